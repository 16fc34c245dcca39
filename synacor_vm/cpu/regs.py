"""
Synacor VM — Register Bank + Operand Resolution

Register model:
  R0..R7 — eight word cells, separate from addressable memory,
           encoded in instructions as 32768..32775

Operand words are interpreted two ways:
  value operand        resolve(): 0..32767 is a literal,
                       32768..32775 reads the register
  destination operand  target(): must encode a register, never
                       resolved, never a memory address
"""

from ..config import REGISTER_BASE, REGISTER_COUNT, MAX_WORD
from ..errors import InvalidOperand


class RegisterBank:
    """Eight general purpose registers, all zero at reset."""

    __slots__ = ('_cells',)

    def __init__(self):
        self._cells = [0] * REGISTER_COUNT

    def get(self, index: int) -> int:
        return self._cells[index]

    def set(self, index: int, value: int):
        self._cells[index] = value

    # --- Operand decoding ---

    def resolve(self, word: int) -> int:
        """Map an encoded value operand to the number it stands for."""
        if word < REGISTER_BASE:
            return word
        if word > MAX_WORD:
            raise InvalidOperand(f"Operand {word} is neither a literal nor a register")
        return self._cells[word - REGISTER_BASE]

    def target(self, word: int) -> int:
        """Map a destination operand to a register index."""
        if not REGISTER_BASE <= word <= MAX_WORD:
            raise InvalidOperand(f"Destination operand {word} is not a register")
        return word - REGISTER_BASE

    # --- Inspection ---

    def snapshot(self) -> list:
        return list(self._cells)

    def display(self) -> str:
        """Format register state for fault reports and trace lines."""
        return ' '.join(f"R{i}={v:5d}" for i, v in enumerate(self._cells))

    def reset(self):
        for i in range(REGISTER_COUNT):
            self._cells[i] = 0
