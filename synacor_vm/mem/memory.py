"""
Synacor VM — Flat Word-Addressed Memory

Memory map:
  0..32767  program and data (one flat region, all writable)

Programs are loaded at address 0 and the rest of the space is zero.
Every address may be rewritten at run time, including code the PC has
not reached yet: self-modifying programs are expected. There is no
instruction cache, so the decoder always sees the current contents.
"""

from typing import Iterable, List

from ..config import MEMORY_SIZE
from ..errors import OutOfBounds


class Memory:
    """32768-word memory with bounds-checked access."""

    def __init__(self, words: Iterable[int] = ()):
        self._words: List[int] = [0] * MEMORY_SIZE
        self.load_words(words)

    def __len__(self) -> int:
        return MEMORY_SIZE

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        if not 0 <= addr < MEMORY_SIZE:
            raise OutOfBounds(f"Read from address {addr} outside 0..{MEMORY_SIZE - 1}")
        return self._words[addr]

    def write(self, addr: int, value: int):
        if not 0 <= addr < MEMORY_SIZE:
            raise OutOfBounds(f"Write to address {addr} outside 0..{MEMORY_SIZE - 1}")
        self._words[addr] = value

    # --- Bulk load ---

    def load_words(self, words: Iterable[int], base: int = 0):
        """Copy a word sequence into memory starting at base."""
        words = list(words)
        if base < 0 or base + len(words) > MEMORY_SIZE:
            raise OutOfBounds(
                f"{len(words)} words at {base} do not fit in {MEMORY_SIZE} words")
        self._words[base:base + len(words)] = words

    # --- Inspection ---

    def snapshot(self, start: int = 0, length: int = MEMORY_SIZE) -> List[int]:
        """Copy of a memory window, clipped to the address space."""
        start = max(start, 0)
        end = min(start + length, MEMORY_SIZE)
        return self._words[start:end]

    def dump(self, start: int, length: int = 64) -> str:
        """Word dump with printable characters, eight words per line."""
        lines = []
        end = min(start + length, MEMORY_SIZE)
        for addr in range(start, end, 8):
            row = self._words[addr:min(addr + 8, end)]
            words = ' '.join(f'{w:5d}' for w in row)
            text = ''.join(chr(w) if 0x20 <= w < 0x7F else '.' for w in row)
            lines.append(f'{addr:05d}  {words:<47}  {text}')
        return '\n'.join(lines)
