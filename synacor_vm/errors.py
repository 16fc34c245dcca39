"""
Synacor VM — Fault Taxonomy

Every fault is fatal: the engine records it, stops the run in the
failed state, and never retries. `ret` on an empty stack is NOT a
fault (it halts normally) and has no exception here.
"""

from typing import Optional


class VMFault(Exception):
    """Base class for fatal run-time faults.

    `pc` and `opcode` are filled in by the engine when the fault
    escapes an instruction handler.
    """

    def __init__(self, message: str, pc: Optional[int] = None,
                 opcode: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.pc = pc
        self.opcode = opcode

    def __str__(self):
        where = []
        if self.pc is not None:
            where.append(f"pc={self.pc}")
        if self.opcode is not None:
            where.append(f"opcode={self.opcode}")
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message


class OutOfBounds(VMFault):
    """Memory read/write (or operand fetch) outside 0..32767."""


class StackUnderflow(VMFault):
    """`pop` on an empty stack."""


class IllegalInstruction(VMFault):
    """Fetched opcode is not in 0..21."""


class InvalidOperand(VMFault):
    """Destination operand is not a register, or a word above 32775."""


class DivisionByZero(VMFault):
    """`mod` with a zero divisor."""


class InputExhausted(VMFault):
    """`in` needed a new line but the input stream is at EOF."""


class ImageError(Exception):
    """Program image cannot be loaded (too large, unreadable)."""
