# Synacor VM — 15-bit word virtual machine for the Synacor challenge
# instruction set (22 opcodes, 8 registers, unbounded stack,
# line-buffered character I/O).
from .emu import SynacorVM, StopReason, RunResult
from .mem.memory import Memory
from .periph.console import Console
from .errors import (
    VMFault, OutOfBounds, StackUnderflow, IllegalInstruction,
    InvalidOperand, DivisionByZero, InputExhausted, ImageError,
)

__version__ = "1.0.0"
