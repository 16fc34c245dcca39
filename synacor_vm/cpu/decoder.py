"""
Synacor VM — Opcode Table + Instruction Decoder

Every instruction is one opcode word followed by a fixed number of
operand words (0-3). There are no prefixes and no variable-length
encodings, so the operand count lives on the opcode itself and the
decoder reads exactly that many words after the opcode.

  op  mnemonic  operands
   0  halt      -
   1  set       a b
   2  push      a
   3  pop       a
   4  eq        a b c
   5  gt        a b c
   6  jmp       a
   7  jt        a b
   8  jf        a b
   9  add       a b c
  10  mult      a b c
  11  mod       a b c
  12  and       a b c
  13  or        a b c
  14  not       a b
  15  rmem      a b
  16  wmem      a b
  17  call      a
  18  ret       -
  19  out       a
  20  in        a
  21  noop      -
"""

from enum import IntEnum
from typing import Tuple

from ..errors import IllegalInstruction


class Opcode(IntEnum):
    """Closed opcode set. Each member knows its own operand count."""

    def __new__(cls, code: int, operands: int):
        obj = int.__new__(cls, code)
        obj._value_ = code
        obj.operands = operands
        return obj

    HALT = (0, 0)
    SET = (1, 2)
    PUSH = (2, 1)
    POP = (3, 1)
    EQ = (4, 3)
    GT = (5, 3)
    JMP = (6, 1)
    JT = (7, 2)
    JF = (8, 2)
    ADD = (9, 3)
    MULT = (10, 3)
    MOD = (11, 3)
    AND = (12, 3)
    OR = (13, 3)
    NOT = (14, 2)
    RMEM = (15, 2)
    WMEM = (16, 2)
    CALL = (17, 1)
    RET = (18, 0)
    OUT = (19, 1)
    IN = (20, 1)
    NOOP = (21, 0)

    @property
    def mnemonic(self) -> str:
        return self.name.lower()

    @property
    def width(self) -> int:
        """Instruction length in words, opcode included."""
        return 1 + self.operands


def lookup(word: int) -> Opcode:
    """Opcode for a raw word, or IllegalInstruction."""
    try:
        return Opcode(word)
    except ValueError:
        raise IllegalInstruction(f"Unknown opcode {word}", opcode=word) from None


def decode_instruction(memory, pc: int) -> Tuple[Opcode, Tuple[int, ...]]:
    """Fetch and decode the instruction at pc.

    Returns: (opcode, raw operand words)

    Operands come straight from current memory, so a program that
    rewrote these words earlier sees its own edits. Reading past the
    last address raises OutOfBounds from the memory layer.
    """
    opcode = lookup(memory.read(pc))
    operands = tuple(memory.read(pc + 1 + i) for i in range(opcode.operands))
    return opcode, operands
