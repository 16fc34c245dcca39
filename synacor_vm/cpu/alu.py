"""
Synacor VM — ALU Operations

All arithmetic is on 15-bit values. add/mult wrap modulo 32768;
`not` is the 15-bit complement (xor 0x7FFF), so it never produces a
value with bit 15 set. Comparisons return 1 or 0.
"""

from ..config import MODULUS, WORD_MASK
from ..errors import DivisionByZero


def add(b: int, c: int) -> int:
    return (b + c) % MODULUS


def mult(b: int, c: int) -> int:
    return (b * c) % MODULUS


def mod(b: int, c: int) -> int:
    """Remainder of b / c. A zero divisor is a fault, not a wrap."""
    if c == 0:
        raise DivisionByZero(f"mod {b} by zero")
    return b % c


def and_(b: int, c: int) -> int:
    return b & c


def or_(b: int, c: int) -> int:
    return b | c


def not_(b: int) -> int:
    return b ^ WORD_MASK


def eq(b: int, c: int) -> int:
    return 1 if b == c else 0


def gt(b: int, c: int) -> int:
    return 1 if b > c else 0
