"""
Synacor VM — Data / Call Stack

Unbounded LIFO of words shared by push/pop and call/ret. The stack
itself only knows "empty pop is an error"; `ret` checks for emptiness
before popping because an empty stack there means halt, not fault.
"""

from typing import List

from ..errors import StackUnderflow


class Stack:
    """Growable word stack."""

    def __init__(self):
        self._values: List[int] = []

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: int):
        self._values.append(value)

    def pop(self) -> int:
        if not self._values:
            raise StackUnderflow("Pop from empty stack")
        return self._values.pop()

    def snapshot(self) -> List[int]:
        """Copy of the stack contents, bottom first."""
        return list(self._values)

    def display(self, limit: int = 8) -> str:
        """Top-first view of the stack for fault reports."""
        if not self._values:
            return "<empty>"
        top = self._values[-limit:][::-1]
        text = ' '.join(str(v) for v in top)
        if len(self._values) > limit:
            text += f" ... ({len(self._values)} total)"
        return text

    def clear(self):
        self._values.clear()
