"""
Synacor VM — Character Console (out / in)

Emulates the terminal the program talks to.

Output:
  - one character per `out`, written in program order
  - stream flushed on newline, before blocking for input, and when
    the run stops

Input:
  - line buffered: when the buffer is empty, one whole line is read
    from the host stream and a single '\n' terminator is appended
  - characters are then handed out one per `in` until the buffer is
    drained, so a program always receives a complete line
  - EOF with an empty buffer is a fault (InputExhausted); there is no
    line left to hand out
"""

import logging
import sys
from collections import deque
from typing import Optional, TextIO

from ..config import REGISTER_BASE
from ..errors import InputExhausted, InvalidOperand

log = logging.getLogger(__name__)


class Console:
    """Line-buffered character I/O over host text streams.

    Streams default to sys.stdin / sys.stdout, looked up when used so
    test harnesses that swap them (capsys) see the output.
    """

    def __init__(self, stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None):
        self._stdin = stdin
        self._stdout = stdout
        self._buffer: deque = deque()
        self.chars_written = 0
        self.chars_read = 0

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def pending(self) -> int:
        """Characters of the current line not yet consumed by `in`."""
        return len(self._buffer)

    # --- out ---

    def write_char(self, code: int):
        if not 0 <= code < REGISTER_BASE:
            raise InvalidOperand(f"Output code {code} is not a character under {REGISTER_BASE}")
        ch = chr(code)
        try:
            self.stdout.write(ch)
        except UnicodeEncodeError as e:
            raise InvalidOperand(f"Output code {code} cannot be encoded: {e.reason}") from e
        self.chars_written += 1
        if ch == '\n':
            self.stdout.flush()

    def flush(self):
        self.stdout.flush()

    # --- in ---

    def read_char(self) -> int:
        if not self._buffer:
            self._fill()
        code = ord(self._buffer.popleft())
        self.chars_read += 1
        return code

    def _fill(self):
        self.flush()
        try:
            line = self.stdin.readline()
        except UnicodeDecodeError as e:
            raise InvalidOperand(f"Input is not valid text: {e.reason}") from e
        if not line:
            raise InputExhausted("Input stream closed while waiting for a line")
        line = line.rstrip('\r\n') + '\n'
        bad = [ch for ch in line if ord(ch) >= REGISTER_BASE]
        if bad:
            raise InvalidOperand(f"Input character {bad[0]!r} does not fit in a word")
        log.debug("Input line buffered: %d chars", len(line))
        self._buffer.extend(line)

    def reset(self):
        self._buffer.clear()
        self.chars_written = 0
        self.chars_read = 0
