"""
Synacor VM — Main Emulator Class

This is the top-level class that integrates:
  - Register bank (cpu/regs.py)
  - Memory (mem/memory.py)
  - Stack (mem/stack.py)
  - Opcode decoder (cpu/decoder.py)
  - ALU operations (cpu/alu.py)
  - Console peripheral (periph/console.py)

Execution model:
  1. Fetch opcode at PC, read its fixed operand words
  2. Set PC to the next sequential instruction
  3. Execute handler: resolve value operands, write destination
     registers, memory, stack, console; jumps overwrite PC
  4. Check termination: PC outside 0..32767 ends the run

Termination reasons:
  - HALT:      opcode 0
  - RETURN:    ret with an empty stack
  - PC_EXIT:   PC left the address space
  - FAULT:     fatal VMFault (bounds, underflow, illegal opcode, ...)
  - LIMIT:     max_steps executed without stopping
  - CANCELLED: request_stop() from another thread

HALT, RETURN and PC_EXIT are normal halts. FAULT is a failure. LIMIT
and CANCELLED mean the program was stopped from outside; they are
never reported as a halt.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import MEMORY_SIZE
from .cpu import alu
from .cpu.decoder import Opcode, decode_instruction
from .cpu.regs import RegisterBank
from .errors import VMFault
from .mem.memory import Memory
from .mem.stack import Stack
from .periph.console import Console

log = logging.getLogger(__name__)


class StopReason(Enum):
    HALT = 'HALT'
    RETURN = 'RETURN'
    PC_EXIT = 'PC_EXIT'
    FAULT = 'FAULT'
    LIMIT = 'LIMIT'
    CANCELLED = 'CANCELLED'

    @property
    def halted(self) -> bool:
        return self in (StopReason.HALT, StopReason.RETURN, StopReason.PC_EXIT)


@dataclass
class RunResult:
    """Outcome of SynacorVM.run()."""
    reason: StopReason
    pc: int
    steps: int
    fault: Optional[VMFault] = None

    @property
    def halted(self) -> bool:
        return self.reason.halted

    @property
    def failed(self) -> bool:
        return self.reason is StopReason.FAULT


class SynacorVM:
    """Synacor challenge virtual machine.

    Each instance owns its memory, registers, stack and PC; nothing is
    shared between instances.

    Usage:
        vm = SynacorVM(Memory(words))
        result = vm.run()
        if result.failed:
            print(vm.describe())
    """

    def __init__(self, memory: Optional[Memory] = None,
                 console: Optional[Console] = None, trace: bool = False):
        self.mem = memory if memory is not None else Memory()
        self.regs = RegisterBank()
        self.stack = Stack()
        self.console = console if console is not None else Console()
        self.pc = 0
        self.steps = 0
        self.stop_reason: Optional[StopReason] = None
        self.fault: Optional[VMFault] = None
        self.trace = trace

        self._stop_requested = threading.Event()

        # Instruction dispatch table (built in _build_dispatch)
        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    @property
    def running(self) -> bool:
        return self.stop_reason is None

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None."""
        if self.stop_reason is not None:
            return self.stop_reason

        pc = self.pc
        self.steps += 1
        try:
            opcode, operands = decode_instruction(self.mem, pc)
            if self.trace:
                log.debug("%05d: %-4s %-20s %s", pc, opcode.mnemonic,
                          ' '.join(str(w) for w in operands), self.regs.display())
            self.pc = pc + opcode.width
            self._dispatch[opcode](*operands)
        except _HaltSignal as sig:
            self.pc = pc
            return self._stop(sig.reason)
        except VMFault as fault:
            self.pc = pc
            if fault.pc is None:
                fault.pc = pc
            if fault.opcode is None and 0 <= pc < MEMORY_SIZE:
                fault.opcode = self.mem.read(pc)
            self.fault = fault
            return self._stop(StopReason.FAULT)
        except KeyboardInterrupt:
            # blocked in `in`; leave pc on the interrupted instruction
            self.pc = pc
            raise

        if not 0 <= self.pc < MEMORY_SIZE:
            return self._stop(StopReason.PC_EXIT)
        return None

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """Run until the program halts or fails.

        Args:
            max_steps: stop with LIMIT after this many instructions
                       (None runs without a limit)
        """
        executed = 0
        while self.stop_reason is None:
            if self._stop_requested.is_set():
                self._stop(StopReason.CANCELLED)
                break
            if max_steps is not None and executed >= max_steps:
                self._stop(StopReason.LIMIT)
                break
            self.step()
            executed += 1
        return self.result()

    def request_stop(self):
        """Ask a running loop to stop before its next instruction.

        Safe to call from another thread. The run ends as CANCELLED.
        """
        self._stop_requested.set()

    def result(self) -> RunResult:
        return RunResult(self.stop_reason, self.pc, self.steps, self.fault)

    def _stop(self, reason: StopReason) -> StopReason:
        self.stop_reason = reason
        self.console.flush()
        if reason is StopReason.FAULT:
            log.error("Run failed: %s", self.fault)
            log.debug("%s", self.describe())
        elif reason.halted:
            log.info("Halted (%s) at pc=%d after %d steps", reason.value, self.pc, self.steps)
        else:
            log.warning("Stopped (%s) at pc=%d after %d steps", reason.value, self.pc, self.steps)
        return reason

    # ══════════════════════════════════════════════
    # Operand helpers
    # ══════════════════════════════════════════════

    def _value(self, word: int) -> int:
        return self.regs.resolve(word)

    def _store(self, word: int, value: int):
        self.regs.set(self.regs.target(word), value)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(*raw_operand_words)
    # PC already points at the next instruction; jumps overwrite it.

    def _build_dispatch(self) -> dict:
        """Build opcode → handler dispatch table, one entry per opcode."""
        table = {
            Opcode.HALT: self._op_halt,
            Opcode.SET:  self._op_set,
            Opcode.PUSH: self._op_push,
            Opcode.POP:  self._op_pop,
            Opcode.EQ:   self._binary(alu.eq),
            Opcode.GT:   self._binary(alu.gt),
            Opcode.JMP:  self._op_jmp,
            Opcode.JT:   self._op_jt,
            Opcode.JF:   self._op_jf,
            Opcode.ADD:  self._binary(alu.add),
            Opcode.MULT: self._binary(alu.mult),
            Opcode.MOD:  self._binary(alu.mod),
            Opcode.AND:  self._binary(alu.and_),
            Opcode.OR:   self._binary(alu.or_),
            Opcode.NOT:  self._op_not,
            Opcode.RMEM: self._op_rmem,
            Opcode.WMEM: self._op_wmem,
            Opcode.CALL: self._op_call,
            Opcode.RET:  self._op_ret,
            Opcode.OUT:  self._op_out,
            Opcode.IN:   self._op_in,
            Opcode.NOOP: self._op_noop,
        }
        missing = set(Opcode) - set(table)
        if missing:
            raise RuntimeError(f"No handler for {sorted(op.mnemonic for op in missing)}")
        return table

    def _binary(self, fn):
        """Handler for `op a b c`: reg[a] = fn(resolve(b), resolve(c))."""
        def handler(a, b, c):
            index = self.regs.target(a)
            self.regs.set(index, fn(self._value(b), self._value(c)))
        return handler

    def _op_halt(self):
        raise _HaltSignal(StopReason.HALT)

    def _op_set(self, a, b):
        self._store(a, self._value(b))

    def _op_push(self, a):
        self.stack.push(self._value(a))

    def _op_pop(self, a):
        index = self.regs.target(a)
        self.regs.set(index, self.stack.pop())

    def _op_jmp(self, a):
        self.pc = self._value(a)

    def _op_jt(self, a, b):
        if self._value(a) != 0:
            self.pc = self._value(b)

    def _op_jf(self, a, b):
        if self._value(a) == 0:
            self.pc = self._value(b)

    def _op_not(self, a, b):
        self._store(a, alu.not_(self._value(b)))

    def _op_rmem(self, a, b):
        self._store(a, self.mem.read(self._value(b)))

    def _op_wmem(self, a, b):
        # destination is a memory address, so it is resolved
        self.mem.write(self._value(a), self._value(b))

    def _op_call(self, a):
        target = self._value(a)
        self.stack.push(self.pc)
        self.pc = target

    def _op_ret(self):
        if not self.stack:
            raise _HaltSignal(StopReason.RETURN)
        self.pc = self.stack.pop()

    def _op_out(self, a):
        self.console.write_char(self._value(a))

    def _op_in(self, a):
        index = self.regs.target(a)
        self.regs.set(index, self.console.read_char())

    def _op_noop(self):
        pass

    # ══════════════════════════════════════════════
    # Inspection
    # ══════════════════════════════════════════════

    @property
    def state(self) -> str:
        if self.stop_reason is None:
            return 'running'
        if self.stop_reason is StopReason.FAULT:
            return 'failed'
        if self.stop_reason.halted:
            return 'halted'
        return 'stopped'

    def snapshot(self) -> dict:
        """Best-effort copy of machine state for observers.

        Takes no lock; values may be mid-instruction when read from
        another thread, but the running instance is never touched.
        """
        return {
            'pc': self.pc,
            'state': self.state,
            'reason': self.stop_reason.value if self.stop_reason else None,
            'steps': self.steps,
            'registers': self.regs.snapshot(),
            'stack': self.stack.snapshot(),
            'output_chars': self.console.chars_written,
            'input_chars': self.console.chars_read,
            'input_pending': self.console.pending,
            'fault': str(self.fault) if self.fault else None,
        }

    def describe(self) -> str:
        """Failure report: PC, opcode, registers and stack."""
        lines = [f"PC:        {self.pc}"]
        if self.fault is not None:
            opcode = self.fault.opcode
            try:
                name = Opcode(opcode).mnemonic
            except ValueError:
                name = 'illegal'
            lines = [
                f"Fault:     {type(self.fault).__name__}: {self.fault.message}",
                f"PC:        {self.fault.pc}",
                f"Opcode:    {opcode} ({name})",
            ]
        lines.append(f"Registers: {self.regs.display()}")
        lines.append(f"Stack:     {self.stack.display()}")
        return '\n'.join(lines)

    def reset(self):
        """Reset registers, stack, PC and run state. Memory is kept."""
        self.regs.reset()
        self.stack.clear()
        self.console.reset()
        self.pc = 0
        self.steps = 0
        self.stop_reason = None
        self.fault = None
        self._stop_requested.clear()


# Internal exception for flow control
class _HaltSignal(Exception):
    def __init__(self, reason: StopReason):
        super().__init__(reason.value)
        self.reason = reason
