"""
Synacor VM — Component Tests

Register bank, opcode table, ALU, memory and stack in isolation.
"""

import pytest

from synacor_vm.config import MEMORY_SIZE
from synacor_vm.cpu import alu
from synacor_vm.cpu.decoder import Opcode, decode_instruction, lookup
from synacor_vm.cpu.regs import RegisterBank
from synacor_vm.errors import (
    DivisionByZero, IllegalInstruction, InvalidOperand, OutOfBounds, StackUnderflow,
)
from synacor_vm.mem.memory import Memory
from synacor_vm.mem.stack import Stack


class TestRegisterBank:

    def test_starts_zeroed(self):
        assert RegisterBank().snapshot() == [0] * 8

    def test_literals_resolve_to_themselves(self):
        regs = RegisterBank()
        for v in (0, 1, 65, 12345, 32767):
            assert regs.resolve(v) == v

    def test_register_words_resolve_to_contents(self):
        regs = RegisterBank()
        for i in range(8):
            regs.set(i, 100 + i)
        for i in range(8):
            assert regs.resolve(32768 + i) == 100 + i

    def test_resolve_follows_mutation(self):
        regs = RegisterBank()
        assert regs.resolve(32770) == 0
        regs.set(2, 77)
        assert regs.resolve(32770) == 77

    def test_resolve_rejects_words_above_registers(self):
        with pytest.raises(InvalidOperand):
            RegisterBank().resolve(32776)

    def test_target(self):
        regs = RegisterBank()
        assert regs.target(32768) == 0
        assert regs.target(32775) == 7
        for word in (0, 5, 32767, 32776):
            with pytest.raises(InvalidOperand):
                regs.target(word)

    def test_display_and_reset(self):
        regs = RegisterBank()
        regs.set(7, 12)
        assert "R7=   12" in regs.display()
        regs.reset()
        assert regs.get(7) == 0


class TestOpcodeTable:

    def test_operand_counts(self):
        expected = {
            0: 0, 1: 2, 2: 1, 3: 1, 4: 3, 5: 3, 6: 1, 7: 2, 8: 2, 9: 3, 10: 3,
            11: 3, 12: 3, 13: 3, 14: 2, 15: 2, 16: 2, 17: 1, 18: 0, 19: 1,
            20: 1, 21: 0,
        }
        assert {int(op): op.operands for op in Opcode} == expected

    def test_in_is_20_and_noop_is_21(self):
        assert Opcode(20) is Opcode.IN
        assert Opcode(21) is Opcode.NOOP
        assert Opcode.NOOP.mnemonic == 'noop'

    def test_width(self):
        assert Opcode.HALT.width == 1
        assert Opcode.ADD.width == 4

    def test_lookup_illegal(self):
        with pytest.raises(IllegalInstruction) as exc:
            lookup(22)
        assert exc.value.opcode == 22

    def test_decode_reads_fixed_operands(self):
        mem = Memory([9, 32768, 1, 2, 99])
        opcode, operands = decode_instruction(mem, 0)
        assert opcode is Opcode.ADD
        assert operands == (32768, 1, 2)

    def test_decode_sees_current_memory(self):
        mem = Memory([19, 65])
        mem.write(1, 66)
        assert decode_instruction(mem, 0) == (Opcode.OUT, (66,))


class TestALU:

    def test_add_mult_wrap(self):
        assert alu.add(32767, 2) == 1
        assert alu.add(16384, 16384) == 0
        assert alu.mult(32767, 32767) == 1
        assert alu.mult(2, 3) == 6

    def test_mod(self):
        assert alu.mod(17, 5) == 2
        with pytest.raises(DivisionByZero):
            alu.mod(1, 0)

    def test_bitwise(self):
        assert alu.and_(0b1100, 0b1010) == 0b1000
        assert alu.or_(0b1100, 0b1010) == 0b1110
        assert alu.not_(0) == 32767
        assert alu.not_(32767) == 0

    def test_not_self_inverse(self):
        for v in (0, 1, 4660, 21845, 32767):
            assert alu.not_(alu.not_(v)) == v

    def test_compare(self):
        assert alu.eq(3, 3) == 1
        assert alu.eq(3, 4) == 0
        assert alu.gt(4, 3) == 1
        assert alu.gt(3, 3) == 0


class TestMemory:

    def test_full_address_space(self):
        mem = Memory([1, 2, 3])
        assert len(mem) == MEMORY_SIZE
        assert mem.read(2) == 3
        assert mem.read(3) == 0
        assert mem.read(MEMORY_SIZE - 1) == 0

    def test_bounds(self):
        mem = Memory()
        for addr in (-1, MEMORY_SIZE, 32775):
            with pytest.raises(OutOfBounds):
                mem.read(addr)
            with pytest.raises(OutOfBounds):
                mem.write(addr, 1)

    def test_write_last_address(self):
        mem = Memory()
        mem.write(MEMORY_SIZE - 1, 42)
        assert mem.read(MEMORY_SIZE - 1) == 42

    def test_load_too_large(self):
        with pytest.raises(OutOfBounds):
            Memory([0] * (MEMORY_SIZE + 1))

    def test_load_at_base(self):
        mem = Memory()
        mem.load_words([7, 8], base=10)
        assert mem.snapshot(9, 4) == [0, 7, 8, 0]

    def test_snapshot_clipped(self):
        mem = Memory()
        assert len(mem.snapshot(MEMORY_SIZE - 2, 10)) == 2

    def test_dump(self):
        mem = Memory([72, 105, 0, 32768])
        text = mem.dump(0, 8)
        assert text.startswith("00000")
        assert "Hi.." in text


class TestStack:

    def test_lifo(self):
        s = Stack()
        s.push(1)
        s.push(2)
        assert s.pop() == 2
        assert s.pop() == 1
        assert len(s) == 0

    def test_underflow(self):
        s = Stack()
        with pytest.raises(StackUnderflow):
            s.pop()
        assert s.snapshot() == []

    def test_display(self):
        s = Stack()
        assert s.display() == "<empty>"
        for v in range(10):
            s.push(v)
        assert s.display(limit=3) == "9 8 7 ... (10 total)"

    def test_snapshot_is_copy(self):
        s = Stack()
        s.push(5)
        snap = s.snapshot()
        snap.append(6)
        assert len(s) == 1
