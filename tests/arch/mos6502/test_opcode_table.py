# tests/arch/mos6502/test_opcode_table.py
"""
命令表、デコード、CPUクラスの公開インターフェース。
"""
import pytest

from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.cpu import Mos6502Cpu, UnknownOpcodeError
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.instructions.base import AddressingMode
from nes6502.arch.mos6502.instructions.maps import (
    CANONICAL_OPCODES,
    LEGACY_OPCODES,
    CpuProfile,
    InstructionFamily,
    decode_opcode,
)


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        CANONICAL_OPCODES.instructions[0x02] = CANONICAL_OPCODES.instructions[0xEA]


def test_both_profiles_define_the_same_opcodes():
    assert set(CANONICAL_OPCODES.instructions) == set(LEGACY_OPCODES.instructions)
    for opcode, instr in CANONICAL_OPCODES.instructions.items():
        other = LEGACY_OPCODES.instructions[opcode]
        assert (instr.mnemonic, instr.mode, instr.cycles) == (other.mnemonic, other.mode, other.cycles)


def test_documented_instruction_count():
    documented = [i for i in CANONICAL_OPCODES.instructions.values()
                  if i.family is not InstructionFamily.UNDOCUMENTED]
    assert len(documented) == 151


@pytest.mark.parametrize("opcode, mnemonic, mode, cycles", [
    (0xA9, "LDA", AddressingMode.IMMEDIATE, 2),
    (0xAD, "LDA", AddressingMode.ABSOLUTE, 4),
    (0x9D, "STA", AddressingMode.ABSOLUTE_X, 5),
    (0xFE, "INC", AddressingMode.ABSOLUTE_X, 7),
    (0x20, "JSR", AddressingMode.ABSOLUTE, 6),
    (0x60, "RTS", AddressingMode.IMPLIED, 6),
    (0x00, "BRK", AddressingMode.IMPLIED, 7),
    (0x6C, "JMP", AddressingMode.INDIRECT, 5),
    (0xE3, "ISC", AddressingMode.INDEXED_INDIRECT, 8),
])
def test_table_entries(opcode, mnemonic, mode, cycles):
    instr = CANONICAL_OPCODES.instructions[opcode]
    assert (instr.mnemonic, instr.mode, instr.cycles) == (mnemonic, mode, cycles)


def test_decode_resolves_operand_once():
    memory = Memory(record_activity=True)
    memory.load(0x8000, [0xC9, 0x10])
    operation = decode_opcode(0xC9, memory, 0x8000, Mos6502CpuState())
    assert operation.immediate == 0x10
    assert operation.length == 2
    assert operation.operands == ["#$10"]
    assert [a.address for a in memory.get_and_clear_activity_log()] == [0x8001]


def test_compare_reads_operand_once():
    cpu = Mos6502Cpu(Memory(record_activity=True))
    cpu.load_program([0xCD, 0x00, 0x02], 0x8000)
    snapshot = cpu.step()
    reads = [a.address for a in snapshot.bus_activity]
    assert reads.count(0x0200) == 1


def test_unknown_opcode_raises_with_opcode_and_pc(make_cpu):
    cpu = make_cpu([0xEA, 0x02])
    cpu.step()
    with pytest.raises(UnknownOpcodeError) as excinfo:
        cpu.step()
    assert excinfo.value.opcode == 0x02
    assert excinfo.value.pc == 0x8001
    assert "$02" in str(excinfo.value) and "$8001" in str(excinfo.value)
    assert cpu.get_state().pc == 0x8001


def test_profile_from_name():
    assert CpuProfile.from_name("Legacy") is CpuProfile.LEGACY
    assert CpuProfile.CANONICAL.opcode_set is CANONICAL_OPCODES
    with pytest.raises(ValueError):
        CpuProfile.from_name("nmos")


def test_initial_state_and_register_map(cpu):
    state = cpu.get_state()
    assert (state.sp, state.p, state.cycles) == (0xFD, 0x24, 0)
    assert cpu.get_register_map() == {"A": 0, "X": 0, "Y": 0, "PC": 0x8000, "SP": 0xFD, "P": 0x24}
    flags = cpu.get_flag_state()
    assert flags["I"] and not flags["C"]


def test_reset_vector_start():
    memory = Memory()
    memory.load(0xFFFC, [0x00, 0xC0])
    cpu = Mos6502Cpu(memory, use_reset_vector=True)
    assert cpu.get_state().pc == 0xC000

    cpu.set_state(cpu.get_state().replace(pc=0x1234, cycles=99))
    cpu.reset()
    assert cpu.get_state().pc == 0xC000
    assert cpu.get_state().cycles == 0


def test_cycles_accumulate_across_steps(make_cpu):
    cpu = make_cpu([0xA9, 0x01, 0x8D, 0x00, 0x02, 0xEA])
    totals = [cpu.step().metadata.cycle_count for _ in range(3)]
    assert totals == [2, 6, 8]
