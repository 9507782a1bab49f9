# tests/arch/mos6502/test_legacy_profile.py
"""
互換プロファイル（元プログラムと同じ結果を返す命令表）の振る舞い。
"""
import pytest

from nes6502.arch.mos6502.instructions.maps import CpuProfile


@pytest.fixture
def make_legacy(make_cpu):
    def _make(program, **registers):
        return make_cpu(program, profile=CpuProfile.LEGACY, **registers)
    return _make


def test_adc_ignores_incoming_carry(make_legacy):
    cpu = make_legacy([0x38, 0x69, 0x01], a=0x01)
    cpu.step()
    cpu.step()
    state = cpu.get_state()
    assert state.a == 0x02
    assert not state.flag_c and not state.flag_v


def test_adc_unsigned_overflow_sets_v_and_c(make_legacy):
    cpu = make_legacy([0x69, 0x80], a=0x80)
    cpu.step()
    state = cpu.get_state()
    assert state.a == 0x00
    assert state.flag_c and state.flag_v and state.flag_z


def test_sbc_adjusts_subtrahend_by_borrow(make_legacy):
    cpu = make_legacy([0xE9, 0x01], a=0x10, p=0x24)
    cpu.step()
    assert cpu.get_state().a == 0x0E

    cpu = make_legacy([0xE9, 0x01], a=0x10, p=0x25)
    cpu.step()
    state = cpu.get_state()
    assert state.a == 0x0F
    assert not state.flag_c and not state.flag_v


def test_compare_only_sets_flags(make_legacy):
    cpu = make_legacy([0xC9, 0x10], a=0x10, p=0x24)
    cpu.step()
    state = cpu.get_state()
    assert state.flag_z and not state.flag_c

    # an earlier carry survives a "less than" comparison
    cpu = make_legacy([0xC9, 0x20], a=0x10, p=0x25)
    cpu.step()
    state = cpu.get_state()
    assert state.flag_c and not state.flag_z and not state.flag_n


def test_txa_copies_stack_pointer(make_legacy):
    cpu = make_legacy([0x8A], x=0x01)
    cpu.step()
    assert cpu.get_state().a == 0xFD


def test_bmi_branches_when_zero_clear(make_legacy):
    cpu = make_legacy([0x30, 0x10], p=0x24)
    cpu.step()
    assert cpu.get_state().pc == 0x8012
    assert cpu.get_state().cycles == 3


def test_indexed_indirect_uses_zero_page_cell(make_legacy):
    cpu = make_legacy([0xA1, 0x20, 0xB1, 0x20], x=0x04, y=0x01)
    cpu.memory.write(0x24, 0x5A)
    cpu.memory.write(0x21, 0x6B)
    cpu.step()
    assert cpu.get_state().a == 0x5A
    cpu.step()
    assert cpu.get_state().a == 0x6B


def test_jsr_rts_round_trip(make_legacy):
    cpu = make_legacy([0x20, 0x00, 0x90, 0xEA])
    cpu.memory.write(0x9000, 0x60)
    cpu.step()
    assert cpu.memory.read(0x01FD) == 0x80
    assert cpu.memory.read(0x01FC) == 0x01
    cpu.step()
    assert cpu.get_state().pc == 0x8003


def test_php_plp_move_status_verbatim(make_legacy):
    cpu = make_legacy([0x08, 0x28], p=0x24)
    cpu.step()
    assert cpu.memory.read(0x01FD) == 0x24
    cpu.memory.write(0x01FD, 0x13)
    cpu.step()
    assert cpu.get_state().p == 0x13


def test_brk_pushes_address_after_opcode(make_legacy):
    cpu = make_legacy([0x00], p=0x20)
    cpu.memory.write(0xFFFE, 0x34)
    cpu.memory.write(0xFFFF, 0x12)
    cpu.step()
    state = cpu.get_state()
    assert cpu.memory.read(0x01FC) == 0x01
    assert cpu.memory.read(0x01FB) == 0x30
    assert state.flag_b and not state.flag_i
    assert state.pc == 0x1234
    assert state.cycles == 7


def test_isc_subtracts_incremented_value(make_legacy):
    cpu = make_legacy([0xE7, 0x10], a=0x10, p=0x25)
    cpu.memory.write(0x10, 0x05)
    cpu.step()
    assert cpu.memory.read(0x10) == 0x06
    assert cpu.get_state().a == 0x0A

    cpu = make_legacy([0xE7, 0x10], a=0x10, p=0x24)
    cpu.memory.write(0x10, 0x05)
    cpu.step()
    assert cpu.get_state().a == 0x0B


def test_shared_behaviour_matches_canonical(make_cpu, make_legacy):
    program = [0xA9, 0x80, 0x0A, 0xE8, 0x85, 0x10]
    canonical = make_cpu(program)
    legacy = make_legacy(program)
    for _ in range(4):
        canonical.step()
        legacy.step()
    assert canonical.get_state() == legacy.get_state()
    assert canonical.memory.read(0x10) == legacy.memory.read(0x10)
