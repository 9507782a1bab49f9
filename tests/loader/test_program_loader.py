# tests/loader/test_program_loader.py
import pytest

from nes6502.loader.program import BinaryLoader


def test_load_bytes_at_base(memory):
    assert BinaryLoader().load_bytes([0xA9, 0x01], memory, 0x0600) == 2
    assert memory.read(0x0600) == 0xA9
    assert memory.read(0x0601) == 0x01


def test_load_binary_file(tmp_path, memory):
    path = tmp_path / "prog.bin"
    path.write_bytes(bytes([0xEA, 0x00]))
    BinaryLoader().load_binary(path, memory, 0xC000)
    assert memory.dump(0xC000, 2) == b"\xea\x00"


def test_image_past_end_of_memory_is_rejected(tmp_path, memory):
    path = tmp_path / "big.bin"
    path.write_bytes(bytes(0x20))
    with pytest.raises(ValueError, match="big.bin"):
        BinaryLoader().load_binary(path, memory, 0xFFF0)
    assert memory.read(0xFFF0) == 0


def test_cpu_load_program_sets_pc(make_cpu):
    cpu = make_cpu([0xEA], base=0x0400)
    assert cpu.get_state().pc == 0x0400
    assert cpu.memory.read(0x0400) == 0xEA
