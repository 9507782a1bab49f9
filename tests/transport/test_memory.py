# tests/transport/test_memory.py
"""
nes6502.transport.memory の単体テスト。
"""
import pytest

from nes6502.transport.memory import Memory, BusAccess, BusAccessType, MEMORY_SIZE


def test_memory_is_64kb_and_zeroed(memory):
    assert memory.get_size() == MEMORY_SIZE == 0x10000
    assert memory.read(0x0000) == 0
    assert memory.read(0xFFFF) == 0


def test_read_write_roundtrip(memory):
    memory.write(0x1234, 0xAB)
    assert memory.read(0x1234) == 0xAB


def test_out_of_range_address_raises(memory):
    with pytest.raises(IndexError):
        memory.read(0x10000)
    with pytest.raises(IndexError):
        memory.write(-1, 0)


def test_write_rejects_non_byte_data(memory):
    with pytest.raises(ValueError):
        memory.write(0x0000, 0x100)


def test_read_word_is_little_endian_and_wraps(memory):
    memory.write(0x2000, 0x34)
    memory.write(0x2001, 0x12)
    assert memory.read_word(0x2000) == 0x1234

    memory.write(0xFFFF, 0xCD)
    memory.write(0x0000, 0xAB)
    assert memory.read_word(0xFFFF) == 0xABCD


def test_zero_page_and_stack_addresses_wrap():
    assert Memory.zero_page_address(0x80 + 0xFF) == 0x7F
    assert Memory.stack_address(0x00) == 0x0100
    assert Memory.stack_address(0x1FF) == 0x01FF


def test_zero_page_pointer_high_byte_wraps(memory):
    memory.write(0x00FF, 0x00)
    memory.write(0x0000, 0x40)
    memory.write(0x0100, 0x99)
    assert memory.read_zero_page_word(0xFF) == 0x4000


def test_load_copies_verbatim(memory):
    assert memory.load(0x0600, [1, 2, 3]) == 3
    assert memory.dump(0x0600, 3) == b"\x01\x02\x03"


def test_load_accepts_image_ending_at_top_of_memory(memory):
    memory.load(0xFFFE, b"\xAA\xBB")
    assert memory.read(0xFFFF) == 0xBB


def test_load_rejects_overflowing_image_without_writing(memory):
    with pytest.raises(ValueError):
        memory.load(0xFFFF, b"\x01\x02")
    assert memory.read(0xFFFF) == 0


def test_load_rejects_bad_base(memory):
    with pytest.raises(ValueError):
        memory.load(0x10000, b"\x01")


def test_activity_log_records_only_when_enabled():
    quiet = Memory()
    quiet.write(0x10, 1)
    assert quiet.get_and_clear_activity_log() == []

    traced = Memory(record_activity=True)
    traced.write(0x10, 1)
    traced.read(0x10)
    traced.peek(0x10)
    log = traced.get_and_clear_activity_log()
    assert log == [
        BusAccess(0x10, 1, BusAccessType.WRITE),
        BusAccess(0x10, 1, BusAccessType.READ),
    ]
    assert traced.get_and_clear_activity_log() == []
