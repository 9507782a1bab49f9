# tests/common/test_bits.py
import pytest

from nes6502.common.bits import get_bit, set_bit, clear_bit, assign_bit


@pytest.mark.parametrize("pos", range(8))
def test_get_bit_matches_mask(pos):
    assert get_bit(1 << pos, pos)
    assert not get_bit(0xFF ^ (1 << pos), pos)


def test_set_and_clear_bit():
    assert set_bit(0x00, 3) == 0x08
    assert set_bit(0x08, 3) == 0x08
    assert clear_bit(0xFF, 0) == 0xFE
    assert clear_bit(0x00, 7) == 0x00


def test_results_stay_within_eight_bits():
    assert set_bit(0x80, 7) == 0x80
    assert clear_bit(0x80, 7) == 0x00
    assert 0 <= clear_bit(0x01, 4) <= 0xFF


def test_assign_bit():
    assert assign_bit(0x00, 1, True) == 0x02
    assert assign_bit(0x02, 1, False) == 0x00
