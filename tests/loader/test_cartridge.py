# tests/loader/test_cartridge.py
"""
iNESカートリッジの検証と配置。
"""
import logging

import pytest

from nes6502.transport.memory import Memory
from nes6502.loader.cartridge import (
    Cartridge,
    InvalidCartridgeError,
    load_cartridge,
    parse_cartridge,
    read_cartridge,
)


def _ines(prg_banks=1, chr_banks=0, flags6=0, flags7=0, prg=None, trainer=False):
    header = b"NES\x1a" + bytes([prg_banks, chr_banks, flags6 | (0x04 if trainer else 0), flags7]) + bytes(8)
    if prg is None:
        prg = bytes(i & 0xFF for i in range(prg_banks * 16384))
    return header + (bytes(512) if trainer else b"") + prg + bytes(chr_banks * 8192)


def test_parse_valid_image():
    cart = parse_cartridge(_ines(chr_banks=1))
    assert len(cart.prg_rom) == 16384
    assert len(cart.chr_rom) == 8192
    assert cart.prg_banks == 1
    assert cart.mapper == 0


def test_bad_magic_is_rejected():
    data = bytearray(_ines())
    data[3] = 0x00
    with pytest.raises(InvalidCartridgeError, match="magic"):
        parse_cartridge(bytes(data))


def test_short_header_is_rejected():
    with pytest.raises(InvalidCartridgeError):
        parse_cartridge(b"NES\x1a\x01")


def test_truncated_prg_rom_is_rejected():
    data = _ines(prg_banks=2)[:16 + 20000]
    with pytest.raises(InvalidCartridgeError, match="truncated"):
        parse_cartridge(data)


def test_validation_error_is_a_value_error():
    assert issubclass(InvalidCartridgeError, ValueError)


def test_empty_prg_rom_is_rejected():
    with pytest.raises(InvalidCartridgeError):
        parse_cartridge(_ines(prg_banks=0))


def test_trainer_is_skipped():
    prg = bytes([0xEA]) * 16384
    cart = parse_cartridge(_ines(prg=prg, trainer=True))
    assert cart.has_trainer
    assert cart.prg_rom == prg


def test_mapper_number_from_both_flag_bytes():
    cart = parse_cartridge(_ines(flags6=0x10, flags7=0x20))
    assert cart.mapper == 0x21


def test_16kb_prg_is_mirrored(memory):
    load_cartridge(parse_cartridge(_ines()), memory)
    assert memory.dump(0x8000, 16) == memory.dump(0xC000, 16)
    assert memory.read(0x8001) == 0x01
    assert memory.read(0xFFFF) == 0xFF


def test_32kb_prg_fills_upper_half(memory):
    prg = bytes([0x11]) * 16384 + bytes([0x22]) * 16384
    load_cartridge(parse_cartridge(_ines(prg_banks=2, prg=prg)), memory)
    assert memory.read(0x8000) == 0x11
    assert memory.read(0xC000) == 0x22


def test_oversized_prg_rom_is_rejected(memory):
    with pytest.raises(InvalidCartridgeError):
        load_cartridge(Cartridge(prg_rom=bytes(3 * 16384)), memory)


def test_unsupported_mapper_warns(memory, caplog):
    with caplog.at_level(logging.WARNING, logger="nes6502.loader.cartridge"):
        load_cartridge(parse_cartridge(_ines(flags6=0x10)), memory)
    assert "Mapper 1" in caplog.text


def test_read_cartridge_from_file(tmp_path):
    path = tmp_path / "game.nes"
    path.write_bytes(_ines())
    assert len(read_cartridge(path).prg_rom) == 16384
