# src/nes6502/loader/cartridge.py
"""
カートリッジイメージ(iNES)リーダー。

16バイトのヘッダを検証し、PRG-ROMを取り出してマッパー0の配置規則でメモリに置きます。
  - $8000 から配置
  - PRG-ROMがちょうど16KBの場合は $C000 にもミラーする
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from nes6502.transport.memory import Memory

logger = logging.getLogger(__name__)

INES_MAGIC = b"NES\x1a"
HEADER_SIZE = 16
TRAINER_SIZE = 512
PRG_BANK_SIZE = 16384
CHR_BANK_SIZE = 8192
PRG_BASE = 0x8000
PRG_MIRROR_BASE = 0xC000
MAX_PRG_SIZE = 0x10000 - PRG_BASE


# @intent:responsibility ヘッダ不正や切り詰められたファイル。実行時エラーとは区別される。
class InvalidCartridgeError(ValueError):
    pass


# @intent:responsibility 解析済みのカートリッジイメージ。
@dataclass(frozen=True)
class Cartridge:
    prg_rom: bytes
    chr_rom: bytes = b""
    mapper: int = 0
    has_trainer: bool = False

    @property
    def prg_banks(self) -> int:
        return len(self.prg_rom) // PRG_BANK_SIZE


# @intent:responsibility iNESイメージのバイト列を解析する。
def parse_cartridge(data: bytes) -> Cartridge:
    if len(data) < HEADER_SIZE:
        raise InvalidCartridgeError(
            f"File too short for an iNES header: {len(data)} bytes (need {HEADER_SIZE})."
        )
    if data[:4] != INES_MAGIC:
        raise InvalidCartridgeError(f"Invalid iNES magic {data[:4]!r}, expected {INES_MAGIC!r}.")

    prg_size = data[4] * PRG_BANK_SIZE
    chr_size = data[5] * CHR_BANK_SIZE
    flags6 = data[6]
    flags7 = data[7]
    has_trainer = bool(flags6 & 0x04)
    mapper = (flags7 & 0xF0) | (flags6 >> 4)

    if prg_size == 0:
        raise InvalidCartridgeError("Cartridge declares no PRG-ROM.")

    prg_start = HEADER_SIZE + (TRAINER_SIZE if has_trainer else 0)
    prg_end = prg_start + prg_size
    if len(data) < prg_end:
        raise InvalidCartridgeError(
            f"PRG-ROM truncated: header declares {prg_size} bytes, "
            f"but only {max(len(data) - prg_start, 0)} bytes follow the header."
        )

    # CHR-ROMは実行に使わないため、欠けていても読める分だけ保持する
    chr_rom = bytes(data[prg_end:prg_end + chr_size])

    return Cartridge(
        prg_rom=bytes(data[prg_start:prg_end]),
        chr_rom=chr_rom,
        mapper=mapper,
        has_trainer=has_trainer,
    )


def read_cartridge(file_path: Union[str, Path]) -> Cartridge:
    data = Path(file_path).read_bytes()
    return parse_cartridge(data)


# @intent:responsibility PRG-ROMをマッパー0の規則でメモリへ配置する。
def load_cartridge(cartridge: Cartridge, memory: Memory) -> None:
    if cartridge.mapper != 0:
        logger.warning("Mapper %d is not supported; PRG-ROM is placed as mapper 0", cartridge.mapper)

    prg = cartridge.prg_rom
    if len(prg) > MAX_PRG_SIZE:
        raise InvalidCartridgeError(
            f"PRG-ROM of {len(prg)} bytes does not fit at ${PRG_BASE:04X} without bank switching."
        )

    memory.load(PRG_BASE, prg)
    if len(prg) == PRG_BANK_SIZE:
        memory.load(PRG_MIRROR_BASE, prg)
    logger.info("Loaded %d KB PRG-ROM at $%04X", len(prg) // 1024, PRG_BASE)
