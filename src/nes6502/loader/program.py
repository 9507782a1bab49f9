# src/nes6502/loader/program.py
"""
プログラムイメージローダー。

生のバイナリ（ファイルまたはバイト列）を指定アドレスから逐語的にメモリへ配置します。
"""
import logging
from pathlib import Path
from typing import Iterable, Union

from nes6502.transport.memory import Memory

logger = logging.getLogger(__name__)


class BinaryLoader:
    """
    フラットなバイナリイメージをメモリにロードするローダー。
    64KBに収まらないイメージは1バイトも書き込まずにValueErrorとします。
    """
    def load_bytes(self, data: Iterable[int], memory: Memory, base: int) -> int:
        written = memory.load(base, data)
        logger.debug("Loaded %d bytes at $%04X", written, base)
        return written

    def load_binary(self, file_path: Union[str, Path], memory: Memory, base: int) -> int:
        data = Path(file_path).read_bytes()
        try:
            return self.load_bytes(data, memory, base)
        except ValueError as e:
            raise ValueError(f"Cannot load '{file_path}': {e}") from e
