# src/nes6502/transport/memory.py
"""
Transport Layer (フラットメモリ)

このモジュールは、6502から見える64KBのアドレス空間を単一のバイト配列として表現します。
ゼロページ($0000-$00FF)とスタックページ($0100-$01FF)は同じ配列上の領域であり、
バンク切り替えやデバイスのマッピングは行いません。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

MEMORY_SIZE = 0x10000
ZERO_PAGE = 0x0000
STACK_PAGE = 0x0100


# @intent:responsibility メモリアクセスの種別を定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"


# @intent:responsibility 個々のメモリアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    メモリ上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int
    access_type: BusAccessType


# @intent:responsibility 64KBのフラットなアドレス空間を保持し、読み書きとロードを提供します。
# @intent:rationale CPUの各インスタンスは専用のMemoryを所有し、他のインスタンスと共有しない。
class Memory:
    """
    固定サイズ(65,536バイト)のメモリ。
    record_activity=Trueの場合、read/writeをアクセスログに記録します（トレース用）。
    """
    def __init__(self, record_activity: bool = False):
        self._memory = bytearray(MEMORY_SIZE)
        self._record_activity = record_activity
        self._activity_log: List[BusAccess] = []

    # @intent:responsibility アクセスログを記録します。
    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        if self._record_activity:
            self._activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたアクセスログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._activity_log
        self._activity_log = []
        return log

    # @intent:pre-condition アドレスは0x0000-0xFFFFの範囲内である必要があります。
    def _check_address(self, address: int) -> None:
        if not 0 <= address < MEMORY_SIZE:
            raise IndexError(f"Address {address:#06x} out of bounds for 64KB memory.")

    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        """
        self._check_address(address)
        data = self._memory[address]
        self._log_access(address, data, BusAccessType.READ)
        return data

    def peek(self, address: int) -> int:
        """
        ログに記録せずに読み出します。逆アセンブラやトレース表示用。
        """
        self._check_address(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        """
        指定されたアドレスに8bitのデータを書き込みます。
        """
        self._check_address(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data
        self._log_access(address, data, BusAccessType.WRITE)

    # @intent:responsibility リトルエンディアンの16bit値を読み出す。上位バイトのアドレスは16bitでラップする。
    def read_word(self, address: int) -> int:
        lo = self.read(address)
        hi = self.read((address + 1) & 0xFFFF)
        return (hi << 8) | lo

    # ベクタ読み出し用（ログなし）
    def peek_word(self, address: int) -> int:
        return self.peek(address) | (self.peek((address + 1) & 0xFFFF) << 8)

    # --- Zero page / Stack page accessors ---

    # @intent:responsibility ゼロページ内のアドレスを返す。オフセットは256でラップする。
    @staticmethod
    def zero_page_address(offset: int) -> int:
        return ZERO_PAGE | (offset & 0xFF)

    # @intent:responsibility SPからスタックページ上の物理アドレスを返す。ページ$00/$02には決して出ない。
    @staticmethod
    def stack_address(sp: int) -> int:
        return STACK_PAGE | (sp & 0xFF)

    # @intent:responsibility ゼロページ上の2バイトポインタを読み出す。上位バイトもゼロページ内でラップする。
    def read_zero_page_word(self, offset: int) -> int:
        lo = self.read(self.zero_page_address(offset))
        hi = self.read(self.zero_page_address(offset + 1))
        return (hi << 8) | lo

    # @intent:responsibility プログラムイメージを指定アドレスから逐語的にコピーする。
    # @intent:pre-condition base + len(data) <= 65536。範囲外は書き込みを一切行わずにValueErrorとする。
    def load(self, base: int, data: Iterable[int]) -> int:
        """
        データをbaseから連続して配置し、書き込んだバイト数を返します。
        ロードはアクセスログに記録されません。
        """
        payload = bytes(data)
        if not 0 <= base < MEMORY_SIZE:
            raise ValueError(f"Load address {base:#06x} is outside the 64KB address space.")
        if base + len(payload) > MEMORY_SIZE:
            raise ValueError(
                f"Image of {len(payload)} bytes at {base:#06x} does not fit in memory "
                f"(ends at {base + len(payload) - 1:#x})."
            )
        self._memory[base:base + len(payload)] = payload
        return len(payload)

    # @intent:responsibility 指定範囲のメモリ内容をbytesとして返す（ログなし）。
    def dump(self, start: int, length: int) -> bytes:
        self._check_address(start)
        end = min(start + length, MEMORY_SIZE)
        return bytes(self._memory[start:end])

    def get_size(self) -> int:
        return MEMORY_SIZE
