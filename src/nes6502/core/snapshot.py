# src/nes6502/core/snapshot.py
"""
実行状態の不変スナップショット

1命令の実行結果（命令の詳細、実行後のCPU状態、メモリアクセス）を記録する不変のデータ構造を定義します。
トレース出力と実行ループの停止判定に用いられます。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from nes6502.core.state import CpuState
from nes6502.transport.memory import BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    デコード済みの命令。
    effective_address / immediate はアドレッシングモード解決の結果で、
    実行フェーズではこの値がそのまま使われます（オペランドの再フェッチは行わない）。
    """
    opcode: int
    mnemonic: str
    address: int = 0  # 命令の先頭アドレス
    operands: List[str] = field(default_factory=list)  # 例: ["$1234"]
    operand_bytes: List[int] = field(default_factory=list)
    cycle_count: int = 0  # 命令の基本サイクル数
    length: int = 1
    effective_address: Optional[int] = None
    immediate: Optional[int] = None

    @property
    def opcode_hex(self) -> str:
        return f"{self.opcode:02X}"


# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    cycle_count: int  # 累計サイクル数
    symbol_info: Optional[str] = None  # 例: "LDA #$05"


# @intent:responsibility ある一時点におけるCPUとメモリアクセスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
