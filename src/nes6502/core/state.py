# src/nes6502/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（PC、SP、サイクルカウンタ）を保持するデータ構造を定義します。
"""
from dataclasses import dataclass


# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUの基底状態。
    cyclesは実行開始からの累計クロックサイクル数で、実行中にリセットされることはありません。
    """
    pc: int = 0x0000  # Program Counter
    sp: int = 0x00  # Stack Pointer (8bit, 物理アドレスは $0100 | sp)
    cycles: int = 0

    # @intent:responsibility dataclasses.replaceのラッパー。
    def replace(self, **changes) -> 'CpuState':
        from dataclasses import replace
        return replace(self, **changes)
