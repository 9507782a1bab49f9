# src/nes6502/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの状態管理と命令サイクル（フェッチ→デコード→PC更新→実行）の駆動に関する
抽象化を提供します。具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from nes6502.transport.memory import Memory
from nes6502.core.snapshot import Snapshot, Operation, Metadata
from nes6502.core.state import CpuState


# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    CPUエミュレーションの基底となる抽象クラス。
    Memoryとのインターフェース、状態管理、命令サイクルのテンプレートを提供します。
    """
    # @intent:pre-condition `memory`はこのCPU専用のMemoryオブジェクトである必要があります。
    def __init__(self, memory: Memory):
        self._memory = memory
        self._state: CpuState = self._create_initial_state()
        # @intent:rationale 状態は命令ごとに新しいインスタンスへ置き換えられる。
        #                  外部からは`get_state()`/`set_state()`を介してアクセスする。

    @property
    def memory(self) -> Memory:
        return self._memory

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。サイクルカウンタも0に戻る。
    def reset(self) -> None:
        self._state = self._create_initial_state()

    def get_state(self) -> CpuState:
        """
        現在のCPUの状態を返します。
        """
        return self._state

    # @intent:responsibility 外部（ローダー、設定ビルダー）から状態を差し替える。
    def set_state(self, state: CpuState) -> None:
        self._state = state

    # @intent:responsibility メモリから次の命令（オペコード）をフェッチします。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility フェッチしたオペコードを解析し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターン。共通の実行フロー（ログクリア→フェッチ→デコード→PC更新→実行→Snapshot生成）を定義する。
    def step(self) -> Snapshot:
        """
        CPUを1命令進め、実行後の状態を含むSnapshotを返します。
        命令は完全に完了してから戻り、途中で中断されることはありません。
        """
        self._memory.get_and_clear_activity_log()

        opcode = self._fetch()
        operation = self._decode(opcode)

        # 分岐・ジャンプ系の命令は実行フェーズでPCを上書きする
        self._update_pc(operation)
        self._execute(operation)

        return self._create_snapshot(operation)

    # @intent:responsibility 命令実行前にPCを命令長分進めます。
    def _update_pc(self, operation: Operation) -> None:
        self._state = self._state.replace(pc=(self._state.pc + operation.length) & 0xFFFF)

    def _create_snapshot(self, operation: Operation) -> Snapshot:
        bus_activity = self._memory.get_and_clear_activity_log()

        symbol_info = operation.mnemonic
        if operation.operands:
            symbol_info += " " + ", ".join(operation.operands)

        return Snapshot(
            state=self._state,
            operation=operation,
            metadata=Metadata(cycle_count=self._state.cycles, symbol_info=symbol_info),
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグ（ステータスレジスタ）の各ビットの状態を辞書形式で返す。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
