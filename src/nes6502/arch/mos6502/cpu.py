# src/nes6502/arch/mos6502/cpu.py
"""
MOS 6502 CPUエミュレーションの中心モジュール。
"""
from typing import Dict, Iterable, List, Tuple

from nes6502.core.cpu import AbstractCpu
from nes6502.core.snapshot import Operation
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.instructions.maps import (
    CpuProfile,
    UnknownOpcodeError,
    decode_opcode,
    execute_instruction,
)

RESET_VECTOR = 0xFFFC

__all__ = ["Mos6502Cpu", "UnknownOpcodeError", "RESET_VECTOR"]


# @intent:responsibility MOS 6502 CPUの具体的なエミュレーションロジックを提供する。
class Mos6502Cpu(AbstractCpu):
    """
    MOS 6502 CPUをエミュレートするクラス。
    profileで命令表（標準/互換）を選択します。インスタンスは専用のMemoryを所有します。
    """
    def __init__(self, memory: Memory, profile: CpuProfile = CpuProfile.CANONICAL,
                 use_reset_vector: bool = False):
        self._profile = profile
        self._opcode_set = profile.opcode_set
        self._use_reset_vector = use_reset_vector
        super().__init__(memory)

    @property
    def profile(self) -> CpuProfile:
        return self._profile

    # @intent:responsibility MOS 6502の初期状態を生成する。
    def _create_initial_state(self) -> Mos6502CpuState:
        # P: 0x24 (R=1, I=1), SP: 0xFD
        state = Mos6502CpuState()
        if self._use_reset_vector:
            state = state.replace(pc=self._memory.peek_word(RESET_VECTOR))
        return state

    def get_state(self) -> Mos6502CpuState:
        return self._state

    # @intent:responsibility プログラムイメージをbaseへ配置し、PCをbaseに設定する。
    def load_program(self, data: Iterable[int], base: int) -> int:
        written = self._memory.load(base, data)
        self._state = self._state.replace(pc=base & 0xFFFF)
        return written

    # @intent:responsibility リセットベクタ($FFFC/$FFFD)からPCを読み込む。
    def jump_to_reset_vector(self) -> None:
        self._state = self._state.replace(pc=self._memory.peek_word(RESET_VECTOR))

    # @intent:responsibility 命令フェッチ。
    def _fetch(self) -> int:
        return self._memory.read(self._state.pc)

    # @intent:responsibility 命令デコード。未定義オペコードはUnknownOpcodeErrorとなる。
    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._memory, self._state.pc, self._state, self._opcode_set)

    # @intent:responsibility 命令実行。PCは既に命令長分進んでいる。
    def _execute(self, operation: Operation) -> None:
        self._state = execute_instruction(operation, self._state, self._memory, self._opcode_set)

    # @intent:responsibility レジスタマップ（トレース表示用）を返す。
    def get_register_map(self) -> Dict[str, int]:
        state = self._state
        return {
            "A": state.a,
            "X": state.x,
            "Y": state.y,
            "PC": state.pc,
            "SP": state.sp,
            "P": state.p
        }

    # @intent:responsibility フラグ状態を返す。
    def get_flag_state(self) -> Dict[str, bool]:
        state = self._state
        return {
            "N": state.flag_n,
            "V": state.flag_v,
            "B": state.flag_b,
            "D": state.flag_d,
            "I": state.flag_i,
            "Z": state.flag_z,
            "C": state.flag_c
        }

    # @intent:responsibility 指定範囲の逆アセンブル結果を返す。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        from nes6502.arch.mos6502 import disassembler
        return disassembler.disassemble(self._memory, start_addr, length, self._opcode_set)
