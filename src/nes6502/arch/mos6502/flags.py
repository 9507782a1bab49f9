# src/nes6502/arch/mos6502/flags.py
"""
MOS 6502 フラグ更新ロジック。

多くの命令で共有されるキャリー/ゼロ/ネガティブ/オーバーフローの計算を集約します。
全ての関数は新しいMos6502CpuStateを返し、指定されたフラグ以外は変更しません。
"""
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.common.bits import get_bit


def set_negative_flag(state: Mos6502CpuState, value: int) -> Mos6502CpuState:
    return state.update_flags(n=get_bit(value, 7))


def set_zero_flag(state: Mos6502CpuState, value: int) -> Mos6502CpuState:
    return state.update_flags(z=(value & 0xFF) == 0)


# @intent:responsibility N, Z フラグ更新ヘルパー
def update_nz(state: Mos6502CpuState, value: int) -> Mos6502CpuState:
    return state.update_flags(n=get_bit(value, 7), z=(value & 0xFF) == 0)


# @intent:responsibility 8bit加算 a + b が桁あふれするかを、演算前のオペランドで判定する。
def carry_out(a: int, b: int) -> bool:
    return a > 0xFF - b


def set_carry_flag(state: Mos6502CpuState, a: int, b: int) -> Mos6502CpuState:
    return state.update_flags(c=carry_out(a, b))


# @intent:responsibility 符号付き加算オーバーフロー。両オペランドと結果の符号が食い違う場合に真。
def signed_add_overflow(a: int, b: int, result: int) -> bool:
    return (~(a ^ b) & (a ^ result) & 0x80) != 0


# @intent:note 互換プロファイル用。符号なし和が8bitを超えた場合にVとCを立て、そうでなければVのみ落とす。
def set_add_overflow_flag(state: Mos6502CpuState, a: int, b: int) -> Mos6502CpuState:
    if a + b > 0xFF:
        return state.update_flags(v=True, c=True)
    return state.update_flags(v=False)


# @intent:note 互換プロファイル用。a - b が負ならVを立て、そうでなければVとCを落とす。
def set_sub_overflow_flag(state: Mos6502CpuState, a: int, b: int) -> Mos6502CpuState:
    if a - b < 0:
        return state.update_flags(v=True)
    return state.update_flags(v=False, c=False)


# @intent:responsibility BIT命令のフラグ規則。ZはA & Mから、VとNはMのビット6, 7をそのまま写す。
def set_bit_test_flags(state: Mos6502CpuState, a: int, value: int) -> Mos6502CpuState:
    return state.update_flags(
        z=(a & value) == 0,
        v=get_bit(value, 6),
        n=get_bit(value, 7),
    )
