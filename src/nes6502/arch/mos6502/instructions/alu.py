# src/nes6502/arch/mos6502/instructions/alu.py
"""
MOS 6502 演算系命令 (Logical, Arithmetic, Compare, Shift/Rotate, Inc/Dec)。

ADC/SBC/CMP は標準版（NMOS 6502 の文書化された挙動）と互換版の2系統を持ちます。
どちらもDフラグ（BCD演算）は参照しません。
"""
from typing import Callable, Tuple

from nes6502.core.snapshot import Operation
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.flags import (
    set_add_overflow_flag,
    set_bit_test_flags,
    set_carry_flag,
    set_sub_overflow_flag,
    signed_add_overflow,
    update_nz,
)
from nes6502.arch.mos6502.instructions.base import fetch_operand


# --- Logical Operations (AND, ORA, EOR, BIT) ---

def and_(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = state.a & fetch_operand(memory, operation)
    return update_nz(state.replace(a=res), res)


def ora(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = state.a | fetch_operand(memory, operation)
    return update_nz(state.replace(a=res), res)


def eor(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = state.a ^ fetch_operand(memory, operation)
    return update_nz(state.replace(a=res), res)


# @intent:responsibility Aとメモリの論理積でZを、メモリのビット6, 7でV, Nを決める。Aは変更しない。
def bit(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return set_bit_test_flags(state, state.a, fetch_operand(memory, operation))


# --- Arithmetic Operations (ADC, SBC) ---

# @intent:responsibility 標準のバイナリ加算。入力キャリーを加え、2の補数オーバーフローをVに設定する。
def add_with_carry(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    c = 1 if state.flag_c else 0
    res_wide = a + val + c
    res = res_wide & 0xFF
    new_state = state.replace(a=res).update_flags(
        c=res_wide > 0xFF,
        v=signed_add_overflow(a, val, res),
    )
    return update_nz(new_state, res)


# @intent:responsibility 標準の減算。SBC A, M は ADC A, ~M と等価。
def subtract_with_borrow(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    return add_with_carry(state, val ^ 0xFF)


# @intent:note 互換版ADC。入力キャリーは加えない。キャリーは加算前のオペランドから求める。
def legacy_add(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    new_state = set_carry_flag(state, a, val)
    new_state = set_add_overflow_flag(new_state, a, val)
    res = (a + val) & 0xFF
    return update_nz(new_state.replace(a=res), res)


# @intent:note 互換版SBC。減数は借りを反映した調整後の値で、キャリーとVはその値から求める。
def legacy_subtract(state: Mos6502CpuState, subtrahend: int) -> Mos6502CpuState:
    a = state.a
    subtrahend &= 0xFF
    new_state = set_carry_flag(state, a, subtrahend)
    new_state = set_sub_overflow_flag(new_state, a, subtrahend)
    res = (a - subtrahend) & 0xFF
    return update_nz(new_state.replace(a=res), res)


def borrow_of(state: Mos6502CpuState) -> int:
    return 0 if state.flag_c else 1


def adc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return add_with_carry(state, fetch_operand(memory, operation))


def sbc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return subtract_with_borrow(state, fetch_operand(memory, operation))


def adc_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return legacy_add(state, fetch_operand(memory, operation))


def sbc_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    val = fetch_operand(memory, operation)
    return legacy_subtract(state, val + borrow_of(state))


# --- Compare Operations (CMP, CPX, CPY) ---
# @intent:note 比較は結果を格納しない減算。オペランドは1度だけ読む。

def _compare(state: Mos6502CpuState, reg_val: int, mem_val: int) -> Mos6502CpuState:
    diff = reg_val - mem_val
    return update_nz(state.update_flags(c=diff >= 0), diff & 0xFF)


# @intent:note 互換版の比較。C (reg > mem) と Z (一致) を立てるのみで、落とすことはない。Nは変更しない。
def _compare_legacy(state: Mos6502CpuState, reg_val: int, mem_val: int) -> Mos6502CpuState:
    if reg_val > mem_val:
        state = state.update_flags(c=True)
    if reg_val == mem_val:
        state = state.update_flags(z=True)
    return state


def cmp(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _compare(state, state.a, fetch_operand(memory, operation))


def cpx(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _compare(state, state.x, fetch_operand(memory, operation))


def cpy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _compare(state, state.y, fetch_operand(memory, operation))


def cmp_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _compare_legacy(state, state.a, fetch_operand(memory, operation))


def cpx_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _compare_legacy(state, state.x, fetch_operand(memory, operation))


def cpy_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _compare_legacy(state, state.y, fetch_operand(memory, operation))


# --- Shift / Rotate Operations (ASL, LSR, ROL, ROR) ---
# @intent:note 実効アドレスがない場合はアキュムレータモード。

# (value, carry_in) -> (result, carry_out)
ShiftFunc = Callable[[int, bool], Tuple[int, bool]]


def _shift(state: Mos6502CpuState, memory: Memory, operation: Operation,
           func: ShiftFunc) -> Mos6502CpuState:
    addr = operation.effective_address
    val = state.a if addr is None else memory.read(addr)

    res, c = func(val, state.flag_c)
    new_state = update_nz(state.update_flags(c=c), res)

    if addr is None:
        return new_state.replace(a=res)
    memory.write(addr, res)
    return new_state


def _asl(val: int, carry: bool):
    return (val << 1) & 0xFF, (val & 0x80) != 0


def _lsr(val: int, carry: bool):
    return val >> 1, (val & 0x01) != 0


def _rol(val: int, carry: bool):
    return ((val << 1) | int(carry)) & 0xFF, (val & 0x80) != 0


def _ror(val: int, carry: bool):
    return (val >> 1) | (int(carry) << 7), (val & 0x01) != 0


def asl(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _shift(state, memory, operation, _asl)


def lsr(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _shift(state, memory, operation, _lsr)


def rol(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _shift(state, memory, operation, _rol)


def ror(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _shift(state, memory, operation, _ror)


# --- Increment / Decrement (INC, DEC, INX, DEX, INY, DEY) ---

# @intent:responsibility メモリセルを±1し、書き戻した値を返す。
def step_memory(memory: Memory, addr: int, delta: int) -> int:
    res = (memory.read(addr) + delta) & 0xFF
    memory.write(addr, res)
    return res


def inc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state, step_memory(memory, operation.effective_address, 1))


def dec(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state, step_memory(memory, operation.effective_address, -1))


def inx(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = (state.x + 1) & 0xFF
    return update_nz(state.replace(x=res), res)


def dex(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = (state.x - 1) & 0xFF
    return update_nz(state.replace(x=res), res)


def iny(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = (state.y + 1) & 0xFF
    return update_nz(state.replace(y=res), res)


def dey(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    res = (state.y - 1) & 0xFF
    return update_nz(state.replace(y=res), res)
