# src/nes6502/arch/mos6502/instructions/undocumented.py
"""
MOS 6502 非公式命令 (ISC, DCP, LAX, SAX)。

いずれも公式命令2つを1命令で行う複合命令で、NESソフトウェアが実際に使用するものに限ります。
"""
from nes6502.core.snapshot import Operation
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.flags import update_nz
from nes6502.arch.mos6502.instructions.base import fetch_operand
from nes6502.arch.mos6502.instructions.alu import (
    borrow_of,
    legacy_subtract,
    step_memory,
    subtract_with_borrow,
)


# @intent:responsibility ISC (INC + SBC)。メモリを+1して書き戻し、その値でAから減算する。
def isc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    value = step_memory(memory, operation.effective_address, 1)
    return subtract_with_borrow(state, value)


# @intent:note 互換プロファイルのISC。減数は増分後の値から借り(1 - C)を引いたもの。
def isc_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    value = step_memory(memory, operation.effective_address, 1)
    return legacy_subtract(state, value - borrow_of(state))


# @intent:responsibility DCP (DEC + CMP)。メモリを-1して書き戻し、Aと比較する。
def dcp(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    value = step_memory(memory, operation.effective_address, -1)
    diff = state.a - value
    return update_nz(state.update_flags(c=diff >= 0), diff & 0xFF)


# @intent:responsibility LAX (LDA + LDX)。同じ値をAとXへロードする。
def lax(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    value = fetch_operand(memory, operation)
    return update_nz(state.replace(a=value, x=value), value)


# @intent:responsibility SAX。A & X をストアする。フラグ変化なし。
def sax(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    memory.write(operation.effective_address, state.a & state.x)
    return state
