# src/nes6502/arch/mos6502/instructions/load.py
"""
MOS 6502 転送系命令 (Load/Store/Transfer)。

全てのハンドラは (state, memory, operation) -> state の純粋関数です。
オペランドはデコード時に解決済みで、ここでは再フェッチしません。
"""
from nes6502.core.snapshot import Operation
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.flags import update_nz
from nes6502.arch.mos6502.instructions.base import fetch_operand


# --- Load ---

# @intent:responsibility メモリ（または即値）からAへロードし、N, Zフラグを更新。
def lda(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    val = fetch_operand(memory, operation)
    return update_nz(state.replace(a=val), val)


def ldx(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    val = fetch_operand(memory, operation)
    return update_nz(state.replace(x=val), val)


def ldy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    val = fetch_operand(memory, operation)
    return update_nz(state.replace(y=val), val)


# --- Store ---

# @intent:responsibility レジスタの内容を実効アドレスへストア。フラグ変化なし。
def sta(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    memory.write(operation.effective_address, state.a)
    return state


def stx(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    memory.write(operation.effective_address, state.x)
    return state


def sty(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    memory.write(operation.effective_address, state.y)
    return state


# --- Register Transfers (TAX, TAY, TXA, TYA, TSX, TXS) ---

def tax(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state.replace(x=state.a), state.a)


def tay(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state.replace(y=state.a), state.a)


def txa(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state.replace(a=state.x), state.x)


# @intent:note 互換プロファイルのTXA。XではなくSPをAへ写す。
def txa_from_sp(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state.replace(a=state.sp), state.sp)


def tya(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state.replace(a=state.y), state.y)


def tsx(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return update_nz(state.replace(x=state.sp), state.sp)


# @intent:note TXSはフラグを変更しない唯一の転送命令。
def txs(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.replace(sp=state.x)
