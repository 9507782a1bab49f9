# src/nes6502/arch/mos6502/instructions/control.py
"""
MOS 6502 制御系命令 (Branch, Jump/Subroutine, Stack, Flags, BRK/RTI, NOP)。
"""
from typing import Tuple

from nes6502.core.snapshot import Operation
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.flags import update_nz

IRQ_VECTOR = 0xFFFE

# --- Stack helpers ---
# @intent:note スタックは$0100-$01FFに固定。SPは8bitでラップし、ページ$00/$02へは決して出ない。

# @intent:responsibility $0100|SP へ書き込んでからSPを1減らす。
def push(state: Mos6502CpuState, memory: Memory, value: int) -> Mos6502CpuState:
    memory.write(memory.stack_address(state.sp), value & 0xFF)
    return state.replace(sp=(state.sp - 1) & 0xFF)


# @intent:responsibility SPを1増やしてから $0100|SP を読む。
def pull(state: Mos6502CpuState, memory: Memory) -> Tuple[Mos6502CpuState, int]:
    new_sp = (state.sp + 1) & 0xFF
    value = memory.read(memory.stack_address(new_sp))
    return state.replace(sp=new_sp), value


# 上位バイトを先に積む
def push_word(state: Mos6502CpuState, memory: Memory, value: int) -> Mos6502CpuState:
    state = push(state, memory, (value >> 8) & 0xFF)
    return push(state, memory, value & 0xFF)


def pull_word(state: Mos6502CpuState, memory: Memory) -> Tuple[Mos6502CpuState, int]:
    state, lo = pull(state, memory)
    state, hi = pull(state, memory)
    return state, (hi << 8) | lo


# --- Branch Instructions ---
# @intent:note PCは実行前に命令長(2)分進んでいる。不成立時は何もしない。
#              成立時はPCを分岐先へ書き換え、1サイクル加算する。

def _branch(state: Mos6502CpuState, operation: Operation, condition: bool) -> Mos6502CpuState:
    if not condition:
        return state
    return state.replace(pc=operation.effective_address).add_cycles(1)


def bcc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, not state.flag_c)


def bcs(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, state.flag_c)


def beq(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, state.flag_z)


def bne(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, not state.flag_z)


def bmi(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, state.flag_n)


# @intent:note 互換プロファイルのBMI。NではなくZが0のときに分岐する。
def bmi_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, not state.flag_z)


def bpl(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, not state.flag_n)


def bvc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, not state.flag_v)


def bvs(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _branch(state, operation, state.flag_v)


# --- Jump / Subroutine ---

def jmp(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.replace(pc=operation.effective_address)


# @intent:responsibility 戻り番地(JSR命令の最終バイト)を上位バイトから積み、サブルーチンへ飛ぶ。
def jsr(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return_addr = (operation.address + 2) & 0xFFFF
    state = push_word(state, memory, return_addr)
    return state.replace(pc=operation.effective_address)


# @intent:responsibility 積まれた戻り番地 + 1 から再開する。
def rts(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state, return_addr = pull_word(state, memory)
    return state.replace(pc=(return_addr + 1) & 0xFFFF)


# @intent:note 互換プロファイル。JSRは命令先頭+1を積み、RTSは積まれた値+2から再開する。往復の結果は同じ。
def jsr_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return_addr = (operation.address + 1) & 0xFFFF
    state = push_word(state, memory, return_addr)
    return state.replace(pc=operation.effective_address)


def rts_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state, return_addr = pull_word(state, memory)
    return state.replace(pc=(return_addr + 2) & 0xFFFF)


# --- Stack Instructions (PHA, PHP, PLA, PLP) ---

def pha(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return push(state, memory, state.a)


def pla(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state, value = pull(state, memory)
    return update_nz(state.replace(a=value), value)


# @intent:note 積まれるPには常にBと未使用ビットが立つ。
def php(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return push(state, memory, state.p | Mos6502CpuState.B_FLAG | Mos6502CpuState.R_FLAG)


# @intent:note 引き出した値のBは捨て、未使用ビットは1に固定する。
def plp(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state, value = pull(state, memory)
    return state.replace(p=_restore_status(state, value))


def php_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return push(state, memory, state.p)


def plp_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state, value = pull(state, memory)
    return state.replace(p=value)


def _restore_status(state: Mos6502CpuState, value: int) -> int:
    return (value & ~Mos6502CpuState.B_FLAG & 0xFF) | Mos6502CpuState.R_FLAG | (state.p & Mos6502CpuState.B_FLAG)


# --- Flag Instructions ---

def clc(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(c=False)


def sec(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(c=True)


def cli(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(i=False)


def sei(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(i=True)


def cld(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(d=False)


def sed(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(d=True)


def clv(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state.update_flags(v=False)


# --- System ---

def nop(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return state


def _interrupt(state: Mos6502CpuState, memory: Memory, return_addr: int) -> Mos6502CpuState:
    state = push_word(state, memory, return_addr & 0xFFFF)
    state = push(state, memory, state.p | Mos6502CpuState.B_FLAG)
    state = state.update_flags(b=True)
    return state.replace(pc=memory.read_word(IRQ_VECTOR))


# @intent:responsibility PC上位, PC下位, P|B の順に積み、Bを立ててIRQベクタ($FFFE/$FFFF)へ飛ぶ。
# @intent:note 戻り番地はBRKの次の次のバイト（パディングバイトを飛ばす）。Iフラグも立つ。
def brk(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state = _interrupt(state, memory, operation.address + 2)
    return state.update_flags(i=True)


# @intent:note 互換プロファイルのBRK。戻り番地はBRK+1で、Iフラグは変更しない。
def brk_legacy(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    return _interrupt(state, memory, operation.address + 1)


# @intent:responsibility Pを引き出し（Bは捨てる）、続けてPC下位, 上位を引き出して復帰する。
def rti(state: Mos6502CpuState, memory: Memory, operation: Operation) -> Mos6502CpuState:
    state, value = pull(state, memory)
    state = state.replace(p=_restore_status(state, value))
    state, return_addr = pull_word(state, memory)
    return state.replace(pc=return_addr)
