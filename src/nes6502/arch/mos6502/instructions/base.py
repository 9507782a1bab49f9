# src/nes6502/arch/mos6502/instructions/base.py
"""
MOS 6502 アドレッシングモード解決ロジック。

各モードはオペコード直後(pc + 1)からオペランドバイトを読み、実効アドレスまたは即値を求めます。
PCの前進とサイクル加算は呼び出し側（CPUの命令サイクル）が命令長と命令表に基づいて行います。
"""
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Mapping, NamedTuple, Optional

from nes6502.transport.memory import Memory
from nes6502.core.snapshot import Operation
from nes6502.arch.mos6502.state import Mos6502CpuState


# @intent:responsibility アドレッシングモードの解決結果。
class AddressingResult(NamedTuple):
    address: Optional[int]  # 実効アドレス (Immediate/Implied/AccumulatorではNone)
    value: Optional[int]  # Immediateの場合の値
    operand_bytes: List[int]  # オペランドとして読んだバイト列


# @intent:responsibility アドレッシングモードとそのオペランド長。
class AddressingMode(Enum):
    IMPLIED = ("imp", 0)
    ACCUMULATOR = ("acc", 0)
    IMMEDIATE = ("imm", 1)
    ZERO_PAGE = ("zp", 1)
    ZERO_PAGE_X = ("zpx", 1)
    ZERO_PAGE_Y = ("zpy", 1)
    ABSOLUTE = ("abs", 2)
    ABSOLUTE_X = ("abx", 2)
    ABSOLUTE_Y = ("aby", 2)
    INDEXED_INDIRECT = ("izx", 1)
    INDIRECT_INDEXED = ("izy", 1)
    INDIRECT = ("ind", 2)
    RELATIVE = ("rel", 1)

    def __init__(self, label: str, operand_length: int):
        self.label = label
        self.operand_length = operand_length

    @property
    def length(self) -> int:
        return 1 + self.operand_length


# @intent:responsibility アドレッシングモードとオペランドバイトから表記を作る。
def format_operand(mode: AddressingMode, operand_bytes: List[int], addr: int) -> str:
    if mode == AddressingMode.IMPLIED:
        return ""
    if mode == AddressingMode.ACCUMULATOR:
        return "A"

    if mode == AddressingMode.RELATIVE:
        offset = operand_bytes[0]
        signed = offset - 0x100 if offset >= 0x80 else offset
        return f"${(addr + 2 + signed) & 0xFFFF:04X}"

    if mode.operand_length == 2:
        word = operand_bytes[0] | (operand_bytes[1] << 8)
        return {
            AddressingMode.ABSOLUTE: f"${word:04X}",
            AddressingMode.ABSOLUTE_X: f"${word:04X},X",
            AddressingMode.ABSOLUTE_Y: f"${word:04X},Y",
            AddressingMode.INDIRECT: f"(${word:04X})",
        }[mode]

    byte = operand_bytes[0]
    return {
        AddressingMode.IMMEDIATE: f"#${byte:02X}",
        AddressingMode.ZERO_PAGE: f"${byte:02X}",
        AddressingMode.ZERO_PAGE_X: f"${byte:02X},X",
        AddressingMode.ZERO_PAGE_Y: f"${byte:02X},Y",
        AddressingMode.INDEXED_INDIRECT: f"(${byte:02X},X)",
        AddressingMode.INDIRECT_INDEXED: f"(${byte:02X}),Y",
    }[mode]


AddrFunc = Callable[[int, Memory, Mos6502CpuState], AddressingResult]


def _operand_byte(pc: int, memory: Memory, offset: int = 1) -> int:
    return memory.read((pc + offset) & 0xFFFF)


def _operand_word(pc: int, memory: Memory) -> List[int]:
    return [_operand_byte(pc, memory, 1), _operand_byte(pc, memory, 2)]


# --- Addressing Modes ---

def addr_implied(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    return AddressingResult(None, None, [])


def addr_accumulator(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    return AddressingResult(None, None, [])


# @intent:responsibility Immediate Mode (#$xx)
def addr_immediate(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    val = _operand_byte(pc, memory)
    return AddressingResult(None, val, [val])


# @intent:responsibility Zero Page Mode ($xx)
def addr_zeropage(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    addr = _operand_byte(pc, memory)
    return AddressingResult(addr, None, [addr])


# @intent:responsibility Zero Page, X Mode ($xx,X)
# @intent:note ゼロページ内でラップアラウンドする ($80 + $FF -> $7F)
def addr_zeropage_x(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    base = _operand_byte(pc, memory)
    addr = memory.zero_page_address(base + state.x)
    return AddressingResult(addr, None, [base])


# @intent:responsibility Zero Page, Y Mode ($xx,Y) - LDX, STX など
def addr_zeropage_y(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    base = _operand_byte(pc, memory)
    addr = memory.zero_page_address(base + state.y)
    return AddressingResult(addr, None, [base])


# @intent:responsibility Absolute Mode ($xxxx)
def addr_absolute(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    lo, hi = _operand_word(pc, memory)
    addr = (hi << 8) | lo
    return AddressingResult(addr, None, [lo, hi])


# @intent:responsibility Absolute, X Mode ($xxxx,X)
def addr_absolute_x(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    lo, hi = _operand_word(pc, memory)
    base_addr = (hi << 8) | lo
    addr = (base_addr + state.x) & 0xFFFF
    return AddressingResult(addr, None, [lo, hi])


# @intent:responsibility Absolute, Y Mode ($xxxx,Y)
def addr_absolute_y(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    lo, hi = _operand_word(pc, memory)
    base_addr = (hi << 8) | lo
    addr = (base_addr + state.y) & 0xFFFF
    return AddressingResult(addr, None, [lo, hi])


# @intent:responsibility Indirect Mode (($xxxx)) - JMP only
# @intent:note ページ境界バグ: ポインタの下位バイトが$FFの場合、上位バイトは次ページではなく同じページの先頭($xx00)から読む。
def addr_indirect(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    ptr_lo, ptr_hi = _operand_word(pc, memory)
    ptr = (ptr_hi << 8) | ptr_lo

    eff_lo = memory.read(ptr)
    if ptr_lo == 0xFF:
        eff_hi = memory.read(ptr & 0xFF00)
    else:
        eff_hi = memory.read((ptr + 1) & 0xFFFF)

    addr = (eff_hi << 8) | eff_lo
    return AddressingResult(addr, None, [ptr_lo, ptr_hi])


# @intent:responsibility Indexed Indirect Mode (($xx,X)) - "Pre-indexed"
# @intent:note ゼロページ内でXを加算し、そこにあるポインタを読む。ポインタ上位バイトもゼロページ内でラップ。
def addr_indexed_indirect(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    base = _operand_byte(pc, memory)
    addr = memory.read_zero_page_word(base + state.x)
    return AddressingResult(addr, None, [base])


# @intent:responsibility Indirect Indexed Mode (($xx),Y) - "Post-indexed"
def addr_indirect_indexed(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    ptr_addr = _operand_byte(pc, memory)
    base_addr = memory.read_zero_page_word(ptr_addr)
    addr = (base_addr + state.y) & 0xFFFF
    return AddressingResult(addr, None, [ptr_addr])


# @intent:note 互換プロファイル用。ポインタを辿らず、(zp + X) mod 256 のセル自体を実効アドレスとする。
def addr_indexed_indirect_cell(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    base = _operand_byte(pc, memory)
    addr = memory.zero_page_address(base + state.x)
    return AddressingResult(addr, None, [base])


# @intent:note 互換プロファイル用。(zp + Y) mod 256 のセル自体を実効アドレスとする。
def addr_indirect_indexed_cell(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    base = _operand_byte(pc, memory)
    addr = memory.zero_page_address(base + state.y)
    return AddressingResult(addr, None, [base])


# @intent:responsibility Relative Mode (Branch)
# @intent:note 戻り値のアドレスは分岐先の絶対アドレス (PC + 2 + 符号付きオフセット)。
def addr_relative(pc: int, memory: Memory, state: Mos6502CpuState) -> AddressingResult:
    offset = _operand_byte(pc, memory)
    signed = offset - 0x100 if offset >= 0x80 else offset
    dest_addr = (pc + 2 + signed) & 0xFFFF
    return AddressingResult(dest_addr, None, [offset])


RESOLVERS: Mapping[AddressingMode, AddrFunc] = MappingProxyType({
    AddressingMode.IMPLIED: addr_implied,
    AddressingMode.ACCUMULATOR: addr_accumulator,
    AddressingMode.IMMEDIATE: addr_immediate,
    AddressingMode.ZERO_PAGE: addr_zeropage,
    AddressingMode.ZERO_PAGE_X: addr_zeropage_x,
    AddressingMode.ZERO_PAGE_Y: addr_zeropage_y,
    AddressingMode.ABSOLUTE: addr_absolute,
    AddressingMode.ABSOLUTE_X: addr_absolute_x,
    AddressingMode.ABSOLUTE_Y: addr_absolute_y,
    AddressingMode.INDEXED_INDIRECT: addr_indexed_indirect,
    AddressingMode.INDIRECT_INDEXED: addr_indirect_indexed,
    AddressingMode.INDIRECT: addr_indirect,
    AddressingMode.RELATIVE: addr_relative,
})

LEGACY_RESOLVERS: Mapping[AddressingMode, AddrFunc] = MappingProxyType({
    **RESOLVERS,
    AddressingMode.INDEXED_INDIRECT: addr_indexed_indirect_cell,
    AddressingMode.INDIRECT_INDEXED: addr_indirect_indexed_cell,
})


# @intent:responsibility 解決済みオペランドの値を返す。即値があればそれを、なければ実効アドレスから1回だけ読む。
def fetch_operand(memory: Memory, operation: Operation) -> int:
    if operation.immediate is not None:
        return operation.immediate
    return memory.read(operation.effective_address)
