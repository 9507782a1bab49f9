# src/nes6502/arch/mos6502/instructions/maps.py
"""
MOS 6502 命令表とデコード/実行ロジック。

命令表はオペコードからInstruction（ニーモニック、アドレッシングモード、命令ファミリ、ハンドラ、基本サイクル数）
への不変マッピングで、モジュール読み込み時に1度だけ構築されます。
標準(CANONICAL)と互換(LEGACY)の2つのプロファイルがあり、互換側は一部のハンドラとアドレッシングモード解決を差し替えたものです。
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Mapping

from nes6502.core.snapshot import Operation
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.arch.mos6502.instructions import alu, control, load, undocumented
from nes6502.arch.mos6502.instructions.base import (
    AddrFunc,
    AddressingMode,
    LEGACY_RESOLVERS,
    RESOLVERS,
    format_operand,
)

# Execution Function Type
ExecFunc = Callable[[Mos6502CpuState, Memory, Operation], Mos6502CpuState]

IMP = AddressingMode.IMPLIED
ACC = AddressingMode.ACCUMULATOR
IMM = AddressingMode.IMMEDIATE
ZP = AddressingMode.ZERO_PAGE
ZPX = AddressingMode.ZERO_PAGE_X
ZPY = AddressingMode.ZERO_PAGE_Y
ABS = AddressingMode.ABSOLUTE
ABX = AddressingMode.ABSOLUTE_X
ABY = AddressingMode.ABSOLUTE_Y
IZX = AddressingMode.INDEXED_INDIRECT
IZY = AddressingMode.INDIRECT_INDEXED
IND = AddressingMode.INDIRECT
REL = AddressingMode.RELATIVE


# @intent:responsibility 未定義オペコードの実行。回復不能なエラーとして扱う。
class UnknownOpcodeError(RuntimeError):
    def __init__(self, opcode: int, pc: int):
        self.opcode = opcode
        self.pc = pc
        super().__init__(f"Unknown opcode ${opcode:02X} at ${pc:04X}")


class InstructionFamily(Enum):
    LOAD = "load"
    STORE = "store"
    TRANSFER = "transfer"
    STACK = "stack"
    LOGICAL = "logical"
    ARITHMETIC = "arithmetic"
    COMPARE = "compare"
    SHIFT = "shift"
    INCREMENT = "increment"
    BRANCH = "branch"
    JUMP = "jump"
    FLAG = "flag"
    SYSTEM = "system"
    UNDOCUMENTED = "undocumented"


# @intent:responsibility 1つのオペコードの静的な定義。
@dataclass(frozen=True)
class Instruction:
    opcode: int
    mnemonic: str
    mode: AddressingMode
    family: InstructionFamily
    handler: ExecFunc
    cycles: int  # 基本サイクル数 (分岐成立の+1は含まない)

    @property
    def length(self) -> int:
        return self.mode.length


# @intent:responsibility プロファイルごとの命令表とアドレッシングモード解決関数の組。
@dataclass(frozen=True)
class OpcodeSet:
    instructions: Mapping[int, Instruction]
    resolvers: Mapping[AddressingMode, AddrFunc]


class CpuProfile(Enum):
    CANONICAL = "canonical"
    LEGACY = "legacy"

    @classmethod
    def from_name(cls, name: str) -> "CpuProfile":
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown CPU profile '{name}'. Expected one of: {choices}") from None

    @property
    def opcode_set(self) -> OpcodeSet:
        return _OPCODE_SETS[self]


F = InstructionFamily

# Opcode Entry: (Mnemonic, Addressing Mode, Family, Execution Function, Base Cycles)
_CANONICAL_ENTRIES = {
    # --- Load ---
    0xA9: ("LDA", IMM, F.LOAD, load.lda, 2),
    0xA5: ("LDA", ZP, F.LOAD, load.lda, 3),
    0xB5: ("LDA", ZPX, F.LOAD, load.lda, 4),
    0xAD: ("LDA", ABS, F.LOAD, load.lda, 4),
    0xBD: ("LDA", ABX, F.LOAD, load.lda, 4),
    0xB9: ("LDA", ABY, F.LOAD, load.lda, 4),
    0xA1: ("LDA", IZX, F.LOAD, load.lda, 6),
    0xB1: ("LDA", IZY, F.LOAD, load.lda, 5),

    0xA2: ("LDX", IMM, F.LOAD, load.ldx, 2),
    0xA6: ("LDX", ZP, F.LOAD, load.ldx, 3),
    0xB6: ("LDX", ZPY, F.LOAD, load.ldx, 4),
    0xAE: ("LDX", ABS, F.LOAD, load.ldx, 4),
    0xBE: ("LDX", ABY, F.LOAD, load.ldx, 4),

    0xA0: ("LDY", IMM, F.LOAD, load.ldy, 2),
    0xA4: ("LDY", ZP, F.LOAD, load.ldy, 3),
    0xB4: ("LDY", ZPX, F.LOAD, load.ldy, 4),
    0xAC: ("LDY", ABS, F.LOAD, load.ldy, 4),
    0xBC: ("LDY", ABX, F.LOAD, load.ldy, 4),

    # --- Store ---
    0x85: ("STA", ZP, F.STORE, load.sta, 3),
    0x95: ("STA", ZPX, F.STORE, load.sta, 4),
    0x8D: ("STA", ABS, F.STORE, load.sta, 4),
    0x9D: ("STA", ABX, F.STORE, load.sta, 5),
    0x99: ("STA", ABY, F.STORE, load.sta, 5),
    0x81: ("STA", IZX, F.STORE, load.sta, 6),
    0x91: ("STA", IZY, F.STORE, load.sta, 6),

    0x86: ("STX", ZP, F.STORE, load.stx, 3),
    0x96: ("STX", ZPY, F.STORE, load.stx, 4),
    0x8E: ("STX", ABS, F.STORE, load.stx, 4),

    0x84: ("STY", ZP, F.STORE, load.sty, 3),
    0x94: ("STY", ZPX, F.STORE, load.sty, 4),
    0x8C: ("STY", ABS, F.STORE, load.sty, 4),

    # --- Transfer ---
    0xAA: ("TAX", IMP, F.TRANSFER, load.tax, 2),
    0xA8: ("TAY", IMP, F.TRANSFER, load.tay, 2),
    0xBA: ("TSX", IMP, F.TRANSFER, load.tsx, 2),
    0x8A: ("TXA", IMP, F.TRANSFER, load.txa, 2),
    0x9A: ("TXS", IMP, F.TRANSFER, load.txs, 2),
    0x98: ("TYA", IMP, F.TRANSFER, load.tya, 2),

    # --- Stack ---
    0x48: ("PHA", IMP, F.STACK, control.pha, 3),
    0x08: ("PHP", IMP, F.STACK, control.php, 3),
    0x68: ("PLA", IMP, F.STACK, control.pla, 4),
    0x28: ("PLP", IMP, F.STACK, control.plp, 4),

    # --- Logical ---
    0x29: ("AND", IMM, F.LOGICAL, alu.and_, 2),
    0x25: ("AND", ZP, F.LOGICAL, alu.and_, 3),
    0x35: ("AND", ZPX, F.LOGICAL, alu.and_, 4),
    0x2D: ("AND", ABS, F.LOGICAL, alu.and_, 4),
    0x3D: ("AND", ABX, F.LOGICAL, alu.and_, 4),
    0x39: ("AND", ABY, F.LOGICAL, alu.and_, 4),
    0x21: ("AND", IZX, F.LOGICAL, alu.and_, 6),
    0x31: ("AND", IZY, F.LOGICAL, alu.and_, 5),

    0x09: ("ORA", IMM, F.LOGICAL, alu.ora, 2),
    0x05: ("ORA", ZP, F.LOGICAL, alu.ora, 3),
    0x15: ("ORA", ZPX, F.LOGICAL, alu.ora, 4),
    0x0D: ("ORA", ABS, F.LOGICAL, alu.ora, 4),
    0x1D: ("ORA", ABX, F.LOGICAL, alu.ora, 4),
    0x19: ("ORA", ABY, F.LOGICAL, alu.ora, 4),
    0x01: ("ORA", IZX, F.LOGICAL, alu.ora, 6),
    0x11: ("ORA", IZY, F.LOGICAL, alu.ora, 5),

    0x49: ("EOR", IMM, F.LOGICAL, alu.eor, 2),
    0x45: ("EOR", ZP, F.LOGICAL, alu.eor, 3),
    0x55: ("EOR", ZPX, F.LOGICAL, alu.eor, 4),
    0x4D: ("EOR", ABS, F.LOGICAL, alu.eor, 4),
    0x5D: ("EOR", ABX, F.LOGICAL, alu.eor, 4),
    0x59: ("EOR", ABY, F.LOGICAL, alu.eor, 4),
    0x41: ("EOR", IZX, F.LOGICAL, alu.eor, 6),
    0x51: ("EOR", IZY, F.LOGICAL, alu.eor, 5),

    0x24: ("BIT", ZP, F.LOGICAL, alu.bit, 3),
    0x2C: ("BIT", ABS, F.LOGICAL, alu.bit, 4),

    # --- Arithmetic ---
    0x69: ("ADC", IMM, F.ARITHMETIC, alu.adc, 2),
    0x65: ("ADC", ZP, F.ARITHMETIC, alu.adc, 3),
    0x75: ("ADC", ZPX, F.ARITHMETIC, alu.adc, 4),
    0x6D: ("ADC", ABS, F.ARITHMETIC, alu.adc, 4),
    0x7D: ("ADC", ABX, F.ARITHMETIC, alu.adc, 4),
    0x79: ("ADC", ABY, F.ARITHMETIC, alu.adc, 4),
    0x61: ("ADC", IZX, F.ARITHMETIC, alu.adc, 6),
    0x71: ("ADC", IZY, F.ARITHMETIC, alu.adc, 5),

    0xE9: ("SBC", IMM, F.ARITHMETIC, alu.sbc, 2),
    0xE5: ("SBC", ZP, F.ARITHMETIC, alu.sbc, 3),
    0xF5: ("SBC", ZPX, F.ARITHMETIC, alu.sbc, 4),
    0xED: ("SBC", ABS, F.ARITHMETIC, alu.sbc, 4),
    0xFD: ("SBC", ABX, F.ARITHMETIC, alu.sbc, 4),
    0xF9: ("SBC", ABY, F.ARITHMETIC, alu.sbc, 4),
    0xE1: ("SBC", IZX, F.ARITHMETIC, alu.sbc, 6),
    0xF1: ("SBC", IZY, F.ARITHMETIC, alu.sbc, 5),

    # --- Compare ---
    0xC9: ("CMP", IMM, F.COMPARE, alu.cmp, 2),
    0xC5: ("CMP", ZP, F.COMPARE, alu.cmp, 3),
    0xD5: ("CMP", ZPX, F.COMPARE, alu.cmp, 4),
    0xCD: ("CMP", ABS, F.COMPARE, alu.cmp, 4),
    0xDD: ("CMP", ABX, F.COMPARE, alu.cmp, 4),
    0xD9: ("CMP", ABY, F.COMPARE, alu.cmp, 4),
    0xC1: ("CMP", IZX, F.COMPARE, alu.cmp, 6),
    0xD1: ("CMP", IZY, F.COMPARE, alu.cmp, 5),

    0xE0: ("CPX", IMM, F.COMPARE, alu.cpx, 2),
    0xE4: ("CPX", ZP, F.COMPARE, alu.cpx, 3),
    0xEC: ("CPX", ABS, F.COMPARE, alu.cpx, 4),

    0xC0: ("CPY", IMM, F.COMPARE, alu.cpy, 2),
    0xC4: ("CPY", ZP, F.COMPARE, alu.cpy, 3),
    0xCC: ("CPY", ABS, F.COMPARE, alu.cpy, 4),

    # --- Shift / Rotate ---
    0x0A: ("ASL", ACC, F.SHIFT, alu.asl, 2),
    0x06: ("ASL", ZP, F.SHIFT, alu.asl, 5),
    0x16: ("ASL", ZPX, F.SHIFT, alu.asl, 6),
    0x0E: ("ASL", ABS, F.SHIFT, alu.asl, 6),
    0x1E: ("ASL", ABX, F.SHIFT, alu.asl, 7),

    0x4A: ("LSR", ACC, F.SHIFT, alu.lsr, 2),
    0x46: ("LSR", ZP, F.SHIFT, alu.lsr, 5),
    0x56: ("LSR", ZPX, F.SHIFT, alu.lsr, 6),
    0x4E: ("LSR", ABS, F.SHIFT, alu.lsr, 6),
    0x5E: ("LSR", ABX, F.SHIFT, alu.lsr, 7),

    0x2A: ("ROL", ACC, F.SHIFT, alu.rol, 2),
    0x26: ("ROL", ZP, F.SHIFT, alu.rol, 5),
    0x36: ("ROL", ZPX, F.SHIFT, alu.rol, 6),
    0x2E: ("ROL", ABS, F.SHIFT, alu.rol, 6),
    0x3E: ("ROL", ABX, F.SHIFT, alu.rol, 7),

    0x6A: ("ROR", ACC, F.SHIFT, alu.ror, 2),
    0x66: ("ROR", ZP, F.SHIFT, alu.ror, 5),
    0x76: ("ROR", ZPX, F.SHIFT, alu.ror, 6),
    0x6E: ("ROR", ABS, F.SHIFT, alu.ror, 6),
    0x7E: ("ROR", ABX, F.SHIFT, alu.ror, 7),

    # --- Increment / Decrement ---
    0xE6: ("INC", ZP, F.INCREMENT, alu.inc, 5),
    0xF6: ("INC", ZPX, F.INCREMENT, alu.inc, 6),
    0xEE: ("INC", ABS, F.INCREMENT, alu.inc, 6),
    0xFE: ("INC", ABX, F.INCREMENT, alu.inc, 7),

    0xC6: ("DEC", ZP, F.INCREMENT, alu.dec, 5),
    0xD6: ("DEC", ZPX, F.INCREMENT, alu.dec, 6),
    0xCE: ("DEC", ABS, F.INCREMENT, alu.dec, 6),
    0xDE: ("DEC", ABX, F.INCREMENT, alu.dec, 7),

    0xE8: ("INX", IMP, F.INCREMENT, alu.inx, 2),
    0xC8: ("INY", IMP, F.INCREMENT, alu.iny, 2),
    0xCA: ("DEX", IMP, F.INCREMENT, alu.dex, 2),
    0x88: ("DEY", IMP, F.INCREMENT, alu.dey, 2),

    # --- Branch ---
    0x90: ("BCC", REL, F.BRANCH, control.bcc, 2),
    0xB0: ("BCS", REL, F.BRANCH, control.bcs, 2),
    0xF0: ("BEQ", REL, F.BRANCH, control.beq, 2),
    0x30: ("BMI", REL, F.BRANCH, control.bmi, 2),
    0xD0: ("BNE", REL, F.BRANCH, control.bne, 2),
    0x10: ("BPL", REL, F.BRANCH, control.bpl, 2),
    0x50: ("BVC", REL, F.BRANCH, control.bvc, 2),
    0x70: ("BVS", REL, F.BRANCH, control.bvs, 2),

    # --- Jump / Subroutine ---
    0x4C: ("JMP", ABS, F.JUMP, control.jmp, 3),
    0x6C: ("JMP", IND, F.JUMP, control.jmp, 5),
    0x20: ("JSR", ABS, F.JUMP, control.jsr, 6),
    0x60: ("RTS", IMP, F.JUMP, control.rts, 6),

    # --- Flags ---
    0x18: ("CLC", IMP, F.FLAG, control.clc, 2),
    0x38: ("SEC", IMP, F.FLAG, control.sec, 2),
    0x58: ("CLI", IMP, F.FLAG, control.cli, 2),
    0x78: ("SEI", IMP, F.FLAG, control.sei, 2),
    0xB8: ("CLV", IMP, F.FLAG, control.clv, 2),
    0xD8: ("CLD", IMP, F.FLAG, control.cld, 2),
    0xF8: ("SED", IMP, F.FLAG, control.sed, 2),

    # --- System ---
    0xEA: ("NOP", IMP, F.SYSTEM, control.nop, 2),
    0x00: ("BRK", IMP, F.SYSTEM, control.brk, 7),
    0x40: ("RTI", IMP, F.SYSTEM, control.rti, 6),

    # --- Undocumented ---
    0xE7: ("ISC", ZP, F.UNDOCUMENTED, undocumented.isc, 5),
    0xF7: ("ISC", ZPX, F.UNDOCUMENTED, undocumented.isc, 6),
    0xEF: ("ISC", ABS, F.UNDOCUMENTED, undocumented.isc, 6),
    0xFF: ("ISC", ABX, F.UNDOCUMENTED, undocumented.isc, 7),
    0xFB: ("ISC", ABY, F.UNDOCUMENTED, undocumented.isc, 7),
    0xE3: ("ISC", IZX, F.UNDOCUMENTED, undocumented.isc, 8),
    0xF3: ("ISC", IZY, F.UNDOCUMENTED, undocumented.isc, 8),

    0xC7: ("DCP", ZP, F.UNDOCUMENTED, undocumented.dcp, 5),
    0xD7: ("DCP", ZPX, F.UNDOCUMENTED, undocumented.dcp, 6),
    0xCF: ("DCP", ABS, F.UNDOCUMENTED, undocumented.dcp, 6),
    0xDF: ("DCP", ABX, F.UNDOCUMENTED, undocumented.dcp, 7),
    0xDB: ("DCP", ABY, F.UNDOCUMENTED, undocumented.dcp, 7),
    0xC3: ("DCP", IZX, F.UNDOCUMENTED, undocumented.dcp, 8),
    0xD3: ("DCP", IZY, F.UNDOCUMENTED, undocumented.dcp, 8),

    0xA7: ("LAX", ZP, F.UNDOCUMENTED, undocumented.lax, 3),
    0xB7: ("LAX", ZPY, F.UNDOCUMENTED, undocumented.lax, 4),
    0xAF: ("LAX", ABS, F.UNDOCUMENTED, undocumented.lax, 4),
    0xBF: ("LAX", ABY, F.UNDOCUMENTED, undocumented.lax, 4),
    0xA3: ("LAX", IZX, F.UNDOCUMENTED, undocumented.lax, 6),
    0xB3: ("LAX", IZY, F.UNDOCUMENTED, undocumented.lax, 5),

    0x87: ("SAX", ZP, F.UNDOCUMENTED, undocumented.sax, 3),
    0x97: ("SAX", ZPY, F.UNDOCUMENTED, undocumented.sax, 4),
    0x8F: ("SAX", ABS, F.UNDOCUMENTED, undocumented.sax, 4),
    0x83: ("SAX", IZX, F.UNDOCUMENTED, undocumented.sax, 6),

    0x1A: ("NOP", IMP, F.UNDOCUMENTED, control.nop, 2),
    0x3A: ("NOP", IMP, F.UNDOCUMENTED, control.nop, 2),
    0x5A: ("NOP", IMP, F.UNDOCUMENTED, control.nop, 2),
    0x7A: ("NOP", IMP, F.UNDOCUMENTED, control.nop, 2),
    0xDA: ("NOP", IMP, F.UNDOCUMENTED, control.nop, 2),
    0xFA: ("NOP", IMP, F.UNDOCUMENTED, control.nop, 2),
    0xEB: ("SBC", IMM, F.UNDOCUMENTED, alu.sbc, 2),
}

# @intent:note 互換プロファイルで差し替えるハンドラ。ニーモニック、モード、サイクル数は共通。
_LEGACY_HANDLERS: Dict[ExecFunc, ExecFunc] = {
    alu.adc: alu.adc_legacy,
    alu.sbc: alu.sbc_legacy,
    alu.cmp: alu.cmp_legacy,
    alu.cpx: alu.cpx_legacy,
    alu.cpy: alu.cpy_legacy,
    load.txa: load.txa_from_sp,
    control.bmi: control.bmi_legacy,
    control.jsr: control.jsr_legacy,
    control.rts: control.rts_legacy,
    control.php: control.php_legacy,
    control.plp: control.plp_legacy,
    control.brk: control.brk_legacy,
    undocumented.isc: undocumented.isc_legacy,
}


def _build_table(handler_overrides: Mapping[ExecFunc, ExecFunc]) -> Mapping[int, Instruction]:
    table = {}
    for opcode, (mnemonic, mode, family, handler, cycles) in _CANONICAL_ENTRIES.items():
        handler = handler_overrides.get(handler, handler)
        table[opcode] = Instruction(opcode, mnemonic, mode, family, handler, cycles)
    return MappingProxyType(table)


CANONICAL_OPCODES = OpcodeSet(_build_table({}), RESOLVERS)
LEGACY_OPCODES = OpcodeSet(_build_table(_LEGACY_HANDLERS), LEGACY_RESOLVERS)

_OPCODE_SETS = MappingProxyType({
    CpuProfile.CANONICAL: CANONICAL_OPCODES,
    CpuProfile.LEGACY: LEGACY_OPCODES,
})


# @intent:responsibility オペコードを命令表から引き、オペランドを1度だけ解決してOperationを作る。
# @intent:pre-condition pc はオペコードのアドレス。state はアドレッシングモード解決時点のレジスタ。
def decode_opcode(opcode: int, memory: Memory, pc: int, state: Mos6502CpuState,
                  opcode_set: OpcodeSet = CANONICAL_OPCODES) -> Operation:
    instr = opcode_set.instructions.get(opcode)
    if instr is None:
        raise UnknownOpcodeError(opcode, pc)

    res = opcode_set.resolvers[instr.mode](pc, memory, state)
    operand = format_operand(instr.mode, res.operand_bytes, pc)

    return Operation(
        opcode=opcode,
        mnemonic=instr.mnemonic,
        address=pc,
        operands=[operand] if operand else [],
        operand_bytes=list(res.operand_bytes),
        cycle_count=instr.cycles,
        length=instr.length,
        effective_address=res.address,
        immediate=res.value,
    )


# @intent:responsibility デコード済みの命令を実行し、基本サイクル数を加算した新しい状態を返す。
def execute_instruction(operation: Operation, state: Mos6502CpuState, memory: Memory,
                        opcode_set: OpcodeSet = CANONICAL_OPCODES) -> Mos6502CpuState:
    instr = opcode_set.instructions.get(operation.opcode)
    if instr is None:
        raise UnknownOpcodeError(operation.opcode, operation.address)

    new_state = instr.handler(state, memory, operation)
    return new_state.add_cycles(instr.cycles)
