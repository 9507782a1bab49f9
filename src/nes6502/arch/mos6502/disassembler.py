# src/nes6502/arch/mos6502/disassembler.py
"""
MOS 6502 逆アセンブラ。

レジスタ状態に依存せず、命令表のアドレッシングモードとオペランドバイトだけから表記を組み立てます。
メモリはpeekで読むため、アクセスログには残りません。
"""
from typing import List, Tuple

from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.instructions.base import format_operand
from nes6502.arch.mos6502.instructions.maps import CANONICAL_OPCODES, OpcodeSet


# @intent:responsibility 指定されたメモリ範囲を逆アセンブルする。
def disassemble(memory: Memory, start_addr: int, length: int,
                opcode_set: OpcodeSet = CANONICAL_OPCODES) -> List[Tuple[int, str, str]]:
    """
    メモリを解析し、(アドレス, HEX, ニーモニック) のリストを返す。
    未定義のオペコードは "DB $xx" として1バイト進める。
    """
    results = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        addr = current_addr & 0xFFFF
        opcode = memory.peek(addr)
        instr = opcode_set.instructions.get(opcode)

        if instr is None:
            results.append((addr, f"{opcode:02X}", f"DB ${opcode:02X}"))
            current_addr += 1
            continue

        raw = [memory.peek((addr + i) & 0xFFFF) for i in range(instr.length)]
        hex_str = " ".join(f"{b:02X}" for b in raw)
        mnemonic_full = f"{instr.mnemonic} {format_operand(instr.mode, raw[1:], addr)}".strip()

        results.append((addr, hex_str, mnemonic_full))
        current_addr += instr.length

    return results
