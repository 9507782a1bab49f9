# tests/arch/mos6502/test_disassembler.py
from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.disassembler import disassemble


def test_disassemble_mixed_program():
    memory = Memory(record_activity=True)
    memory.load(0x8000, [0xA9, 0x05, 0x8D, 0x00, 0x02, 0xD0, 0xFB, 0x0A, 0x02, 0xB1, 0x20])

    lines = disassemble(memory, 0x8000, 11)

    assert lines == [
        (0x8000, "A9 05", "LDA #$05"),
        (0x8002, "8D 00 02", "STA $0200"),
        (0x8005, "D0 FB", "BNE $8002"),
        (0x8007, "0A", "ASL A"),
        (0x8008, "02", "DB $02"),
        (0x8009, "B1 20", "LDA ($20),Y"),
    ]
    assert memory.get_and_clear_activity_log() == []


def test_cpu_disassemble_delegates(cpu):
    cpu.memory.load(0x8000, [0x6C, 0xFF, 0x30])
    assert cpu.disassemble(0x8000, 3) == [(0x8000, "6C FF 30", "JMP ($30FF)")]


def test_decoded_operands_match_disassembly(make_cpu):
    # LDX #$02 / LDA $10,X / ROL A / STA ($20,X) / JMP ($0300)
    program = [0xA2, 0x02, 0xB5, 0x10, 0x2A, 0x81, 0x20, 0x6C, 0x00, 0x03]
    cpu = make_cpu(program)
    listing = cpu.disassemble(0x8000, len(program))

    for address, _, text in listing:
        op = cpu.step().operation
        assert op.address == address
        assert " ".join([op.mnemonic] + op.operands) == text
