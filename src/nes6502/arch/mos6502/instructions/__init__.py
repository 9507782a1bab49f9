# src/nes6502/arch/mos6502/instructions/__init__.py
"""
MOS 6502 命令実装パッケージ。
"""
