# src/nes6502/arch/mos6502/__init__.py
"""
MOS 6502 Architecture Package
"""
from .cpu import Mos6502Cpu, UnknownOpcodeError
from .state import Mos6502CpuState
from .instructions.maps import CpuProfile
