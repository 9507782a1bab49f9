# src/nes6502/arch/mos6502/state.py
"""
MOS 6502 CPUの状態定義。
"""
from dataclasses import dataclass

from nes6502.common.bits import get_bit, assign_bit
from nes6502.core.state import CpuState


# @intent:responsibility MOS 6502 CPUの状態（レジスタ、フラグ、サイクル）を保持する。
@dataclass
class Mos6502CpuState(CpuState):
    """
    MOS 6502 CPUのレジスタ状態。
    全てのレジスタは8bit(PCのみ16bit)で、演算は常にラップアラウンドする。
    """
    sp: int = 0xFD
    a: int = 0
    x: int = 0
    y: int = 0
    p: int = 0x24  # Unused bit and Interrupt Disable set

    # Flag bit positions
    C_BIT = 0  # Carry
    Z_BIT = 1  # Zero
    I_BIT = 2  # Interrupt Disable
    D_BIT = 3  # Decimal Mode
    B_BIT = 4  # Break Command
    R_BIT = 5  # Unused (reads as 1 on hardware)
    V_BIT = 6  # Overflow
    N_BIT = 7  # Negative

    # Flag bit masks
    C_FLAG = 0x01
    Z_FLAG = 0x02
    I_FLAG = 0x04
    D_FLAG = 0x08
    B_FLAG = 0x10
    R_FLAG = 0x20
    V_FLAG = 0x40
    N_FLAG = 0x80

    @property
    def flag_c(self) -> bool: return get_bit(self.p, self.C_BIT)
    @property
    def flag_z(self) -> bool: return get_bit(self.p, self.Z_BIT)
    @property
    def flag_i(self) -> bool: return get_bit(self.p, self.I_BIT)
    @property
    def flag_d(self) -> bool: return get_bit(self.p, self.D_BIT)
    @property
    def flag_b(self) -> bool: return get_bit(self.p, self.B_BIT)
    @property
    def flag_v(self) -> bool: return get_bit(self.p, self.V_BIT)
    @property
    def flag_n(self) -> bool: return get_bit(self.p, self.N_BIT)

    # @intent:responsibility 指定したフラグだけを書き換えた新しいインスタンスを返す。指定のないフラグは保持される。
    def update_flags(self, **kwargs) -> 'Mos6502CpuState':
        """
        例: state.update_flags(c=True, z=False)
        """
        new_p = self.p
        for flag_name, value in kwargs.items():
            pos = getattr(self, f"{flag_name.upper()}_BIT", None)
            if pos is None:
                raise ValueError(f"Unknown 6502 flag: {flag_name}")
            new_p = assign_bit(new_p, pos, bool(value))
        return self.replace(p=new_p)

    # @intent:responsibility 累計サイクルを加算した新しいインスタンスを返す。
    def add_cycles(self, cycles: int) -> 'Mos6502CpuState':
        return self.replace(cycles=self.cycles + cycles)
