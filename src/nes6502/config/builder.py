from typing import Tuple

from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.cpu import Mos6502Cpu
from nes6502.arch.mos6502.instructions.maps import CpuProfile
from .models import SystemConfig, CpuInitialState


# @intent:responsibility システム構成（Config）に基づいて、MemoryとCPUを生成し、初期状態を適用します。
class SystemBuilder:
    # @intent:note record_activity=Trueのとき、各Snapshotにメモリアクセスのログが残る（トレース用）。
    def build_system(self, config: SystemConfig, record_activity: bool = False) -> Tuple[Mos6502Cpu, Memory]:
        memory = Memory(record_activity=record_activity)
        cpu = Mos6502Cpu(
            memory,
            profile=CpuProfile.from_name(config.profile),
            use_reset_vector=config.initial_state.use_reset_vector,
        )
        self.apply_initial_state(cpu, config.initial_state)
        return cpu, memory

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Mos6502Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        リセットベクタを使う場合、PCはリセット処理で読み込んだ値のまま残ります。
        """
        cpu.reset()
        state = cpu.get_state()

        changes = dict(sp=config_state.sp & 0xFF, p=config_state.p & 0xFF)
        if not config_state.use_reset_vector:
            changes["pc"] = config_state.pc & 0xFFFF
        for reg_name, value in config_state.registers.items():
            changes[reg_name] = value & 0xFF

        cpu.set_state(state.replace(**changes))
