# src/nes6502/runner.py
"""
実行ループモジュール。

フェッチ→実行のステップを繰り返し、停止オペコードの実行、最大ステップ数への到達、
または外部からの停止要求で実行を終えます。停止要求は命令の間でのみ受け付けます。
"""
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from nes6502.core.snapshot import Snapshot
from nes6502.transport.memory import BusAccess
from nes6502.arch.mos6502.cpu import Mos6502Cpu
from nes6502.arch.mos6502.state import Mos6502CpuState
from nes6502.config.builder import SystemBuilder
from nes6502.config.models import SystemConfig
from nes6502.loader.cartridge import PRG_BASE, load_cartridge, read_cartridge

logger = logging.getLogger(__name__)

REASON_HALT = "halt"
REASON_MAX_STEPS = "max_steps"
REASON_STOPPED = "stopped"


# @intent:responsibility 実行ループの結果。
@dataclass(frozen=True)
class RunResult:
    steps: int
    cycles: int
    reason: str  # "halt" | "max_steps" | "stopped"
    state: Mos6502CpuState


# @intent:responsibility 1命令分のトレース行を作る。
def format_trace(snapshot: Snapshot) -> str:
    op = snapshot.operation
    state = snapshot.state
    hex_bytes = " ".join(f"{b:02X}" for b in [op.opcode] + list(op.operand_bytes))
    asm = op.mnemonic + (" " + ", ".join(op.operands) if op.operands else "")
    return (
        f"{op.address:04X}  {hex_bytes:<8}  {asm:<14}"
        f"A:{state.a:02X} X:{state.x:02X} Y:{state.y:02X} P:{state.p:02X} SP:{state.sp:02X} "
        f"CYC:{state.cycles}"
    )


# @intent:responsibility メモリアクセス1件分のトレース行を作る。
def format_bus_access(access: BusAccess) -> str:
    return f"      {access.access_type.value:<5} ${access.address:04X} = {access.data:02X}"


# @intent:responsibility CPUの実行を制御します。
class Runner:
    """
    停止オペコードはその命令を実行した後で停止します（BRKならスタックへの退避まで完了する）。
    """
    def __init__(self, cpu: Mos6502Cpu, halt_opcodes: Iterable[int] = (0x00,),
                 max_steps: Optional[int] = None,
                 on_step: Optional[Callable[[Snapshot], None]] = None):
        self._cpu = cpu
        self._halt_opcodes = frozenset(halt_opcodes)
        self._max_steps = max_steps
        self._on_step = on_step
        self._running = False
        self._stop_requested = False
        self._steps = 0
        self._last_snapshot: Optional[Snapshot] = None

    @property
    def cpu(self) -> Mos6502Cpu:
        return self._cpu

    @property
    def steps(self) -> int:
        return self._steps

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    # @intent:responsibility 1命令だけ実行し、そのSnapshotを返す。
    def step_instruction(self) -> Snapshot:
        snapshot = self._cpu.step()
        self._steps += 1
        self._last_snapshot = snapshot
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(format_trace(snapshot))
            for access in snapshot.bus_activity:
                logger.debug(format_bus_access(access))
        if self._on_step is not None:
            self._on_step(snapshot)
        return snapshot

    def run(self) -> RunResult:
        """
        停止条件を満たすまでCPUの実行を継続します。
        UnknownOpcodeErrorはそのまま呼び出し元へ伝播します。
        """
        self._running = True
        self._stop_requested = False
        run_steps = 0
        reason = REASON_STOPPED

        try:
            while True:
                if self._stop_requested:
                    reason = REASON_STOPPED
                    break
                if self._max_steps is not None and run_steps >= self._max_steps:
                    reason = REASON_MAX_STEPS
                    break

                snapshot = self.step_instruction()
                run_steps += 1

                if snapshot.operation.opcode in self._halt_opcodes:
                    reason = REASON_HALT
                    logger.info(
                        "Halted on %s ($%02X) at $%04X after %d steps, %d cycles",
                        snapshot.operation.mnemonic, snapshot.operation.opcode,
                        snapshot.operation.address, run_steps, snapshot.state.cycles,
                    )
                    break
        finally:
            self._running = False

        state = self._cpu.get_state()
        if reason != REASON_HALT:
            logger.info("Run ended (%s) after %d steps, %d cycles", reason, run_steps, state.cycles)
        return RunResult(steps=run_steps, cycles=state.cycles, reason=reason, state=state)

    # @intent:responsibility 実行中のループに停止を要求する。現在の命令は完了してから止まる。
    def stop(self) -> None:
        self._stop_requested = True

    @property
    def is_running(self) -> bool:
        return self._running


# @intent:responsibility 構成からCPUを組み立ててRunnerを返す。
def build_runner(config: SystemConfig, on_step: Optional[Callable[[Snapshot], None]] = None,
                 record_activity: bool = False) -> Runner:
    cpu, _ = SystemBuilder().build_system(config, record_activity=record_activity)
    return Runner(cpu, halt_opcodes=config.run.halt_opcodes, max_steps=config.run.max_steps, on_step=on_step)


# @intent:responsibility iNESイメージを読み込み、$8000から（またはリセットベクタから）実行する。
def run_cartridge(path: Union[str, Path], config: Optional[SystemConfig] = None,
                  record_activity: bool = False) -> RunResult:
    if config is None:
        config = SystemConfig()
    # PCはPRG-ROMの先頭から
    config = replace(config, initial_state=replace(config.initial_state, pc=PRG_BASE))

    cartridge = read_cartridge(path)
    runner = build_runner(config, record_activity=record_activity)
    load_cartridge(cartridge, runner.cpu.memory)
    if config.initial_state.use_reset_vector:
        runner.cpu.jump_to_reset_vector()
    return runner.run()
