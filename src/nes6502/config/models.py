from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class CpuInitialState:
    pc: int = 0x8000
    sp: int = 0xFD
    p: int = 0x24
    use_reset_vector: bool = False  # PCを$FFFC/$FFFDから読み込む
    registers: Dict[str, int] = field(default_factory=dict)  # a, x, y


@dataclass
class LoadConfig:
    base: int = 0x8000  # 生バイナリの配置アドレス


@dataclass
class RunConfig:
    halt_opcodes: List[int] = field(default_factory=lambda: [0x00])
    max_steps: Optional[int] = None


@dataclass
class SystemConfig:
    profile: str = "canonical"
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    load: LoadConfig = field(default_factory=LoadConfig)
    run: RunConfig = field(default_factory=RunConfig)
