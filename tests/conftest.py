# tests/conftest.py
import pytest

from nes6502.transport.memory import Memory
from nes6502.arch.mos6502.cpu import Mos6502Cpu
from nes6502.arch.mos6502.instructions.maps import CpuProfile


@pytest.fixture
def memory():
    return Memory()


# @intent:responsibility プログラムを配置済みのCPUを作るファクトリ。
@pytest.fixture
def make_cpu():
    def _make(program=b"", base=0x8000, profile=CpuProfile.CANONICAL, **registers):
        cpu = Mos6502Cpu(Memory(), profile=profile)
        cpu.load_program(bytes(program), base)
        if registers:
            cpu.set_state(cpu.get_state().replace(**registers))
        return cpu
    return _make


@pytest.fixture
def cpu(make_cpu):
    return make_cpu()
