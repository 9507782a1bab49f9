import yaml
from typing import Any, Dict, Optional

from nes6502.arch.mos6502.instructions.maps import CpuProfile
from .models import SystemConfig, CpuInitialState, LoadConfig, RunConfig

REGISTER_NAMES = ("a", "x", "y")


# @intent:responsibility 10進整数、"0x.."、"$.." 表記を受け付ける。
def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer format: {value}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            if text.startswith("$"):
                return int(text[1:], 16)
            return int(text)
        except ValueError:
            raise ValueError(f"Invalid integer format: {value}") from None
    raise ValueError(f"Invalid integer format: {value}")


class ConfigLoader:
    # @intent:responsibility 読み込み・YAML構文の失敗はValueErrorとして報告する。
    def load_from_file(self, path: str) -> SystemConfig:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Cannot read config '{path}': {e}") from e
        return self.parse(data)

    def load_from_string(self, text: str) -> SystemConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Cannot parse config: {e}") from e
        return self.parse(data)

    # @intent:responsibility 省略されたキーには既定値を使う。空文書は既定構成になる。
    def parse(self, data: Optional[Dict[str, Any]]) -> SystemConfig:
        data = self._section(data, "root")

        # プロファイル名はここで検証する
        profile = CpuProfile.from_name(data.get("profile", "canonical")).value

        initial_state_data = self._section(data.get("initial_state"), "initial_state")
        defaults = CpuInitialState()
        registers = {}
        registers_data = self._section(initial_state_data.get("registers"), "initial_state.registers")
        for reg_name, value in registers_data.items():
            reg_name = str(reg_name).lower()
            if reg_name not in REGISTER_NAMES:
                raise ValueError(f"Unknown register '{reg_name}' in initial_state.registers")
            registers[reg_name] = self._parse_byte(value, reg_name)

        initial_state = CpuInitialState(
            pc=self._parse_word(initial_state_data.get("pc", defaults.pc), "pc"),
            sp=self._parse_byte(initial_state_data.get("sp", defaults.sp), "sp"),
            p=self._parse_byte(initial_state_data.get("p", defaults.p), "p"),
            use_reset_vector=self._parse_bool(
                initial_state_data.get("use_reset_vector", False), "initial_state.use_reset_vector"),
            registers=registers,
        )

        load_data = self._section(data.get("load"), "load")
        load = LoadConfig(base=self._parse_word(load_data.get("base", LoadConfig().base), "load.base"))

        run_data = self._section(data.get("run"), "run")
        halt_opcodes = run_data.get("halt_opcodes", [0x00])
        if not isinstance(halt_opcodes, list):
            halt_opcodes = [halt_opcodes]
        max_steps = run_data.get("max_steps")
        run = RunConfig(
            halt_opcodes=[self._parse_byte(v, "run.halt_opcodes") for v in halt_opcodes],
            max_steps=None if max_steps is None else self._parse_int(max_steps),
        )

        return SystemConfig(profile=profile, initial_state=initial_state, load=load, run=run)

    def _parse_int(self, value: Any) -> int:
        return parse_int(value)

    def _parse_byte(self, value: Any, name: str) -> int:
        result = self._parse_int(value)
        if not 0 <= result <= 0xFF:
            raise ValueError(f"{name} must be an 8-bit value, got {result:#x}")
        return result

    def _parse_word(self, value: Any, name: str) -> int:
        result = self._parse_int(value)
        if not 0 <= result <= 0xFFFF:
            raise ValueError(f"{name} must be a 16-bit value, got {result:#x}")
        return result

    # @intent:note 省略（None）は空のセクションとして扱う。
    def _section(self, value: Any, name: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"Configuration section '{name}' must be a mapping, got {type(value).__name__}")
        return value

    # @intent:note YAMLの真偽値のみ受け付ける。文字列"false"などは誤設定とみなす。
    def _parse_bool(self, value: Any, name: str) -> bool:
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false, got {value!r}")
        return value
