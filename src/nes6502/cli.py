# src/nes6502/cli.py
"""
コマンドライン入口。

iNESカートリッジ（または --binary 指定時は生バイナリ）を読み込み、停止オペコードを実行するまで
走らせて最終レジスタを表示します。終了コードは 0 (正常)、1 (未定義オペコード)、2 (入力不正)。
"""
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from nes6502.arch.mos6502.cpu import UnknownOpcodeError
from nes6502.arch.mos6502.instructions.maps import CpuProfile
from nes6502.config.loader import ConfigLoader, parse_int
from nes6502.config.models import SystemConfig
from nes6502.loader.cartridge import InvalidCartridgeError
from nes6502.loader.program import BinaryLoader
from nes6502.runner import RunResult, build_runner, run_cartridge

EXIT_OK = 0
EXIT_UNKNOWN_OPCODE = 1
EXIT_INVALID_INPUT = 2


def _address(text: str) -> int:
    try:
        value = parse_int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"address out of range: {text}")
    return value


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nes6502",
        description="Cycle-counting 6502 (NES) interpreter",
    )
    parser.add_argument("image", type=Path, help="iNES cartridge image, or a raw binary with --binary")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument(
        "--binary",
        action="store_true",
        help="Treat IMAGE as a raw binary loaded at --base (default: load.base from config, $8000)",
    )
    parser.add_argument("--base", type=_address, help="Load address for --binary (e.g. 0x0600 or $0600)")
    parser.add_argument(
        "--profile",
        choices=[p.value for p in CpuProfile],
        help="Instruction-set profile (default: canonical)",
    )
    parser.add_argument("--max-steps", type=int, help="Stop after this many instructions")
    parser.add_argument(
        "--reset-vector",
        action="store_true",
        help="Start at the address stored in $FFFC/$FFFD",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--trace", action="store_true", help="Log every executed instruction and its memory accesses")
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.trace:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_config(args: argparse.Namespace) -> SystemConfig:
    config = ConfigLoader().load_from_file(str(args.config)) if args.config else SystemConfig()
    if args.profile:
        config = replace(config, profile=args.profile)
    if args.max_steps is not None:
        config = replace(config, run=replace(config.run, max_steps=args.max_steps))
    if args.reset_vector:
        config = replace(config, initial_state=replace(config.initial_state, use_reset_vector=True))
    if args.base is not None:
        config = replace(config, load=replace(config.load, base=args.base))
    return config


def _run_binary(path: Path, config: SystemConfig, record_activity: bool = False) -> RunResult:
    base = config.load.base
    config = replace(config, initial_state=replace(config.initial_state, pc=base))
    runner = build_runner(config, record_activity=record_activity)
    BinaryLoader().load_binary(path, runner.cpu.memory, base)
    if config.initial_state.use_reset_vector:
        runner.cpu.jump_to_reset_vector()
    return runner.run()


# @intent:responsibility 最終状態を1行で表す。
def format_registers(result: RunResult) -> str:
    state = result.state
    return (
        f"PC:{state.pc:04X} A:{state.a:02X} X:{state.x:02X} Y:{state.y:02X} "
        f"P:{state.p:02X} SP:{state.sp:02X} CYC:{state.cycles} "
        f"steps:{result.steps} ({result.reason})"
    )


# @intent:responsibility 引数を解釈して実行し、終了コードを返す。
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    if not args.image.exists():
        parser.exit(EXIT_INVALID_INPUT, f"nes6502: file not found: {args.image}\n")

    try:
        config = _load_config(args)
        if args.binary:
            result = _run_binary(args.image, config, record_activity=args.trace)
        else:
            result = run_cartridge(args.image, config, record_activity=args.trace)
    except UnknownOpcodeError as exc:
        print(f"nes6502: {exc}", file=sys.stderr)
        return EXIT_UNKNOWN_OPCODE
    except (InvalidCartridgeError, ValueError, OSError) as exc:
        print(f"nes6502: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    print(format_registers(result))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
