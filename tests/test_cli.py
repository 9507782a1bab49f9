# tests/test_cli.py
import logging

import pytest

from nes6502.cli import main, EXIT_OK, EXIT_UNKNOWN_OPCODE, EXIT_INVALID_INPUT


def _write_cartridge(path, program):
    prg = bytearray(16384)
    prg[0:len(program)] = bytes(program)
    path.write_bytes(b"NES\x1a" + bytes([1, 0, 0, 0]) + bytes(8) + bytes(prg))
    return path


def test_run_cartridge_prints_registers(tmp_path, capsys):
    image = _write_cartridge(tmp_path / "ok.nes", [0xA9, 0x05, 0x00])
    assert main([str(image), "--quiet"]) == EXIT_OK
    out = capsys.readouterr().out.strip()
    assert out == "PC:0000 A:05 X:00 Y:00 P:34 SP:FA CYC:9 steps:2 (halt)"


def test_unknown_opcode_exit_code(tmp_path, capsys):
    image = _write_cartridge(tmp_path / "bad_op.nes", [0xE8, 0x02])
    assert main([str(image), "--quiet"]) == EXIT_UNKNOWN_OPCODE
    assert "Unknown opcode $02 at $8001" in capsys.readouterr().err


def test_invalid_cartridge_exit_code(tmp_path, capsys):
    image = tmp_path / "garbage.nes"
    image.write_bytes(b"not a cartridge at all")
    assert main([str(image), "--quiet"]) == EXIT_INVALID_INPUT
    assert "magic" in capsys.readouterr().err


def test_missing_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.nes")])
    assert excinfo.value.code == EXIT_INVALID_INPUT


def test_raw_binary_with_base(tmp_path, capsys):
    image = tmp_path / "prog.bin"
    image.write_bytes(bytes([0xA2, 0x03, 0xCA, 0xD0, 0xFD, 0x00]))  # LDX #3 / loop: DEX / BNE loop / BRK
    assert main([str(image), "--binary", "--base", "$0600", "--quiet"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "X:00" in out
    assert "steps:8 (halt)" in out


def test_max_steps_option(tmp_path, capsys):
    image = _write_cartridge(tmp_path / "loop.nes", [0x4C, 0x00, 0x80])
    assert main([str(image), "--max-steps", "4", "--quiet"]) == EXIT_OK
    assert "CYC:12 steps:4 (max_steps)" in capsys.readouterr().out


def test_legacy_profile_option(tmp_path, capsys):
    # TXA / BRK: 互換プロファイルのTXAはSPをコピーする
    image = _write_cartridge(tmp_path / "txa.nes", [0x8A, 0x00])
    assert main([str(image), "--profile", "legacy", "--quiet"]) == EXIT_OK
    assert "A:FD" in capsys.readouterr().out

    assert main([str(image), "--quiet"]) == EXIT_OK
    assert "A:00" in capsys.readouterr().out


def test_config_file(tmp_path, capsys):
    image = _write_cartridge(tmp_path / "cfg.nes", [0xE8, 0xE8, 0xEA, 0x00])
    config = tmp_path / "system.yaml"
    config.write_text("run:\n  halt_opcodes: [0xEA]\ninitial_state:\n  registers: {x: 0x10}\n")
    assert main([str(image), "--config", str(config), "--quiet"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "X:12" in out
    assert "PC:8003" in out
    assert "(halt)" in out


def test_invalid_config_exit_code(tmp_path, capsys):
    image = _write_cartridge(tmp_path / "x.nes", [0x00])
    config = tmp_path / "bad.yaml"
    config.write_text("profile: z80\n")
    assert main([str(image), "--config", str(config), "--quiet"]) == EXIT_INVALID_INPUT
    assert capsys.readouterr().err.startswith("nes6502:")


@pytest.mark.parametrize("content", [
    "run: [unclosed\n",
    "initial_state: 5\n",
    "run: [0x00]\n",
    "initial_state: {use_reset_vector: 'no'}\n",
])
def test_malformed_config_exit_code(tmp_path, capsys, content):
    image = _write_cartridge(tmp_path / "x.nes", [0x00])
    config = tmp_path / "bad.yaml"
    config.write_text(content)
    assert main([str(image), "--config", str(config), "--quiet"]) == EXIT_INVALID_INPUT
    assert capsys.readouterr().err.startswith("nes6502:")


def test_missing_config_exit_code(tmp_path, capsys):
    image = _write_cartridge(tmp_path / "x.nes", [0x00])
    missing = tmp_path / "missing.yaml"
    assert main([str(image), "--config", str(missing), "--quiet"]) == EXIT_INVALID_INPUT
    assert "Cannot read config" in capsys.readouterr().err


def test_unreadable_image_exit_code(tmp_path, capsys):
    # ディレクトリは存在するが読めない
    assert main([str(tmp_path), "--quiet"]) == EXIT_INVALID_INPUT
    assert capsys.readouterr().err.startswith("nes6502:")


def test_trace_logs_memory_accesses(tmp_path, caplog):
    image = _write_cartridge(tmp_path / "trace.nes", [0xA9, 0x05, 0x00])
    with caplog.at_level(logging.DEBUG, logger="nes6502.runner"):
        assert main([str(image), "--trace"]) == EXIT_OK
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("8000  A9 05") for m in messages)
    assert "      READ  $8000 = A9" in messages
    # BRKは戻り番地の上位バイト($80)から積む
    assert "      WRITE $01FD = 80" in messages
