"""
chip8kit CLI Tests

Drives the command-line entry point in-process with small hand-built
ROM files and checks exit codes and printed summaries.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

import chip8kit


def _rom(tmp_path, data: bytes, name: str = "test.ch8") -> str:
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


# LD V0,$01 ; JP $202  (spins on the jump forever)
SPIN = bytes([0x60, 0x01, 0x12, 0x02])


class TestInfo:

    def test_summary(self, tmp_path, capsys):
        rom = _rom(tmp_path, SPIN)
        assert chip8kit.main(["info", rom]) == 0
        out = capsys.readouterr().out
        assert "Size:     4 bytes" in out
        assert "Fit:      OK, $200-$203" in out
        assert "Words:    6001 1202" in out

    def test_word_limit(self, tmp_path, capsys):
        rom = _rom(tmp_path, SPIN * 4)
        chip8kit.main(["info", rom, "--words", "2"])
        assert "Words:    6001 1202\n" in capsys.readouterr().out

    def test_odd_length(self, tmp_path, capsys):
        rom = _rom(tmp_path, SPIN + b'\x00')
        assert chip8kit.main(["info", rom]) == 0
        assert "odd length" in capsys.readouterr().out

    def test_too_large(self, tmp_path, capsys):
        rom = _rom(tmp_path, bytes(3585))
        assert chip8kit.main(["info", rom]) == 1
        assert "TOO LARGE (1 bytes over 3584)" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert chip8kit.main(["info", str(tmp_path / "nope.ch8")]) == 1
        assert capsys.readouterr().err.startswith("Error:")


class TestRun:

    def test_timeout(self, tmp_path, capsys):
        rom = _rom(tmp_path, SPIN)
        assert chip8kit.main(["run", rom, "--ticks", "10"]) == 0
        assert "Stopped: TIMEOUT after 10 ticks at PC=$202" in capsys.readouterr().out

    def test_breakpoint(self, tmp_path, capsys):
        rom = _rom(tmp_path, SPIN)
        assert chip8kit.main(["run", rom, "--break", "0x202"]) == 0
        assert "Stopped: BREAK after 1 ticks at PC=$202" in capsys.readouterr().out

    def test_illegal_opcode(self, tmp_path, capsys):
        rom = _rom(tmp_path, bytes([0x01, 0x23]))
        assert chip8kit.main(["run", rom, "--ticks", "5"]) == 1
        captured = capsys.readouterr()
        assert "Stopped: ILLEGAL after 1 ticks at PC=$200" in captured.out
        assert "Fault: Unknown opcode $0123 at $200" in captured.err

    def test_trace(self, tmp_path, capsys):
        rom = _rom(tmp_path, SPIN)
        assert chip8kit.main(["run", rom, "--ticks", "2", "--trace"]) == 0
        out = capsys.readouterr().out
        assert "$200: 6001" in out
        assert "$202: 1202" in out

    def test_too_large_rom(self, tmp_path, capsys):
        rom = _rom(tmp_path, bytes(4000))
        assert chip8kit.main(["run", rom]) == 1
        assert "Error:" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert chip8kit.main([]) == 0
    assert "usage: chip8kit" in capsys.readouterr().out


def test_version():
    with pytest.raises(SystemExit) as exc:
        chip8kit.main(["--version"])
    assert exc.value.code == 0
