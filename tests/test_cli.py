"""
Synacor VM — CLI Tests (synvm run / synvm info)
"""

import struct

import pytest

import synvm
from synacor_vm.config import DEFAULT_STATUS_PORT, RunConfig


def _write_image(path, words):
    path.write_bytes(struct.pack(f'<{len(words)}H', *words))
    return str(path)


class TestRun:

    def test_prints_program_output(self, tmp_path, capsys):
        image = _write_image(tmp_path / "hi.bin", [19, 72, 19, 105, 19, 10, 0])
        assert synvm.main(["run", image]) == synvm.EXIT_HALTED
        assert capsys.readouterr().out == "Hi\n"

    def test_ret_on_empty_stack_exits_cleanly(self, tmp_path, capsys):
        image = _write_image(tmp_path / "ret.bin", [18])
        assert synvm.main(["run", image]) == synvm.EXIT_HALTED

    def test_fault_exit_code_and_report(self, tmp_path, capsys):
        image = _write_image(tmp_path / "pop.bin", [3, 32768])
        assert synvm.main(["run", "-q", image]) == synvm.EXIT_FAILED
        err = capsys.readouterr().err
        assert "Program failed" in err
        assert "StackUnderflow" in err
        assert "Opcode:    3 (pop)" in err

    def test_step_limit(self, tmp_path, capsys):
        image = _write_image(tmp_path / "loop.bin", [6, 0])
        assert synvm.main(["run", "--max-steps", "50", image]) == synvm.EXIT_LIMIT
        assert "Step limit reached" in capsys.readouterr().err

    def test_input_file(self, tmp_path, capsys):
        image = _write_image(tmp_path / "echo.bin", [20, 32768, 19, 32768, 0])
        moves = tmp_path / "moves.txt"
        moves.write_text("Z\n", encoding="utf-8")
        assert synvm.main(["run", "--input", str(moves), image]) == synvm.EXIT_HALTED
        assert capsys.readouterr().out == "Z"

    def test_undecodable_input_file(self, tmp_path, capsys):
        image = _write_image(tmp_path / "echo.bin", [20, 32768, 19, 32768, 0])
        moves = tmp_path / "moves.txt"
        moves.write_bytes(b"\xff\n")
        assert synvm.main(["run", "-q", "--input", str(moves), image]) == synvm.EXIT_FAILED
        assert "InvalidOperand" in capsys.readouterr().err

    def test_missing_image(self, tmp_path):
        assert synvm.main(["run", "-q", str(tmp_path / "none.bin")]) == synvm.EXIT_FAILED

    def test_log_dir_gets_trace(self, tmp_path, capsys):
        image = _write_image(tmp_path / "noop.bin", [21, 0])
        log_dir = tmp_path / "logs"
        assert synvm.main(["run", "--trace", "--log-dir", str(log_dir), image]) == 0
        logs = list(log_dir.glob("synvm_*.log"))
        assert len(logs) == 1
        text = logs[0].read_text(encoding="utf-8")
        assert "noop" in text
        assert "Halted (HALT)" in text


class TestInfo:

    def test_info(self, tmp_path, capsys):
        image = _write_image(tmp_path / "p.bin", [19, 65, 0])
        assert synvm.main(["info", image]) == 0
        out = capsys.readouterr().out
        assert "Words:     3 (6 bytes)" in out
        assert "Non-zero:  2 words" in out

    def test_no_command(self, capsys):
        assert synvm.main([]) == synvm.EXIT_FAILED


class TestRunConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SYNVM_STATUS_HOST", raising=False)
        monkeypatch.delenv("SYNVM_STATUS_PORT", raising=False)
        args = synvm.build_parser().parse_args(["run", "x.bin"])
        config = RunConfig.from_args(args)
        assert config.port == DEFAULT_STATUS_PORT
        assert config.max_steps is None
        assert config.log_dir is None
        assert config.verbosity == 0

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("SYNVM_STATUS_HOST", "0.0.0.0")
        monkeypatch.setenv("SYNVM_STATUS_PORT", "9090")
        args = synvm.build_parser().parse_args(["run", "--status", "x.bin"])
        config = RunConfig.from_args(args)
        assert (config.host, config.port) == ("0.0.0.0", 9090)
        assert config.status

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("SYNVM_STATUS_PORT", "9090")
        args = synvm.build_parser().parse_args(["run", "--port", "7000", "-vv", "x.bin"])
        config = RunConfig.from_args(args)
        assert config.port == 7000
        assert config.verbosity == 2

    def test_quiet(self):
        args = synvm.build_parser().parse_args(["run", "-q", "x.bin"])
        assert RunConfig.from_args(args).verbosity == -1
