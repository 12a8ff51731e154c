from __future__ import annotations

import json
import sys

import pytest

from strictsh.cli import build_parser, main
from strictsh.core.config import get_runtime_config

from conftest import requires_bash


def run_cli(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


class TestCli:
    def test_print_lib(self, capsys):
        assert run_cli(["print-lib"]) == 0
        out = capsys.readouterr().out
        assert "strict::enable()" in out
        assert "strict::run()" in out
        assert "strict::errexit_honored()" in out

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX process semantics")
    def test_guard_prints_status(self, capsys):
        code = run_cli(["guard", sys.executable, "-c", "import sys; sys.exit(4)"])
        assert code == 0
        assert capsys.readouterr().out.strip().splitlines()[-1] == "4"

    def test_print_config(self, capsys, monkeypatch):
        monkeypatch.setenv("STRICTSH_ARG_LIMIT", "80")
        assert run_cli(["print-config"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["runtime"]["arg_limit"] == 80
        assert payload["runtime"]["bash"] == "bash"
        assert "log_dir" in payload

    def test_no_command_prints_help(self, capsys):
        assert run_cli([]) == 2
        assert "usage: strictsh" in capsys.readouterr().out

    def test_run_missing_script(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["run", str(tmp_path / "missing.sh")])
        assert "Script not found" in str(excinfo.value.code)

    @requires_bash
    def test_run_exits_with_script_status(self, tmp_path):
        script = tmp_path / "job.sh"
        script.write_text("true\nexit 3\n")
        assert run_cli(["run", str(script)]) == 3

    @requires_bash
    def test_run_no_strict(self, tmp_path):
        script = tmp_path / "job.sh"
        script.write_text("false\ntrue\n")
        assert run_cli(["run", "--no-strict", str(script)]) == 0

    def test_run_arguments_after_script(self):
        args = build_parser().parse_args(["run", "job.sh", "--flag", "x"])
        assert args.script == "job.sh"
        assert args.args == ["--flag", "x"]
        assert args.strict

    def test_strict_error_reported_on_stderr(self, tmp_path, capsys, monkeypatch):
        script = tmp_path / "job.sh"
        script.write_text("true\n")
        monkeypatch.setenv("STRICTSH_BASH", "strictsh-no-such-bash")
        get_runtime_config.cache_clear()
        assert run_cli(["run", str(script)]) == 2
        err = capsys.readouterr().err
        assert err.startswith("strictsh: [bash_missing] bash is required")
