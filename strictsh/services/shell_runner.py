from __future__ import annotations

import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from strictsh.core.config import get_runtime_config
from strictsh.core.errors import StrictError, wrap_error
from strictsh.core.logging import get_logger, log_event
from strictsh.resources.library import BASH_LIBRARY, LIBRARY_FILENAME

SCRIPT_FILENAME = "main.sh"

# $1 is the library, $2 the script; the rest become the script's arguments.
_BOOTSTRAP = 'source "$1"; __strictsh_main=$2; shift 2; {enable}source "$__strictsh_main"'

_logger = get_logger(__name__)


@dataclass(frozen=True)
class ShellResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def find_bash(bash: str | None = None) -> str:
    candidate = bash or get_runtime_config().bash
    resolved = shutil.which(candidate)
    if resolved is None:
        raise StrictError(
            code="bash_missing",
            message="bash is required to run shell scripts",
            detail=candidate,
        )
    return resolved


def build_command(
    bash: str,
    library_path: Path,
    script_path: Path,
    args: Sequence[str] = (),
    *,
    strict: bool = True,
) -> list[str]:
    bootstrap = _BOOTSTRAP.format(enable="strict::enable; " if strict else "")
    return [
        bash,
        "-c",
        bootstrap,
        "strictsh",
        str(library_path),
        str(script_path),
        *args,
    ]


def run_shell_script(
    source: str,
    *,
    args: Sequence[str] = (),
    strict: bool = True,
    cwd: Path | None = None,
    capture: bool = True,
    timeout: float | None = None,
    bash: str | None = None,
) -> ShellResult:
    """Run bash ``source`` with the library loaded and return its status."""
    executable = find_bash(bash)
    with tempfile.TemporaryDirectory(prefix="strictsh-") as tmp:
        root = Path(tmp)
        library_path = root / LIBRARY_FILENAME
        script_path = root / SCRIPT_FILENAME
        library_path.write_text(BASH_LIBRARY, encoding="utf-8")
        script_path.write_text(source, encoding="utf-8")
        return _run(
            build_command(executable, library_path, script_path, args, strict=strict),
            cwd=cwd,
            capture=capture,
            timeout=timeout,
        )


def run_shell_file(
    path: Path,
    *,
    args: Sequence[str] = (),
    strict: bool = True,
    cwd: Path | None = None,
    capture: bool = False,
    timeout: float | None = None,
    bash: str | None = None,
) -> ShellResult:
    """Run an existing script file so its stack traces name the real path."""
    executable = find_bash(bash)
    with tempfile.TemporaryDirectory(prefix="strictsh-") as tmp:
        library_path = Path(tmp) / LIBRARY_FILENAME
        library_path.write_text(BASH_LIBRARY, encoding="utf-8")
        return _run(
            build_command(executable, library_path, path.resolve(), args, strict=strict),
            cwd=cwd,
            capture=capture,
            timeout=timeout,
        )


def _run(
    command: list[str],
    *,
    cwd: Path | None,
    capture: bool,
    timeout: float | None,
) -> ShellResult:
    log_event(_logger, "shell.run", script=command[5], args=command[6:])
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            capture_output=capture,
            text=True,
            stdin=subprocess.DEVNULL if capture else None,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return ShellResult(
            returncode=-1,
            stderr=f"Script timed out after {timeout} seconds.",
        )
    except OSError as exc:
        raise wrap_error(exc, code="bash_failed", message="Unable to start bash") from exc

    return ShellResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


__all__ = [
    "ShellResult",
    "build_command",
    "find_bash",
    "run_shell_file",
    "run_shell_script",
]
