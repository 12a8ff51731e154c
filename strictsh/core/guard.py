"""
Guarded execution: run one command and capture its status as data.

The caller's fail-fast flag and error handler are cleared only while the
child is launched and awaited, then restored from the snapshot on every
exit path. Inside the child the snapshot is re-applied, so strict semantics
still hold for the command's own work.
"""

from __future__ import annotations

import os
import subprocess
from typing import Any, Callable, Mapping, Sequence

from strictsh.core.config import get_runtime_config
from strictsh.core.errors import StrictError
from strictsh.core.logging import get_logger, log_event
from strictsh.core.mode import ExecutionMode, StrictModeConfig, default_mode
from strictsh.host.managed_process import ManagedProcess, normalize_status

Command = str | os.PathLike[str] | Callable[..., Any] | None

STATUS_NOT_FOUND = 127
STATUS_NOT_EXECUTABLE = 126

_logger = get_logger(__name__)


def shell_environment(
    snapshot: StrictModeConfig,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment that carries the snapshot's flags into bash children."""
    env = dict(os.environ if base is None else base)
    options = snapshot.shell_options()
    if options:
        env["SHELLOPTS"] = ":".join(options)
    else:
        env.pop("SHELLOPTS", None)
    if snapshot.inherit_errexit:
        env["BASHOPTS"] = "inherit_errexit"
    else:
        env.pop("BASHOPTS", None)
    return env


def describe_command(command: Command, args: Sequence[Any] = ()) -> str:
    if command is None:
        name = ""
    elif callable(command):
        name = getattr(command, "__qualname__", None) or repr(command)
    else:
        name = os.fspath(command)
    return " ".join([name, *(str(arg) for arg in args)]).strip()


class GuardedExecutor:
    """Runs commands in isolated child processes and records their status."""

    def __init__(
        self,
        mode: ExecutionMode | None = None,
        *,
        export_shellopts: bool | None = None,
        start_method: str | None = None,
    ) -> None:
        config = get_runtime_config()
        self.mode = mode if mode is not None else default_mode()
        self.export_shellopts = (
            config.export_shellopts if export_shellopts is None else export_shellopts
        )
        self.start_method = start_method or config.start_method

    def run(self, dest: str | None, command: Command, *args: Any) -> int:
        """Run ``command`` with ``args``; store the status in variable ``dest``.

        Returns the same status. An empty ``dest`` discards it. Failures,
        missing executables and signals all become a status in [0, 255];
        nothing is raised for them and the error handler does not fire.
        """
        mode = self.mode
        snapshot = mode.snapshot()
        log_event(_logger, "guard.start", command=describe_command(command, args))

        mode.update(errexit=False, error_handler=None)
        try:
            status = self._launch(snapshot, command, args)
        finally:
            mode.restore(snapshot)

        log_event(_logger, "guard.finished", status=status)
        if dest:
            mode.assign(dest, status)
        return status

    def _launch(
        self,
        snapshot: StrictModeConfig,
        command: Command,
        args: Sequence[Any],
    ) -> int:
        if command is None or command == "":
            return 0
        if callable(command):
            process = ManagedProcess(
                command=command,
                args=tuple(args),
                snapshot=snapshot,
                start_method=self.start_method,
            )
            try:
                process.start()
            except StrictError as exc:
                log_event(_logger, "guard.launch_failed", error=str(exc))
                return STATUS_NOT_EXECUTABLE
            return process.wait()
        return self._launch_external(snapshot, command, args)

    def _launch_external(
        self,
        snapshot: StrictModeConfig,
        command: str | os.PathLike[str],
        args: Sequence[Any],
    ) -> int:
        argv = [os.fspath(command), *(str(arg) for arg in args)]
        env = shell_environment(snapshot) if self.export_shellopts else None
        try:
            proc = subprocess.Popen(argv, env=env)
        except FileNotFoundError:
            return STATUS_NOT_FOUND
        except OSError:
            return STATUS_NOT_EXECUTABLE
        return normalize_status(proc.wait())


def run_guarded(
    dest: str | None,
    command: Command,
    *args: Any,
    mode: ExecutionMode | None = None,
) -> int:
    return GuardedExecutor(mode).run(dest, command, *args)


__all__ = [
    "Command",
    "GuardedExecutor",
    "STATUS_NOT_EXECUTABLE",
    "STATUS_NOT_FOUND",
    "describe_command",
    "run_guarded",
    "shell_environment",
]
