from __future__ import annotations

import multiprocessing
import pickle
import sys
import time
import traceback
from dataclasses import dataclass, field
from multiprocessing.process import BaseProcess
from typing import Any, Callable, Optional, Sequence

from strictsh.core.errors import CommandFailed, wrap_error
from strictsh.core.mode import StrictModeConfig, default_mode

CommandFn = Callable[..., Any]

# Raised by Process.start when spawn or forkserver cannot pickle the target.
_LAUNCH_ERRORS = (pickle.PicklingError, AttributeError, TypeError, OSError)


def resolve_start_method(preferred: str | None = None) -> str:
    available = multiprocessing.get_all_start_methods()
    if preferred and preferred in available:
        return preferred
    # Fork keeps closures and test-local callables usable as commands.
    return "fork" if "fork" in available else "spawn"


def normalize_status(code: int | None) -> int:
    """Map a process exit code onto the shell's 0-255 status range."""
    if code is None:
        return 1
    if code < 0:
        return (128 - code) & 0xFF
    return code & 0xFF


@dataclass
class ManagedProcess:
    """A Python callable running as an independent child process.

    The child re-applies ``snapshot`` to its default mode before the command
    runs, with no condition-position suppression carried over.
    """

    command: CommandFn
    args: Sequence[Any] = ()
    snapshot: StrictModeConfig = field(default_factory=StrictModeConfig)
    start_method: str | None = None

    process: Optional[BaseProcess] = field(init=False, default=None)
    start_time: Optional[float] = field(init=False, default=None)
    exit_code: Optional[int] = field(init=False, default=None)

    def start(self) -> None:
        if self.process is not None:
            raise RuntimeError("Process already started")

        context = multiprocessing.get_context(resolve_start_method(self.start_method))
        proc = context.Process(
            target=self._bootstrap_command,
            args=(self.snapshot, self.command, tuple(self.args)),
            daemon=False,
        )
        try:
            proc.start()
        except _LAUNCH_ERRORS as exc:
            raise wrap_error(
                exc,
                code="launch_failed",
                message="Unable to start child process",
            ) from exc

        self.process = proc
        self.start_time = time.time()

    def wait(self) -> int:
        """
        Block until the child exits and return its normalized status.
        """
        if self.process is None:
            raise RuntimeError("Process not started")

        self.process.join()
        self.exit_code = self.process.exitcode
        return normalize_status(self.exit_code)

    @staticmethod
    def _bootstrap_command(
        snapshot: StrictModeConfig,
        command: CommandFn,
        args: tuple[Any, ...],
    ) -> None:
        mode = default_mode()
        mode.restore(snapshot)
        mode.detach()
        try:
            result = command(*args)
        except CommandFailed as exc:
            status = exc.status
        except SystemExit:
            raise
        except BaseException:
            traceback.print_exc(file=sys.stderr)
            status = 1
        else:
            status = result if isinstance(result, int) and not isinstance(result, bool) else 0
        sys.stdout.flush()
        sys.stderr.flush()
        sys.exit(status & 0xFF)


__all__ = [
    "CommandFn",
    "ManagedProcess",
    "normalize_status",
    "resolve_start_method",
]
