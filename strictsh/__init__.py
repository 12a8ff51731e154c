"""Strict execution mode, guarded command execution and error-context probing."""

from strictsh.core.errors import CommandFailed, StrictError, UnboundVariable
from strictsh.core.guard import GuardedExecutor, run_guarded
from strictsh.core.mode import (
    ExecutionMode,
    StrictModeConfig,
    default_mode,
    disable,
    enable,
)
from strictsh.core.probe import errexit_honored
from strictsh.core.report import FailureEvent, report_failure

__version__ = "0.3.0"

__all__ = [
    "CommandFailed",
    "ExecutionMode",
    "FailureEvent",
    "GuardedExecutor",
    "StrictError",
    "StrictModeConfig",
    "UnboundVariable",
    "__version__",
    "default_mode",
    "disable",
    "enable",
    "errexit_honored",
    "report_failure",
    "run_guarded",
]
