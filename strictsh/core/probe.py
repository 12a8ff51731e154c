from __future__ import annotations

from strictsh.core.logging import get_logger, log_event
from strictsh.core.mode import ExecutionMode, default_mode

_logger = get_logger(__name__)


def _fail_then_succeed(scope: ExecutionMode) -> int:
    scope.update(errexit=True)
    scope.check(1, "false")
    return scope.check(0, "true")


def errexit_honored(dest: str | None = None, *, mode: ExecutionMode | None = None) -> bool:
    """Report whether fail-fast currently takes effect at the call site.

    Setup clears fail-fast and the handler on the caller's mode; the nested
    scope then turns fail-fast back on and runs a failing step followed by a
    succeeding one. A non-zero scope status means the first failure stopped
    the scope. The order matters: the suppression being detected is
    inherited by the scope, while the caller's own flags are not.
    """
    mode = mode if mode is not None else default_mode()
    saved = mode.update(errexit=False, error_handler=None)
    try:
        status = mode.run_isolated(_fail_then_succeed)
    finally:
        mode.restore(saved)

    honored = status != 0
    log_event(_logger, "probe.verdict", honored=honored, suppression=mode.suppression)
    if dest:
        mode.assign(dest, honored)
    return honored


__all__ = ["errexit_honored"]
