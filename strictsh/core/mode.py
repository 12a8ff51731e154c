"""
Execution-mode state: fail-fast flags, the error handler and shell variables.

An ``ExecutionMode`` is the explicit context object every operation in this
package threads through. ``default_mode()`` exposes a process-wide instance
for callers that do not want to pass one around.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Callable, Iterator, MutableMapping

from strictsh.core.errors import CommandFailed, UnboundVariable
from strictsh.core.logging import get_logger, log_event
from strictsh.core.report import FailureEvent, report_failure

ErrorHandler = Callable[[FailureEvent], None]

DEFAULT_IFS = " \t\n"
STRICT_IFS = "\n\t"

_logger = get_logger(__name__)


@dataclass(frozen=True)
class StrictModeConfig:
    errexit: bool = False
    errtrace: bool = False
    inherit_errexit: bool = False
    nounset: bool = False
    pipefail: bool = False
    error_handler: ErrorHandler | None = None
    ifs: str = DEFAULT_IFS

    def shell_options(self) -> list[str]:
        """Names of the ``set -o`` options this config turns on."""
        names = ("errexit", "errtrace", "nounset", "pipefail")
        return [name for name in names if getattr(self, name)]


def strict_config(handler: ErrorHandler | None = report_failure) -> StrictModeConfig:
    return StrictModeConfig(
        errexit=True,
        errtrace=True,
        inherit_errexit=True,
        nounset=True,
        pipefail=True,
        error_handler=handler,
        ifs=STRICT_IFS,
    )


class ExecutionMode:
    """Mutable holder of the current ``StrictModeConfig``.

    The config is only ever replaced as a whole, so readers never observe a
    partially applied change.
    """

    def __init__(
        self,
        config: StrictModeConfig | None = None,
        *,
        variables: MutableMapping[str, Any] | None = None,
        suppression: int = 0,
    ) -> None:
        self._config = config or StrictModeConfig()
        self.variables: MutableMapping[str, Any] = (
            variables if variables is not None else {}
        )
        self._suppression = suppression

    # ------------------------------------------------------------------
    # Mode controller
    # ------------------------------------------------------------------

    @property
    def config(self) -> StrictModeConfig:
        return self._config

    def enable(self, handler: ErrorHandler | None = report_failure) -> None:
        self._config = strict_config(handler)
        log_event(_logger, "mode.enabled")

    def disable(self) -> None:
        self._config = StrictModeConfig()
        log_event(_logger, "mode.disabled")

    def snapshot(self) -> StrictModeConfig:
        return self._config

    def restore(self, snapshot: StrictModeConfig) -> None:
        self._config = snapshot

    def update(self, **changes: Any) -> StrictModeConfig:
        """Replace the config with a copy carrying ``changes``; return the old one."""
        previous = self._config
        self._config = replace(previous, **changes)
        return previous

    # ------------------------------------------------------------------
    # Context suppression
    # ------------------------------------------------------------------

    @property
    def suppression(self) -> int:
        return self._suppression

    @property
    def errexit_active(self) -> bool:
        return self._config.errexit and self._suppression == 0

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Mark a condition position: if/while tests, ``&&``/``||`` operands, ``!``.

        Fail-fast is ignored for everything nested inside, and nothing nested
        can turn it back on.
        """
        self._suppression += 1
        try:
            yield
        finally:
            self._suppression -= 1

    def detach(self) -> None:
        """Drop inherited suppression; the scope now runs as an independent unit."""
        self._suppression = 0

    # ------------------------------------------------------------------
    # Command status
    # ------------------------------------------------------------------

    def check(
        self,
        status: int,
        command: str = "",
        *,
        pipestatus: tuple[int, ...] = (),
    ) -> int:
        if status != 0 and self.errexit_active:
            event = FailureEvent(status=status, command=command, pipestatus=pipestatus)
            self._fire(event)
            raise CommandFailed(status=status, command=command, pipestatus=pipestatus)
        return status

    def pipeline(self, *statuses: int, command: str = "") -> int:
        if not statuses:
            return self.check(0, command)
        status = statuses[-1]
        if self._config.pipefail:
            failed = [code for code in statuses if code != 0]
            status = failed[-1] if failed else 0
        return self.check(status, command, pipestatus=tuple(statuses))

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def get(self, name: str) -> Any:
        if name in self.variables:
            return self.variables[name]
        if self._config.nounset:
            # Not subject to suppression: an unset read is always fatal.
            self._fire(FailureEvent(status=1, command=f"${name}"))
            raise UnboundVariable(status=1, name=name)
        return ""

    def assign(self, name: str, value: Any) -> None:
        if not name:
            return
        self.variables[name] = value

    def split(self, text: str) -> list[str]:
        ifs = self._config.ifs
        if not ifs:
            return [text] if text else []
        pattern = "[" + re.escape(ifs) + "]+"
        return [field for field in re.split(pattern, text) if field]

    # ------------------------------------------------------------------
    # Isolated scopes
    # ------------------------------------------------------------------

    def fork(self) -> "ExecutionMode":
        """Nested scope: copied variables, inherited suppression.

        Like a ``( ... )`` subshell, the scope keeps fail-fast as is; the
        handler crosses only with ``errtrace``.
        """
        config = self._config
        if not config.errtrace:
            config = replace(config, error_handler=None)
        return ExecutionMode(
            config,
            variables=dict(self.variables),
            suppression=self._suppression,
        )

    def run_isolated(self, fn: Callable[["ExecutionMode"], int | None]) -> int:
        """Run ``fn`` in a forked scope and return the scope's exit status."""
        scope = self.fork()
        try:
            status = fn(scope)
        except CommandFailed as exc:
            return exc.status
        return 0 if status is None else status

    def _fire(self, event: FailureEvent) -> None:
        handler = self._config.error_handler
        if handler is not None:
            handler(event)


@lru_cache
def default_mode() -> ExecutionMode:
    return ExecutionMode()


def enable(handler: ErrorHandler | None = report_failure) -> None:
    default_mode().enable(handler)


def disable() -> None:
    default_mode().disable()


__all__ = [
    "DEFAULT_IFS",
    "STRICT_IFS",
    "ErrorHandler",
    "ExecutionMode",
    "StrictModeConfig",
    "default_mode",
    "disable",
    "enable",
    "strict_config",
]
