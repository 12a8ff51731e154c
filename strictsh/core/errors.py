from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StrictError(Exception):
    code: str
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


@dataclass
class CommandFailed(StrictError):
    """A failing command whose failure was honored by fail-fast mode."""

    code: str = "command_failed"
    message: str = ""
    status: int = 1
    command: str = ""
    pipestatus: tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"`{self.command}` exited with status {self.status}"


@dataclass
class UnboundVariable(CommandFailed):
    code: str = "unbound_variable"
    name: str = ""

    def __post_init__(self) -> None:
        if not self.command:
            self.command = f"${self.name}"
        if not self.message:
            self.message = f"{self.name}: unbound variable"


def format_error(error: BaseException) -> str:
    if isinstance(error, StrictError) and error.code:
        return f"[{error.code}] {error}"
    return str(error)


def wrap_error(
    error: BaseException,
    *,
    code: str,
    message: str,
) -> StrictError:
    if isinstance(error, StrictError):
        return error
    detail = str(error)
    return StrictError(code=code, message=message, detail=detail)
