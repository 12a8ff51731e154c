"""Human-readable failure reports for honored failures."""

from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass, field
from typing import Sequence, TextIO

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from strictsh.core.config import get_runtime_config
from strictsh.core.stack import PythonStackInspector, StackFrame, StackInspector

ARG_LIMIT = 255
ELLIPSIS = "..."


@dataclass(frozen=True)
class FailureEvent:
    status: int
    command: str
    pipestatus: tuple[int, ...] = field(default_factory=tuple)


def format_arg(value: str, *, limit: int = ARG_LIMIT) -> str:
    if len(value) > limit:
        value = value[:limit] + ELLIPSIS
    return shlex.quote(value)


def format_frame(index: int, frame: StackFrame, *, limit: int = ARG_LIMIT) -> str:
    parts = [f"[{index}]", frame.label, frame.location]
    parts.extend(format_arg(arg, limit=limit) for arg in frame.args)
    return " ".join(parts)


def render_report(
    event: FailureEvent,
    frames: Sequence[StackFrame],
    *,
    limit: int = ARG_LIMIT,
) -> list[Text]:
    lines: list[Text] = []
    header = Text.from_markup(
        f"[bold red]Error:[/bold red] `{escape(event.command)}` "
        f"exited with status [bold]{event.status}[/bold]"
    )
    if frames:
        header.append(f" at {frames[0].location}")
    lines.append(header)

    if len(event.pipestatus) > 1:
        statuses = " ".join(str(code) for code in event.pipestatus)
        lines.append(Text(f"Pipeline status: {statuses}"))

    if frames:
        lines.append(Text("Stack trace:", style="bold"))
        for index, frame in enumerate(frames):
            lines.append(Text("  " + format_frame(index, frame, limit=limit)))
    return lines


def report_failure(
    event: FailureEvent,
    *,
    inspector: StackInspector | None = None,
    stream: TextIO | None = None,
    limit: int | None = None,
) -> None:
    """Default error handler: print the failure and a stack trace to stderr.

    Pure reporting; whatever termination is underway continues after this
    returns.
    """
    if limit is None:
        limit = get_runtime_config().arg_limit
    frames = (inspector or PythonStackInspector()).frames()
    console = Console(
        file=stream or sys.stderr,
        highlight=False,
        soft_wrap=True,
    )
    for line in render_report(event, frames, limit=limit):
        console.print(line)


__all__ = [
    "ARG_LIMIT",
    "FailureEvent",
    "format_arg",
    "format_frame",
    "render_report",
    "report_failure",
]
