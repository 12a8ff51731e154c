from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from pathlib import Path
from types import FrameType
from typing import Protocol, Sequence

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class StackFrame:
    """One call-stack entry as consumed by the failure report."""

    label: str
    source: str
    line: int
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def location(self) -> str:
        return f"{self.source}:{self.line}"


class StackInspector(Protocol):
    def frames(self) -> Sequence[StackFrame]: ...


class PythonStackInspector:
    """Walks the interpreter's frames, innermost first.

    Frames that belong to this package are skipped so the first entry is
    the code that ran the failing command.
    """

    def __init__(self, *, include_library: bool = False) -> None:
        self._include_library = include_library

    def frames(self) -> list[StackFrame]:
        collected: list[StackFrame] = []
        frame = inspect.currentframe()
        try:
            while frame is not None:
                if self._include_library or not _is_library_frame(frame):
                    collected.append(_describe(frame))
                frame = frame.f_back
        finally:
            del frame
        return collected


def _is_library_frame(frame: FrameType) -> bool:
    filename = frame.f_code.co_filename
    try:
        path = Path(filename).resolve()
    except (OSError, ValueError):
        return False
    return path.is_relative_to(_PACKAGE_ROOT)


def _describe(frame: FrameType) -> StackFrame:
    code = frame.f_code
    label = code.co_name
    if label == "<module>":
        label = Path(code.co_filename).name
    info = inspect.getargvalues(frame)
    args: list[str] = []
    for name in info.args:
        args.append(_safe_str(info.locals.get(name)))
    if info.varargs:
        args.extend(_safe_str(value) for value in info.locals.get(info.varargs, ()))
    return StackFrame(
        label=label,
        source=code.co_filename,
        line=frame.f_lineno,
        args=tuple(args),
    )


def _safe_str(value: object) -> str:
    try:
        return str(value)
    except Exception:
        return f"<{type(value).__name__}>"


__all__ = [
    "PythonStackInspector",
    "StackFrame",
    "StackInspector",
]
