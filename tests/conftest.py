from __future__ import annotations

import shutil

import pytest

from strictsh.core.config import get_runtime_config
from strictsh.core.mode import ExecutionMode, default_mode
from strictsh.core.report import FailureEvent

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


class RecordingHandler:
    def __init__(self) -> None:
        self.events: list[FailureEvent] = []

    def __call__(self, event: FailureEvent) -> None:
        self.events.append(event)


@pytest.fixture(autouse=True)
def clean_state():
    get_runtime_config.cache_clear()
    mode = default_mode()
    mode.disable()
    mode.variables.clear()
    yield
    mode.disable()
    mode.variables.clear()
    get_runtime_config.cache_clear()


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def strict_mode(handler: RecordingHandler) -> ExecutionMode:
    mode = ExecutionMode()
    mode.enable(handler)
    return mode
