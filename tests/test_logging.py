from __future__ import annotations

import io
import json
import logging

import pytest

from strictsh.core.logging import configure_logging, get_logger, log_event


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


class TestLogging:
    def test_stream_receives_json_events(self):
        stream = io.StringIO()
        configure_logging(stream=stream)
        log_event(get_logger("strictsh.core.guard"), "guard.finished", status=2)
        assert json.loads(stream.getvalue()) == {"event": "guard.finished", "status": 2}

    def test_log_dir_uses_file_handler(self, tmp_path):
        handler = configure_logging(log_dir=tmp_path / "logs", format_name="json")
        assert isinstance(handler, logging.FileHandler)
        log_event(get_logger(), "mode.enabled")
        handler.flush()
        line = (tmp_path / "logs" / "strictsh.log").read_text(encoding="utf-8").strip()
        assert json.loads(line)["event"] == "mode.enabled"

    def test_reconfigure_closes_previous_handler(self, tmp_path):
        first = configure_logging(log_dir=tmp_path)
        second = configure_logging()
        assert first.stream is None
        assert get_logger().handlers == [second]
        assert isinstance(second, logging.NullHandler)

    def test_level_is_applied(self):
        stream = io.StringIO()
        configure_logging(level="warning", stream=stream)
        log_event(get_logger(), "shell.run")
        assert stream.getvalue() == ""
