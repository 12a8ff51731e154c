from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from platformdirs import user_log_path

APP_NAME = "strictsh"
LOG_FILENAME = "strictsh.log"

_FORMATS = {
    "json": "%(message)s",
    "text": "%(asctime)s %(levelname)s %(name)s %(message)s",
}


def get_logger(name: str = APP_NAME) -> logging.Logger:
    return logging.getLogger(name)


def default_log_dir() -> Path:
    env_dir = os.environ.get("STRICTSH_LOG_DIR")
    if env_dir:
        return Path(env_dir)
    return Path(user_log_path(APP_NAME))


def configure_logging(
    *,
    level: str = "info",
    format_name: str = "json",
    stream=None,
    log_dir: Path | None = None,
    filename: str = LOG_FILENAME,
) -> logging.Handler:
    """Attach one handler to the ``strictsh`` logger and return it.

    ``stream`` wins over ``log_dir``; with neither, events are discarded.
    Calling it again replaces the handler installed by the previous call.
    """
    logger = get_logger()
    logger.setLevel(getattr(logging, level.strip().upper(), logging.INFO))
    logger.propagate = False

    if stream is not None:
        handler: logging.Handler = logging.StreamHandler(stream)
    elif log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / filename, encoding="utf-8")
    else:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(_FORMATS.get(format_name, _FORMATS["text"])))

    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()
    logger.addHandler(handler)
    return handler


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    payload = {"event": event, **fields}
    logger.info(json.dumps(payload, sort_keys=True, default=str))
