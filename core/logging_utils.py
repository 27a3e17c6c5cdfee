"""Logging setup shared by the CLI, engine and tests.

One named stream handler on the root logger (UTC timestamps), plus an optional
file handler when ``LOG_FILE`` is set. Calling ``setup_logging`` again only
adjusts levels.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_STREAM_HANDLER = "curvetrader-console"
_FILE_HANDLER = "curvetrader-file"

# Chatty transport loggers kept at WARNING unless LOG_LEVEL=DEBUG
_NOISY_LOGGERS = ("urllib3", "asyncio")


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def _utc_formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def _named_handler(root: logging.Logger, name: str) -> logging.Handler | None:
    for handler in root.handlers:
        if getattr(handler, "name", "") == name:
            return handler
    return None


def setup_logging(level: str | int | None = None, log_file: str | None = None) -> logging.Logger:
    root = logging.getLogger()
    resolved = _resolve_level(level)

    if _named_handler(root, _STREAM_HANDLER) is None:
        console = logging.StreamHandler()
        console.name = _STREAM_HANDLER
        console.setFormatter(_utc_formatter())
        root.addHandler(console)

    log_file = log_file or os.getenv("LOG_FILE")
    if log_file and _named_handler(root, _FILE_HANDLER) is None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.name = _FILE_HANDLER
        file_handler.setFormatter(_utc_formatter())
        root.addHandler(file_handler)

    root.setLevel(resolved)
    for name in (_STREAM_HANDLER, _FILE_HANDLER):
        handler = _named_handler(root, name)
        if handler is not None:
            handler.setLevel(resolved)

    noisy_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger; attaches the shared handler on first use."""
    setup_logging()
    return logging.getLogger(name)
