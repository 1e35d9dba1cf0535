# src/logging/logger.py — v1
"""Logger factory with JSON and text formatters.

Every record carries the current request/collection context so that the
retries and classification of a single logical API call can be correlated.
Structured extras go in extra={"data": {...}}.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from storesync.logging.context import LogContext, get_context

ROOT_LOGGER_NAME = "storesync"

# Third-party loggers that log every HTTP exchange at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


def _context_tags(ctx: LogContext) -> list[str]:
    tags = []
    if ctx.request_id:
        tags.append(f"[req={ctx.request_id}]")
    if ctx.resource:
        tags.append(f"({ctx.resource})")
    if ctx.collection:
        tags.append(f"<{ctx.collection}>")
    return tags


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context, data."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line format for terminals and the CLI's --verbose mode."""

    def format(self, record: logging.LogRecord) -> str:
        head = [
            _record_time(record).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
            *_context_tags(get_context()),
        ]
        line = f"{' '.join(head)} - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Configuration is applied by setup_logging()."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _build_formatter(log_format: str) -> logging.Formatter:
    return JsonFormatter() if log_format == "json" else TextFormatter()


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Configure the storesync logger tree.

    Console output goes to stderr so command output on stdout stays clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format ("json" or "text").
        log_file: Path to log file (None = stderr only).
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()

    formatter = _build_formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from storesync.logging.handlers import create_rotating_handler

        handlers.append(
            create_rotating_handler(str(log_file), rotation=rotation, retention=retention)
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
