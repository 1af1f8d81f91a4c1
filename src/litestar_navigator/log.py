"""Structured logging configuration.

Module loggers use the standard library; this module supplies a JSON formatter
and the Litestar ``LoggingConfig`` that wires it up.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from litestar.logging.config import LoggingConfig

__all__ = ["JsonFormatter", "get_logging_config"]

_RESERVED_LOG_RECORD_ATTRS: set[str] = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def get_logging_config(level: str = "INFO") -> LoggingConfig:
    """Build the Litestar logging configuration.

    Records of the ``litestar_navigator`` loggers, including the audit log, are
    written to stderr as JSON.

    Args:
        level: Log level name for the package loggers.

    Returns:
        The LoggingConfig to pass to ``Litestar(logging_config=...)``.
    """
    level = level.upper()
    return LoggingConfig(
        formatters={
            "standard": {"format": "%(levelname)s - %(asctime)s - %(name)s - %(module)s - %(message)s"},
            "json": {"()": "litestar_navigator.log.JsonFormatter"},
        },
        handlers={
            "json_console": {"class": "logging.StreamHandler", "level": "DEBUG", "formatter": "json"},
        },
        loggers={
            "litestar_navigator": {"level": level, "handlers": ["json_console"], "propagate": False},
        },
        log_exceptions="debug",
    )
