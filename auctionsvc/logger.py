"""Structured JSON logging for the service."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

_LEVEL_NAMES = {"WARNING": "warn", "CRITICAL": "fatal"}


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone()
        millis = f"{stamp.microsecond // 1000:03d}"
        return stamp.strftime("%Y-%m-%dT%H:%M:%S.") + millis + stamp.strftime("%z")

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": _LEVEL_NAMES.get(record.levelname, record.levelname.lower()),
            "time": self.formatTime(record),
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "fields", None) or {})
        return json.dumps(payload, default=str)


_LOGGER = logging.getLogger("auctionsvc")
_LOGGER.setLevel(logging.INFO)
_LOGGER.propagate = False
if not _LOGGER.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(JsonFormatter())
    _LOGGER.addHandler(_handler)


def _emit(level: int, message: str, fields: dict[str, Any]) -> None:
    _LOGGER.log(level, message, extra={"fields": fields})
    for handler in _LOGGER.handlers:
        handler.flush()


def info(message: str, **kwargs: Any) -> None:
    """Log at info level with extra structured fields."""
    _emit(logging.INFO, message, kwargs)


def warn(message: str, **kwargs: Any) -> None:
    """Log at warning level with extra structured fields."""
    _emit(logging.WARNING, message, kwargs)


def error(message: str, err: BaseException | None, **kwargs: Any) -> None:
    """Log at error level, attaching the error text under ``error``."""
    if err is not None:
        kwargs["error"] = str(err)
    _emit(logging.ERROR, message, kwargs)