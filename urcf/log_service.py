"""Forwarding of structured (JSON-per-line) output into a logger."""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import IO, Any, Optional, Union

_TIMESTAMP_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{6}(?:Z|[+-]\d{2}:\d{2})"
)

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class Level(IntEnum):
    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5


_LEVEL_NAMES = {
    "panic": Level.PANIC,
    "fatal": Level.FATAL,
    "error": Level.ERROR,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "info": Level.INFO,
    "debug": Level.DEBUG,
}

# Panic-level entries are recognised but not forwarded.
_LOGGING_LEVELS = {
    Level.FATAL: logging.CRITICAL,
    Level.ERROR: logging.ERROR,
    Level.WARN: logging.WARNING,
    Level.INFO: logging.INFO,
    Level.DEBUG: logging.DEBUG,
}


@dataclass
class LogEntry:
    """The well-known fields of one structured log line."""

    message: str = ""
    level: str = ""
    timestamp: Optional[datetime] = None


def _string_field(raw: dict[str, Any], key: str) -> Optional[str]:
    if key not in raw:
        return None
    value = raw.pop(key)
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _parse_timestamp(text: str) -> datetime:
    if not _TIMESTAMP_RE.fullmatch(text):
        raise ValueError(f"invalid timestamp {text!r}")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_json(line: str) -> tuple[LogEntry, dict[str, Any]]:
    """Split a JSON log line into its entry and the remaining fields."""
    raw = json.loads(line)
    if not isinstance(raw, dict):
        raise ValueError("log line must be a JSON object")
    entry = LogEntry()
    message = _string_field(raw, "message")
    if message is not None:
        entry.message = message
    level = _string_field(raw, "level")
    if level is not None:
        entry.level = level
    timestamp = _string_field(raw, "timestamp")
    if timestamp is not None:
        entry.timestamp = _parse_timestamp(timestamp)
    return entry, raw


def _forward(logger: LoggerLike, line: str, fields: dict[str, Any]) -> None:
    line = line.rstrip()
    try:
        entry, extra = parse_json(line)
    except ValueError:
        logger.info(line, extra={"fields": dict(fields)})
        return
    fields.update(extra)
    level = _LEVEL_NAMES.get(entry.level.lower())
    if level is None:
        logger.debug(line, extra={"fields": dict(fields)})
        return
    logging_level = _LOGGING_LEVELS.get(level)
    if logging_level is not None:
        logger.log(logging_level, entry.message, extra={"fields": dict(fields)})


def forward_line(logger: LoggerLike, line: str) -> None:
    """Log one line: JSON lines at their own level, anything else as info.

    Extra JSON fields are attached to the record as ``record.fields``.
    """
    _forward(logger, line, {})


def wrap_reader(logger: LoggerLike, stream: IO[Any]) -> threading.Thread:
    """Forward every line of ``stream`` to ``logger`` in a background thread.

    Extra fields seen on earlier lines stay attached to later records.
    """
    fields: dict[str, Any] = {}

    def pump() -> None:
        for line in stream:
            if isinstance(line, bytes):
                line = line.decode("utf-8", errors="replace")
            if line:
                _forward(logger, line, fields)

    thread = threading.Thread(target=pump, name="log-reader", daemon=True)
    thread.start()
    return thread