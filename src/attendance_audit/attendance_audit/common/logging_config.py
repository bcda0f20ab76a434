"""Logging setup for the attendance audit package.

Loggers live under the ``attendance_audit`` namespace. ``configure_logging``
installs either a plain text formatter or a JSON-lines formatter that also
serializes ``extra={...}`` fields passed at the call site.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any

_LOGGER_PREFIX = "attendance_audit"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the attendance_audit namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(level: str | int = "INFO", *, json_format: bool = False) -> logging.Logger:
    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level if isinstance(level, int) else str(level).upper())

    # Replace handlers installed by a previous call (app factory runs per test).
    for handler in list(root.handlers):
        if getattr(handler, "_attendance_audit", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._attendance_audit = True  # type: ignore[attr-defined]
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    return root
