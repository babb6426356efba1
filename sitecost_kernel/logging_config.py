"""
Structured JSON logging for the site cost kernel.

Every record under the ``sitecost`` logger namespace is emitted as one JSON
line. Fields bound through LogContext (the report being generated, its
project, the export file it was read from) are merged into each line so a
single report run can be followed across ingestion, engines and rendering.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"sitecost_log_{name}", default=None)
    for name in ("report_id", "project_id", "export_path")
}


class LogContext:
    """Context-local fields added to every structured log line."""

    FIELD_NAMES = tuple(_CONTEXT_VARS)

    @staticmethod
    def _var(name: str) -> ContextVar[str | None]:
        try:
            return _CONTEXT_VARS[name]
        except KeyError:
            raise ValueError(f"Unknown log context field: {name}") from None

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields. None values leave the field unchanged."""
        for name, value in fields.items():
            var = cls._var(name)
            if value is not None:
                var.set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return the fields currently set."""
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (cls._var(name), cls._var(name).set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS:
                payload.setdefault(key, val)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        """Type, message, ``code`` and public attributes of a SiteCostError."""
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        for key, val in vars(exc).items():
            if not key.startswith("_") and key not in ("args", "code"):
                fields[f"exc_{key}"] = val
        return fields


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "sitecost"
_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the sitecost namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``sitecost`` logger.

    Idempotent: later calls are no-ops until reset_logging(). ``level``
    accepts a logging constant or its name (``"DEBUG"``, ``"warning"``).
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    h = handler or logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Undo configure_logging(). Used by tests."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
