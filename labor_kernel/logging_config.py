"""
Structured JSON logging for the payroll hours tracker.

Every record under the ``labor_tracker`` logger is rendered as one JSON
object: the envelope (ts, level, logger, message), then whatever import or
budget context is bound with ``LogContext.bind``, then the record's
``extra`` keys.  Tracker exceptions add their ``code`` and structured
attributes as ``exc_*`` keys, so a failed import can be found by
``exc_code`` alone.

Context fields
--------------
correlation_id  one id per import or budget operation
project_id      project the operation writes to
upload_id       upload row created by a payroll import
source_file     report or workbook file name
layout          payroll layout the report is parsed with
"""

__all__ = [
    "CONTEXT_FIELDS",
    "LOGGER_NAMESPACE",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, TextIO
from uuid import UUID

LOGGER_NAMESPACE = "labor_tracker"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "project_id",
    "upload_id",
    "source_file",
    "layout",
)

_NO_CONTEXT: Mapping[str, str] = MappingProxyType({})
_bound: ContextVar[Mapping[str, str]] = ContextVar(
    "labor_tracker_log_context", default=_NO_CONTEXT
)


class LogContext:
    """
    Operation-scoped fields merged into every log record.

    Fields are only ever bound for the extent of a ``with`` block; nested
    binds layer on top of the outer ones and the outer values come back on
    exit.  Values are stored as strings, ``None`` leaves a field untouched.
    """

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[Mapping[str, str]]:
        unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")

        layered = dict(_bound.get())
        layered.update((k, str(v)) for k, v in fields.items() if v is not None)
        token = _bound.set(MappingProxyType(layered))
        try:
            yield _bound.get()
        finally:
            _bound.reset(token)

    @staticmethod
    def current() -> dict[str, str]:
        """Bound fields in ``CONTEXT_FIELDS`` order."""
        bound = _bound.get()
        return {name: bound[name] for name in CONTEXT_FIELDS if name in bound}

    @staticmethod
    def clear() -> None:
        _bound.set(_NO_CONTEXT)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else on a record came from extra=.
_RECORD_ATTRS: frozenset[str] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # field, project_id, entry_id, source ... on tracker errors
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.current(),
        }
        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        }
        payload.update(extra)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """``get_logger("ingestion.parser")`` -> ``labor_tracker.ingestion.parser``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def _structured_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if isinstance(h.formatter, StructuredFormatter)]


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``labor_tracker`` logger.

    A no-op when a JSON handler is already attached, so the scripts, the
    engine initializer and the test suite can all call it.  ``level``
    accepts the names used in the config file ("INFO", "DEBUG", ...).
    """
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    if _structured_handlers(namespace):
        return

    namespace.setLevel(level)
    namespace.propagate = False
    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    namespace.addHandler(h)


def reset_logging() -> None:
    """Detach the JSON handlers again. Tests only."""
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    for h in _structured_handlers(namespace):
        namespace.removeHandler(h)
    namespace.setLevel(logging.WARNING)
