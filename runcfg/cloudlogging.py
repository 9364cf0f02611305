"""Structured JSON log formatting following Cloud Logging conventions."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import string
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone

SOURCE_LOCATION_KEY = "logging.googleapis.com/sourceLocation"
TRACE_KEY = "logging.googleapis.com/trace"
SPAN_ID_KEY = "logging.googleapis.com/spanId"
TRACE_SAMPLED_KEY = "logging.googleapis.com/trace_sampled"

_SEVERITIES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARNING",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "span_context"}


def severity_for_level(levelno: int) -> str:
    """Map a logging level number to a Cloud Logging severity."""
    if levelno > logging.CRITICAL:
        return "ALERT"
    return _SEVERITIES.get(levelno, "DEFAULT")


def _normalise_hex(value: str, length: int, label: str) -> str:
    if len(value) != length or not all(char in string.hexdigits for char in value):
        raise ValueError(f"{label} must be {length} hexadecimal digits, got {value!r}")
    return value.lower()


@dataclass(frozen=True)
class SpanContext:
    """Identity of the trace span a log entry belongs to."""

    trace_id: str
    span_id: str
    sampled: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "trace_id", _normalise_hex(self.trace_id, 32, "trace_id"))
        object.__setattr__(self, "span_id", _normalise_hex(self.span_id, 16, "span_id"))

    @property
    def is_valid(self) -> bool:
        return int(self.trace_id, 16) != 0 and int(self.span_id, 16) != 0


_active_span: contextvars.ContextVar[SpanContext | None] = contextvars.ContextVar(
    "runcfg_active_span", default=None
)


@contextlib.contextmanager
def current_span(span: SpanContext | None) -> Iterator[SpanContext | None]:
    """Make ``span`` the span attached to records logged inside the block."""
    token = _active_span.set(span)
    try:
        yield span
    finally:
        _active_span.reset(token)


def _timestamp(created: float) -> str:
    moment = datetime.fromtimestamp(created, tz=timezone.utc)
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


class CloudLoggingFormatter(logging.Formatter):
    """Render records as single-line JSON entries for Cloud Logging."""

    def __init__(self, project_id: str = "") -> None:
        super().__init__()
        self.project_id = project_id

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "severity": severity_for_level(record.levelno),
            "time": _timestamp(record.created),
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _RESERVED
        )
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_trace"] = self.formatStack(record.stack_info)

        entry[SOURCE_LOCATION_KEY] = {
            "file": record.filename or "",
            "line": str(record.lineno),
            "function": record.funcName or "",
        }

        span = getattr(record, "span_context", None) or _active_span.get()
        if span is not None and span.is_valid:
            entry[TRACE_KEY] = f"projects/{self.project_id}/traces/{span.trace_id}"
            entry[SPAN_ID_KEY] = span.span_id
            entry[TRACE_SAMPLED_KEY] = span.sampled

        return json.dumps(entry, default=str)


def hook(project_id: str) -> CloudLoggingFormatter:
    """Return a formatter that links entries to traces of ``project_id``."""
    return CloudLoggingFormatter(project_id)