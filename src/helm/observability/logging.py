"""
Logging — Structured logging with session and decision correlation.

Every log line emitted while an evaluation is running carries the
decision id, and the owning agent session id when one is bound.
Components attach structured fields with ``extra={"fields": {...}}``.
"""

import logging
import json
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, TextIO


_decision_id: ContextVar[str | None] = ContextVar("decision_id", default=None)
_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)


def get_decision_id() -> str | None:
    """Decision being evaluated in the current context, if any."""
    return _decision_id.get()


def set_session_id(session_id: str | None) -> None:
    """Bind the agent session id for the current context."""
    _session_id.set(session_id or None)


def get_session_id() -> str | None:
    return _session_id.get()


class CorrelationFilter(logging.Filter):
    """Stamps decision_id and session_id onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.decision_id = get_decision_id() or "-"
        record.session_id = get_session_id() or "-"
        return True


def _fields(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "fields", None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line; structured fields are merged at top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "decision_id": getattr(record, "decision_id", None),
            "session_id": getattr(record, "session_id", None),
        }
        log_data.update(_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """
    Single-line console format:

        WARNING [sess_1a2/dec_9f3] helm.gate: goal_filter #3 rejected score=0.0
    """

    def format(self, record: logging.LogRecord) -> str:
        sid = getattr(record, "session_id", "-")[:8]
        did = getattr(record, "decision_id", "-")[:8]
        line = f"{record.levelname:<7} [{sid}/{did}] {record.name}: {record.getMessage()}"

        fields = _fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Install a single handler on the ``helm`` logger.

    Args:
        level: Logging level
        json_format: JSON lines instead of the readable format
        stream: Output stream (default: stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(CorrelationFilter())
    handler.setFormatter(JSONFormatter() if json_format else ReadableFormatter())

    helm_logger = logging.getLogger("helm")
    helm_logger.setLevel(level)
    helm_logger.handlers.clear()
    helm_logger.addHandler(handler)
    helm_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a HELM component."""
    return logging.getLogger(f"helm.{name}")


class LogContext:
    """
    Scope log lines to one decision.

    Usage:
        with LogContext(decision_id):
            logger.info("Scoring...")  # carries decision_id
    """

    def __init__(self, decision_id: str):
        self.decision_id = decision_id
        self._token = None

    def __enter__(self):
        self._token = _decision_id.set(self.decision_id)
        return self

    def __exit__(self, *args):
        _decision_id.reset(self._token)
