# src/gcl_request_log/infrastructure/logging/logger.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Structured JSON logging for the diagnostic channel.

This module exposes an idempotent root configurator and a per-module logger
factory that render operator diagnostics (failed writes, bad configuration)
as JSON. The diagnostic channel is separate from the request and application
line sinks, so a broken sink can always be reported.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Automatic enrichment with the current request's ``trace_id`` via
      contextvars, set by the request-logging middleware.
    * Every ``extra=`` field is copied into the payload.
    * No-throw enrichment path.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
"""

from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "configure_root_logging",
    "get_json_logger",
    "get_trace_id",
    "reset_request_context",
    "set_request_context",
]

# Per-request correlation context (task-local via contextvars).
_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("gcl_trace_id", default=None)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_STD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


def set_request_context(*, trace_id: str) -> Token[str | None]:
    """Bind ``trace_id`` to the current context.

    Returns:
        A token for :func:`reset_request_context`, so the binding does not
        outlive the request.
    """
    return _TRACE_ID_CTX.set(trace_id)


def reset_request_context(token: Token[str | None]) -> None:
    """Restore the trace id binding that preceded ``token``."""
    _TRACE_ID_CTX.reset(token)


def get_trace_id() -> str | None:
    """Return the current trace id from contextvars, if any."""
    return _TRACE_ID_CTX.get(None)


class _JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and optional extras."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Logging record.

        Returns:
            JSON-encoded log line.
        """
        ts = datetime.now(tz=UTC).isoformat()
        payload: dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Trace id enrichment: prefer record attribute, then contextvar.
        try:
            tid: str | None = getattr(record, "trace_id", None) or _TRACE_ID_CTX.get(None)
            if tid:
                payload["trace_id"] = tid
        except Exception as exc:  # pragma: no cover (defensive)
            payload["trace_id_error"] = str(exc)

        # Exceptions: guard against None in exc_info tuple.
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        for key, value in record.__dict__.items():
            if key not in _RECORD_STD_ATTRS and key not in payload:
                payload[key] = value

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(level: str | int | None = None) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use env ``LOG_LEVEL`` or ``INFO``.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved)

    if root.handlers:
        # Already configured; prevent duplicate handlers on hot reload.
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module-specific logger backed by the JSON root handler.

    This does *not* implicitly configure the root logger. Call
    :func:`configure_root_logging` once at startup for global defaults.

    Args:
        name: Logger name, typically ``__name__`` of the caller.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(name)
    # Delegate formatting and level to the root logger.
    logger.propagate = True
    return logger
