# src/gcl_request_log/application/services/context_logger.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Request-scoped application logger.

Summary:
    A :class:`ContextLogger` belongs to exactly one in-flight request. Every
    accepted log call writes one JSON line carrying the request's trace
    resource name and records its severity, so the access log emitted at
    completion can report the most severe entry of the request.

Design:
    * Calls below the configured threshold are a no-op: nothing is
      formatted, recorded or written.
    * Accepted calls record the severity and write under one lock, which
      makes the logger safe for concurrent use by request-scoped tasks or
      threads.
    * Serialization and sink failures are reported to the diagnostic channel
      and never raised to the caller.
    * Every public logging method reaches :meth:`_emit` through exactly one
      frame, so a single ``skip`` depth locates the caller.

Usage:
    log = get_context_logger(request)
    if log is not None:
        log.info("loaded %d rows", len(rows))
"""

from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from gcl_request_log.application.services.call_site import resolve_source_location
from gcl_request_log.application.services.diagnostics import report_failure
from gcl_request_log.application.services.entry_formatter import (
    context_entry_payload,
    render_line,
)
from gcl_request_log.domain.entities.log_entry import ContextLogEntry, SourceLocation
from gcl_request_log.domain.enums.severity import Severity
from gcl_request_log.domain.exceptions.logging import (
    RequestLogError,
    SerializationError,
    SinkWriteError,
)
from gcl_request_log.domain.interfaces.line_sink import LineSink

__all__ = ["ContextLogger"]

DEFAULT_SKIP = 2


class ContextLogger:
    """Logger bound to one request's trace and severity threshold.

    Args:
        sink: Destination for application log lines.
        trace: Trace resource name, ``projects/<id>/traces/<trace-id>``.
        severity: Minimum severity accepted; lower calls are dropped.
        additional_data: Static fields rendered under ``data`` on every line.
        skip: Frames between :meth:`_emit` and the application call site.
    """

    def __init__(
        self,
        sink: LineSink,
        trace: str,
        *,
        severity: Severity = Severity.INFO,
        additional_data: Mapping[str, Any] | None = None,
        skip: int = DEFAULT_SKIP,
    ) -> None:
        self._sink = sink
        self._trace = trace
        self._severity = Severity.parse(severity)
        self._additional_data: Mapping[str, Any] = MappingProxyType(dict(additional_data or {}))
        self._skip = skip
        self._logged: list[Severity] = []
        self._lock = threading.Lock()

    @property
    def trace(self) -> str:
        """Trace resource name stamped on every line."""
        return self._trace

    @property
    def trace_id(self) -> str:
        """Bare trace id (last path segment of :attr:`trace`)."""
        return self._trace.rsplit("/", 1)[-1]

    @property
    def severity(self) -> Severity:
        """Configured minimum severity."""
        return self._severity

    @property
    def additional_data(self) -> Mapping[str, Any]:
        return self._additional_data

    @property
    def logged_severities(self) -> tuple[Severity, ...]:
        """Snapshot of every accepted severity, in call order."""
        with self._lock:
            return tuple(self._logged)

    def max_severity(self) -> Severity:
        """Return the most severe accepted entry, or DEFAULT if none."""
        with self._lock:
            return max(self._logged, default=Severity.DEFAULT)

    def is_enabled_for(self, severity: Severity) -> bool:
        return severity >= self._severity

    # ------------------------------------------------------------------
    # Per-severity entry points
    # ------------------------------------------------------------------
    def default(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at DEFAULT severity."""
        self._emit(Severity.DEFAULT, msg, args)

    def debug(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at DEBUG severity."""
        self._emit(Severity.DEBUG, msg, args)

    def info(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at INFO severity."""
        self._emit(Severity.INFO, msg, args)

    def notice(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at NOTICE severity."""
        self._emit(Severity.NOTICE, msg, args)

    def warning(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at WARNING severity."""
        self._emit(Severity.WARNING, msg, args)

    def warn(self, msg: object, *args: Any) -> None:
        """Alias of :meth:`warning`."""
        self._emit(Severity.WARNING, msg, args)

    def error(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at ERROR severity."""
        self._emit(Severity.ERROR, msg, args)

    def critical(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at CRITICAL severity."""
        self._emit(Severity.CRITICAL, msg, args)

    def alert(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at ALERT severity."""
        self._emit(Severity.ALERT, msg, args)

    def emergency(self, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at EMERGENCY severity."""
        self._emit(Severity.EMERGENCY, msg, args)

    def log(self, severity: Severity | str | int, msg: object, *args: Any) -> None:
        """Log ``msg % args`` at an explicit severity.

        Raises:
            ValueError: If ``severity`` names no known level.
        """
        self._emit(Severity.parse(severity), msg, args)

    def logln(self, severity: Severity | str | int, *parts: object) -> None:
        """Log the space-joined ``parts`` followed by a newline, print-style."""
        fmt = " ".join(["%s"] * len(parts)) + "\n"
        self._emit(Severity.parse(severity), fmt, parts)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------
    def _emit(self, severity: Severity, msg: object, args: tuple[Any, ...]) -> None:
        if severity < self._severity:
            return

        location = self._locate()
        try:
            message = _render_message(msg, args)
        except Exception as exc:
            report_failure(
                "context_log.message_format_failed",
                SerializationError(f"{type(exc).__name__}: {exc}"),
                trace=self._trace,
                severity=severity.name,
            )
            message = _fallback_message(msg)

        entry = ContextLogEntry(
            time_ns=time.time_ns(),
            trace=self._trace,
            source_location=location,
            severity=severity,
            message=message,
            additional_data=self._additional_data,
        )

        with self._lock:
            self._logged.append(severity)
            try:
                self._sink.append(render_line(context_entry_payload(entry)))
            except RequestLogError as exc:
                report_failure("context_log.write_failed", exc, trace=self._trace)
            except Exception as exc:
                report_failure(
                    "context_log.write_failed",
                    SinkWriteError.from_exception(exc),
                    trace=self._trace,
                )

    def _locate(self) -> SourceLocation:
        # _locate -> _emit -> public method -> caller
        return resolve_source_location(self._skip + 1)

    def __repr__(self) -> str:
        return f"ContextLogger(trace={self._trace!r}, severity={self._severity.name})"


def _render_message(msg: object, args: tuple[Any, ...]) -> str:
    text = str(msg)
    if args:
        return text % args
    return text


def _fallback_message(msg: object) -> str:
    """Best-effort text for a message that could not be formatted."""
    try:
        return str(msg)
    except Exception:
        return object.__repr__(msg)
