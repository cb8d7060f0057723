# src/gcl_request_log/infrastructure/middleware/request_lifecycle.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Request logging lifecycle.

Summary:
    Framework-neutral orchestration of one request's logging: resolve the
    trace id, create the request's :class:`ContextLogger` and
    :class:`ResponseObserver`, hand them to the host while the handler runs,
    and emit exactly one access log line when the handler is done.

Design:
    * Phases advance ``IDLE -> REQUEST_STARTED -> HANDLER_RUNNING ->
      COMPLETED``; ``COMPLETED`` is terminal and completion is idempotent.
    * :meth:`RequestLogging.lifecycle` is a context manager, so completion
      runs on every exit path: normal return, exception, and task
      cancellation.
    * Host adapters own transport details. They supply request facts up
      front and route response messages through ``scope.observer``.
    * Failures while writing the access line are reported to the diagnostic
      channel; the handler's own exception always propagates unchanged.

Usage:
    logging_ = RequestLogging(RequestLogConfig.default("my-project"))
    with logging_.lifecycle(headers, facts) as scope:
        await app(asgi_scope, receive, scope.observer.wrap_send(send))
"""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from enum import Enum

from gcl_request_log.application.services.context_logger import ContextLogger
from gcl_request_log.application.services.diagnostics import report_failure
from gcl_request_log.application.services.entry_formatter import (
    access_entry_payload,
    render_line,
    trace_resource,
)
from gcl_request_log.config.request_log import RequestLogConfig
from gcl_request_log.domain.entities.log_entry import AccessLogEntry, HttpRequestFacts
from gcl_request_log.domain.exceptions.logging import (
    InvalidEntryError,
    RequestLogError,
    SinkWriteError,
)
from gcl_request_log.infrastructure.http.observers import ResponseObserver

__all__ = ["RequestLogging", "RequestPhase", "RequestScope"]

# Status reported when the handler raised before any response was started.
_FAILED_STATUS = 500
# Status reported when the handler returned without starting a response.
_NO_RESPONSE_STATUS = 0


class RequestPhase(str, Enum):
    """Lifecycle phase of one request."""

    IDLE = "idle"
    REQUEST_STARTED = "request_started"
    HANDLER_RUNNING = "handler_running"
    COMPLETED = "completed"


class RequestScope:
    """Per-request logging state owned by the orchestrator.

    Attributes:
        trace_id: Resolved trace id.
        context_logger: Application logger for this request.
        observer: Records status and response size.
        facts: Request-side facts for the access log.
        phase: Current lifecycle phase.
        request_bytes: Body bytes received; used when no Content-Length
            header declared the request size.
        handler_failed: True if the handler exited with an exception.
    """

    def __init__(
        self,
        trace_id: str,
        context_logger: ContextLogger,
        observer: ResponseObserver,
        facts: HttpRequestFacts,
    ) -> None:
        self.trace_id = trace_id
        self.context_logger = context_logger
        self.observer = observer
        self.facts = facts
        self.phase = RequestPhase.IDLE
        self.request_bytes = 0
        self.handler_failed = False
        self.started_at = time.perf_counter()

    @property
    def request_size(self) -> int:
        declared = self.facts.content_length
        return declared if declared is not None and declared >= 0 else self.request_bytes

    @property
    def status(self) -> int:
        if self.observer.status is not None:
            return self.observer.status
        return _FAILED_STATUS if self.handler_failed else _NO_RESPONSE_STATUS


class RequestLogging:
    """Orchestrates context logging and access logging for requests.

    Args:
        config: Explicit request-log configuration.
    """

    def __init__(self, config: RequestLogConfig) -> None:
        self.config = config

    def begin(self, headers: Mapping[str, str], facts: HttpRequestFacts) -> RequestScope:
        """Start a request: resolve its trace id and build its logger.

        Args:
            headers: Inbound request headers.
            facts: Request-side facts for the access log.

        Returns:
            RequestScope: Scope in phase ``REQUEST_STARTED``.
        """
        config = self.config
        trace_id = config.trace_resolver.resolve(headers)
        context_logger = ContextLogger(
            config.context_log_out,
            trace_resource(config.project_id, trace_id),
            severity=config.severity,
            additional_data=config.additional_data,
            skip=config.skip,
        )
        scope = RequestScope(trace_id, context_logger, ResponseObserver(), facts)
        scope.phase = RequestPhase.REQUEST_STARTED
        return scope

    def complete(self, scope: RequestScope) -> None:
        """Write the access log line for ``scope`` exactly once.

        Calling this again after completion is a no-op. Every failure to
        build, render or write the line is reported, never raised.
        """
        if scope.phase is RequestPhase.COMPLETED:
            return
        scope.phase = RequestPhase.COMPLETED

        elapsed = max(0.0, time.perf_counter() - scope.started_at)
        trace = scope.context_logger.trace
        try:
            entry = AccessLogEntry(
                time_ns=time.time_ns(),
                trace=trace,
                severity=scope.context_logger.max_severity(),
                request=scope.facts,
                request_size=scope.request_size,
                status=scope.status,
                response_size=scope.observer.response_size,
                latency_seconds=elapsed,
                additional_data=self.config.additional_data,
            )
        except ValueError as exc:
            report_failure("request_log.invalid_entry", InvalidEntryError(str(exc)), trace=trace)
            return

        try:
            line = render_line(access_entry_payload(entry))
        except RequestLogError as exc:
            report_failure("request_log.serialization_failed", exc, trace=trace)
            return

        try:
            self.config.request_log_out.append(line)
        except RequestLogError as exc:
            report_failure("request_log.write_failed", exc, trace=trace)
        except Exception as exc:
            # Injected sinks may raise anything; none of it reaches the server.
            report_failure(
                "request_log.write_failed", SinkWriteError.from_exception(exc), trace=trace
            )

    @contextmanager
    def lifecycle(
        self, headers: Mapping[str, str], facts: HttpRequestFacts
    ) -> Iterator[RequestScope]:
        """Run one request inside a logging scope.

        The access line is written when the ``with`` block exits, however it
        exits.

        Args:
            headers: Inbound request headers.
            facts: Request-side facts for the access log.

        Yields:
            RequestScope: Scope in phase ``HANDLER_RUNNING``.
        """
        scope = self.begin(headers, facts)
        scope.phase = RequestPhase.HANDLER_RUNNING
        try:
            yield scope
        except BaseException:
            scope.handler_failed = True
            raise
        finally:
            self.complete(scope)
