# src/gcl_request_log/config/request_log.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Request-log configuration value.

Summary:
    :class:`RequestLogConfig` is the explicit, immutable configuration handed
    to the middleware. It holds live collaborators (sinks, trace resolver)
    rather than their textual names, so tests and host applications can
    inject their own.

Defaults (``RequestLogConfig.default(project_id)``):
    * severity threshold: INFO
    * access log sink: standard error
    * application log sink: standard output
    * additional data: none
    * call-site skip: 2
    * trace propagation: ``X-Cloud-Trace-Context``
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from gcl_request_log.config.settings import Settings
from gcl_request_log.domain.enums.severity import Severity
from gcl_request_log.domain.interfaces.line_sink import LineSink
from gcl_request_log.infrastructure.sinks.stream_sink import StandardStreamSink, open_line_sink
from gcl_request_log.infrastructure.tracing.trace_resolver import (
    TraceResolver,
    resolve_extractors,
)

__all__ = ["RequestLogConfig"]


def _stderr_sink() -> LineSink:
    return StandardStreamSink("stderr")


def _stdout_sink() -> LineSink:
    return StandardStreamSink("stdout")


@dataclass(frozen=True, slots=True)
class RequestLogConfig:
    """Configuration of the request-logging middleware.

    Args:
        project_id: Google Cloud project id; required and non-empty.
        severity: Minimum severity of application entries that are written.
        request_log_out: Sink for access log lines.
        context_log_out: Sink for application log lines.
        additional_data: Static fields merged into every line under ``data``.
        skip: Stack frames skipped when resolving call sites.
        trace_resolver: Resolves a request's trace id from its headers.

    Raises:
        ValueError: If ``project_id`` is empty or ``skip`` is negative.
    """

    project_id: str
    severity: Severity = Severity.INFO
    request_log_out: LineSink = field(default_factory=_stderr_sink)
    context_log_out: LineSink = field(default_factory=_stdout_sink)
    additional_data: Mapping[str, Any] = field(default_factory=dict)
    skip: int = 2
    trace_resolver: TraceResolver = field(default_factory=TraceResolver)

    def __post_init__(self) -> None:
        if not self.project_id or not self.project_id.strip():
            raise ValueError("project_id must be a non-empty string")
        if self.skip < 0:
            raise ValueError("skip must be >= 0")
        object.__setattr__(self, "severity", Severity.parse(self.severity))
        object.__setattr__(
            self, "additional_data", MappingProxyType(dict(self.additional_data))
        )

    @classmethod
    def default(cls, project_id: str) -> RequestLogConfig:
        """Return a config with default settings for ``project_id``."""
        return cls(project_id=project_id)

    @classmethod
    def from_settings(cls, settings: Settings) -> RequestLogConfig:
        """Build a config from environment-driven :class:`Settings`.

        Args:
            settings: Validated settings.

        Returns:
            RequestLogConfig: Config with sinks opened and extractors resolved.
        """
        return cls(
            project_id=settings.project_id,
            severity=settings.severity,
            request_log_out=open_line_sink(settings.request_log_out),
            context_log_out=open_line_sink(settings.context_log_out),
            additional_data=settings.additional_data,
            skip=settings.skip,
            trace_resolver=TraceResolver(resolve_extractors(settings.trace_propagators)),
        )
