# src/gcl_request_log/__init__.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Request-scoped structured logging for Google Cloud Logging.

Public surface:
    * :class:`RequestLoggingMiddleware` and :func:`get_context_logger` for
      ASGI applications.
    * :class:`RequestLogConfig` for explicit configuration.
    * :class:`ContextLogger` and :class:`Severity` for application code.
    * :class:`RequestLogging` for hosts that are not ASGI.
"""

from __future__ import annotations

from gcl_request_log.application.services.context_logger import ContextLogger
from gcl_request_log.infrastructure.middleware.request_lifecycle import (
    RequestLogging,
    RequestPhase,
    RequestScope,
)
from gcl_request_log.config import RequestLogConfig, Settings, get_settings
from gcl_request_log.domain.enums.severity import Severity, severity_name
from gcl_request_log.domain.interfaces.line_sink import LineSink
from gcl_request_log.infrastructure.middleware.request_logging import (
    RequestLoggingMiddleware,
    get_context_logger,
)
from gcl_request_log.infrastructure.tracing.trace_resolver import TraceResolver

__all__ = [
    "ContextLogger",
    "LineSink",
    "RequestLogConfig",
    "RequestLogging",
    "RequestLoggingMiddleware",
    "RequestPhase",
    "RequestScope",
    "Settings",
    "Severity",
    "TraceResolver",
    "get_context_logger",
    "get_settings",
    "severity_name",
]
