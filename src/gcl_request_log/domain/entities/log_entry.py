# src/gcl_request_log/domain/entities/log_entry.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""
Log entry values.

Purpose:
    Immutable representations of the two kinds of structured lines this
    package emits: application ("context") entries produced by each accepted
    log call, and the single access entry produced when a request completes.

Layer: domain/entities
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from gcl_request_log.domain.enums.severity import Severity

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _empty_data() -> Mapping[str, Any]:
    # dataclasses reject mappingproxy as a plain default before 3.12.
    return _EMPTY


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Call site of an application log call.

    All fields are empty strings when the call site could not be resolved.
    """

    file: str = ""
    line: str = ""
    function: str = ""


@dataclass(frozen=True, slots=True)
class ContextLogEntry:
    """One application log entry, written once and never replayed.

    Args:
        time_ns: Wall-clock timestamp in nanoseconds since the epoch.
        trace: Trace resource name (``projects/<id>/traces/<trace-id>``).
        source_location: Best-effort call site.
        severity: Severity of the entry.
        message: Free-form message.
        additional_data: Static fields rendered under ``data``.
    """

    time_ns: int
    trace: str
    source_location: SourceLocation
    severity: Severity
    message: str
    additional_data: Mapping[str, Any] = field(default_factory=_empty_data)


@dataclass(frozen=True, slots=True)
class HttpRequestFacts:
    """Request-side facts of one HTTP transaction.

    Args:
        method: HTTP method, e.g. ``GET``.
        url: Request URI (path plus query string).
        user_agent: ``User-Agent`` header or empty.
        remote_ip: Client address or empty.
        server_ip: Address of the serving host or empty.
        referer: ``Referer`` header or empty.
        protocol: Protocol string, e.g. ``HTTP/1.1``.
        content_length: Declared body size, ``None`` when not declared.
    """

    method: str
    url: str
    user_agent: str = ""
    remote_ip: str = ""
    server_ip: str = ""
    referer: str = ""
    protocol: str = ""
    content_length: int | None = None


@dataclass(frozen=True, slots=True)
class AccessLogEntry:
    """The single access entry summarizing one request.

    Raises:
        ValueError: If sizes or latency are negative.
    """

    time_ns: int
    trace: str
    severity: Severity
    request: HttpRequestFacts
    request_size: int
    status: int
    response_size: int
    latency_seconds: float
    additional_data: Mapping[str, Any] = field(default_factory=_empty_data)

    def __post_init__(self) -> None:
        if self.request_size < 0 or self.response_size < 0:
            raise ValueError("request_size and response_size must be >= 0")
        if self.latency_seconds < 0:
            raise ValueError("latency_seconds must be >= 0")


__all__ = ["AccessLogEntry", "ContextLogEntry", "HttpRequestFacts", "SourceLocation"]
