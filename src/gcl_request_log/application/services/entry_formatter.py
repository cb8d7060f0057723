# src/gcl_request_log/application/services/entry_formatter.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Entry formatter.

Summary:
    Pure functions mapping log entry values to the JSON shapes expected by
    Cloud Logging's structured-log ingestion.

Design:
    * No internal state; every function is deterministic for its inputs.
    * Sizes are rendered as strings and latency as ``"<seconds>s"`` to match
      the ingestion schema; ``status`` stays an integer.
    * ``data`` is omitted when there are no additional fields.
    * JSON is compact and non-ASCII is kept verbatim.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from gcl_request_log.domain.entities.log_entry import AccessLogEntry, ContextLogEntry
from gcl_request_log.domain.exceptions.logging import SerializationError

__all__ = [
    "TRACE_KEY",
    "SOURCE_LOCATION_KEY",
    "access_entry_payload",
    "context_entry_payload",
    "format_latency",
    "format_timestamp",
    "render_line",
    "trace_resource",
]

TRACE_KEY = "logging.googleapis.com/trace"
SOURCE_LOCATION_KEY = "logging.googleapis.com/sourceLocation"

_NANOS_PER_SECOND = 1_000_000_000


def format_timestamp(time_ns: int) -> str:
    """Render an epoch timestamp as RFC3339 with nanoseconds in UTC.

    Trailing zeros of the fractional part are trimmed, and the fraction is
    dropped entirely on a whole second.

    Args:
        time_ns: Nanoseconds since the Unix epoch.

    Returns:
        str: e.g. ``2024-05-01T12:30:45.1234567Z``.
    """
    seconds, nanos = divmod(time_ns, _NANOS_PER_SECOND)
    base = datetime.fromtimestamp(seconds, tz=UTC).strftime("%Y-%m-%dT%H:%M:%S")
    if not nanos:
        return f"{base}Z"
    return f"{base}.{f'{nanos:09d}'.rstrip('0')}Z"


def format_latency(seconds: float) -> str:
    """Render a duration the way Cloud Logging expects (``"0.001234s"``)."""
    return f"{seconds:.6f}s"


def trace_resource(project_id: str, trace_id: str) -> str:
    """Return the trace resource name for a project and trace id."""
    return f"projects/{project_id}/traces/{trace_id}"


def context_entry_payload(entry: ContextLogEntry) -> dict[str, Any]:
    """Build the JSON object for an application log entry."""
    location = entry.source_location
    payload: dict[str, Any] = {
        "time": format_timestamp(entry.time_ns),
        TRACE_KEY: entry.trace,
        SOURCE_LOCATION_KEY: {
            "file": location.file,
            "line": location.line,
            "function": location.function,
        },
        "severity": entry.severity.name,
        "message": entry.message,
    }
    if entry.additional_data:
        payload["data"] = dict(entry.additional_data)
    return payload


def access_entry_payload(entry: AccessLogEntry) -> dict[str, Any]:
    """Build the JSON object for the per-request access entry."""
    request = entry.request
    payload: dict[str, Any] = {
        "time": format_timestamp(entry.time_ns),
        TRACE_KEY: entry.trace,
        "severity": entry.severity.name,
        "httpRequest": {
            "requestMethod": request.method,
            "requestUrl": request.url,
            "requestSize": str(entry.request_size),
            "status": entry.status,
            "responseSize": str(entry.response_size),
            "userAgent": request.user_agent,
            "remoteIp": request.remote_ip,
            "serverIp": request.server_ip,
            "referer": request.referer,
            "latency": format_latency(entry.latency_seconds),
            "protocol": request.protocol,
            "cacheLookup": False,
            "cacheHit": False,
            "cacheValidatedWithOriginServer": False,
        },
    }
    if entry.additional_data:
        payload["data"] = dict(entry.additional_data)
    return payload


def render_line(payload: dict[str, Any]) -> str:
    """Serialize a payload to one newline-terminated JSON record.

    Args:
        payload: Object produced by one of the ``*_payload`` builders.

    Returns:
        str: Compact JSON followed by ``"\\n"``.

    Raises:
        SerializationError: If the payload holds values JSON cannot encode
            (arbitrary objects, NaN/Infinity).
    """
    try:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"log entry is not serializable: {exc}",
            details={"keys": sorted(payload)},
        ) from exc
    return body + "\n"
