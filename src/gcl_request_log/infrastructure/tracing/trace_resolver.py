# src/gcl_request_log/infrastructure/tracing/trace_resolver.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""
Trace id resolution.

Summary:
    Resolve the trace id that correlates every log line of one request.
    Inbound propagation headers are tried first; when none yields a usable
    id a fresh one is generated.

Design:
    * Extractors are plain callables ``(headers) -> str | None`` tried in
      order, so propagation formats are pluggable.
    * The default chain reads only ``X-Cloud-Trace-Context``
      (``TRACE_ID/SPAN_ID;o=OPTIONS``). W3C ``traceparent`` and the active
      OpenTelemetry span are available as opt-in extractors.
    * Generated ids come from ``secrets`` (128 random bits), so concurrent
      requests within the same clock tick cannot collide.
    * Never raises: a malformed header, or an extractor that fails, is
      treated as absent.

Layer:
    infrastructure/tracing
"""

from __future__ import annotations

import logging
import re
import secrets
from collections.abc import Callable, Iterable, Mapping
from typing import Final

from opentelemetry import trace as otel_trace

__all__ = [
    "CLOUD_TRACE_HEADER",
    "TRACEPARENT_HEADER",
    "TraceExtractor",
    "TraceResolver",
    "extract_cloud_trace_context",
    "extract_otel_span",
    "extract_traceparent",
    "generate_trace_id",
    "resolve_extractors",
]

logger = logging.getLogger(__name__)

CLOUD_TRACE_HEADER: Final[str] = "X-Cloud-Trace-Context"
TRACEPARENT_HEADER: Final[str] = "traceparent"

# Headers above this size are ignored without parsing.
_MAX_HEADER_LEN: Final[int] = 200
_TRACE_ID_BYTES: Final[int] = 16
_UINT64_MAX: Final[int] = 2**64 - 1

_HEX_RE: Final[re.Pattern[str]] = re.compile(r"^(?:[0-9a-fA-F]{2})+$")
_DECIMAL_RE: Final[re.Pattern[str]] = re.compile(r"^[0-9]+$")
_TRACEPARENT_RE: Final[re.Pattern[str]] = re.compile(
    r"^([0-9a-f]{2})-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})(?:-.*)?$"
)

TraceExtractor = Callable[[Mapping[str, str]], "str | None"]


def _header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup that also works for plain dicts."""
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                return candidate
    return value


def _parse_uint(text: str) -> int | None:
    if not _DECIMAL_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _UINT64_MAX else None


def extract_cloud_trace_context(headers: Mapping[str, str]) -> str | None:
    """Extract the trace id from ``X-Cloud-Trace-Context``.

    Rules:
        * Empty headers, or headers longer than 200 characters, are absent.
        * A ``/`` separating trace id and span id is required.
        * The trace id must be non-empty, even-length hex. At most 16 bytes
          are used and shorter ids are right-padded with zeros.
        * The span id must be an unsigned 64-bit decimal.
        * ``;o=OPTIONS`` is optional; when present it must be an unsigned
          decimal.

    Args:
        headers: Inbound request headers.

    Returns:
        32 lowercase hex characters, or ``None`` if absent or malformed.
    """
    raw = _header(headers, CLOUD_TRACE_HEADER)
    if not raw or len(raw) > _MAX_HEADER_LEN:
        return None

    trace_part, sep, rest = raw.partition("/")
    if not sep or not _HEX_RE.fullmatch(trace_part):
        return None

    span_part, _, options = rest.partition(";")
    if _parse_uint(span_part) is None:
        return None
    if options.startswith("o=") and _parse_uint(options[2:]) is None:
        return None

    trace_bytes = bytes.fromhex(trace_part)[:_TRACE_ID_BYTES]
    return trace_bytes.ljust(_TRACE_ID_BYTES, b"\x00").hex()


def extract_traceparent(headers: Mapping[str, str]) -> str | None:
    """Extract the trace id from a W3C ``traceparent`` header."""
    raw = _header(headers, TRACEPARENT_HEADER)
    if not raw:
        return None
    match = _TRACEPARENT_RE.fullmatch(raw.strip().lower())
    if match is None:
        return None
    version, trace_id, span_id, _flags = match.groups()
    if version == "ff" or (version == "00" and len(raw.strip()) != 55):
        return None
    if trace_id == "0" * 32 or span_id == "0" * 16:
        return None
    return trace_id


def extract_otel_span(headers: Mapping[str, str]) -> str | None:
    """Return the trace id of the active OpenTelemetry span, if valid.

    Headers are ignored; this extractor relies on instrumentation that
    already started a server span for the request.
    """
    ctx = otel_trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return f"{ctx.trace_id:032x}"


def generate_trace_id() -> str:
    """Return a fresh 32-character lowercase hex trace id."""
    return secrets.token_hex(_TRACE_ID_BYTES)


_EXTRACTORS: Final[dict[str, TraceExtractor]] = {
    "cloud": extract_cloud_trace_context,
    "w3c": extract_traceparent,
    "otel": extract_otel_span,
}


def resolve_extractors(names: Iterable[str]) -> tuple[TraceExtractor, ...]:
    """Map propagator names (``cloud``, ``w3c``, ``otel``) to extractors.

    Raises:
        ValueError: If a name is unknown.
    """
    extractors: list[TraceExtractor] = []
    for name in names:
        key = name.strip().lower()
        if key not in _EXTRACTORS:
            raise ValueError(f"unknown trace propagator: {name!r}")
        extractors.append(_EXTRACTORS[key])
    return tuple(extractors)


class TraceResolver:
    """Resolve a request's trace id from headers, generating one if needed.

    Args:
        extractors: Extractors tried in order. Defaults to
            ``X-Cloud-Trace-Context`` only.
        generator: Fallback id generator.
    """

    def __init__(
        self,
        extractors: Iterable[TraceExtractor] = (extract_cloud_trace_context,),
        generator: Callable[[], str] = generate_trace_id,
    ) -> None:
        self._extractors = tuple(extractors)
        self._generator = generator

    @property
    def extractors(self) -> tuple[TraceExtractor, ...]:
        return self._extractors

    def resolve(self, headers: Mapping[str, str]) -> str:
        """Return the inbound trace id, or a freshly generated one."""
        for extract in self._extractors:
            try:
                trace_id = extract(headers)
            except Exception:
                logger.debug("trace.extractor_failed", exc_info=True)
                continue
            if trace_id:
                return trace_id
        return self._generator()

    def __call__(self, headers: Mapping[str, str]) -> str:
        return self.resolve(headers)
