# src/gcl_request_log/application/services/diagnostics.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Operator-visible diagnostic channel.

Failures to emit request or application log lines are reported here instead
of being raised into request handling. The channel is a plain ``logging``
logger, never one of the line sinks, so a broken sink cannot recurse.
"""

from __future__ import annotations

import logging
from typing import Any

from gcl_request_log.domain.exceptions.logging import RequestLogError

__all__ = ["DIAGNOSTICS_LOGGER_NAME", "report_failure"]

DIAGNOSTICS_LOGGER_NAME = "gcl_request_log.diagnostics"

logger = logging.getLogger(DIAGNOSTICS_LOGGER_NAME)


def report_failure(event: str, exc: BaseException, **fields: Any) -> None:
    """Log a swallowed emission failure at ERROR level.

    Args:
        event: Stable event name, e.g. ``"context_log.write_failed"``.
        exc: The failure being reported.
        **fields: Extra structured fields for the diagnostic record.
    """
    extra: dict[str, Any] = dict(fields)
    extra["error_type"] = type(exc).__name__
    if isinstance(exc, RequestLogError):
        extra["error_code"] = exc.code
        if exc.details:
            extra["error_details"] = exc.details
    try:
        logger.error("%s: %s", event, exc, extra=extra)
    except Exception:  # pragma: no cover - a broken handler must not escape
        logger.debug("diagnostics.report_failed", exc_info=True)
