# src/gcl_request_log/domain/exceptions/logging.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""
Request-log exceptions.

Summary:
    Failure taxonomy for emitting log lines. These errors never reach
    application code that issues log calls; the emitting component reports
    them to the diagnostic channel and carries on.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any


class RequestLogError(Exception):
    """Base class for all log-emission failures."""

    code: str = "REQUEST_LOG_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class SerializationError(RequestLogError):
    """An entry could not be rendered as a JSON line."""

    code = "SERIALIZATION_ERROR"


class InvalidEntryError(RequestLogError):
    """Observed request values did not form a valid access entry."""

    code = "INVALID_ENTRY"


class SinkWriteError(RequestLogError):
    """The line sink rejected or failed a write."""

    code = "SINK_WRITE_ERROR"

    @classmethod
    def from_exception(cls, exc: BaseException) -> SinkWriteError:
        """Wrap an arbitrary sink failure, keeping its type in ``details``."""
        err = cls(str(exc) or type(exc).__name__, details={"cause": type(exc).__name__})
        err.__cause__ = exc
        return err


__all__ = ["InvalidEntryError", "RequestLogError", "SerializationError", "SinkWriteError"]
