# src/gcl_request_log/domain/enums/severity.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""
Log severity enumeration.

Purpose:
    Ordered severity levels understood by Cloud Logging's structured-log
    ingestion. Ranks are spaced by 100 so that the numeric value matches the
    ``LogSeverity`` codes of the Cloud Logging API.

Layer:
    domain

Notes:
    - Ordering is total and fixed; ``max()`` over severities yields the most
      severe entry.
    - Rendering an unrecognized integer never fails; it yields ``"UNKNOWN"``.
"""

from __future__ import annotations

from enum import IntEnum

_UNKNOWN = "UNKNOWN"


class Severity(IntEnum):
    """Cloud Logging severity, lowest (DEFAULT) to highest (EMERGENCY)."""

    DEFAULT = 0
    DEBUG = 100
    INFO = 200
    NOTICE = 300
    WARNING = 400
    ERROR = 500
    CRITICAL = 600
    ALERT = 700
    EMERGENCY = 800

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value: str | int | Severity) -> Severity:
        """Coerce a configuration value into a :class:`Severity`.

        Args:
            value: Severity member, canonical name (case-insensitive) or rank.

        Returns:
            The matching severity.

        Raises:
            ValueError: If the value names no known severity.
        """
        if isinstance(value, Severity):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"unknown severity rank: {value}") from None
        key = str(value).strip().upper()
        if key.isdigit():
            return cls.parse(int(key))
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown severity name: {value!r}") from None


def severity_name(value: int) -> str:
    """Return the canonical name for ``value`` or ``"UNKNOWN"``."""
    try:
        return Severity(value).name
    except ValueError:
        return _UNKNOWN


__all__ = ["Severity", "severity_name"]
