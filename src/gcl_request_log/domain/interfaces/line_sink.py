# src/gcl_request_log/domain/interfaces/line_sink.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""
Line sink interface.

Purpose:
    Abstract append-only destination for newline-terminated structured log
    records. Implementations live in the infrastructure layer (standard
    streams, files) or in tests (in-memory collectors).

Layer: domain
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LineSink(Protocol):
    """Protocol for append-only line destinations.

    Implementations must be safe under concurrent ``append`` calls and must
    never interleave partial records: each call writes one complete record.
    """

    def append(self, record: str) -> None:
        """Append one newline-terminated record.

        Args:
            record: A complete JSON line including its trailing ``"\\n"``.

        Raises:
            SinkWriteError: If the destination rejects or fails the write.
        """
