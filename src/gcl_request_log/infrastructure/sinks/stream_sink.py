# src/gcl_request_log/infrastructure/sinks/stream_sink.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Line sinks backed by text streams.

Summary:
    Concrete :class:`~gcl_request_log.domain.interfaces.line_sink.LineSink`
    implementations for the process's standard streams and for append-only
    files.

Design:
    * One ``threading.Lock`` per sink; each record is written with a single
      ``write`` followed by ``flush`` while the lock is held, so concurrent
      requests never interleave partial lines.
    * Standard-stream sinks look the stream up on every write, which keeps
      them correct when ``sys.stdout``/``sys.stderr`` are swapped (test
      capture, process supervisors).
    * Stream errors are translated to ``SinkWriteError``.
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Literal, TextIO

from gcl_request_log.domain.exceptions.logging import SinkWriteError
from gcl_request_log.domain.interfaces.line_sink import LineSink

__all__ = ["FileLineSink", "StandardStreamSink", "TextStreamSink", "open_line_sink"]

StandardStreamName = Literal["stdout", "stderr"]


class TextStreamSink:
    """Write records to an already-open text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def _target(self) -> TextIO:
        return self._stream

    def append(self, record: str) -> None:
        with self._lock:
            stream = self._target()
            try:
                stream.write(record)
                stream.flush()
            except (OSError, ValueError) as exc:
                raise SinkWriteError(
                    f"write to {self!r} failed: {exc}", details={"sink": repr(self)}
                ) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}({getattr(self._stream, 'name', '?')!r})"


class StandardStreamSink(TextStreamSink):
    """Write records to ``sys.stdout`` or ``sys.stderr``."""

    def __init__(self, name: StandardStreamName) -> None:
        if name not in ("stdout", "stderr"):
            raise ValueError(f"not a standard stream: {name!r}")
        super().__init__(getattr(sys, name))
        self.name = name

    def _target(self) -> TextIO:
        return getattr(sys, self.name)

    def __repr__(self) -> str:
        return f"StandardStreamSink({self.name!r})"


class FileLineSink(TextStreamSink):
    """Append records to a file opened once for the life of the sink."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(self.path.open("a", encoding="utf-8"))

    def close(self) -> None:
        with self._lock:
            self._stream.close()

    def __repr__(self) -> str:
        return f"FileLineSink({str(self.path)!r})"


def open_line_sink(target: str) -> LineSink:
    """Build a sink from a configuration value.

    Args:
        target: ``"stdout"``, ``"stderr"`` or a filesystem path.

    Returns:
        LineSink: Sink writing to the named destination.
    """
    value = target.strip()
    if value in ("stdout", "stderr"):
        return StandardStreamSink(value)  # type: ignore[arg-type]
    if not value:
        raise ValueError("sink target must not be empty")
    return FileLineSink(value)
