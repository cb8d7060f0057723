# src/gcl_request_log/infrastructure/http/observers.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Response and request-body observers.

Summary:
    Thin decorators around the ASGI ``send``/``receive`` channels that record
    what the access log needs (final status, bytes written, bytes received)
    without altering a single message.

Design:
    * The first explicit status wins; later ``http.response.start`` messages
      are still forwarded so transport semantics are preserved.
    * A body write with no prior status records an implicit 200.
    * Bytes are counted only after the downstream ``send`` returned, so the
      total always equals what was actually forwarded. A failing ``send``
      propagates its error and counts nothing.
    * Files sent through the ``http.response.pathsend`` extension count as
      the response's ``Content-Length``, or the file size when none was
      declared.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from starlette.types import Message, Receive, Send

__all__ = ["RequestBodyCounter", "ResponseObserver"]

_IMPLICIT_STATUS = 200


def _declared_length(headers: Iterable[tuple[bytes, bytes]]) -> int | None:
    for name, value in headers:
        if name.lower() == b"content-length":
            try:
                length = int(value)
            except ValueError:
                return None
            return length if length >= 0 else None
    return None


class ResponseObserver:
    """Record status code and response size of one response."""

    def __init__(self) -> None:
        self.status: int | None = None
        self.response_size: int = 0
        self._declared_length: int | None = None

    def set_status(self, code: int) -> None:
        """Record ``code`` unless a status has already been recorded."""
        if self.status is None:
            self.status = int(code)

    def record_body(self, nbytes: int) -> None:
        """Account for ``nbytes`` body bytes confirmed written downstream."""
        if self.status is None:
            self.status = _IMPLICIT_STATUS
        self.response_size += nbytes

    def wrap_send(self, send: Send) -> Send:
        """Return an ASGI ``send`` that observes messages before forwarding.

        Args:
            send: Underlying ASGI send channel.

        Returns:
            Send: Observing send channel with identical semantics.
        """

        async def observed_send(message: Message) -> None:
            kind = message["type"]
            if kind == "http.response.start":
                if self.status is None:
                    self._declared_length = _declared_length(message.get("headers", ()))
                self.set_status(message["status"])
                await send(message)
            elif kind == "http.response.body":
                await send(message)
                self.record_body(len(message.get("body", b"")))
            elif kind == "http.response.pathsend":
                await send(message)
                self.record_body(self._pathsend_size(message))
            else:
                await send(message)

        return observed_send

    def _pathsend_size(self, message: Message) -> int:
        """Size of a file handed to the server by path.

        The ``Content-Length`` of the response start wins; otherwise the file
        is stat-ed. An unreadable path counts as zero bytes.
        """
        if self._declared_length is not None:
            return self._declared_length
        try:
            return os.stat(message["path"]).st_size
        except (KeyError, OSError, TypeError, ValueError):
            return 0


class RequestBodyCounter:
    """Count request body bytes handed to the application."""

    def __init__(self) -> None:
        self.received: int = 0

    def wrap_receive(self, receive: Receive) -> Receive:
        async def counted_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                self.received += len(message.get("body", b""))
            return message

        return counted_receive
