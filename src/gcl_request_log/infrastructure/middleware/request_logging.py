# src/gcl_request_log/infrastructure/middleware/request_logging.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Request Logging Middleware.

Summary:
    Pure ASGI middleware that gives every HTTP request a
    :class:`ContextLogger` correlated by trace id and emits one Cloud Logging
    access entry (``httpRequest``) when the request completes. Works with
    any ASGI application: Starlette, FastAPI, or a bare callable.

Design:
    * Wraps ``send``/``receive`` rather than the response object, so status
      and byte counts reflect what was actually sent, including streaming
      responses.
    * The context logger is stored on ``scope["state"]`` and is therefore
      available as ``request.state.context_logger``; use
      :func:`get_context_logger` to read it.
    * The trace id is bound to a contextvar for the diagnostic JSON logger
      while the request runs, and reset afterwards.
    * Non-HTTP scopes (lifespan, websocket) pass through untouched.

Usage:
    app.add_middleware(RequestLoggingMiddleware, config=RequestLogConfig.default("proj"))
"""

from __future__ import annotations

from starlette.datastructures import Headers
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Receive, Scope, Send

from gcl_request_log.application.services.context_logger import ContextLogger
from gcl_request_log.infrastructure.middleware.request_lifecycle import RequestLogging
from gcl_request_log.config.request_log import RequestLogConfig
from gcl_request_log.config.settings import get_settings
from gcl_request_log.domain.entities.log_entry import HttpRequestFacts
from gcl_request_log.infrastructure.http.network import host_ipv4_address
from gcl_request_log.infrastructure.http.observers import RequestBodyCounter
from gcl_request_log.infrastructure.logging.logger import (
    reset_request_context,
    set_request_context,
)

__all__ = [
    "CONTEXT_LOGGER_STATE_KEY",
    "RequestLoggingMiddleware",
    "get_context_logger",
    "request_facts_from_scope",
]

CONTEXT_LOGGER_STATE_KEY = "context_logger"


def _content_length(headers: Headers) -> int | None:
    raw = headers.get("content-length")
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def _request_uri(scope: Scope) -> str:
    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else scope.get("path", "") or "/"
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


def request_facts_from_scope(scope: Scope, headers: Headers | None = None) -> HttpRequestFacts:
    """Collect request-side access-log facts from an ASGI HTTP scope.

    Args:
        scope: ASGI connection scope of type ``http``.
        headers: Pre-parsed headers of the same scope, if available.

    Returns:
        HttpRequestFacts: Method, URI, client/server addresses and headers.
    """
    headers = headers if headers is not None else Headers(scope=scope)
    client = scope.get("client")
    server = scope.get("server")
    server_ip = str(server[0]) if server and server[0] else host_ipv4_address()
    return HttpRequestFacts(
        method=scope.get("method", ""),
        url=_request_uri(scope),
        user_agent=headers.get("user-agent", ""),
        remote_ip=str(client[0]) if client else "",
        server_ip=server_ip,
        referer=headers.get("referer", ""),
        protocol=f"HTTP/{scope.get('http_version', '1.1')}",
        content_length=_content_length(headers),
    )


class RequestLoggingMiddleware:
    """ASGI middleware emitting request-correlated Cloud Logging entries.

    Args:
        app: Downstream ASGI application.
        config: Explicit configuration. When omitted it is built once from
            the environment via :func:`get_settings`.
    """

    def __init__(self, app: ASGIApp, config: RequestLogConfig | None = None) -> None:
        self.app = app
        self.config = config or RequestLogConfig.from_settings(get_settings())
        self._logging = RequestLogging(self.config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        facts = request_facts_from_scope(scope, headers)
        counter = RequestBodyCounter()

        with self._logging.lifecycle(headers, facts) as request_scope:
            scope.setdefault("state", {})[CONTEXT_LOGGER_STATE_KEY] = (
                request_scope.context_logger
            )
            token = set_request_context(trace_id=request_scope.trace_id)
            try:
                await self.app(
                    scope,
                    counter.wrap_receive(receive),
                    request_scope.observer.wrap_send(send),
                )
            finally:
                request_scope.request_bytes = counter.received
                reset_request_context(token)


def get_context_logger(conn: HTTPConnection) -> ContextLogger | None:
    """Return the current request's context logger.

    Returns ``None`` when :class:`RequestLoggingMiddleware` is not installed;
    callers should treat that as logging disabled.

    Args:
        conn: Current request (or any HTTP connection).
    """
    state = conn.scope.get("state") or {}
    logger = state.get(CONTEXT_LOGGER_STATE_KEY)
    return logger if isinstance(logger, ContextLogger) else None
