# src/gcl_request_log/dependencies/logging.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Dependency wiring for request-scoped logging.

Overview:
    FastAPI dependency providers that hand the current request's
    :class:`ContextLogger` to path operations, so handlers receive it as an
    explicit parameter instead of reaching into ``request.state``.

Layer:
    dependencies
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from gcl_request_log.application.services.context_logger import ContextLogger
from gcl_request_log.infrastructure.middleware.request_logging import get_context_logger

__all__ = ["ContextLoggerDep", "RequiredContextLoggerDep", "require_context_logger"]


def _optional_context_logger(request: Request) -> ContextLogger | None:
    return get_context_logger(request)


def require_context_logger(request: Request) -> ContextLogger:
    """Return the context logger or fail the request with 500.

    Use this only in applications that always install the middleware; a
    missing logger then signals a wiring bug.

    Raises:
        HTTPException: 500 if the request-logging middleware is not installed.
    """
    logger = get_context_logger(request)
    if logger is None:
        raise HTTPException(status_code=500, detail="request logging is not configured")
    return logger


ContextLoggerDep = Annotated[ContextLogger | None, Depends(_optional_context_logger)]
RequiredContextLoggerDep = Annotated[ContextLogger, Depends(require_context_logger)]
