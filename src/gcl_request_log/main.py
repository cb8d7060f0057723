# src/gcl_request_log/main.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""
Demo Application

Synopsis:
    Minimal FastAPI application showing how request logging is wired: the
    middleware is installed once and handlers receive the request's context
    logger through a dependency. Application lines and the access line of a
    request share one trace id and are grouped together by Cloud Logging.

Run:
    GOOGLE_CLOUD_PROJECT=my-project uvicorn gcl_request_log.main:create_app --factory
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from gcl_request_log.config.request_log import RequestLogConfig
from gcl_request_log.config.settings import get_settings
from gcl_request_log.dependencies.logging import ContextLoggerDep
from gcl_request_log.infrastructure.logging.logger import configure_root_logging
from gcl_request_log.infrastructure.middleware.request_logging import (
    RequestLoggingMiddleware,
)

__all__ = ["create_app"]


def create_app(config: RequestLogConfig | None = None) -> FastAPI:
    """Create the demo application.

    Args:
        config: Request-log configuration. Built from the environment when
            omitted.

    Returns:
        FastAPI: Application with request logging installed.
    """
    configure_root_logging()
    resolved = config or RequestLogConfig.from_settings(get_settings())

    app = FastAPI(title="gcl-request-log demo", docs_url=None, redoc_url=None)
    app.add_middleware(RequestLoggingMiddleware, config=resolved)

    @app.get("/", response_class=PlainTextResponse)
    async def index(logger: ContextLoggerDep) -> str:
        # These lines are grouped with the access line of the request.
        if logger is not None:
            logger.debug("Hi")
            logger.info("Hello")
            logger.warning("World")
        return "OK\n"

    return app
