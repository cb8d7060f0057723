# tests/unit/dependencies/test_logging_dependencies.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from gcl_request_log.dependencies.logging import ContextLoggerDep, RequiredContextLoggerDep
from gcl_request_log.infrastructure.middleware.request_logging import RequestLoggingMiddleware


def _app() -> FastAPI:
    app = FastAPI()

    @app.get("/optional")
    def optional(logger: ContextLoggerDep) -> dict[str, object]:
        return {"has_logger": logger is not None}

    @app.get("/required")
    def required(logger: RequiredContextLoggerDep) -> dict[str, str]:
        return {"trace_id": logger.trace_id}

    return app


def test_dependencies_without_middleware() -> None:
    client = TestClient(_app())

    assert client.get("/optional").json() == {"has_logger": False}
    resp = client.get("/required")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "request logging is not configured"}


def test_dependencies_with_middleware(make_config, request_sink) -> None:
    app = _app()
    app.add_middleware(RequestLoggingMiddleware, config=make_config())
    client = TestClient(app)

    assert client.get("/optional").json() == {"has_logger": True}
    resp = client.get(
        "/required",
        headers={"X-Cloud-Trace-Context": "105445aa7843bc8bf206b12000100000/1;o=1"},
    )
    assert resp.json() == {"trace_id": "105445aa7843bc8bf206b12000100000"}
    assert len(request_sink.records) == 2
