# tests/conftest.py
from __future__ import annotations

import json
import threading
from collections.abc import Callable, Generator
from typing import Any

import pytest

from gcl_request_log.config.request_log import RequestLogConfig
from gcl_request_log.config.settings import get_settings
from gcl_request_log.domain.enums.severity import Severity
from gcl_request_log.domain.exceptions.logging import SinkWriteError

PROJECT_ID = "test-project"


class MemorySink:
    """In-memory line sink recording every appended record."""

    def __init__(self) -> None:
        self.records: list[str] = []
        self._lock = threading.Lock()

    def append(self, record: str) -> None:
        with self._lock:
            self.records.append(record)

    def entries(self) -> list[dict[str, Any]]:
        """Parse every record as JSON (each must be one newline-terminated line)."""
        out = []
        for record in self.records:
            assert record.endswith("\n")
            assert record.count("\n") == 1
            out.append(json.loads(record))
        return out


class FailingSink:
    """Line sink that rejects every write."""

    def __init__(self) -> None:
        self.attempts = 0

    def append(self, record: str) -> None:
        self.attempts += 1
        raise SinkWriteError("sink is closed", details={"record_len": len(record)})


@pytest.fixture
def memory_sink() -> Callable[[], MemorySink]:
    """Factory for fresh in-memory sinks."""
    return MemorySink


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


@pytest.fixture
def request_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def context_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def make_config(
    request_sink: MemorySink, context_sink: MemorySink
) -> Callable[..., RequestLogConfig]:
    """Build a RequestLogConfig writing to the in-memory sinks."""

    def _make(**overrides: Any) -> RequestLogConfig:
        params: dict[str, Any] = {
            "project_id": PROJECT_ID,
            "severity": Severity.INFO,
            "request_log_out": request_sink,
            "context_log_out": context_sink,
        }
        params.update(overrides)
        return RequestLogConfig(**params)

    return _make


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    """Keep cached settings from leaking across tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
