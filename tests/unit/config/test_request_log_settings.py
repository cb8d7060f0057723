# tests/unit/config/test_request_log_settings.py
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from gcl_request_log.config.request_log import RequestLogConfig
from gcl_request_log.config.settings import Settings, get_settings
from gcl_request_log.domain.enums.severity import Severity
from gcl_request_log.infrastructure.sinks.stream_sink import FileLineSink, StandardStreamSink
from gcl_request_log.infrastructure.tracing.trace_resolver import (
    extract_cloud_trace_context,
    extract_traceparent,
)

_ENV_VARS = (
    "GOOGLE_CLOUD_PROJECT",
    "REQUEST_LOG_SEVERITY",
    "REQUEST_LOG_OUT",
    "CONTEXT_LOG_OUT",
    "REQUEST_LOG_ADDITIONAL_DATA",
    "REQUEST_LOG_SKIP",
    "REQUEST_LOG_TRACE_PROPAGATORS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "proj")
    s = Settings()  # type: ignore[call-arg]

    assert s.project_id == "proj"
    assert s.severity is Severity.INFO
    assert s.request_log_out == "stderr"
    assert s.context_log_out == "stdout"
    assert s.additional_data == {}
    assert s.skip == 2
    assert s.trace_propagators == ["cloud"]


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "proj")
    monkeypatch.setenv("REQUEST_LOG_SEVERITY", "warning")
    monkeypatch.setenv("REQUEST_LOG_OUT", "stdout")
    monkeypatch.setenv("REQUEST_LOG_ADDITIONAL_DATA", '{"service": "foo", "rev": 3}')
    monkeypatch.setenv("REQUEST_LOG_SKIP", "4")
    monkeypatch.setenv("REQUEST_LOG_TRACE_PROPAGATORS", "w3c, cloud")

    s = Settings()  # type: ignore[call-arg]

    assert s.severity is Severity.WARNING
    assert s.request_log_out == "stdout"
    assert s.additional_data == {"service": "foo", "rev": 3}
    assert s.skip == 4
    assert s.trace_propagators == ["w3c", "cloud"]


def test_numeric_severity_is_accepted() -> None:
    assert Settings(project_id="proj", severity="500").severity is Severity.ERROR


@pytest.mark.parametrize(
    "overrides",
    [
        {"severity": "LOUD"},
        {"skip": -1},
        {"trace_propagators": "cloud,b3"},
        {"trace_propagators": ""},
        {"bogus": 1},
    ],
)
def test_invalid_values_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(project_id="proj", **overrides)


def test_project_id_is_required() -> None:
    with pytest.raises(ValidationError):
        Settings()  # type: ignore[call-arg]


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "proj")
    assert get_settings() is get_settings()


def test_get_settings_wraps_validation_error() -> None:
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        get_settings()


def test_config_default() -> None:
    config = RequestLogConfig.default("proj")

    assert config.severity is Severity.INFO
    assert isinstance(config.request_log_out, StandardStreamSink)
    assert config.request_log_out.name == "stderr"
    assert config.context_log_out.name == "stdout"
    assert dict(config.additional_data) == {}
    assert config.skip == 2
    assert config.trace_resolver.extractors == (extract_cloud_trace_context,)


@pytest.mark.parametrize("overrides", [{"project_id": ""}, {"project_id": "  "}, {"skip": -1}])
def test_config_rejects_invalid_values(overrides: dict) -> None:
    params = {"project_id": "proj", **overrides}
    with pytest.raises(ValueError):
        RequestLogConfig(**params)


def test_config_rejects_unknown_severity() -> None:
    with pytest.raises(ValueError):
        RequestLogConfig(project_id="proj", severity="LOUD")  # type: ignore[arg-type]


def test_config_freezes_additional_data() -> None:
    data = {"service": "foo"}
    config = RequestLogConfig(project_id="proj", additional_data=data)
    data["service"] = "bar"

    assert config.additional_data["service"] == "foo"
    with pytest.raises(TypeError):
        config.additional_data["service"] = "baz"  # type: ignore[index]


def test_config_from_settings(tmp_path: Path) -> None:
    settings = Settings(
        project_id="proj",
        severity="DEBUG",
        request_log_out=str(tmp_path / "access.log"),
        additional_data={"service": "foo"},
        trace_propagators=["w3c"],
    )

    config = RequestLogConfig.from_settings(settings)

    assert config.project_id == "proj"
    assert config.severity is Severity.DEBUG
    assert isinstance(config.request_log_out, FileLineSink)
    assert isinstance(config.context_log_out, StandardStreamSink)
    assert config.additional_data == {"service": "foo"}
    assert config.trace_resolver.extractors == (extract_traceparent,)
    config.request_log_out.close()
