# src/gcl_request_log/config/settings.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Request-log configuration (Pydantic Settings, v2)

Summary:
    Typed, validated environment layer for the request-logging middleware.
    Settings are plain values (names of streams, JSON text); they are turned
    into live sinks and resolvers by
    :meth:`gcl_request_log.config.request_log.RequestLogConfig.from_settings`.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown input.
    - Explicit field declarations with constrained types and ranges.
    - Singleton accessor `get_settings()` with LRU cache for applications that
      read the environment once at startup. The middleware itself never reads
      process-wide state; it receives an explicit config value.
    - Safe, structured logging of the resolved values.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from gcl_request_log.domain.enums.severity import Severity

logger = logging.getLogger(__name__)

_PROPAGATORS = frozenset({"cloud", "w3c", "otel"})


class Settings(BaseSettings):
    """Environment-driven settings for request logging."""

    project_id: str = Field(
        ...,
        min_length=1,
        description="Google Cloud project id used to build trace resource names.",
        validation_alias="GOOGLE_CLOUD_PROJECT",
    )

    severity: Severity = Field(
        default=Severity.INFO,
        description="Minimum severity of application log entries that are written.",
        validation_alias="REQUEST_LOG_SEVERITY",
    )

    request_log_out: str = Field(
        default="stderr",
        min_length=1,
        description="Destination of access log lines: 'stdout', 'stderr' or a file path.",
        validation_alias="REQUEST_LOG_OUT",
    )

    context_log_out: str = Field(
        default="stdout",
        min_length=1,
        description="Destination of application log lines: 'stdout', 'stderr' or a file path.",
        validation_alias="CONTEXT_LOG_OUT",
    )

    additional_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Static fields merged into every line under 'data' (JSON object).",
        validation_alias="REQUEST_LOG_ADDITIONAL_DATA",
    )

    skip: int = Field(
        default=2,
        ge=0,
        le=32,
        description="Stack frames skipped when resolving the call site of a log call.",
        validation_alias="REQUEST_LOG_SKIP",
    )

    trace_propagators: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["cloud"],
        description="Trace extractors tried in order: 'cloud', 'w3c', 'otel'.",
        validation_alias="REQUEST_LOG_TRACE_PROPAGATORS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("severity", mode="before")
    @classmethod
    def _parse_severity(cls, value: Any) -> Severity:
        """Accept severity names (any case) as well as ranks."""
        return Severity.parse(value)

    @field_validator("trace_propagators", mode="before")
    @classmethod
    def _split_propagators(cls, value: Any) -> Any:
        """Accept a comma-separated string and validate every name.

        Raises:
            ValueError: If a propagator name is unknown or the list is empty.
        """
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        names = [str(part).strip().lower() for part in value]
        unknown = sorted(set(names) - _PROPAGATORS)
        if unknown:
            raise ValueError(f"unknown trace propagators: {unknown}")
        if not names:
            raise ValueError("at least one trace propagator is required")
        return names


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated request-log settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()  # type: ignore[call-arg]
        logger.info(
            "Request log settings initialized",
            extra={
                "project_id": settings.project_id,
                "severity": settings.severity.name,
                "request_log_out": settings.request_log_out,
                "context_log_out": settings.context_log_out,
                "additional_data_keys": sorted(settings.additional_data),
                "skip": settings.skip,
                "trace_propagators": settings.trace_propagators,
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid request log configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
