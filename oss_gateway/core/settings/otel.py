"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from typing import Any

from pydantic import AnyUrl, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_otel_yaml_source


class OtelSettings(BaseSettings):
    """OpenTelemetry distributed tracing settings.

    Environment variables use OTEL_ prefix.
    Example: OTEL_ENABLED=true, OTEL_ENDPOINT=http://tempo:4317
    """

    enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )

    endpoint: AnyUrl | None = Field(
        default=None,
        description="OTLP gRPC endpoint (e.g., http://tempo:4317)",
    )

    service_name: str = Field(
        default="oss-gateway",
        min_length=1,
        max_length=100,
        description="Service name for tracing",
    )

    service_version: str = Field(
        default="1.0.0",
        min_length=1,
        max_length=50,
        description="Service version for tracing",
    )

    insecure: bool = Field(
        default=True,
        description="Use insecure gRPC connection (no TLS) - for local development",
    )

    sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Parent-based trace id ratio sampling rate",
    )

    instrument_fastapi: bool = Field(
        default=True,
        description="Instrument FastAPI request handling",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_configured(self) -> bool:
        """Tracing is active only when enabled and an endpoint is set."""
        return self.enabled and self.endpoint is not None

    def resource_attributes(self) -> dict[str, Any]:
        """Resource attributes attached to every exported span."""
        return {
            "service.name": self.service_name,
            "service.version": self.service_version,
        }

    model_config = SettingsConfigDict(
        env_prefix="OTEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_otel_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
