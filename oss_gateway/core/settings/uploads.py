"""Chunked upload protocol settings.

Environment variables use UPLOAD_ prefix.
Example: UPLOAD_PUBLIC_BASE_URL="https://cdn.example.com"
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_upload_yaml_source


class UploadSettings(BaseSettings):
    """Settings for the resumable chunked-upload sessions."""

    completion_claim_enabled: bool = Field(
        default=True,
        description=(
            "Guard complete() with a conditionally-created marker object so that "
            "two concurrent completions of one session cannot both compose"
        ),
    )

    public_base_url: str | None = Field(
        default=None,
        description=(
            "Base URL used to build the externally addressable URL of merged objects "
            "as '{public_base_url}/{bucket}/{key}'. When unset the object key is returned."
        ),
    )

    max_chunk_size_mb: int = Field(
        default=512,
        ge=5,
        le=5120,
        description="Largest accepted payload for a single chunk upload, in MB",
    )

    @field_validator("public_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def max_chunk_size_bytes(self) -> int:
        """Get the chunk payload limit in bytes."""
        return self.max_chunk_size_mb * 1024 * 1024

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_upload_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
