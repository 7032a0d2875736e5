"""S3-compatible object storage configuration settings.

Environment variables use STORAGE_ prefix.
Example: STORAGE_ENDPOINT="http://localhost:9000"
         STORAGE_BUCKET="uploads"

Supports:
- AWS S3 (default, no endpoint needed)
- MinIO (set endpoint to MinIO server URL)
- Any S3-compatible storage that implements multipart upload-part-copy
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_storage_yaml_source


class StorageBackendType(StrEnum):
    """Supported object store backends."""

    S3 = "s3"
    MINIO = "minio"


class StorageSettings(BaseSettings):
    """S3-compatible object storage settings.

    Environment variables use STORAGE_ prefix.
    Example: STORAGE_ENABLED=true
    """

    # ──────────────────────────────────────────────────────────────
    # Enable/Disable toggle
    # ──────────────────────────────────────────────────────────────

    enabled: bool = Field(
        default=False,
        description="Enable S3-compatible object storage (disabled by default)",
    )

    backend: StorageBackendType = Field(
        default=StorageBackendType.S3,
        description="Backend implementation to use (s3 or minio)",
    )

    # ──────────────────────────────────────────────────────────────
    # S3 Connection Configuration
    # ──────────────────────────────────────────────────────────────

    endpoint: str | None = Field(
        default=None,
        description="S3-compatible endpoint URL (for MinIO). None for AWS S3.",
    )

    bucket: str = Field(
        default="uploads",
        min_length=3,
        max_length=63,
        description="Default bucket for uploads and chunk staging",
    )

    region: str = Field(
        default="us-east-1",
        description="AWS region (used for AWS S3 and request signing)",
    )

    access_key: SecretStr | None = Field(
        default=None,
        description="S3 access key ID",
    )

    secret_key: SecretStr | None = Field(
        default=None,
        description="S3 secret access key",
    )

    use_ssl: bool = Field(
        default=True,
        description="Use SSL/TLS for S3 connections (set False for local MinIO without TLS)",
    )

    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates (set False for self-signed certs in local MinIO)",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts for failed S3 operations",
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="S3 connect/read timeout in seconds",
    )

    max_pool_connections: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum number of connections in the connection pool",
    )

    retry_mode: str = Field(
        default="standard",
        description="botocore retry mode: standard, adaptive, or legacy",
    )

    # ──────────────────────────────────────────────────────────────
    # Object Operations
    # ──────────────────────────────────────────────────────────────

    max_file_size_mb: int = Field(
        default=100,
        ge=1,
        le=5000,
        description="Maximum size in MB of a single-shot file upload",
    )

    list_max_keys: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum number of keys returned by a file listing",
    )

    # ──────────────────────────────────────────────────────────────
    # Health and Lifecycle
    # ──────────────────────────────────────────────────────────────

    health_check_enabled: bool = Field(
        default=True,
        description="Include storage in readiness checks",
    )

    startup_require_storage: bool = Field(
        default=False,
        description="Fail application startup if storage is unavailable (False = degraded mode)",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators
    # ──────────────────────────────────────────────────────────────

    @field_validator("retry_mode")
    @classmethod
    def _validate_retry_mode(cls, value: str) -> str:
        """Validate retry_mode is one of the allowed values."""
        allowed_modes = {"standard", "adaptive", "legacy"}
        if value not in allowed_modes:
            raise ValueError(f"retry_mode must be one of {allowed_modes}, got {value}")
        return value

    @model_validator(mode="after")
    def _validate_credential_consistency(self) -> StorageSettings:
        """Require both static credentials or neither (IAM role authentication)."""
        if (self.access_key is None) != (self.secret_key is None):
            raise ValueError(
                "Both access_key and secret_key must be provided together when using "
                "static credentials. Provide both or neither (for IAM role authentication)."
            )
        return self

    # ──────────────────────────────────────────────────────────────
    # Computed Properties
    # ──────────────────────────────────────────────────────────────

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_configured(self) -> bool:
        """Storage is configured once enabled; credential consistency is validated above."""
        return self.enabled

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_minio(self) -> bool:
        """Check if configured for MinIO/S3-compatible (has custom endpoint)."""
        return self.backend is StorageBackendType.MINIO or self.endpoint is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    def get_boto3_config(self) -> dict[str, Any]:
        """Get keyword arguments for creating the aioboto3 S3 client.

        Credentials are only included for static auth; otherwise botocore
        falls back to its default provider chain (IAM role, env, profile).
        """
        config: dict[str, Any] = {
            "region_name": self.region,
            "use_ssl": self.use_ssl,
            "verify": self.verify_ssl,
        }

        if self.access_key is not None and self.secret_key is not None:
            config["aws_access_key_id"] = self.access_key.get_secret_value()
            config["aws_secret_access_key"] = self.secret_key.get_secret_value()

        if self.endpoint:
            config["endpoint_url"] = self.endpoint

        return config

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
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
            create_storage_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
