"""Unified settings composition for convenient access.

Composes the domain settings into a single object. This is purely additive
and does not replace the modular get_*_settings() functions.

Usage:
    from oss_gateway.core.settings import get_settings

    settings = get_settings()
    print(settings.storage.bucket)
    print(settings.upload.completion_claim_enabled)

Note:
    Each nested settings class still loads from its own environment
    prefix (APP_, STORAGE_, UPLOAD_, ...), not from a unified prefix.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .app import AppSettings
from .loader import (
    get_app_settings,
    get_logging_settings,
    get_otel_settings,
    get_storage_settings,
    get_upload_settings,
)
from .logs import LoggingSettings
from .otel import OtelSettings
from .storage import StorageSettings
from .uploads import UploadSettings


class Settings(BaseModel):
    """Unified settings composing all domain settings.

    Example:
        settings = Settings()
        assert settings.app.debug is False
        assert settings.storage.list_max_keys == 100
    """

    model_config = ConfigDict(frozen=True)

    app: AppSettings = Field(default_factory=get_app_settings)
    logging: LoggingSettings = Field(default_factory=get_logging_settings)
    otel: OtelSettings = Field(default_factory=get_otel_settings)
    storage: StorageSettings = Field(default_factory=get_storage_settings)
    upload: UploadSettings = Field(default_factory=get_upload_settings)


def get_settings() -> Settings:
    """Compose the cached domain settings into one object.

    Returns:
        Settings: Unified settings with all domain configurations.
    """
    return Settings()
