"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from oss_gateway.core.settings.loader import get_storage_settings

    settings = get_storage_settings()  # First call: loads and validates
    settings = get_storage_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_storage_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .logs import LoggingSettings
from .otel import OtelSettings
from .storage import StorageSettings
from .uploads import UploadSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_otel_settings() -> OtelSettings:
    """Get cached OpenTelemetry settings.

    Returns:
        Validated and frozen OtelSettings instance.
    """
    return OtelSettings()


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """Get cached object storage settings.

    Returns:
        Validated and frozen StorageSettings instance.
    """
    return StorageSettings()


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """Get cached chunked upload settings.

    Returns:
        Validated and frozen UploadSettings instance.
    """
    return UploadSettings()


def clear_all_caches() -> None:
    """Clear every cached settings loader (tests and reloads)."""
    get_app_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_otel_settings.cache_clear()
    get_storage_settings.cache_clear()
    get_upload_settings.cache_clear()
