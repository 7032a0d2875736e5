"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/logging/otel/storage/upload), loaded once
through LRU-cached loaders and frozen after validation.

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .app import AppSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_logging_settings,
    get_otel_settings,
    get_storage_settings,
    get_upload_settings,
)
from .logs import LoggingSettings
from .otel import OtelSettings
from .storage import StorageBackendType, StorageSettings
from .unified import Settings, get_settings
from .uploads import UploadSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "OtelSettings",
    "Settings",
    "StorageBackendType",
    "StorageSettings",
    "UploadSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_logging_settings",
    "get_otel_settings",
    "get_settings",
    "get_storage_settings",
    "get_upload_settings",
]
