"""Object storage infrastructure for S3-compatible stores.

Quick Start:
    from oss_gateway.infra.storage import Storage

    @router.get("/objects")
    async def list_objects(storage: Storage):
        objects, _ = await storage.list_objects(prefix="2024/")
        return [obj.key for obj in objects]
"""

from __future__ import annotations

from .backends import (
    MAX_COMPOSE_SOURCES,
    BucketInfo,
    ObjectMetadata,
    StorageBackend,
    UploadResult,
    create_storage_backend,
)
from .dependencies import Storage, require_storage
from .exceptions import (
    StorageComposeError,
    StorageConflictError,
    StorageDownloadError,
    StorageError,
    StorageFileNotFoundError,
    StorageNotConfiguredError,
    StoragePermissionError,
    StorageTimeoutError,
    StorageUploadError,
    StorageValidationError,
    map_boto_error,
)
from .service import (
    StorageService,
    get_storage_service,
    reset_storage_service,
    set_storage_service,
)

__all__ = [
    "MAX_COMPOSE_SOURCES",
    "BucketInfo",
    "ObjectMetadata",
    "Storage",
    "StorageBackend",
    "StorageComposeError",
    "StorageConflictError",
    "StorageDownloadError",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageNotConfiguredError",
    "StoragePermissionError",
    "StorageService",
    "StorageTimeoutError",
    "StorageUploadError",
    "StorageValidationError",
    "create_storage_backend",
    "get_storage_service",
    "map_boto_error",
    "require_storage",
    "reset_storage_service",
    "set_storage_service",
]
