"""Storage backend implementations behind the StorageBackend protocol."""

from .factory import create_storage_backend
from .protocol import (
    MAX_COMPOSE_SOURCES,
    BucketInfo,
    ObjectMetadata,
    StorageBackend,
    UploadResult,
)

__all__ = [
    "MAX_COMPOSE_SOURCES",
    "BucketInfo",
    "ObjectMetadata",
    "StorageBackend",
    "UploadResult",
    "create_storage_backend",
]
