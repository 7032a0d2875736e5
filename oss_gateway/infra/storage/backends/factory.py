"""Backend factory for creating storage backends from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from oss_gateway.core.settings.storage import StorageBackendType
from oss_gateway.infra.storage.exceptions import StorageNotConfiguredError

if TYPE_CHECKING:
    from oss_gateway.core.settings.storage import StorageSettings

    from .protocol import StorageBackend


def create_storage_backend(settings: StorageSettings) -> StorageBackend:
    """Create the storage backend selected by ``settings.backend``.

    Raises:
        StorageNotConfiguredError: If storage is disabled or the backend is unsupported
    """
    if not settings.is_configured:
        raise StorageNotConfiguredError(
            "Storage not configured. Set STORAGE_ENABLED=true and provide credentials."
        )

    match settings.backend:
        case StorageBackendType.S3 | StorageBackendType.MINIO:
            # MinIO speaks the S3 API
            from .s3.backend import S3Backend

            return S3Backend(settings)

        case _:
            raise StorageNotConfiguredError(
                f"Unsupported storage backend: {settings.backend}. "
                f"Supported backends: {', '.join(t.value for t in StorageBackendType)}"
            )
