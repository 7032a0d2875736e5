"""FastAPI dependency injection for the storage service.

``Storage`` is the alias routes use when they cannot work without object
storage; it answers 503 when the service is not ready.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from oss_gateway.core.exceptions import ServiceUnavailableException

from .service import StorageService


def get_storage_service() -> StorageService:
    """Return the singleton storage service (may not be ready)."""
    from .service import get_storage_service as _get_storage_service

    return _get_storage_service()


async def require_storage(
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> StorageService:
    """Dependency that requires storage to be available.

    Raises:
        ServiceUnavailableException: 503 if storage is not ready
    """
    if not storage.is_ready:
        raise ServiceUnavailableException(
            "Storage service is not available",
            type="storage-unavailable",
        )
    return storage


Storage = Annotated[StorageService, Depends(require_storage)]
