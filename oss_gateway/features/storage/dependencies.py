"""Dependencies for storage management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from oss_gateway.infra.storage.dependencies import Storage

from .service import StorageGatewayService


def get_storage_gateway(storage: Storage) -> StorageGatewayService:
    return StorageGatewayService(storage)


StorageGateway = Annotated[StorageGatewayService, Depends(get_storage_gateway)]

__all__ = ["Storage", "StorageGateway", "get_storage_gateway"]
