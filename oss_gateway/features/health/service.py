"""Liveness and readiness checks."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends

from oss_gateway.core.settings import get_app_settings
from oss_gateway.infra.storage.dependencies import get_storage_service
from oss_gateway.infra.storage.service import StorageService


class HealthService:
    """Aggregates dependency checks for the probe endpoints."""

    def __init__(self, storage: StorageService) -> None:
        self._storage = storage

    async def liveness(self) -> dict[str, Any]:
        return {
            "alive": True,
            "timestamp": datetime.now(UTC),
            "service": get_app_settings().service_name,
        }

    async def readiness(self) -> dict[str, Any]:
        """Ready unless storage is required and failing its health check."""
        checks: dict[str, bool] = {}
        settings = self._storage.settings
        ready = True

        if settings.is_configured:
            checks["storage"] = await self._storage.health_check()
            if settings.startup_require_storage and not checks["storage"]:
                ready = False

        return {"ready": ready, "checks": checks, "timestamp": datetime.now(UTC)}


def get_health_service(
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> HealthService:
    return HealthService(storage)


HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]
