"""Tests for the liveness and readiness probes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from oss_gateway.core.settings.storage import StorageSettings
from oss_gateway.infra.storage.service import StorageService, set_storage_service
from tests.fixtures.storage import InMemoryStorageBackend


@pytest.fixture
async def required_storage(memory_backend: InMemoryStorageBackend):
    """Storage that must be healthy for the service to take traffic."""
    service = StorageService(
        settings=StorageSettings(enabled=True, startup_require_storage=True),
        backend=memory_backend,
    )
    await service.startup()
    yield service
    await service.shutdown()


class TestLiveness:
    """Test /health/live."""

    @pytest.mark.asyncio
    async def test_alive(self, client: AsyncClient):
        """Test liveness reports the service name."""
        response = await client.get("/health/live")

        assert response.status_code == 200
        body = response.json()
        assert body["alive"] is True
        assert body["service"] == "oss-gateway"

    @pytest.mark.asyncio
    async def test_alive_when_storage_down(self, client: AsyncClient, memory_backend):
        """Test liveness ignores dependencies."""
        memory_backend.healthy = False

        response = await client.get("/health/live")

        assert response.status_code == 200


class TestReadiness:
    """Test /health/ready."""

    @pytest.mark.asyncio
    async def test_ready(self, client: AsyncClient):
        """Test readiness includes the storage check."""
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"storage": True}

    @pytest.mark.asyncio
    async def test_degraded_storage_stays_ready(self, client: AsyncClient, memory_backend):
        """Test optional storage failing only shows up in the checks."""
        memory_backend.healthy = False

        response = await client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["ready"] is True
        assert body["checks"]["storage"] is False

    @pytest.mark.asyncio
    async def test_required_storage_down(
        self, client: AsyncClient, memory_backend, required_storage: StorageService
    ):
        """Test required storage failing takes the service out of rotation."""
        set_storage_service(required_storage)
        memory_backend.healthy = False

        response = await client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["ready"] is False
