"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolated, cache-free settings objects
    - Storage Fixtures: in-memory backend and a started StorageService
    - Application Fixtures: FastAPI app and HTTP client wired to the fakes
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Tests never reach real infrastructure
os.environ.setdefault("APP_ROOT_PATH", "")
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_ENABLED", "false")
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("LOG_JSON_LOGS", "false")

from oss_gateway.core.settings import clear_all_caches  # noqa: E402
from oss_gateway.core.settings.storage import StorageSettings  # noqa: E402
from oss_gateway.core.settings.uploads import UploadSettings  # noqa: E402
from oss_gateway.features.policies.registry import PolicyTemplateRegistry  # noqa: E402
from oss_gateway.infra.storage.service import (  # noqa: E402
    StorageService,
    reset_storage_service,
    set_storage_service,
)
from tests.fixtures.storage import InMemoryStorageBackend  # noqa: E402

MIB = 1024 * 1024


@pytest.fixture(autouse=True)
def _clear_settings_caches():
    """Drop cached settings so environment patches in one test never leak."""
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def storage_settings() -> StorageSettings:
    """Storage settings pointing at the in-memory default bucket."""
    return StorageSettings(enabled=True, bucket="uploads", list_max_keys=100)


@pytest.fixture
def upload_settings() -> UploadSettings:
    """Upload settings with the completion claim enabled and no public URL."""
    return UploadSettings(completion_claim_enabled=True, public_base_url=None)


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def memory_backend() -> InMemoryStorageBackend:
    """An empty object store holding the default ``uploads`` bucket."""
    return InMemoryStorageBackend(buckets=["uploads"])


@pytest.fixture
async def storage_service(
    storage_settings: StorageSettings,
    memory_backend: InMemoryStorageBackend,
) -> AsyncGenerator[StorageService]:
    """A started StorageService over the in-memory backend."""
    service = StorageService(settings=storage_settings, backend=memory_backend)
    await service.startup()
    yield service
    await service.shutdown()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(storage_service: StorageService):
    """FastAPI application whose storage singleton is the in-memory service.

    ASGITransport does not run the lifespan, so the state it would set up
    is installed here.
    """
    from oss_gateway.app.main import create_app

    set_storage_service(storage_service)
    application = create_app()
    application.state.policy_registry = PolicyTemplateRegistry()
    yield application
    reset_storage_service()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """HTTPX client bound to the application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
