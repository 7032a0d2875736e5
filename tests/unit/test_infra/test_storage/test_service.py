"""Unit tests for StorageService lifecycle and bucket resolution."""

import pytest

from oss_gateway.core.settings.storage import StorageSettings
from oss_gateway.infra.storage.exceptions import StorageNotConfiguredError
from oss_gateway.infra.storage.service import StorageService
from tests.fixtures.storage import InMemoryStorageBackend


class TestBucketResolution:
    """Test default bucket handling."""

    def test_explicit_bucket_takes_priority(self, storage_service):
        """Test an explicit bucket overrides the default."""
        assert storage_service.resolve_bucket("media") == "media"

    def test_falls_back_to_default(self, storage_service):
        """Test None and empty names use the configured bucket."""
        assert storage_service.resolve_bucket(None) == "uploads"
        assert storage_service.resolve_bucket("") == "uploads"


class TestLifecycle:
    """Test startup, readiness and health."""

    @pytest.mark.asyncio
    async def test_not_ready_before_startup(self, storage_settings):
        """Test operations fail until the service is started."""
        service = StorageService(storage_settings, backend=InMemoryStorageBackend())

        assert service.is_ready is False
        with pytest.raises(StorageNotConfiguredError):
            await service.upload_object("k", b"x")

    @pytest.mark.asyncio
    async def test_startup_skipped_when_disabled(self):
        """Test a disabled configuration starts nothing."""
        service = StorageService(StorageSettings(enabled=False))

        await service.startup()

        assert service.is_ready is False
        assert await service.health_check() is False

    @pytest.mark.asyncio
    async def test_shutdown(self, storage_settings):
        """Test shutdown leaves the service not ready."""
        backend = InMemoryStorageBackend()
        service = StorageService(storage_settings, backend=backend)
        await service.startup()

        await service.shutdown()

        assert service.is_ready is False
        assert backend.is_ready is False

    @pytest.mark.asyncio
    async def test_health_check_follows_backend(self, storage_service, memory_backend):
        """Test health mirrors the backend probe."""
        assert await storage_service.health_check() is True

        memory_backend.healthy = False
        assert await storage_service.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check_can_be_disabled(self, memory_backend):
        """Test a disabled probe reports healthy once started."""
        memory_backend.healthy = False
        service = StorageService(
            StorageSettings(enabled=True, health_check_enabled=False), backend=memory_backend
        )
        await service.startup()

        assert await service.health_check() is True


class TestOperations:
    """Test operations pass through with the default bucket."""

    @pytest.mark.asyncio
    async def test_upload_and_download(self, storage_service, memory_backend):
        """Test objects land in the default bucket."""
        await storage_service.upload_object("k.txt", b"hello")

        assert memory_backend.read("k.txt") == b"hello"
        assert await storage_service.download_object("k.txt", offset=1, length=3) == b"ell"

    @pytest.mark.asyncio
    async def test_stream_objects_pages(self, storage_service, memory_backend):
        """Test streaming follows continuation tokens across pages."""
        for index in range(1005):
            await memory_backend.upload_object(f"p/{index:04d}", b"", "uploads")

        keys = [obj.key async for obj in storage_service.stream_objects("p/")]

        assert len(keys) == 1005
        assert keys[0] == "p/0000"
        assert keys[-1] == "p/1004"

    @pytest.mark.asyncio
    async def test_put_if_absent(self, storage_service):
        """Test only the first conditional put wins."""
        assert await storage_service.put_object_if_absent("m", b"") is True
        assert await storage_service.put_object_if_absent("m", b"") is False
