"""High-level storage service with singleton pattern and full observability.

Wraps a ``StorageBackend`` with:
- lifecycle management (startup/shutdown) and health checks
- default bucket resolution from settings
- an OpenTelemetry span and Prometheus metrics around every operation
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from oss_gateway.core.settings import get_storage_settings

from .backends.factory import create_storage_backend
from .exceptions import StorageNotConfiguredError
from .instrumentation import track_storage_operation

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from oss_gateway.core.settings.storage import StorageSettings

    from .backends.protocol import BucketInfo, ObjectMetadata, StorageBackend, UploadResult

logger = logging.getLogger(__name__)


class StorageService:
    """High-level storage service with observability.

    Example:
        service = get_storage_service()

        # In lifespan
        await service.startup()

        # In routes
        result = await service.upload_object("2024/01/01/abc.pdf", data)

        await service.shutdown()
    """

    def __init__(
        self,
        settings: StorageSettings | None = None,
        backend: StorageBackend | None = None,
    ) -> None:
        """Initialize storage service.

        Args:
            settings: Optional settings override. If not provided,
                loads from environment via get_storage_settings()
            backend: Optional pre-built backend (used by tests). When omitted
                the backend is created by the factory during startup()
        """
        self._settings = settings or get_storage_settings()
        self._backend: StorageBackend | None = backend
        self._initialized = False

    @property
    def is_ready(self) -> bool:
        """Check if the service is initialized and ready for operations."""
        return self._initialized and self._backend is not None and self._backend.is_ready

    @property
    def settings(self) -> StorageSettings:
        """Get the storage settings."""
        return self._settings

    async def startup(self) -> None:
        """Initialize the storage backend.

        Raises:
            StorageError: If initialization fails
        """
        if self._initialized:
            return

        if self._backend is None:
            if not self._settings.is_configured:
                logger.info("Storage not configured, skipping initialization")
                return
            self._backend = create_storage_backend(self._settings)

        logger.info(
            "Starting storage service",
            extra={
                "bucket": self._settings.bucket,
                "endpoint": self._settings.endpoint,
                "backend": self._backend.backend_name,
            },
        )
        await self._backend.startup()
        self._initialized = True
        logger.info("Storage service started successfully")

    async def shutdown(self) -> None:
        """Shutdown the storage backend gracefully."""
        if not self._initialized:
            logger.debug("Storage service not initialized, nothing to shutdown")
            return

        logger.info("Shutting down storage service")
        if self._backend is not None:
            await self._backend.shutdown()

        self._initialized = False
        logger.info("Storage service shutdown complete")

    async def health_check(self) -> bool:
        """Check storage service health.

        Returns:
            True if healthy, False otherwise
        """
        if not self.is_ready or self._backend is None:
            return False
        if not self._settings.health_check_enabled:
            return True
        return await self._backend.health_check()

    def _ensure_ready(self) -> StorageBackend:
        """Ensure the service is ready and return the backend.

        Raises:
            StorageNotConfiguredError: If service is not ready
        """
        if not self.is_ready or self._backend is None:
            raise StorageNotConfiguredError(
                message="Storage service is not initialized",
                metadata={"is_configured": self._settings.is_configured},
            )
        return self._backend

    def resolve_bucket(self, bucket: str | None = None) -> str:
        """Return ``bucket`` or the configured default bucket."""
        return bucket or self._settings.bucket

    # ========================================================================
    # Object Operations
    # ========================================================================

    async def upload_object(
        self,
        key: str,
        data: bytes | BinaryIO,
        bucket: str | None = None,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> UploadResult:
        """Upload an object with automatic instrumentation."""
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)

        async with track_storage_operation(
            "upload",
            key=key,
            bucket=resolved_bucket,
            content_type=content_type,
        ) as ctx:
            result = await backend.upload_object(
                key=key,
                data=data,
                bucket=resolved_bucket,
                content_type=content_type,
                metadata=metadata,
            )
            ctx["result_size"] = result.size_bytes
            return result

    async def put_object_if_absent(self, key: str, data: bytes, bucket: str | None = None) -> bool:
        """Create ``key`` only if it does not exist yet.

        Returns:
            True if the object was created, False if it already existed
        """
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)

        async with track_storage_operation(
            "put_if_absent", key=key, bucket=resolved_bucket, size_bytes=len(data)
        ) as ctx:
            created = await backend.put_object_if_absent(key, data, resolved_bucket)
            ctx["created"] = created
            return created

    async def download_object(
        self,
        key: str,
        bucket: str | None = None,
        offset: int | None = None,
        length: int | None = None,
    ) -> bytes:
        """Download an object, or a byte range of it."""
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)
        operation = "download" if offset is None and length is None else "download_range"

        async with track_storage_operation(operation, key=key, bucket=resolved_bucket) as ctx:
            data = await backend.download_object(
                key, resolved_bucket, offset=offset, length=length
            )
            ctx["result_size"] = len(data)
            return data

    async def delete_object(self, key: str, bucket: str | None = None) -> bool:
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)

        async with track_storage_operation("delete", key=key, bucket=resolved_bucket):
            return await backend.delete_object(key, resolved_bucket)

    async def get_object_metadata(
        self, key: str, bucket: str | None = None
    ) -> ObjectMetadata | None:
        """Stat an object; None if it does not exist."""
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)

        async with track_storage_operation("stat", key=key, bucket=resolved_bucket) as ctx:
            info = await backend.get_object_metadata(key, resolved_bucket)
            ctx["exists"] = info is not None
            return info

    async def list_objects(
        self,
        prefix: str = "",
        bucket: str | None = None,
        max_keys: int | None = None,
        continuation_token: str | None = None,
        recursive: bool = True,
    ) -> tuple[list[ObjectMetadata], str | None]:
        """List one page of objects.

        ``max_keys`` defaults to ``STORAGE_LIST_MAX_KEYS``.
        """
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)

        async with track_storage_operation(
            "list", key=prefix, bucket=resolved_bucket, metadata={"recursive": recursive}
        ) as ctx:
            objects, next_token = await backend.list_objects(
                prefix,
                resolved_bucket,
                max_keys=max_keys or self._settings.list_max_keys,
                continuation_token=continuation_token,
                recursive=recursive,
            )
            ctx["count"] = len(objects)
            return objects, next_token

    async def stream_objects(
        self,
        prefix: str,
        bucket: str | None = None,
        recursive: bool = True,
    ) -> AsyncIterator[ObjectMetadata]:
        """Yield every object under ``prefix``, one instrumented page at a time."""
        token: str | None = None
        while True:
            objects, token = await self.list_objects(
                prefix,
                bucket,
                max_keys=1000,
                continuation_token=token,
                recursive=recursive,
            )
            for obj in objects:
                yield obj
            if token is None:
                break

    async def compose_object(
        self,
        dest_key: str,
        source_keys: list[str],
        bucket: str | None = None,
        content_type: str | None = None,
    ) -> int:
        """Server-side concatenate ``source_keys`` into ``dest_key``.

        Returns:
            Size of the composed object in bytes
        """
        backend = self._ensure_ready()
        resolved_bucket = self.resolve_bucket(bucket)

        async with track_storage_operation(
            "compose",
            key=dest_key,
            bucket=resolved_bucket,
            content_type=content_type,
            metadata={"source_count": len(source_keys)},
        ) as ctx:
            size = await backend.compose_object(
                dest_key, source_keys, resolved_bucket, content_type=content_type
            )
            ctx["result_size"] = size
            return size

    # ========================================================================
    # Bucket Operations
    # ========================================================================

    async def bucket_exists(self, bucket: str) -> bool:
        backend = self._ensure_ready()
        async with track_storage_operation("bucket_exists", bucket=bucket):
            return await backend.bucket_exists(bucket)

    async def create_bucket(self, bucket: str, region: str | None = None) -> bool:
        backend = self._ensure_ready()
        async with track_storage_operation("create_bucket", bucket=bucket):
            return await backend.create_bucket(bucket, region=region)

    async def delete_bucket(self, bucket: str, force: bool = False) -> bool:
        backend = self._ensure_ready()
        async with track_storage_operation(
            "delete_bucket", bucket=bucket, metadata={"force": force}
        ):
            return await backend.delete_bucket(bucket, force=force)

    async def list_buckets(self) -> list[BucketInfo]:
        backend = self._ensure_ready()
        async with track_storage_operation("list_buckets") as ctx:
            buckets = await backend.list_buckets()
            ctx["count"] = len(buckets)
            return buckets

    async def set_bucket_policy(self, bucket: str, policy: str) -> None:
        backend = self._ensure_ready()
        async with track_storage_operation("set_bucket_policy", bucket=bucket):
            await backend.set_bucket_policy(bucket, policy)

    async def get_bucket_policy(self, bucket: str) -> str | None:
        backend = self._ensure_ready()
        async with track_storage_operation("get_bucket_policy", bucket=bucket):
            return await backend.get_bucket_policy(bucket)


_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    """Get the singleton storage service instance.

    Creates the instance on first call. The service must be
    initialized via startup() before use.
    """
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service


def set_storage_service(service: StorageService) -> None:
    """Install ``service`` as the singleton (tests and custom wiring)."""
    global _storage_service
    _storage_service = service


def reset_storage_service() -> None:
    """Reset the singleton instance (for testing only)."""
    global _storage_service
    _storage_service = None
