"""Storage backend protocol and normalized data structures.

Defines the interface every object-store backend implements and the
backend-neutral records it returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from datetime import datetime

# S3 caps a multipart upload at 10 000 parts
MAX_COMPOSE_SOURCES = 10_000


# ============================================================================
# Normalized Data Structures
# ============================================================================


@dataclass(frozen=True)
class ObjectMetadata:
    """Normalized object metadata across storage backends.

    Attributes:
        key: Object key/path
        size_bytes: Object size in bytes
        content_type: MIME type (not returned by listings)
        last_modified: Last modification timestamp
        etag: Entity tag for version identification
        custom_metadata: User metadata stored with the object
    """

    key: str
    size_bytes: int
    content_type: str | None = None
    last_modified: datetime | None = None
    etag: str | None = None
    custom_metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadResult:
    """Result of an upload operation."""

    key: str
    bucket: str
    etag: str | None
    size_bytes: int
    checksum_sha256: str | None = None
    version_id: str | None = None


@dataclass(frozen=True)
class BucketInfo:
    """Information about a storage bucket."""

    name: str
    creation_date: datetime | None = None


# ============================================================================
# Storage Backend Protocol
# ============================================================================


class StorageBackend(Protocol):
    """Protocol interface for object-store backends.

    Uses structural typing (Protocol) rather than inheritance, so the test
    suite's in-memory store satisfies it without importing aioboto3.

    Every method takes an explicit bucket; defaulting happens in
    ``StorageService``.
    """

    @property
    def backend_name(self) -> str:
        """Name of the backend (e.g., 's3')."""
        ...

    @property
    def is_ready(self) -> bool:
        """Check if backend is initialized and ready for operations."""
        ...

    # ========================================================================
    # Lifecycle Management
    # ========================================================================

    async def startup(self) -> None:
        """Initialize backend (create clients, connection pools, etc.)."""
        ...

    async def shutdown(self) -> None:
        """Gracefully shutdown backend (close connections, cleanup resources)."""
        ...

    async def health_check(self) -> bool:
        """Check backend health and connectivity."""
        ...

    # ========================================================================
    # Object Operations
    # ========================================================================

    async def upload_object(
        self,
        key: str,
        data: bytes | BinaryIO,
        bucket: str,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> UploadResult:
        """Write an object, replacing any existing object at ``key``.

        Raises:
            StorageError: If upload fails
        """
        ...

    async def put_object_if_absent(
        self,
        key: str,
        data: bytes,
        bucket: str,
    ) -> bool:
        """Create an object only if no object exists at ``key``.

        Returns:
            True if this call created the object, False if it already existed
        """
        ...

    async def download_object(
        self,
        key: str,
        bucket: str,
        offset: int | None = None,
        length: int | None = None,
    ) -> bytes:
        """Read an object, optionally only ``length`` bytes starting at ``offset``.

        Raises:
            StorageFileNotFoundError: If object doesn't exist
        """
        ...

    async def delete_object(self, key: str, bucket: str) -> bool:
        """Delete an object. Deleting a missing key succeeds."""
        ...

    async def get_object_metadata(self, key: str, bucket: str) -> ObjectMetadata | None:
        """Stat an object without downloading it; None if it does not exist."""
        ...

    async def list_objects(
        self,
        prefix: str,
        bucket: str,
        max_keys: int = 1000,
        continuation_token: str | None = None,
        recursive: bool = True,
    ) -> tuple[list[ObjectMetadata], str | None]:
        """List one page of objects under ``prefix``.

        Non-recursive listings treat ``/`` as a delimiter and return only the
        objects directly under ``prefix``.

        Returns:
            Tuple of (object list, next continuation token or None)
        """
        ...

    def stream_objects(
        self,
        prefix: str,
        bucket: str,
        recursive: bool = True,
    ) -> AsyncIterator[ObjectMetadata]:
        """Stream all objects under ``prefix`` across pages."""
        ...

    async def compose_object(
        self,
        dest_key: str,
        source_keys: list[str],
        bucket: str,
        content_type: str | None = None,
    ) -> int:
        """Concatenate ``source_keys`` in order into ``dest_key`` server-side.

        Every source except the last must be at least 5 MiB.

        Returns:
            Size of the composed object in bytes
        """
        ...

    # ========================================================================
    # Bucket Management
    # ========================================================================

    async def bucket_exists(self, bucket: str) -> bool:
        """Check if a bucket exists and is accessible."""
        ...

    async def create_bucket(self, bucket: str, region: str | None = None) -> bool:
        """Create a new bucket."""
        ...

    async def delete_bucket(self, bucket: str, force: bool = False) -> bool:
        """Delete a bucket; with ``force`` its objects are removed first."""
        ...

    async def list_buckets(self) -> list[BucketInfo]:
        """List all accessible buckets."""
        ...

    async def set_bucket_policy(self, bucket: str, policy: str) -> None:
        """Replace the bucket's access policy with the given JSON document."""
        ...

    async def get_bucket_policy(self, bucket: str) -> str | None:
        """Return the bucket's policy JSON, or None when none is set."""
        ...
