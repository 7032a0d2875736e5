"""In-memory object store implementing the StorageBackend protocol.

Buckets are dicts of key -> bytes. Composition concatenates sources and
enforces the 5 MiB minimum on every source but the last, like S3
upload-part-copy does.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, BinaryIO

from oss_gateway.infra.storage.backends.protocol import (
    BucketInfo,
    ObjectMetadata,
    UploadResult,
)
from oss_gateway.infra.storage.exceptions import (
    StorageConflictError,
    StorageError,
    StorageFileNotFoundError,
    StorageValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

MIN_PART_SIZE = 5 * 1024 * 1024


@dataclass
class _StoredObject:
    data: bytes
    content_type: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    last_modified: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def etag(self) -> str:
        return hashlib.md5(self.data).hexdigest()  # noqa: S324


class InMemoryStorageBackend:
    """Dict-backed StorageBackend for unit tests.

    ``fail_deletes`` and ``fail_compose`` inject failures; ``calls`` records
    the name of every operation in order.
    """

    def __init__(self, buckets: list[str] | None = None) -> None:
        self.buckets: dict[str, dict[str, _StoredObject]] = {
            name: {} for name in (buckets or ["uploads"])
        }
        self.policies: dict[str, str] = {}
        self.calls: list[str] = []
        self.fail_deletes: set[str] = set()
        self.fail_compose = False
        self.healthy = True
        self._ready = False

    @property
    def backend_name(self) -> str:
        return "memory"

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def startup(self) -> None:
        self._ready = True

    async def shutdown(self) -> None:
        self._ready = False

    async def health_check(self) -> bool:
        return self.healthy

    def _bucket(self, bucket: str) -> dict[str, _StoredObject]:
        try:
            return self.buckets[bucket]
        except KeyError:
            raise StorageFileNotFoundError(
                f"Bucket not found: {bucket}", metadata={"bucket": bucket}
            ) from None

    # -- objects ---------------------------------------------------------

    async def upload_object(
        self,
        key: str,
        data: bytes | BinaryIO,
        bucket: str,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> UploadResult:
        self.calls.append("upload_object")
        payload = data if isinstance(data, bytes) else data.read()
        stored = _StoredObject(payload, content_type, dict(metadata or {}))
        self._bucket(bucket)[key] = stored
        return UploadResult(
            key=key,
            bucket=bucket,
            etag=stored.etag,
            size_bytes=len(payload),
            checksum_sha256=hashlib.sha256(payload).hexdigest(),
        )

    async def put_object_if_absent(self, key: str, data: bytes, bucket: str) -> bool:
        self.calls.append("put_object_if_absent")
        objects = self._bucket(bucket)
        if key in objects:
            return False
        objects[key] = _StoredObject(data)
        return True

    async def download_object(
        self,
        key: str,
        bucket: str,
        offset: int | None = None,
        length: int | None = None,
    ) -> bytes:
        self.calls.append("download_object")
        stored = self._bucket(bucket).get(key)
        if stored is None:
            raise StorageFileNotFoundError(f"File not found: {key}", metadata={"key": key})
        start = offset or 0
        end = None if length is None else start + length
        return stored.data[start:end]

    async def delete_object(self, key: str, bucket: str) -> bool:
        self.calls.append("delete_object")
        if key in self.fail_deletes:
            raise StorageError(message=f"Delete failed: {key}", code="STORAGE_ERROR")
        self._bucket(bucket).pop(key, None)
        return True

    async def get_object_metadata(self, key: str, bucket: str) -> ObjectMetadata | None:
        self.calls.append("get_object_metadata")
        stored = self._bucket(bucket).get(key)
        if stored is None:
            return None
        return ObjectMetadata(
            key=key,
            size_bytes=len(stored.data),
            content_type=stored.content_type,
            last_modified=stored.last_modified,
            etag=stored.etag,
            custom_metadata=stored.metadata,
        )

    async def list_objects(
        self,
        prefix: str,
        bucket: str,
        max_keys: int = 1000,
        continuation_token: str | None = None,
        recursive: bool = True,
    ) -> tuple[list[ObjectMetadata], str | None]:
        self.calls.append("list_objects")
        objects = self._bucket(bucket)
        entries: dict[str, int] = {}
        for key in sorted(objects):
            if not key.startswith(prefix):
                continue
            relative = key[len(prefix) :]
            if not recursive and "/" in relative:
                folder = prefix + relative.split("/", 1)[0] + "/"
                entries.setdefault(folder, 0)
                continue
            entries[key] = len(objects[key].data)

        keys = sorted(entries)
        start = int(continuation_token) if continuation_token else 0
        page = keys[start : start + max_keys]
        next_token = str(start + max_keys) if start + max_keys < len(keys) else None
        return [ObjectMetadata(key=k, size_bytes=entries[k]) for k in page], next_token

    async def stream_objects(
        self,
        prefix: str,
        bucket: str,
        recursive: bool = True,
    ) -> AsyncIterator[ObjectMetadata]:
        token: str | None = None
        while True:
            page, token = await self.list_objects(
                prefix, bucket, continuation_token=token, recursive=recursive
            )
            for obj in page:
                yield obj
            if token is None:
                break

    async def compose_object(
        self,
        dest_key: str,
        source_keys: list[str],
        bucket: str,
        content_type: str | None = None,
    ) -> int:
        self.calls.append("compose_object")
        if self.fail_compose:
            raise StorageError(message="Compose failed", code="STORAGE_COMPOSE_ERROR")
        objects = self._bucket(bucket)
        parts: list[bytes] = []
        for position, key in enumerate(source_keys):
            stored = objects.get(key)
            if stored is None:
                raise StorageFileNotFoundError(f"Source not found: {key}")
            if position < len(source_keys) - 1 and len(stored.data) < MIN_PART_SIZE:
                raise StorageValidationError(f"Source too small: {key}")
            parts.append(stored.data)
        objects[dest_key] = _StoredObject(b"".join(parts), content_type)
        return len(objects[dest_key].data)

    # -- buckets ---------------------------------------------------------

    async def bucket_exists(self, bucket: str) -> bool:
        return bucket in self.buckets

    async def create_bucket(self, bucket: str, region: str | None = None) -> bool:
        if bucket in self.buckets:
            raise StorageConflictError(f"Bucket already exists: {bucket}")
        self.buckets[bucket] = {}
        return True

    async def delete_bucket(self, bucket: str, force: bool = False) -> bool:
        objects = self._bucket(bucket)
        if objects and not force:
            raise StorageConflictError(f"Bucket not empty: {bucket}")
        del self.buckets[bucket]
        self.policies.pop(bucket, None)
        return True

    async def list_buckets(self) -> list[BucketInfo]:
        return [BucketInfo(name=name) for name in sorted(self.buckets)]

    async def set_bucket_policy(self, bucket: str, policy: str) -> None:
        self._bucket(bucket)
        self.policies[bucket] = policy

    async def get_bucket_policy(self, bucket: str) -> str | None:
        self._bucket(bucket)
        return self.policies.get(bucket)

    # -- helpers for assertions -------------------------------------------

    def keys(self, bucket: str = "uploads", prefix: str = "") -> list[str]:
        return sorted(k for k in self.buckets[bucket] if k.startswith(prefix))

    def read(self, key: str, bucket: str = "uploads") -> bytes:
        return self.buckets[bucket][key].data

    def content_type(self, key: str, bucket: str = "uploads") -> str | None:
        return self.buckets[bucket][key].content_type
