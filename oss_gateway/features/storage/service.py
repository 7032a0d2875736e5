"""Bucket and object management on top of the storage service."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from oss_gateway.core.exceptions import (
    ConflictException,
    InvalidArgumentException,
    NotFoundException,
)
from oss_gateway.core.services.base import BaseService
from oss_gateway.core.settings import get_upload_settings
from oss_gateway.features.policies.templates import custom_bucket_policy, readonly_bucket_policy
from oss_gateway.infra.storage.path import build_object_url, generate_date_key, get_file_extension

if TYPE_CHECKING:
    from oss_gateway.core.settings.uploads import UploadSettings
    from oss_gateway.infra.storage.backends.protocol import BucketInfo, UploadResult
    from oss_gateway.infra.storage.service import StorageService

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageGatewayService(BaseService):
    """Validation and bookkeeping around single-shot storage operations."""

    def __init__(self, storage: StorageService, settings: UploadSettings | None = None) -> None:
        super().__init__()
        self._storage = storage
        self._upload_settings = settings or get_upload_settings()

    # ------------------------------------------------------------------
    # Buckets
    # ------------------------------------------------------------------

    async def create_bucket(self, bucket: str) -> None:
        """Create ``bucket`` and make its objects anonymously readable."""
        await self._create_with_policy(bucket, readonly_bucket_policy(bucket))

    async def create_custom_bucket(self, bucket: str, actions: list[str]) -> None:
        """Create ``bucket`` with an Allow policy for ``actions`` on its objects."""
        actions = [action.strip() for action in actions if action and action.strip()]
        if not actions:
            raise InvalidArgumentException(
                "At least one policy action is required", extra={"bucket": bucket}
            )
        await self._create_with_policy(bucket, custom_bucket_policy(bucket, actions))

    async def _create_with_policy(self, bucket: str, policy: str) -> None:
        if await self._storage.bucket_exists(bucket):
            raise ConflictException(
                f"Bucket '{bucket}' already exists",
                type="bucket-exists",
                extra={"bucket": bucket},
            )
        await self._storage.create_bucket(bucket)
        await self._storage.set_bucket_policy(bucket, policy)
        self.logger.info("Bucket created", extra={"bucket": bucket})

    async def delete_bucket(self, bucket: str) -> None:
        await self._require_bucket(bucket)
        await self._storage.delete_bucket(bucket)
        self.logger.info("Bucket deleted", extra={"bucket": bucket})

    async def list_buckets(self) -> list[BucketInfo]:
        return await self._storage.list_buckets()

    async def set_bucket_policy(self, bucket: str, policy: str) -> None:
        try:
            document = json.loads(policy)
        except json.JSONDecodeError as e:
            raise InvalidArgumentException(
                f"Policy is not valid JSON: {e.msg}", type="invalid-policy"
            ) from e
        if not isinstance(document, dict):
            raise InvalidArgumentException("Policy must be a JSON object", type="invalid-policy")
        await self._require_bucket(bucket)
        await self._storage.set_bucket_policy(bucket, policy)

    async def get_bucket_policy(self, bucket: str) -> str | None:
        await self._require_bucket(bucket)
        return await self._storage.get_bucket_policy(bucket)

    async def _require_bucket(self, bucket: str) -> None:
        if not await self._storage.bucket_exists(bucket):
            raise NotFoundException(
                f"Bucket '{bucket}' not found",
                type="bucket-not-found",
                extra={"bucket": bucket},
            )

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    async def upload_file(
        self,
        file_name: str | None,
        data: bytes,
        content_type: str | None = None,
        bucket: str | None = None,
    ) -> tuple[UploadResult, str]:
        """Store ``data`` under a fresh date-keyed name.

        Returns:
            The upload result and the object's URL
        """
        if not data:
            raise InvalidArgumentException("Cannot upload an empty file", type="empty-file")
        if not file_name or not file_name.strip():
            raise InvalidArgumentException("File name must not be blank", type="missing-filename")
        extension = get_file_extension(file_name)
        if extension is None:
            raise InvalidArgumentException(
                f"File name '{file_name}' has no extension", type="missing-extension"
            )
        max_size = self._storage.settings.max_file_size_bytes
        if len(data) > max_size:
            raise InvalidArgumentException(
                f"File exceeds the {max_size} byte upload limit",
                type="file-too-large",
                extra={"size_bytes": len(data), "max_size_bytes": max_size},
            )

        key = generate_date_key(extension)
        result = await self._storage.upload_object(
            key, data, bucket, content_type=content_type or DEFAULT_CONTENT_TYPE
        )
        self.logger.info(
            "File uploaded",
            extra={"file_name": file_name, "key": key, "size_bytes": result.size_bytes},
        )
        return result, build_object_url(self._upload_settings.public_base_url, result.bucket, key)

    async def download_file(self, key: str, bucket: str | None = None) -> bytes:
        await self.object_size(key, bucket)
        return await self._storage.download_object(key, bucket)

    async def remove_file(self, key: str, bucket: str | None = None) -> None:
        await self._storage.delete_object(key, bucket)

    async def list_files(
        self,
        bucket: str | None = None,
        prefix: str | None = None,
        recursive: bool = False,
        limit: int | None = None,
    ) -> list[str]:
        """List keys under ``prefix``, at most ``STORAGE_LIST_MAX_KEYS`` of them.

        Without ``recursive`` only the direct children of the prefix are
        returned; the prefix object itself is never listed.
        """
        effective_prefix = (prefix or "").strip()
        if effective_prefix and not effective_prefix.endswith("/"):
            effective_prefix += "/"
        max_keys = self._storage.settings.list_max_keys
        max_keys = min(limit, max_keys) if limit else max_keys

        objects, _ = await self._storage.list_objects(
            effective_prefix, bucket, max_keys=max_keys, recursive=recursive
        )

        keys: list[str] = []
        for obj in objects:
            if obj.key == effective_prefix:
                continue
            relative = obj.key[len(effective_prefix) :]
            if not recursive and "/" in relative.rstrip("/"):
                continue
            keys.append(obj.key)
        return keys[:max_keys]

    async def object_size(self, key: str, bucket: str | None = None) -> int:
        info = await self._storage.get_object_metadata(key, bucket)
        if info is None:
            raise NotFoundException(
                f"Object '{key}' not found",
                type="object-not-found",
                extra={"key": key},
            )
        return info.size_bytes

    async def chunk_count(self, key: str, length: int, bucket: str | None = None) -> int:
        """Number of ``length``-byte pieces needed to cover the object."""
        if length < 1:
            raise InvalidArgumentException("length must be at least 1", extra={"length": length})
        size = await self.object_size(key, bucket)
        return -(-size // length)

    async def download_range(
        self,
        key: str,
        offset: int,
        length: int | None = None,
        bucket: str | None = None,
    ) -> tuple[bytes, str]:
        """Read a byte range and name it after its piece number.

        Returns:
            The bytes and the attachment name ``<name>_<offset // length>``
            (``<name>_1`` for an open-ended range)
        """
        if offset < 0:
            raise InvalidArgumentException("offset must not be negative", extra={"offset": offset})
        if length is not None and length < 1:
            raise InvalidArgumentException("length must be at least 1", extra={"length": length})

        size = await self.object_size(key, bucket)
        if offset > size:
            raise InvalidArgumentException(
                "offset is beyond the end of the object",
                extra={"offset": offset, "size_bytes": size},
            )
        if length is not None and offset + length > size:
            raise InvalidArgumentException(
                "range is beyond the end of the object",
                extra={"offset": offset, "length": length, "size_bytes": size},
            )

        if offset == size:
            data = b""
        else:
            data = await self._storage.download_object(key, bucket, offset=offset, length=length)
        name = key.rsplit("/", 1)[-1]
        suffix = 1 if length is None else offset // length
        return data, f"{name}_{suffix}"
