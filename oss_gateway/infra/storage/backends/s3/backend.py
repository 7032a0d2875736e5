"""S3-compatible storage backend implementation.

Implements the StorageBackend protocol for AWS S3, MinIO, and other
S3-compatible services using aioboto3.
"""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING, Any, BinaryIO

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from oss_gateway.infra.storage.exceptions import (
    NOT_FOUND_CODES,
    PRECONDITION_CODES,
    StorageComposeError,
    StorageDownloadError,
    StorageError,
    StorageNotConfiguredError,
    StorageUploadError,
    StorageValidationError,
    client_error_code,
    map_boto_error,
)

from ..protocol import MAX_COMPOSE_SOURCES, BucketInfo, ObjectMetadata, UploadResult

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from oss_gateway.core.settings.storage import StorageSettings

logger = logging.getLogger(__name__)


class S3Backend:
    """S3-compatible storage backend.

    Example:
        backend = S3Backend(settings)
        await backend.startup()
        result = await backend.upload_object("file.txt", b"data", bucket="uploads")
        await backend.shutdown()
    """

    def __init__(self, settings: StorageSettings) -> None:
        """Initialize S3 backend.

        Raises:
            StorageNotConfiguredError: If storage is not enabled
        """
        if not settings.is_configured:
            raise StorageNotConfiguredError(
                "S3 backend not configured. Set STORAGE_ENABLED=true and provide credentials."
            )

        self.settings = settings
        self._session = aioboto3.Session()
        self._client: Any = None
        self._client_context: Any = None

    @property
    def backend_name(self) -> str:
        """Backend name identifier."""
        return "s3"

    @property
    def is_ready(self) -> bool:
        """Check if backend is initialized and ready."""
        return self._client is not None

    # ========================================================================
    # Lifecycle Management
    # ========================================================================

    async def startup(self) -> None:
        """Initialize S3 client and connection pool."""
        if self._client is not None:
            logger.debug("S3 backend already initialized")
            return

        logger.info(
            "Initializing S3 backend",
            extra={
                "bucket": self.settings.bucket,
                "endpoint": self.settings.endpoint,
                "region": self.settings.region,
            },
        )

        boto_config = Config(
            retries={
                "max_attempts": self.settings.max_retries,
                "mode": self.settings.retry_mode,
            },
            connect_timeout=self.settings.timeout,
            read_timeout=self.settings.timeout,
            max_pool_connections=self.settings.max_pool_connections,
        )

        try:
            self._client_context = self._session.client(
                "s3",
                **self.settings.get_boto3_config(),
                config=boto_config,
            )
            self._client = await self._client_context.__aenter__()
        except Exception as e:
            self._client_context = None
            logger.exception("Failed to initialize S3 backend", extra={"error": str(e)})
            raise StorageError(
                f"Failed to initialize S3 backend: {e}",
                code="STORAGE_INITIALIZATION_ERROR",
            ) from e

        logger.info("S3 backend initialized successfully")

    async def shutdown(self) -> None:
        """Shutdown S3 client gracefully."""
        if self._client_context is None:
            logger.debug("S3 backend not initialized, nothing to shutdown")
            return

        logger.info("Shutting down S3 backend")
        try:
            await self._client_context.__aexit__(None, None, None)
        except Exception as e:
            logger.warning("Error closing S3 client", extra={"error": str(e)})
        finally:
            self._client = None
            self._client_context = None

    async def health_check(self) -> bool:
        """HEAD the default bucket to verify connectivity and credentials."""
        if self._client is None:
            return False

        try:
            await self._client.head_bucket(Bucket=self.settings.bucket)
            return True
        except Exception as e:
            logger.warning(
                "S3 health check failed",
                extra={"error": str(e), "bucket": self.settings.bucket},
            )
            return False

    def _ensure_client(self) -> Any:
        """Return the initialized client.

        Raises:
            StorageNotConfiguredError: If client not initialized
        """
        if self._client is None:
            raise StorageNotConfiguredError("S3 backend not initialized. Call startup() first.")
        return self._client

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
        """Upload an object to S3.

        Raises:
            StorageUploadError: If upload fails
        """
        client = self._ensure_client()

        if isinstance(data, bytes):
            body = data
        else:
            data.seek(0)
            body = data.read()

        extra_args: dict[str, Any] = {}
        if content_type:
            extra_args["ContentType"] = content_type
        if metadata:
            extra_args["Metadata"] = metadata

        try:
            response = await client.put_object(Bucket=bucket, Key=key, Body=body, **extra_args)
        except ClientError as e:
            logger.exception("Failed to upload object to S3", extra={"key": key, "bucket": bucket})
            raise map_boto_error(e, operation="upload", key=key) from e
        except Exception as e:
            logger.exception("Unexpected error during S3 upload", extra={"error": str(e)})
            raise StorageUploadError(
                f"Failed to upload {key}: {e}",
                metadata={"key": key, "bucket": bucket, "error": str(e)},
            ) from e

        logger.debug(
            "Object uploaded to S3",
            extra={"key": key, "bucket": bucket, "size_bytes": len(body)},
        )
        return UploadResult(
            key=key,
            bucket=bucket,
            etag=response.get("ETag", "").strip('"') or None,
            size_bytes=len(body),
            checksum_sha256=hashlib.sha256(body).hexdigest(),
            version_id=response.get("VersionId"),
        )

    async def put_object_if_absent(self, key: str, data: bytes, bucket: str) -> bool:
        """Create ``key`` with ``If-None-Match: *``.

        S3 answers 412 PreconditionFailed when the key exists and 409
        ConditionalRequestConflict when a concurrent conditional write wins.
        """
        client = self._ensure_client()

        try:
            await client.put_object(Bucket=bucket, Key=key, Body=data, IfNoneMatch="*")
        except ClientError as e:
            if client_error_code(e) in PRECONDITION_CODES:
                logger.info(
                    "Conditional put lost: object already exists",
                    extra={"key": key, "bucket": bucket},
                )
                return False
            logger.exception("Conditional put failed", extra={"key": key, "bucket": bucket})
            raise map_boto_error(e, operation="put_if_absent", key=key) from e
        return True

    async def download_object(
        self,
        key: str,
        bucket: str,
        offset: int | None = None,
        length: int | None = None,
    ) -> bytes:
        """Download an object (or a byte range of it) from S3.

        Raises:
            StorageFileNotFoundError: If object doesn't exist
            StorageDownloadError: If download fails
        """
        client = self._ensure_client()

        kwargs: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if offset is not None or length is not None:
            start = offset or 0
            end = "" if length is None else str(start + length - 1)
            kwargs["Range"] = f"bytes={start}-{end}"

        try:
            response = await client.get_object(**kwargs)
            async with response["Body"] as stream:
                payload = await stream.read()
        except ClientError as e:
            if client_error_code(e) not in NOT_FOUND_CODES:
                logger.exception("Failed to download object from S3", extra={"key": key})
            raise map_boto_error(e, operation="download", key=key) from e
        except Exception as e:
            logger.exception("Unexpected error during S3 download", extra={"error": str(e)})
            raise StorageDownloadError(
                f"Failed to download {key}: {e}",
                metadata={"key": key, "bucket": bucket, "error": str(e)},
            ) from e

        return bytes(payload)

    async def delete_object(self, key: str, bucket: str) -> bool:
        """Delete an object from S3 (missing keys succeed)."""
        client = self._ensure_client()

        try:
            await client.delete_object(Bucket=bucket, Key=key)
        except ClientError as e:
            logger.exception("Failed to delete object from S3", extra={"key": key})
            raise map_boto_error(e, operation="delete", key=key) from e

        logger.debug("Object deleted from S3", extra={"key": key, "bucket": bucket})
        return True

    async def get_object_metadata(self, key: str, bucket: str) -> ObjectMetadata | None:
        """HEAD an object; None if it does not exist."""
        client = self._ensure_client()

        try:
            response = await client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if client_error_code(e) in NOT_FOUND_CODES:
                return None
            logger.exception("Failed to get object metadata from S3", extra={"key": key})
            raise map_boto_error(e, operation="stat", key=key) from e

        return ObjectMetadata(
            key=key,
            size_bytes=response.get("ContentLength", 0),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            etag=response.get("ETag", "").strip('"') or None,
            custom_metadata=response.get("Metadata", {}),
        )

    async def list_objects(
        self,
        prefix: str,
        bucket: str,
        max_keys: int = 1000,
        continuation_token: str | None = None,
        recursive: bool = True,
    ) -> tuple[list[ObjectMetadata], str | None]:
        """List one page of objects under ``prefix``."""
        client = self._ensure_client()

        kwargs: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix, "MaxKeys": max_keys}
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token
        if not recursive:
            kwargs["Delimiter"] = "/"

        try:
            response = await client.list_objects_v2(**kwargs)
        except ClientError as e:
            logger.exception(
                "Failed to list objects in S3", extra={"bucket": bucket, "prefix": prefix}
            )
            raise map_boto_error(e, operation="list", key=prefix) from e

        objects = [
            ObjectMetadata(
                key=item["Key"],
                size_bytes=item["Size"],
                last_modified=item.get("LastModified"),
                etag=item.get("ETag", "").strip('"') or None,
            )
            for item in response.get("Contents", [])
            if item["Key"] != prefix or recursive
        ]
        # Delimited listings report sub-"folders" separately
        objects.extend(
            ObjectMetadata(key=common["Prefix"], size_bytes=0)
            for common in response.get("CommonPrefixes", [])
        )
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None

        logger.debug(
            "Listed objects from S3",
            extra={
                "bucket": bucket,
                "prefix": prefix,
                "count": len(objects),
                "has_more": next_token is not None,
            },
        )
        return objects, next_token

    async def stream_objects(
        self,
        prefix: str,
        bucket: str,
        recursive: bool = True,
    ) -> AsyncIterator[ObjectMetadata]:
        """Stream all objects matching prefix (automatic pagination)."""
        continuation_token: str | None = None

        while True:
            objects, continuation_token = await self.list_objects(
                prefix=prefix,
                bucket=bucket,
                max_keys=1000,
                continuation_token=continuation_token,
                recursive=recursive,
            )
            for obj in objects:
                yield obj
            if continuation_token is None:
                break

    async def compose_object(
        self,
        dest_key: str,
        source_keys: list[str],
        bucket: str,
        content_type: str | None = None,
    ) -> int:
        """Compose ``source_keys`` into ``dest_key`` with a multipart upload.

        Each source becomes one part via UploadPartCopy, numbered in list
        order. The multipart upload is aborted if any step fails.

        Raises:
            StorageValidationError: If there are no sources or too many
            StorageComposeError: If the copy or completion fails
        """
        client = self._ensure_client()

        if not source_keys:
            raise StorageValidationError(
                "Compose needs at least one source object",
                metadata={"dest_key": dest_key},
            )
        if len(source_keys) > MAX_COMPOSE_SOURCES:
            raise StorageValidationError(
                f"Compose accepts at most {MAX_COMPOSE_SOURCES} sources",
                metadata={"dest_key": dest_key, "source_count": len(source_keys)},
            )

        create_kwargs: dict[str, Any] = {"Bucket": bucket, "Key": dest_key}
        if content_type:
            create_kwargs["ContentType"] = content_type

        try:
            created = await client.create_multipart_upload(**create_kwargs)
        except ClientError as e:
            logger.exception("Failed to start multipart upload", extra={"key": dest_key})
            raise map_boto_error(e, operation="compose", key=dest_key) from e

        upload_id = created["UploadId"]
        try:
            parts: list[dict[str, Any]] = []
            for part_number, source_key in enumerate(source_keys, start=1):
                copied = await client.upload_part_copy(
                    Bucket=bucket,
                    Key=dest_key,
                    UploadId=upload_id,
                    PartNumber=part_number,
                    CopySource={"Bucket": bucket, "Key": source_key},
                )
                parts.append(
                    {"ETag": copied["CopyPartResult"]["ETag"], "PartNumber": part_number}
                )

            await client.complete_multipart_upload(
                Bucket=bucket,
                Key=dest_key,
                UploadId=upload_id,
                MultipartUpload={"Parts": parts},
            )
        except Exception as e:
            await self._abort_multipart_upload(bucket, dest_key, upload_id)
            logger.exception(
                "Failed to compose object",
                extra={"key": dest_key, "bucket": bucket, "source_count": len(source_keys)},
            )
            if isinstance(e, ClientError):
                raise map_boto_error(e, operation="compose", key=dest_key) from e
            raise StorageComposeError(
                f"Failed to compose {len(source_keys)} sources into {dest_key}: {e}",
                metadata={"dest_key": dest_key, "bucket": bucket, "error": str(e)},
            ) from e

        composed = await self.get_object_metadata(dest_key, bucket)
        if composed is None:
            logger.warning(
                "Composed object not visible yet, reporting size 0",
                extra={"key": dest_key, "bucket": bucket, "upload_id": upload_id},
            )
            size = 0
        else:
            size = composed.size_bytes

        logger.info(
            "Object composed in S3",
            extra={
                "key": dest_key,
                "bucket": bucket,
                "source_count": len(source_keys),
                "size_bytes": size,
            },
        )
        return size

    async def _abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        try:
            await self._client.abort_multipart_upload(Bucket=bucket, Key=key, UploadId=upload_id)
        except ClientError as e:
            logger.warning(
                "Failed to abort multipart upload",
                extra={"key": key, "upload_id": upload_id, "error": str(e)},
            )

    # ========================================================================
    # Bucket Management
    # ========================================================================

    async def bucket_exists(self, bucket: str) -> bool:
        """HEAD the bucket; 404 means it does not exist."""
        client = self._ensure_client()

        try:
            await client.head_bucket(Bucket=bucket)
            return True
        except ClientError as e:
            if client_error_code(e) in NOT_FOUND_CODES:
                return False
            logger.exception("Error checking bucket existence", extra={"bucket": bucket})
            raise map_boto_error(e, operation="bucket_exists", key=bucket) from e

    async def create_bucket(self, bucket: str, region: str | None = None) -> bool:
        """Create a new bucket."""
        client = self._ensure_client()
        region = region or self.settings.region

        kwargs: dict[str, Any] = {"Bucket": bucket}
        # us-east-1 rejects an explicit LocationConstraint
        if region and region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            await client.create_bucket(**kwargs)
        except ClientError as e:
            logger.exception("Failed to create bucket in S3", extra={"bucket": bucket})
            raise map_boto_error(e, operation="create_bucket", key=bucket) from e

        logger.info("Bucket created in S3", extra={"bucket": bucket, "region": region})
        return True

    async def delete_bucket(self, bucket: str, force: bool = False) -> bool:
        """Delete a bucket, first removing its objects when ``force`` is set."""
        client = self._ensure_client()

        if force:
            logger.warning(
                "Force deleting bucket - removing all objects first",
                extra={"bucket": bucket},
            )
            async for obj in self.stream_objects(prefix="", bucket=bucket):
                await self.delete_object(key=obj.key, bucket=bucket)

        try:
            await client.delete_bucket(Bucket=bucket)
        except ClientError as e:
            logger.exception("Failed to delete bucket from S3", extra={"bucket": bucket})
            raise map_boto_error(e, operation="delete_bucket", key=bucket) from e

        logger.info("Bucket deleted from S3", extra={"bucket": bucket, "force": force})
        return True

    async def list_buckets(self) -> list[BucketInfo]:
        """List all accessible buckets."""
        client = self._ensure_client()

        try:
            response = await client.list_buckets()
        except ClientError as e:
            logger.exception("Failed to list buckets from S3")
            raise map_boto_error(e, operation="list_buckets") from e

        return [
            BucketInfo(name=item["Name"], creation_date=item.get("CreationDate"))
            for item in response.get("Buckets", [])
        ]

    async def set_bucket_policy(self, bucket: str, policy: str) -> None:
        """Replace the bucket policy."""
        client = self._ensure_client()

        try:
            await client.put_bucket_policy(Bucket=bucket, Policy=policy)
        except ClientError as e:
            logger.exception("Failed to set bucket policy", extra={"bucket": bucket})
            raise map_boto_error(e, operation="set_bucket_policy", key=bucket) from e

        logger.info("Bucket policy updated", extra={"bucket": bucket})

    async def get_bucket_policy(self, bucket: str) -> str | None:
        """Return the bucket policy JSON, or None when the bucket has none."""
        client = self._ensure_client()

        try:
            response = await client.get_bucket_policy(Bucket=bucket)
        except ClientError as e:
            if client_error_code(e) == "NoSuchBucketPolicy":
                return None
            logger.exception("Failed to get bucket policy", extra={"bucket": bucket})
            raise map_boto_error(e, operation="get_bucket_policy", key=bucket) from e

        return response.get("Policy")

    async def __aenter__(self) -> S3Backend:
        """Async context manager entry."""
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.shutdown()
