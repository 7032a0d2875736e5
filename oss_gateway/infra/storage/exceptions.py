"""Storage-specific exceptions for S3/MinIO operations.

Every storage failure is a ``StorageError`` (an ``AppException``) carrying a
machine-readable ``code`` and the AWS context in ``extra``. The HTTP layer
renders these as RFC 7807 documents but never echoes the AWS context.

Example:
    ```python
    try:
        await client.put_object(Bucket=bucket, Key=key, Body=body)
    except ClientError as e:
        raise map_boto_error(e, operation="upload", key=key) from e
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from oss_gateway.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError

NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NoSuchUpload", "404", "NotFound"})
PRECONDITION_CODES = frozenset({"PreconditionFailed", "412", "ConditionalRequestConflict", "409"})


class StorageError(AppException):
    """Base exception for all storage-related errors.

    Example:
        ```python
        raise StorageError(
            message="Failed to connect to storage backend",
            code="STORAGE_CONNECTION_ERROR",
            status_code=503,
            metadata={"backend": "s3", "endpoint": "s3.amazonaws.com"},
        )
        ```
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 500,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            status_code: HTTP status code (default: 500).
            metadata: Additional error context.
        """
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail=message,
            type=code.lower().replace("_", "-"),
            extra=metadata or {},
        )


class StorageNotConfiguredError(StorageError):
    """Storage is disabled, misconfigured or not started."""

    def __init__(
        self,
        message: str = "Storage is not configured or enabled",
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_CONFIGURED",
            status_code=503,
            metadata=metadata,
        )


class StorageFileNotFoundError(StorageError):
    """A requested object or bucket does not exist.

    Example:
        ```python
        raise StorageFileNotFoundError(
            f"File not found: {key}",
            metadata={"bucket": bucket, "key": key},
        )
        ```
    """

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_FOUND",
            status_code=404,
            metadata=metadata,
        )


class StorageConflictError(StorageError):
    """The store rejected a write because of existing state."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_CONFLICT",
            status_code=409,
            metadata=metadata,
        )


class StorageUploadError(StorageError):
    """Upload failed for a reason other than an AWS error response."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            metadata=metadata,
        )


class StorageDownloadError(StorageError):
    """Download failed for a reason other than an AWS error response."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            metadata=metadata,
        )


class StorageComposeError(StorageError):
    """Server-side composition of source objects into one object failed.

    Example:
        ```python
        raise StorageComposeError(
            "Failed to compose 3 sources into 2025/01/01/abc.pdf",
            metadata={"dest_key": key, "source_count": 3},
        )
        ```
    """

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_COMPOSE_ERROR",
            status_code=500,
            metadata=metadata,
        )


class StoragePermissionError(StorageError):
    """The credentials lack permission for the requested operation."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_PERMISSION_DENIED",
            status_code=403,
            metadata=metadata,
        )


class StorageValidationError(StorageError):
    """The store rejected the request parameters."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_VALIDATION_ERROR",
            status_code=400,
            metadata=metadata,
        )


class StorageTimeoutError(StorageError):
    """The store did not answer in time or asked the client to slow down."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_TIMEOUT",
            status_code=504,
            metadata=metadata,
        )


def client_error_code(error: ClientError) -> str:
    """Return the AWS error code of a botocore ClientError (``""`` if absent)."""
    return str(error.response.get("Error", {}).get("Code", ""))


def map_boto_error(
    error: ClientError,
    operation: str,
    key: str | None = None,
) -> StorageError:
    """Map a botocore ClientError to a domain-specific StorageError.

    Args:
        error: The botocore ClientError to map.
        operation: The storage operation being performed (e.g., "upload", "compose").
        key: Optional object key or bucket name being operated on.

    Returns:
        StorageError: Appropriate domain-specific storage exception.

    Error Code Mappings:
        - NoSuchKey, NoSuchBucket, NoSuchUpload -> StorageFileNotFoundError (404)
        - BucketAlreadyExists, BucketAlreadyOwnedByYou, PreconditionFailed,
          ConditionalRequestConflict -> StorageConflictError (409)
        - AccessDenied, ExpiredToken, InvalidAccessKeyId -> StoragePermissionError (403)
        - RequestTimeout, RequestTimeTooSkewed, SlowDown -> StorageTimeoutError (504)
        - InvalidRequest, InvalidArgument, MalformedXML, EntityTooSmall,
          MalformedPolicy -> StorageValidationError (400)
        - Others -> StorageError (500)
    """
    error_code = client_error_code(error) or "Unknown"
    error_message = error.response.get("Error", {}).get("Message", str(error))

    metadata: dict[str, Any] = {
        "operation": operation,
        "aws_error_code": error_code,
        "aws_error_message": error_message,
        "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
    }
    if key:
        metadata["key"] = key

    message = f"{operation.capitalize()} failed: {error_message}"

    if error_code in NOT_FOUND_CODES:
        return StorageFileNotFoundError(message=message, metadata=metadata)

    if error_code in PRECONDITION_CODES or error_code in {
        "BucketAlreadyExists",
        "BucketAlreadyOwnedByYou",
        "BucketNotEmpty",
    }:
        return StorageConflictError(message=message, metadata=metadata)

    if error_code in {
        "AccessDenied",
        "ExpiredToken",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "InvalidToken",
    }:
        return StoragePermissionError(message=message, metadata=metadata)

    if error_code in {"RequestTimeout", "RequestTimeTooSkewed", "SlowDown"}:
        return StorageTimeoutError(
            message=f"{operation.capitalize()} timed out: {error_message}",
            metadata=metadata,
        )

    if error_code in {
        "InvalidRequest",
        "InvalidArgument",
        "MalformedXML",
        "MalformedPolicy",
        "InvalidBucketName",
        "InvalidRange",
        "EntityTooSmall",
        "KeyTooLongError",
    }:
        return StorageValidationError(message=message, metadata=metadata)

    return StorageError(
        message=message,
        code="STORAGE_ERROR",
        status_code=500,
        metadata=metadata,
    )
