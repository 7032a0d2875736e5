"""Custom exception classes for the gateway.

Every exception raised towards the HTTP layer derives from ``AppException``
and is rendered as an RFC 7807 Problem Details document by
``oss_gateway.app.exception_handlers``.
"""

from __future__ import annotations

from typing import Any

from oss_gateway.core.schemas.error import ProblemDetail


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
            raise AppException(
            status_code=404,
            detail="Bucket 'media' does not exist",
            type="bucket-not-found",
            extra={"bucket": "media"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or ProblemDetail.default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


class NotFoundException(AppException):
    """Exception raised when a bucket, object or template is not found.

    Example:
            raise NotFoundException(
            detail="Policy template 'archive' not found",
            type="policy-template-not-found",
            extra={"template_name": "archive"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize not found exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class ConflictException(AppException):
    """Exception raised when a resource already exists or is being claimed.

    Example:
            raise ConflictException(
            detail="Bucket 'media' already exists",
            type="bucket-exists",
            extra={"bucket": "media"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "conflict",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize conflict exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        super().__init__(
            status_code=409,
            detail=detail,
            type=type,
            title="Conflict",
            instance=instance,
            extra=extra,
        )


class BadRequestException(AppException):
    """Exception raised for malformed requests."""

    def __init__(
        self,
        detail: str,
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize bad request exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class InvalidArgumentException(BadRequestException):
    """Exception raised when a caller-supplied argument breaks a precondition.

    Raised before any object-store mutation: blank names, missing file
    extensions, out-of-range chunk indices, undersized chunks and the like.

    Example:
            raise InvalidArgumentException(
            detail="chunk_index 7 is outside [0, 6)",
            extra={"chunk_index": 7, "total_chunks": 6},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "invalid-argument",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type=type, instance=instance, extra=extra)


class ServiceUnavailableException(AppException):
    """Exception raised when a dependency is temporarily unavailable.

    Example:
            raise ServiceUnavailableException(
            detail="Object storage is not ready",
            extra={"service": "storage"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "service-unavailable",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize service unavailable exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        super().__init__(
            status_code=503,
            detail=detail,
            type=type,
            title="Service Unavailable",
            instance=instance,
            extra=extra,
        )

