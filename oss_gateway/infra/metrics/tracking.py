"""Helper functions for tracking operational error metrics."""

from __future__ import annotations

import logging
from typing import Any

from oss_gateway.infra.metrics import prometheus

logger = logging.getLogger(__name__)


def track_error(
    error_type: str,
    endpoint: str,
    status_code: int,
    extra: dict[str, Any] | None = None,
) -> None:
    """Track an error occurrence.

    Args:
        error_type: Problem type of the error (e.g., 'invalid-argument', 'not-found')
        endpoint: API endpoint where error occurred
        status_code: HTTP status code
        extra: Additional context for logging

    Example:
            track_error("conflict", "/api/v1/uploads/chunked/complete", 409)
    """
    prometheus.errors_total.labels(
        error_type=error_type,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()

    logger.debug(
        "Tracked error: %s",
        error_type,
        extra={"endpoint": endpoint, "status_code": status_code, **(extra or {})},
    )


def track_validation_error(endpoint: str, field: str) -> None:
    """Track a validation error for a specific field."""
    prometheus.validation_errors_total.labels(endpoint=endpoint, field=field).inc()


def track_unhandled_exception(exception_type: str, endpoint: str) -> None:
    """Track an unhandled exception.

    Args:
        exception_type: Type of exception (e.g., 'ValueError', 'KeyError')
        endpoint: API endpoint where exception occurred
    """
    prometheus.exceptions_unhandled_total.labels(
        exception_type=exception_type,
        endpoint=endpoint,
    ).inc()
