"""Global exception handlers for the FastAPI application.

Every error leaves the service as an RFC 7807 Problem Details document.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from oss_gateway.core.exceptions import AppException
from oss_gateway.core.schemas.error import (
    ProblemDetail,
    ValidationError,
    ValidationProblemDetail,
)
from oss_gateway.infra.metrics import tracking
from oss_gateway.infra.storage.exceptions import StorageError

logger = logging.getLogger(__name__)

STORAGE_FAILURE_DETAIL = "Storage operation failed"


def _get_request_id(request: Request) -> str | None:
    """Extract the request ID set by RequestIDMiddleware, if any."""
    return getattr(request.state, "request_id", None)


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create an RFC 7807 Problem Details body.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional members merged into the document.

    Returns:
        Dictionary representing the problem detail.
    """
    problem = ProblemDetail(
        type=type_,
        title=title or ProblemDetail.default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance,
    )

    response_data = problem.model_dump(exclude_none=True)
    if extra:
        response_data.update(extra)

    return response_data


def _validation_errors(errors: Any) -> list[ValidationError]:
    return [
        ValidationError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=_safe_value(error.get("input")),
        )
        for error in errors
    ]


def _safe_value(value: Any) -> Any:
    """Keep rejected inputs JSON-friendly; upload bodies are not echoed."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)[:200]


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions raised by features and services."""
    request_id = _get_request_id(request)

    tracking.track_error(
        error_type=exc.type,
        endpoint=request.url.path,
        status_code=exc.status_code,
        extra={"detail": exc.detail},
    )

    logger.warning(
        "Application exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or str(request.url),
        extra=exc.extra,
    )
    if request_id:
        problem_data["request_id"] = request_id

    return JSONResponse(status_code=exc.status_code, content=problem_data)


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle object store failures.

    The AWS context in ``exc.extra`` stays in the logs. Server-side
    failures are reported with a generic detail.
    """
    request_id = _get_request_id(request)

    tracking.track_error(
        error_type=exc.type,
        endpoint=request.url.path,
        status_code=exc.status_code,
    )

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Storage operation failed",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error_code": exc.code,
            "status_code": exc.status_code,
            "detail": exc.detail,
            **{f"storage_{k}": v for k, v in exc.extra.items()},
        },
    )

    detail = STORAGE_FAILURE_DETAIL if exc.status_code >= 500 else exc.detail
    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=detail,
        type_=exc.type,
        title=exc.title,
        instance=str(request.url),
    )
    if request_id:
        problem_data["request_id"] = request_id

    return JSONResponse(status_code=exc.status_code, content=problem_data)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors with field-level detail."""
    request_id = _get_request_id(request)

    validation_errors = _validation_errors(exc.errors())
    for error in validation_errors:
        tracking.track_validation_error(request.url.path, error.field)

    logger.warning(
        "Request validation failed",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
            "errors": [e.model_dump() for e in validation_errors],
        },
    )

    problem = ValidationProblemDetail(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=str(request.url),
        errors=validation_errors,
    )

    response_data = problem.model_dump(exclude_none=True)
    if request_id:
        response_data["request_id"] = request_id

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response_data,
    )


async def pydantic_validation_exception_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing."""
    request_id = _get_request_id(request)
    validation_errors = _validation_errors(exc.errors())

    logger.warning(
        "Pydantic validation failed",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetail(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Data validation failed for {len(validation_errors)} field(s)",
        instance=str(request.url),
        errors=validation_errors,
    )

    response_data = problem.model_dump(exclude_none=True)
    if request_id:
        response_data["request_id"] = request_id

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response_data,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected exceptions.

    Logs the full traceback and returns a generic 500.
    """
    request_id = _get_request_id(request)

    tracking.track_unhandled_exception(
        exception_type=type(exc).__name__,
        endpoint=request.url.path,
    )

    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        title="Internal Server Error",
        instance=str(request.url),
    )
    if request_id:
        problem_data["request_id"] = request_id

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem_data,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the Problem Details handlers on ``app``.

    StorageError is registered ahead of AppException; Starlette picks the
    most specific class in the exception's MRO either way.
    """
    app.add_exception_handler(StorageError, storage_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PydanticValidationError, pydantic_validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")
