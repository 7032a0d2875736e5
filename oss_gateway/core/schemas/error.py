"""RFC 7807 Problem Details schemas for error responses.

See: https://datatracker.ietf.org/doc/html/rfc7807
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_DEFAULT_TITLES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    413: "Content Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    507: "Insufficient Storage",
}


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Example:
            return JSONResponse(
            status_code=404,
            content=ProblemDetail(
                type="not-found",
                title="Not Found",
                status=404,
                detail="Chunk 0 of session 'abc' was never uploaded",
                instance="/api/v1/uploads/chunked/complete",
            ).model_dump(exclude_none=True)
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "invalid-argument",
                "title": "Bad Request",
                "status": 400,
                "detail": "chunk_index 7 is outside [0, 6)",
                "instance": "/api/v1/uploads/chunked/chunk",
            }
        },
    )

    @staticmethod
    def default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        return _DEFAULT_TITLES.get(status_code, "Error")


class ValidationError(BaseModel):
    """A single field-level validation failure."""

    field: str = Field(description="Dotted location of the offending field")
    message: str = Field(description="Validation message")
    type: str = Field(description="Validation error type")
    value: Any | None = Field(default=None, description="Rejected input value")


class ValidationProblemDetail(ProblemDetail):
    """Problem Details carrying field-level validation errors."""

    errors: list[ValidationError] = Field(
        default_factory=list, description="Field-level validation errors"
    )
