"""Shared Pydantic schemas."""

from .common import MessageResponse
from .error import ProblemDetail, ValidationError, ValidationProblemDetail

__all__ = [
    "MessageResponse",
    "ProblemDetail",
    "ValidationError",
    "ValidationProblemDetail",
]
