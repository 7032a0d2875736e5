"""Common response schemas shared across features."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str = Field(min_length=1, max_length=1000, description="Response message")
    success: bool = Field(default=True, description="Operation success status")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"message": "Operation completed successfully", "success": True}
        },
        str_strip_whitespace=True,
    )
