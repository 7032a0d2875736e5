"""Health check response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LivenessResponse(BaseModel):
    """Kubernetes liveness probe response."""

    alive: bool = Field(description="Liveness status")
    timestamp: datetime = Field(description="Check timestamp")
    service: str = Field(min_length=1, max_length=100, description="Service name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "alive": True,
                "timestamp": "2025-01-01T00:00:00Z",
                "service": "oss-gateway",
            }
        }
    )


class ReadinessResponse(BaseModel):
    """Kubernetes readiness probe response.

    Returns 200 if ready, 503 if object storage is required but unavailable.

    Example:
        ```json
        {
            "ready": true,
            "checks": {"storage": true},
            "timestamp": "2025-01-01T00:00:00Z"
        }
        ```
    """

    ready: bool = Field(description="Overall readiness status")
    checks: dict[str, bool] = Field(
        default_factory=dict, description="Individual dependency checks"
    )
    timestamp: datetime = Field(description="Check timestamp")
