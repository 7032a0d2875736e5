"""Health check API endpoints.

- Liveness probes: /health/live - Is the process alive?
- Readiness probes: /health/ready - Can the service accept traffic?
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from .schemas import LivenessResponse, ReadinessResponse
from .service import HealthServiceDep

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe (Kubernetes)",
    description="Returns 200 if the service process is alive and responsive",
)
async def liveness_check(service: HealthServiceDep) -> LivenessResponse:
    result = await service.liveness()
    return LivenessResponse(**result)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe (Kubernetes)",
    description="Returns 503 when object storage is required but not reachable",
)
async def readiness_check(response: Response, service: HealthServiceDep) -> ReadinessResponse:
    """Kubernetes readiness probe endpoint.

    Returns HTTP 503 if not ready, causing Kubernetes to temporarily remove
    the pod from the service endpoints.
    """
    result = await service.readiness()

    if not result["ready"]:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(**result)
