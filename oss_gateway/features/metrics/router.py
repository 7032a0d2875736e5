"""Prometheus metrics endpoint.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    - http_requests_total, http_request_duration_seconds, http_requests_in_progress
    - storage_operations_total, storage_operation_duration_seconds, storage_errors_total
    - chunk_uploads_total, chunk_sessions_completed_total, chunk_cleanup_failures_total
    - policy_template_operations_total
    - application_info
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from oss_gateway.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose the application registry in Prometheus text format."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
