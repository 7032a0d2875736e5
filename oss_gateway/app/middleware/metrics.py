"""Metrics middleware for HTTP request instrumentation with trace correlation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from oss_gateway.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import Request, Response


def _endpoint_label(request: Request) -> str:
    """Route path template ("/api/v1/policies/{template_name}") for low cardinality."""
    route = request.scope.get("route")
    if route is not None and hasattr(route, "path"):
        return route.path
    return "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect HTTP metrics, linking them to traces via exemplars.

    Adds an X-Process-Time header for client-side performance monitoring.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        method = request.method
        http_requests_in_progress.labels(method=method).inc()

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = f"{time.perf_counter() - start_time:.6f}"
            return response
        finally:
            duration = time.perf_counter() - start_time
            endpoint = _endpoint_label(request)

            exemplar = None
            span_context = trace.get_current_span().get_span_context()
            if span_context.is_valid:
                exemplar = {"trace_id": format(span_context.trace_id, "032x")}

            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                duration, exemplar=exemplar
            )
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=str(status_code)
            ).inc(exemplar=exemplar)
            http_requests_in_progress.labels(method=method).dec()
