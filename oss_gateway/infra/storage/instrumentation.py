"""Storage operation instrumentation with OpenTelemetry and Prometheus metrics."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import Status, StatusCode

from oss_gateway.infra.storage import metrics
from oss_gateway.infra.tracing.opentelemetry import get_tracer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_tracer = get_tracer("oss_gateway.storage")


@asynccontextmanager
async def track_storage_operation(
    operation: str,
    key: str | None = None,
    bucket: str | None = None,
    size_bytes: int | None = None,
    content_type: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """Track a storage operation with an OpenTelemetry span and Prometheus metrics.

    The yielded dict can be filled by the caller; its entries become
    ``storage.result.*`` span attributes and ``result_size`` feeds the
    size histogram.

    Example:
        async with track_storage_operation("compose", key=dest_key, bucket=bucket) as ctx:
            size = await backend.compose_object(dest_key, sources, bucket)
            ctx["result_size"] = size
    """
    start_time = time.perf_counter()
    context: dict[str, Any] = {}

    span_attributes: dict[str, Any] = {"storage.operation": operation}
    if key:
        span_attributes["storage.key"] = key
    if bucket:
        span_attributes["storage.bucket"] = bucket
    if size_bytes is not None:
        span_attributes["storage.size_bytes"] = size_bytes
    if content_type:
        span_attributes["storage.content_type"] = content_type
    if metadata:
        for k, v in metadata.items():
            span_attributes[f"storage.metadata.{k}"] = str(v)

    metrics.storage_connections_active.inc()

    with _tracer.start_as_current_span(
        f"storage.{operation}",
        attributes=span_attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield context

            for k, v in context.items():
                span.set_attribute(f"storage.result.{k}", str(v))

            metrics.record_operation_success(
                operation=operation,
                duration_seconds=time.perf_counter() - start_time,
                size_bytes=context.get("result_size", size_bytes),
            )
            span.set_status(Status(StatusCode.OK))

        except Exception as e:
            metrics.record_operation_error(
                operation=operation,
                error_type=type(e).__name__,
                duration_seconds=time.perf_counter() - start_time,
            )
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise

        finally:
            metrics.storage_connections_active.dec()
