"""OpenTelemetry tracing configuration and setup.

Spans are exported via OTLP/gRPC to collectors like Jaeger, Tempo, or an
OpenTelemetry Collector. FastAPI request handling is instrumented
automatically; object-store calls open their own spans through
``oss_gateway.infra.storage.instrumentation``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from oss_gateway.core.settings import get_otel_settings

if TYPE_CHECKING:
    from oss_gateway.core.settings.otel import OtelSettings

logger = logging.getLogger(__name__)

_tracer_provider: TracerProvider | None = None


def setup_tracing(otel_settings: OtelSettings | None = None) -> None:
    """Configure OpenTelemetry tracing for the service.

    Sets up the OTLP exporter, resource attributes, a parent-based ratio
    sampler and a batch span processor. Tracing failures never abort
    startup; they are logged and the service runs untraced.

    Example:
            @asynccontextmanager
        async def lifespan(app: FastAPI):
            setup_tracing()
            yield
            shutdown_tracing()
    """
    global _tracer_provider

    otel_settings = otel_settings or get_otel_settings()
    if not otel_settings.is_configured:
        logger.info("OpenTelemetry tracing is disabled")
        return

    try:
        tracer_provider = TracerProvider(
            resource=Resource(attributes=otel_settings.resource_attributes()),
            sampler=ParentBasedTraceIdRatio(otel_settings.sample_rate),
        )
        exporter = OTLPSpanExporter(
            endpoint=str(otel_settings.endpoint),
            insecure=otel_settings.insecure,
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(tracer_provider)
        _tracer_provider = tracer_provider

        logger.info(
            "OpenTelemetry tracing configured",
            extra={
                "service": otel_settings.service_name,
                "endpoint": str(otel_settings.endpoint),
                "sample_rate": otel_settings.sample_rate,
            },
        )
    except Exception as e:
        logger.exception(
            "Failed to setup OpenTelemetry tracing",
            extra={"exception": str(e)},
        )


def shutdown_tracing() -> None:
    """Flush and shut down the tracer provider created by setup_tracing()."""
    global _tracer_provider

    if _tracer_provider is None:
        return
    _tracer_provider.shutdown()
    _tracer_provider = None


def instrument_app(app: Any, otel_settings: OtelSettings | None = None) -> None:
    """Instrument FastAPI application for tracing.

    Respects otel_settings.instrument_fastapi toggle.

    Args:
        app: FastAPI application instance.
        otel_settings: Optional settings override.
    """
    otel_settings = otel_settings or get_otel_settings()
    if not otel_settings.enabled or not otel_settings.instrument_fastapi:
        return

    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")
        logger.debug("FastAPI instrumentation enabled")
    except Exception as e:
        logger.warning(
            "Failed to instrument FastAPI app: %s",
            e,
            extra={"exception": str(e)},
        )


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for creating custom spans.

    Example:
            tracer = get_tracer(__name__)

        async def compose(sources):
            with tracer.start_as_current_span("storage.compose") as span:
                span.set_attribute("storage.source_count", len(sources))
    """
    return trace.get_tracer(name)


def add_span_attributes(attributes: dict[str, Any]) -> None:
    """Add attributes to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """Add an event to the current span.

    Example:
            add_span_event("upload.cleanup_failed", {"object_key": key})
    """
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes or {})


def record_exception(exception: Exception) -> None:
    """Record an exception in the current span and mark it as failed."""
    span = trace.get_current_span()
    if span.is_recording():
        span.record_exception(exception)
        span.set_status(trace.Status(trace.StatusCode.ERROR))
