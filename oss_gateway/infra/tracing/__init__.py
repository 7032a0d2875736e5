"""OpenTelemetry tracing infrastructure.

- setup_tracing(): Initialize OpenTelemetry tracing at startup
- shutdown_tracing(): Flush spans on shutdown
- instrument_app(): Add tracing to FastAPI applications
- get_tracer(): Get a tracer for creating custom spans
- add_span_attributes(), add_span_event(), record_exception(): span helpers
"""

from oss_gateway.infra.tracing.opentelemetry import (
    add_span_attributes,
    add_span_event,
    get_tracer,
    instrument_app,
    record_exception,
    setup_tracing,
    shutdown_tracing,
)

__all__ = [
    "add_span_attributes",
    "add_span_event",
    "get_tracer",
    "instrument_app",
    "record_exception",
    "setup_tracing",
    "shutdown_tracing",
]
