"""Logging infrastructure.

Structured JSONL logging behind a QueueHandler/QueueListener pair, with
contextvars-based context injection and OpenTelemetry trace correlation.

Basic usage:
    from oss_gateway.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(request_id="abc-123", upload_session_id="s-1")
    logger.info("Chunk stored")  # Includes request_id and upload_session_id
"""

from oss_gateway.infra.logging.config import (
    complete,
    configure_logging,
    setup_logging,
    shutdown,
)
from oss_gateway.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from oss_gateway.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "complete",
    "configure_logging",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
