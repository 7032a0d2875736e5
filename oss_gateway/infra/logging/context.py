"""Context management for structured logging.

Injects contextvars-held fields (request_id, upload_session_id, ...) into
every log record so callers never pass them explicitly. Each asyncio task
gets its own copy of the context.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Set logging context for the current async task/thread.

    Args:
        **kwargs: Key-value pairs to add to logging context.
            Common examples: request_id, upload_session_id, bucket

    Example:
        ```python
        set_log_context(request_id="abc-123", path="/api/v1/uploads/chunked/complete")
        logger.info("Merging chunks")  # Includes request_id and path
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current async task/thread."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from logging context.

    Args:
        *keys: Keys to remove from context.
    """
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the contextvars log context onto each LogRecord.

    Existing record attributes win, so an explicit ``extra={...}`` is never
    overwritten by ambient context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject context into log record.

        Args:
            record: The log record to enhance with context.

        Returns:
            True (always allow the record to be logged).
        """
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
