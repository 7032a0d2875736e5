"""Request ID middleware for per-request tracking.

1. Takes the request ID from the X-Request-ID header, or generates a UUID
2. Stores it in request.state.request_id and the logging context
3. Returns it in the X-Request-ID response header
4. Clears the logging context after the request
"""

from __future__ import annotations

from .base import HeaderContextMiddleware, generate_uuid


class RequestIDMiddleware(HeaderContextMiddleware):
    """Attach a request ID to every request, its log records and its response."""

    header_name = "x-request-id"
    state_key = "request_id"
    log_context_key = "request_id"
    should_clear_context_on_finish = True

    def generate_value(self) -> str:
        return generate_uuid()
