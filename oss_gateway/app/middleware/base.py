"""Base middleware for header-based context propagation.

Subclasses read a value from a request header (or generate one), store it in
request state and the logging context, and echo it in the response headers.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders

from oss_gateway.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class HeaderContextMiddleware(ABC):
    """Abstract pure-ASGI middleware for header-carried identifiers.

    Subclasses must define:
    - header_name: The HTTP header to read/write (lowercase)
    - state_key: The key to use in scope["state"]
    - log_context_key: The key to use in logging context
    - generate_value(): Method to generate a value if header is missing
    """

    header_name: str
    state_key: str
    log_context_key: str

    should_generate_if_missing: bool = True
    should_clear_context_on_finish: bool = False

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    @abstractmethod
    def generate_value(self) -> str:
        """Generate a new value when the header is not present."""
        ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        value = self._extract_or_generate(scope)

        state = scope.setdefault("state", {})
        state[self.state_key] = value

        if value:
            set_log_context(**{self.log_context_key: value})

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start" and value:
                headers = MutableHeaders(scope=message)
                headers.append(self.header_name, value)
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            if self.should_clear_context_on_finish:
                clear_log_context()

    def _extract_or_generate(self, scope: Scope) -> str | None:
        state = scope.get("state", {})
        if existing := state.get(self.state_key):
            return existing

        headers = dict(scope.get("headers", []))
        header_bytes = headers.get(self.header_name.encode("latin-1"))
        if header_bytes:
            return header_bytes.decode("latin-1")

        if self.should_generate_if_missing:
            return self.generate_value()
        return None


def generate_uuid() -> str:
    return str(uuid.uuid4())
