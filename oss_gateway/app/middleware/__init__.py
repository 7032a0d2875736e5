"""HTTP middleware.

Order (outermost first): MetricsMiddleware, RequestIDMiddleware.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .metrics import MetricsMiddleware
from .request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI


def configure_middleware(app: FastAPI) -> None:
    """Register middleware; the last one added runs first."""
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(MetricsMiddleware)


__all__ = ["MetricsMiddleware", "RequestIDMiddleware", "configure_middleware"]
