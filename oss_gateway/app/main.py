"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from oss_gateway.app.exception_handlers import configure_exception_handlers
from oss_gateway.app.lifespan import lifespan
from oss_gateway.app.middleware import configure_middleware
from oss_gateway.app.router import setup_routers
from oss_gateway.core.settings import get_settings
from oss_gateway.infra.tracing.opentelemetry import instrument_app


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are loaded once through the LRU-cached loaders.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        root_path=app_settings.root_path,
        debug=app_settings.debug,
        lifespan=lifespan,
        **app_settings.get_docs_kwargs(),
    )

    # Exception handlers before middleware
    configure_exception_handlers(app)
    configure_middleware(app)
    setup_routers(app, app_settings)

    # After app creation, before serving requests
    instrument_app(app, settings.otel)

    return app


# Application instance for uvicorn
app = create_app()
