"""Application lifespan management.

Startup order:
1. Core (logging, metrics, tracing)
2. Policy template registry (seeded with built-ins, kept on ``app.state``)
3. Storage (S3/MinIO) - conditional on configuration

Shutdown runs in reverse.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from oss_gateway.core.settings import get_settings
from oss_gateway.features.policies.registry import PolicyTemplateRegistry
from oss_gateway.infra.logging.config import setup_logging
from oss_gateway.infra.metrics.prometheus import application_info
from oss_gateway.infra.storage.service import get_storage_service
from oss_gateway.infra.tracing.opentelemetry import setup_tracing, shutdown_tracing

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def startup_storage() -> None:
    """Start the storage service; fail only if storage is required."""
    settings = get_settings().storage
    if not settings.is_configured:
        logger.info("Storage not configured, chunked uploads are unavailable")
        return

    storage_service = get_storage_service()
    try:
        await storage_service.startup()
    except Exception as e:
        if settings.startup_require_storage:
            logger.error(
                "Storage service required but unavailable, failing startup",
                extra={"error": str(e)},
            )
            raise
        logger.warning(
            "Storage service unavailable, continuing in degraded mode",
            extra={"error": str(e)},
        )
        return

    logger.info(
        "Storage service initialized",
        extra={
            "bucket": settings.bucket,
            "endpoint": settings.endpoint,
            "health_checks_enabled": settings.health_check_enabled,
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop the application's services."""
    settings = get_settings()

    setup_logging(log_settings=settings.logging, force=True)
    logger.info(
        "Application starting",
        extra={
            "service": settings.app.service_name,
            "environment": settings.app.environment,
        },
    )

    if settings.otel.is_configured:
        setup_tracing(settings.otel)

    application_info.labels(
        version=settings.app.version,
        service=settings.app.service_name,
        environment=settings.app.environment,
    ).set(1)

    app.state.policy_registry = PolicyTemplateRegistry()
    await startup_storage()

    logger.info("Application startup complete")
    try:
        yield
    finally:
        logger.info("Application shutting down")
        await get_storage_service().shutdown()
        shutdown_tracing()
        logger.info("Application shutdown complete")
