"""Bucket and single-object storage endpoints."""

from .router import router
from .service import StorageGatewayService

__all__ = ["StorageGatewayService", "router"]
