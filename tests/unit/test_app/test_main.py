"""Tests for application assembly."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from oss_gateway.app.main import create_app


class TestCreateApp:
    """Test create_app wiring."""

    def test_routes_are_registered(self):
        """Test probes sit at the root and features under the API prefix."""
        paths = {route.path for route in create_app().routes}

        assert "/health/live" in paths
        assert "/health/ready" in paths
        assert "/metrics" in paths
        assert "/api/v1/uploads/chunked/init" in paths
        assert "/api/v1/policies" in paths

    def test_docs_disabled(self, monkeypatch):
        """Test APP_DISABLE_DOCS removes the OpenAPI endpoints."""
        monkeypatch.setenv("APP_DISABLE_DOCS", "true")

        app = create_app()

        assert app.docs_url is None
        assert app.openapi_url is None

    @pytest.mark.asyncio
    async def test_openapi_schema(self, client: AsyncClient):
        """Test the OpenAPI document is served."""
        response = await client.get("/openapi.json")

        assert response.status_code == 200
        assert response.json()["info"]["title"] == "Object Storage Gateway API"
