"""Tests for the HTTP middleware stack."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient


class TestRequestIDMiddleware:
    """Test request ID propagation."""

    @pytest.mark.asyncio
    async def test_generates_request_id(self, client: AsyncClient):
        """Test a UUID is generated when the caller sends none."""
        response = await client.get("/health/live")

        assert response.status_code == 200
        uuid.UUID(response.headers["x-request-id"])

    @pytest.mark.asyncio
    async def test_echoes_request_id(self, client: AsyncClient):
        """Test an incoming X-Request-ID is returned unchanged."""
        response = await client.get("/health/live", headers={"X-Request-ID": "abc-123"})

        assert response.headers["x-request-id"] == "abc-123"


class TestMetricsMiddleware:
    """Test HTTP instrumentation."""

    @pytest.mark.asyncio
    async def test_process_time_header(self, client: AsyncClient):
        """Test every response reports its processing time."""
        response = await client.get("/health/live")

        assert float(response.headers["x-process-time"]) >= 0

    @pytest.mark.asyncio
    async def test_requests_are_counted(self, client: AsyncClient):
        """Test requests show up by route template on /metrics."""
        await client.get("/api/v1/policies")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert 'endpoint="/api/v1/policies"' in response.text
        assert "http_requests_total" in response.text
