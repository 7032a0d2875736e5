"""Tests for the Problem Details exception handlers."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from oss_gateway.app.exception_handlers import (
    STORAGE_FAILURE_DETAIL,
    configure_exception_handlers,
)
from oss_gateway.app.middleware import RequestIDMiddleware
from oss_gateway.core.exceptions import ConflictException, InvalidArgumentException
from oss_gateway.infra.storage.exceptions import StorageError, StorageFileNotFoundError


class Payload(BaseModel):
    count: int


@pytest.fixture
def error_app() -> FastAPI:
    app = FastAPI()
    configure_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/invalid")
    async def invalid():
        raise InvalidArgumentException(
            "Chunk index out of range", type="chunk-index", extra={"chunk_index": 7}
        )

    @app.get("/conflict")
    async def conflict():
        raise ConflictException("Upload session is already being completed")

    @app.get("/storage-500")
    async def storage_500():
        raise StorageError(
            message="S3 error: InternalError - secret endpoint detail",
            code="STORAGE_ERROR",
            metadata={"aws_error_code": "InternalError", "endpoint": "http://minio:9000"},
        )

    @app.get("/storage-404")
    async def storage_404():
        raise StorageFileNotFoundError("File not found: a/b.png", metadata={"key": "a/b.png"})

    @app.post("/body")
    async def body(payload: Payload):
        return payload

    @app.get("/boom")
    async def boom():
        raise RuntimeError("unexpected")

    return app


@pytest.fixture
async def error_client(error_app: FastAPI):
    transport = ASGITransport(app=error_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestAppExceptionHandler:
    """Test application exceptions."""

    @pytest.mark.asyncio
    async def test_invalid_argument(self, error_client: AsyncClient):
        """Test a 400 problem carries type, detail and extra members."""
        response = await error_client.get("/invalid")

        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "chunk-index"
        assert body["status"] == 400
        assert body["detail"] == "Chunk index out of range"
        assert body["chunk_index"] == 7
        assert body["instance"] == "http://test/invalid"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, error_client: AsyncClient):
        """Test the caller's request ID appears in the body and headers."""
        response = await error_client.get("/conflict", headers={"X-Request-ID": "req-42"})

        assert response.status_code == 409
        assert response.json()["request_id"] == "req-42"
        assert response.headers["x-request-id"] == "req-42"


class TestStorageExceptionHandler:
    """Test object store failures."""

    @pytest.mark.asyncio
    async def test_server_error_is_generic(self, error_client: AsyncClient):
        """Test 5xx storage errors hide the backend detail and context."""
        response = await error_client.get("/storage-500")

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == STORAGE_FAILURE_DETAIL
        assert "aws_error_code" not in body
        assert "endpoint" not in body
        assert "secret" not in response.text

    @pytest.mark.asyncio
    async def test_client_error_keeps_detail(self, error_client: AsyncClient):
        """Test 4xx storage errors keep their message."""
        response = await error_client.get("/storage-404")

        assert response.status_code == 404
        assert response.json()["detail"] == "File not found: a/b.png"
        assert "key" not in response.json()


class TestValidationHandler:
    """Test request validation failures."""

    @pytest.mark.asyncio
    async def test_field_errors(self, error_client: AsyncClient):
        """Test 422 responses list the offending fields."""
        response = await error_client.post("/body", json={"count": "many"})

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation-error"
        assert body["errors"][0]["field"] == "body.count"
        assert body["errors"][0]["value"] == "many"


class TestGenericHandler:
    """Test the catch-all handler."""

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, error_client: AsyncClient):
        """Test unexpected errors become an opaque 500 problem."""
        response = await error_client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["type"] == "internal-error"
        assert body["detail"] == "An unexpected error occurred while processing your request"
        assert "RuntimeError" not in response.text
