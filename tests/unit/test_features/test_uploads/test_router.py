"""HTTP tests for the chunked-upload endpoints."""

import re

import pytest
from fastapi import status

from oss_gateway.features.uploads.naming import MIN_PART_SIZE, chunk_key
from oss_gateway.infra.storage.service import StorageService, set_storage_service

BASE = "/api/v1/uploads/chunked"
PART = b"z" * MIN_PART_SIZE


def chunk_form(index: int, total: int = 2, sid: str = "s1", md5: str = "abc") -> dict:
    return {
        "file_md5": md5,
        "upload_session_id": sid,
        "chunk_index": str(index),
        "total_chunks": str(total),
        "file_name": "movie.mp4",
    }


class TestChunkedUploadFlow:
    """Test the endpoint sequence a client follows."""

    @pytest.mark.asyncio
    async def test_init_reports_progress(self, client):
        """Test init returns the chunk count for a new session."""
        response = await client.post(
            f"{BASE}/init",
            json={
                "file_name": "report.pdf",
                "file_md5": "abc",
                "total_size": 12_000_000,
                "chunk_size": MIN_PART_SIZE,
                "upload_session_id": "s1",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_chunks"] == 3
        assert data["uploaded_chunks"] == []
        assert data["is_completed"] is False

    @pytest.mark.asyncio
    async def test_upload_complete_and_cleanup(self, client, memory_backend):
        """Test two chunks merge into one date-keyed object."""
        for index, data in enumerate((PART, b"end")):
            response = await client.post(
                f"{BASE}/chunk",
                data=chunk_form(index),
                files={"file": ("blob", data, "application/octet-stream")},
            )
            assert response.status_code == status.HTTP_201_CREATED
            assert response.json()["key"] == chunk_key("s1", "abc", index)

        response = await client.post(
            f"{BASE}/complete",
            json={
                "file_name": "movie.mp4",
                "file_md5": "abc",
                "upload_session_id": "s1",
                "total_chunks": 2,
            },
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert re.fullmatch(r"\d{4}/\d{2}/\d{2}/[0-9a-f]{32}\.mp4", body["key"])
        assert body["size_bytes"] == MIN_PART_SIZE + 3
        assert memory_backend.read(body["key"]) == PART + b"end"
        assert memory_backend.keys(prefix=".chunk-uploads/") == []

    @pytest.mark.asyncio
    async def test_status_and_cancel(self, client):
        """Test status reflects uploads and cancel clears them."""
        await client.post(
            f"{BASE}/chunk",
            data=chunk_form(1, total=3),
            files={"file": ("blob", b"x", "application/octet-stream")},
        )

        response = await client.get(
            f"{BASE}/status", params={"file_md5": "abc", "upload_session_id": "s1"}
        )
        assert response.json()["uploaded_chunks"] == [1]

        response = await client.delete(BASE, params={"file_md5": "abc", "upload_session_id": "s1"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["deleted_count"] == 1

        response = await client.delete(BASE, params={"file_md5": "abc", "upload_session_id": "s1"})
        assert response.json()["deleted_count"] == 0


class TestChunkedUploadErrors:
    """Test error responses are Problem Details documents."""

    @pytest.mark.asyncio
    async def test_out_of_range_index(self, client, memory_backend):
        """Test an index beyond the total is a 400 with no write."""
        response = await client.post(
            f"{BASE}/chunk",
            data=chunk_form(5, total=2),
            files={"file": ("blob", b"x", "application/octet-stream")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["type"] == "invalid-argument"
        assert "upload_object" not in memory_backend.calls

    @pytest.mark.asyncio
    async def test_incomplete_upload_lists_missing_chunks(self, client):
        """Test completing early names the chunks still missing."""
        await client.post(
            f"{BASE}/chunk",
            data=chunk_form(0, total=3),
            files={"file": ("blob", PART, "application/octet-stream")},
        )

        response = await client.post(
            f"{BASE}/complete",
            json={
                "file_name": "movie.mp4",
                "file_md5": "abc",
                "upload_session_id": "s1",
                "total_chunks": 3,
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["type"] == "chunks-missing"
        assert body["missing_chunks"] == [1, 2]

    @pytest.mark.asyncio
    async def test_missing_form_field(self, client):
        """Test a chunk without its session id fails request validation."""
        response = await client.post(
            f"{BASE}/chunk",
            data={"file_md5": "abc", "chunk_index": "0", "total_chunks": "1"},
            files={"file": ("blob", b"x", "application/octet-stream")},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        fields = [error["field"] for error in response.json()["errors"]]
        assert "body.upload_session_id" in fields

    @pytest.mark.asyncio
    async def test_storage_unavailable(self, client, storage_settings):
        """Test endpoints answer 503 while storage is not started."""
        set_storage_service(StorageService(settings=storage_settings))

        response = await client.get(f"{BASE}/status", params={"file_md5": "abc"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["type"] == "storage-unavailable"
