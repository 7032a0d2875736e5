"""HTTP tests for the storage management endpoints."""

import json

import pytest
from fastapi import status

BASE = "/api/v1/storage"


class TestBucketEndpoints:
    """Test bucket management endpoints."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, client):
        """Test a created bucket shows up in the listing."""
        response = await client.post(f"{BASE}/buckets", json={"name": "media"})
        assert response.status_code == status.HTTP_201_CREATED

        response = await client.get(f"{BASE}/buckets")
        names = [b["name"] for b in response.json()["buckets"]]
        assert names == ["media", "uploads"]

    @pytest.mark.asyncio
    async def test_create_existing(self, client):
        """Test creating an existing bucket answers 409."""
        response = await client.post(f"{BASE}/buckets", json={"name": "uploads"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["type"] == "bucket-exists"

    @pytest.mark.asyncio
    async def test_custom_bucket_policy(self, client):
        """Test a custom bucket's policy can be read back."""
        await client.post(
            f"{BASE}/buckets/custom", json={"name": "drop", "actions": ["s3:PutObject"]}
        )

        response = await client.get(f"{BASE}/buckets/drop/policy")

        policy = json.loads(response.json()["policy"])
        assert policy["Statement"][0]["Action"] == ["s3:PutObject"]

    @pytest.mark.asyncio
    async def test_delete_bucket(self, client, memory_backend):
        """Test an existing bucket is removed."""
        memory_backend.buckets["tmp"] = {}

        response = await client.delete(f"{BASE}/buckets/tmp")

        assert response.status_code == status.HTTP_200_OK
        assert "tmp" not in memory_backend.buckets


class TestObjectEndpoints:
    """Test object endpoints."""

    @pytest.mark.asyncio
    async def test_upload_download_remove(self, client, memory_backend):
        """Test an uploaded file can be downloaded and removed."""
        response = await client.post(
            f"{BASE}/objects", files={"file": ("notes.txt", b"hello", "text/plain")}
        )
        assert response.status_code == status.HTTP_201_CREATED
        key = response.json()["key"]

        response = await client.get(f"{BASE}/objects/download", params={"object_name": key})
        assert response.content == b"hello"
        assert "attachment" in response.headers["content-disposition"]

        response = await client.delete(f"{BASE}/objects", params={"object_name": key})
        assert response.status_code == status.HTTP_200_OK
        assert key not in memory_backend.keys()

    @pytest.mark.asyncio
    async def test_download_missing(self, client):
        """Test downloading an unknown object answers 404."""
        response = await client.get(f"{BASE}/objects/download", params={"object_name": "x.bin"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_list_files(self, client, memory_backend):
        """Test listing returns the direct children of a prefix."""
        await memory_backend.upload_object("docs/a.txt", b"x", "uploads")

        response = await client.get(f"{BASE}/objects", params={"prefix": "docs"})

        assert response.json() == {"bucket": "uploads", "prefix": "docs", "keys": ["docs/a.txt"]}

    @pytest.mark.asyncio
    async def test_ranged_download(self, client, memory_backend):
        """Test a byte range is served as a numbered attachment."""
        await memory_backend.upload_object("f.bin", b"0123456789", "uploads")

        response = await client.get(
            f"{BASE}/objects/chunk-count", params={"object_name": "f.bin", "length": 4}
        )
        assert response.json()["chunk_count"] == 3

        response = await client.get(
            f"{BASE}/objects/range", params={"object_name": "f.bin", "offset": 4, "length": 4}
        )
        assert response.content == b"4567"
        assert "f.bin_1" in response.headers["content-disposition"]
