"""HTTP tests for the policy template endpoints."""

import json

import pytest
from fastapi import status

BASE = "/api/v1/policies"
CUSTOM = json.dumps({"Version": "2012-10-17", "Statement": []})


class TestPolicyTemplateEndpoints:
    """Test CRUD over HTTP."""

    @pytest.mark.asyncio
    async def test_list_includes_builtins(self, client):
        """Test the built-ins are listed and flagged."""
        response = await client.get(BASE)

        assert response.status_code == status.HTTP_200_OK
        templates = {t["template_name"]: t for t in response.json()}
        assert set(templates) == {"public", "readonly", "private"}
        assert all(t["builtin"] for t in templates.values())

    @pytest.mark.asyncio
    async def test_create_get_delete(self, client):
        """Test a custom template's lifecycle."""
        response = await client.post(
            BASE,
            json={
                "template_name": "archive",
                "description": "Archive",
                "policy_type": "custom",
                "policy": CUSTOM,
            },
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["builtin"] is False

        response = await client.get(f"{BASE}/archive")
        assert response.json()["policy"] == CUSTOM

        response = await client.delete(f"{BASE}/archive")
        assert response.status_code == status.HTTP_200_OK

        response = await client.get(f"{BASE}/archive")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_duplicate_conflicts(self, client):
        """Test creating an existing name answers 409."""
        response = await client.post(
            BASE,
            json={"template_name": "public", "description": "Dup", "policy_type": "public"},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["type"] == "policy-template-exists"

    @pytest.mark.asyncio
    async def test_update(self, client):
        """Test PUT replaces description and body."""
        response = await client.put(
            f"{BASE}/private",
            json={"description": "Nobody", "policy_type": "private", "policy": CUSTOM},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["description"] == "Nobody"

    @pytest.mark.asyncio
    async def test_apply(self, client, memory_backend):
        """Test applying a template installs the rendered policy."""
        response = await client.post(f"{BASE}/readonly/apply/uploads")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["bucket"] == "uploads"
        assert "arn:aws:s3:::uploads/*" in body["policy"]
        assert memory_backend.policies["uploads"] == body["policy"]

    @pytest.mark.asyncio
    async def test_apply_unknown_bucket(self, client):
        """Test applying to a missing bucket answers 404."""
        response = await client.post(f"{BASE}/readonly/apply/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
