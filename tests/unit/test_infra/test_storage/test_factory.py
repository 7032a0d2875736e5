"""Unit tests for the storage backend factory."""

import pytest

from oss_gateway.core.settings.storage import StorageBackendType, StorageSettings
from oss_gateway.infra.storage.backends import create_storage_backend
from oss_gateway.infra.storage.backends.s3.backend import S3Backend
from oss_gateway.infra.storage.exceptions import StorageNotConfiguredError


class TestBackendFactory:
    """Test backend factory creation logic."""

    def test_create_s3_backend(self):
        """Test creating an S3 backend with static credentials."""
        settings = StorageSettings(
            enabled=True,
            backend=StorageBackendType.S3,
            bucket="test-bucket",
            access_key="test-key",
            secret_key="test-secret",
        )

        backend = create_storage_backend(settings)

        assert isinstance(backend, S3Backend)
        assert backend.backend_name == "s3"

    def test_create_minio_backend(self):
        """Test MinIO is served by the S3 backend."""
        settings = StorageSettings(
            enabled=True,
            backend=StorageBackendType.MINIO,
            bucket="test-bucket",
            endpoint="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
        )

        backend = create_storage_backend(settings)

        assert isinstance(backend, S3Backend)
        assert settings.is_minio is True
        assert settings.get_boto3_config()["endpoint_url"] == "http://localhost:9000"

    def test_factory_rejects_unconfigured_storage(self):
        """Test disabled storage cannot produce a backend."""
        with pytest.raises(StorageNotConfiguredError):
            create_storage_backend(StorageSettings(enabled=False))
