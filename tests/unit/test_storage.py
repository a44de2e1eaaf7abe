"""
Unit tests for the storage clients.

The S3 client is exercised with botocore's Stubber, so no requests leave
the process.
"""

import asyncio

import pytest
from botocore.stub import Stubber

from vidsum.infrastructure.storage.client import (
    MockStorageClient,
    S3StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

KEY = "videos/abc-1.mp4"


@pytest.fixture
def s3_client() -> S3StorageClient:
    return S3StorageClient(StorageConfig(
        access_key_id="test-key",
        secret_access_key="test-secret",
        bucket_name="test-bucket",
    ))


class TestMockStorageClient:
    def test_objects_exist_after_put(self):
        storage = MockStorageClient()
        assert asyncio.run(storage.object_exists(KEY)) is False

        storage.put_object(KEY, b"12345")

        assert asyncio.run(storage.object_exists(KEY)) is True
        assert asyncio.run(storage.get_object_size(KEY)) == 5

    def test_delete_is_idempotent(self):
        storage = MockStorageClient()
        storage.put_object(KEY, b"x")

        asyncio.run(storage.delete_object(KEY))
        asyncio.run(storage.delete_object(KEY))

        assert not storage.has_object(KEY)

    def test_urls_carry_key_and_expiry(self):
        storage = MockStorageClient()
        url = asyncio.run(storage.create_upload_url(KEY, "video/mp4", expiry_seconds=60))
        assert url.startswith(f"mock://storage/{KEY}")
        assert "expires=60" in url


class TestS3StorageClient:
    def test_presigned_upload_url_targets_bucket_and_key(self, s3_client):
        url = asyncio.run(s3_client.create_upload_url(KEY, "video/mp4", expiry_seconds=600))

        assert f"/test-bucket/{KEY}" in url
        assert "X-Amz-Expires=600" in url
        assert "X-Amz-Signature=" in url

    def test_presigned_download_url(self, s3_client):
        url = asyncio.run(s3_client.create_download_url(KEY))
        assert f"/test-bucket/{KEY}" in url
        assert "X-Amz-Expires=3600" in url

    def test_object_exists(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_response(
                "head_object",
                {"ContentLength": 42},
                {"Bucket": "test-bucket", "Key": KEY},
            )
            assert asyncio.run(s3_client.object_exists(KEY)) is True

    def test_missing_object_is_false(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
            assert asyncio.run(s3_client.object_exists(KEY)) is False

    def test_other_errors_raise(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_client_error("head_object", service_error_code="403", http_status_code=403)
            with pytest.raises(StorageError):
                asyncio.run(s3_client.object_exists(KEY))

    def test_object_size(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_response("head_object", {"ContentLength": 2048})
            stubber.add_client_error("head_object", service_error_code="NoSuchKey", http_status_code=404)

            assert asyncio.run(s3_client.get_object_size(KEY)) == 2048
            assert asyncio.run(s3_client.get_object_size(KEY)) is None

    def test_delete_failure_raises_storage_error(self, s3_client):
        with Stubber(s3_client._s3_client) as stubber:
            stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)
            with pytest.raises(StorageError):
                asyncio.run(s3_client.delete_object(KEY))


class TestFactory:
    def test_mock_mode(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError):
            create_storage_client()
