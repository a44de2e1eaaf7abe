"""
Object storage client for uploaded videos.

Talks to any S3-compatible store (AWS S3, Cloudflare R2, MinIO) through
boto3. The API never proxies video bytes: clients PUT to a presigned upload
URL and GET from a presigned download URL, and the server only checks for
the object afterwards.

Mock mode keeps objects in memory and returns mock:// URLs, enabling API
testing without provisioning actual object storage.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """Configuration for S3-compatible storage."""
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None  # None means AWS itself


class StorageClient(Protocol):
    """Protocol for object storage operations."""

    async def create_upload_url(
        self,
        key: str,
        content_type: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate a temporary URL the client can PUT the object to."""
        ...

    async def create_download_url(
        self,
        key: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate a temporary URL the client can GET the object from."""
        ...

    async def delete_object(self, key: str) -> None:
        ...

    async def object_exists(self, key: str) -> bool:
        ...

    async def get_object_size(self, key: str) -> Optional[int]:
        ...


class S3StorageClient:
    """
    S3-compatible object storage client.

    All methods are async to match the Protocol even though boto3 is
    synchronous.
    """

    def __init__(self, config: StorageConfig) -> None:
        import boto3
        from botocore.config import Config

        self._config = config

        # v4 signatures and path-style addressing work for S3, R2 and MinIO
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
                "region": config.region,
            }
        )

    async def create_upload_url(
        self,
        key: str,
        content_type: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """
        Generate a presigned PUT URL.

        The content type is part of the signature, so the client must send
        the same Content-Type header when uploading.
        """
        try:
            return self._s3_client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                },
                ExpiresIn=expiry_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to generate upload URL",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Upload URL generation failed: {e}")

    async def create_download_url(
        self,
        key: str,
        expiry_seconds: int = 3600,
    ) -> str:
        try:
            return self._s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': key,
                },
                ExpiresIn=expiry_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to generate download URL",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Download URL generation failed: {e}")

    async def delete_object(self, key: str) -> None:
        try:
            self._s3_client.delete_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
            logger.info("Deleted object", extra={"key": key})
        except Exception as e:
            logger.error(
                "Failed to delete object",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Delete failed: {e}")

    async def object_exists(self, key: str) -> bool:
        """
        Check whether an object is present.

        A 404 means "not there" and returns False; any other failure
        (credentials, network) raises StorageError.
        """
        from botocore.exceptions import ClientError

        try:
            self._head(key)
            return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            logger.error(
                "Failed to check object existence",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Existence check failed: {e}")

    async def get_object_size(self, key: str) -> Optional[int]:
        from botocore.exceptions import ClientError

        try:
            response = self._head(key)
        except ClientError as e:
            if _is_not_found(e):
                return None
            logger.error(
                "Failed to read object size",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Size lookup failed: {e}")

        return response.get('ContentLength')

    def _head(self, key: str) -> dict:
        return self._s3_client.head_object(
            Bucket=self._config.bucket_name,
            Key=key,
        )


def _is_not_found(error) -> bool:
    code = str(error.response.get('Error', {}).get('Code', ''))
    return code in ('404', 'NoSuchKey', 'NotFound')


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development and tests.

    Presigned URLs are mock:// URIs; nothing listens on them. Use
    `put_object` to simulate a client finishing an upload.
    """

    def __init__(self) -> None:
        # {key: bytes}
        self._objects: dict[str, bytes] = {}
        logger.info("Initialized mock storage client (in-memory)")

    def put_object(self, key: str, data: bytes) -> None:
        """Store an object directly, as a client upload would."""
        self._objects[key] = data

    def has_object(self, key: str) -> bool:
        return key in self._objects

    async def create_upload_url(
        self,
        key: str,
        content_type: str,
        expiry_seconds: int = 3600,
    ) -> str:
        return f"mock://storage/{key}?method=PUT&content_type={content_type}&expires={expiry_seconds}"

    async def create_download_url(
        self,
        key: str,
        expiry_seconds: int = 3600,
    ) -> str:
        return f"mock://storage/{key}?method=GET&expires={expiry_seconds}"

    async def delete_object(self, key: str) -> None:
        self._objects.pop(key, None)
        logger.debug("Deleted object from mock storage", extra={"key": key})

    async def object_exists(self, key: str) -> bool:
        return key in self._objects

    async def get_object_size(self, key: str) -> Optional[int]:
        data = self._objects.get(key)
        if data is None:
            return None
        return len(data)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        StorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
