"""
Storage Abstraction Layer - The Bridge Pattern

Provides a clean interface for storage operations with S3ObjectStore as the
production implementation. The pipeline only talks to ObjectStore, so tests
swap in an in-memory fake.
"""

from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cutout.core.config import Settings
from cutout.core.exceptions import StorageError
from cutout.core.logging import get_logger
from cutout.pipeline.schemas import StoredImage

logger = get_logger(__name__)


def object_key(folder: str, filename: str) -> str:
    return f"{folder}/{filename}.png"


def public_url(bucket: str, key: str) -> str:
    return f"https://{bucket}.s3.amazonaws.com/{key}"


class ObjectStore(ABC):
    """Interface for object storage operations - The Bridge"""

    @abstractmethod
    def upload(
        self,
        file_data: bytes,
        filename: str,
        content_type: str = "image/png"
    ) -> StoredImage:
        """
        Upload a file and return where it was stored.

        Args:
            file_data: Raw bytes of the file
            filename: Key stem; the folder prefix and `.png` suffix are added
            content_type: MIME type of the file

        Returns:
            StoredImage with the bucket, key and public URL

        Raises:
            ConfigError: If the storage target is not configured
            StorageError: If the upload fails
        """
        pass


class S3ObjectStore(ObjectStore):
    """
    AWS S3 implementation.

    The bucket, folder and region are read from settings at upload time.
    The boto3 client is created on first upload and reused for the lifetime
    of this store, which is a single invocation.
    """

    def __init__(self, config: Settings, client=None):
        self.config = config
        self._client = client

    def _get_client(self, region: str):
        if self._client is None:
            self._client = boto3.client("s3", region_name=region)
        return self._client

    def upload(
        self,
        file_data: bytes,
        filename: str,
        content_type: str = "image/png"
    ) -> StoredImage:
        bucket = self.config.require("BUCKET_NAME")
        folder = self.config.require("FOLDER_NAME")
        region = self.config.require("BUCKET_REGION")

        key = object_key(folder, filename)

        try:
            client = self._get_client(region)
            client.put_object(
                Bucket=bucket,
                Key=key,
                Body=file_data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("s3_upload_failed", bucket=bucket, key=key, error=str(e))
            raise StorageError(
                f"Failed to upload {key} to bucket {bucket}: {e}",
                details={"bucket": bucket, "key": key}
            ) from e

        url = public_url(bucket, key)
        logger.info("s3_upload_completed", bucket=bucket, key=key, size=len(file_data))

        return StoredImage(bucket=bucket, key=key, url=url)


def get_object_store(config: Settings, client: Optional[object] = None) -> ObjectStore:
    """Build the object store for one invocation."""
    return S3ObjectStore(config, client=client)
