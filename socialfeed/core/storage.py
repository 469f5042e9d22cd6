import os
import time
import uuid
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from socialfeed.core.config import Settings
from socialfeed.core.errors import StorageError
from socialfeed.core.messages import ErrorMessages

logger = logging.getLogger(__name__)


def generate_object_name(filename: Optional[str]) -> str:
    """Unique blob name: millisecond timestamp, uuid4, original extension."""
    file_extension = os.path.splitext(filename or "")[1].lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}{file_extension}"


class ObjectStorage:
    """Handles image storage in an S3-compatible bucket.

    When no credentials are configured, files are written below
    ``UPLOAD_DIRECTORY`` and served from ``/static`` instead.
    """

    def __init__(self, settings: Settings, client=None):
        self.client = client
        self.bucket = settings.S3_BUCKET_NAME
        self.region = settings.S3_REGION
        self.public_url = settings.S3_PUBLIC_URL.rstrip("/")
        self.base_url = settings.BASE_URL.rstrip("/")
        self.upload_directory = settings.UPLOAD_DIRECTORY

        logger.info("Initializing ObjectStorage with configuration:")
        logger.info(f"  Bucket: {self.bucket}")
        logger.info(f"  Region: {self.region}")
        logger.info(f"  Endpoint: {settings.S3_ENDPOINT or 'AWS default'}")
        logger.info(f"  Public URL: {self.public_url or 'derived from bucket'}")

        if self.client is None and settings.storage_configured:
            logger.info("Creating S3 client...")
            self.client = boto3.client(
                "s3",
                endpoint_url=settings.S3_ENDPOINT or None,
                region_name=self.region,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            )
            logger.info("S3 client initialized successfully")
        elif self.client is None:
            logger.warning("Object storage credentials not set, files will be stored locally")

    @property
    def is_local(self) -> bool:
        return self.client is None

    def _object_url(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def _key_from_url(self, url: str) -> Optional[str]:
        if self.is_local:
            prefix = f"{self.base_url}/static/"
        elif self.public_url:
            prefix = f"{self.public_url}/"
        else:
            prefix = f"https://{self.bucket}.s3.{self.region}.amazonaws.com/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def upload_bytes(self, content: bytes, filename: Optional[str], content_type: str, prefix: str) -> str:
        """Store ``content`` under ``prefix`` and return its public URL."""
        key = f"{prefix}/{generate_object_name(filename)}"

        if self.is_local:
            local_path = os.path.join(self.upload_directory, key)
            os.makedirs(os.path.dirname(local_path), exist_ok=True)
            try:
                with open(local_path, "wb") as out_file:
                    out_file.write(content)
            except OSError as e:
                logger.error(f"Failed to save file locally at {local_path}: {e}")
                raise StorageError(ErrorMessages.UPLOAD_FAILED) from e
            logger.info(f"Saved {len(content)} bytes locally at {local_path}")
            return f"{self.base_url}/static/{key}"

        logger.info(f"Uploading '{filename}' to bucket '{self.bucket}' with key '{key}'")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
                CacheControl="max-age=3600",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload '{key}': {e}")
            raise StorageError(ErrorMessages.UPLOAD_FAILED) from e

        return self._object_url(key)

    def delete_file(self, url: str) -> bool:
        """Delete a stored file by its public URL. Returns False when nothing was deleted."""
        key = self._key_from_url(url)
        if key is None:
            logger.error(f"URL {url} doesn't match any expected URL pattern")
            return False

        if self.is_local:
            local_path = os.path.join(self.upload_directory, key)
            try:
                os.remove(local_path)
            except FileNotFoundError:
                return False
            return True

        try:
            logger.info(f"Deleting file with key '{key}' from bucket '{self.bucket}'")
            self.client.delete_object(Bucket=self.bucket, Key=key)
            return True
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete '{key}': {e}")
            return False
