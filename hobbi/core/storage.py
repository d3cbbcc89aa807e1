import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from hobbi.core.config import settings
from hobbi.core.exceptions import ObjectStorageError

logger = logging.getLogger(__name__)


class ObjectStorage:
    """Handles image objects on S3-compatible storage, or local disk when it is not configured"""

    def __init__(self, client=None):
        self.client = client
        self.bucket = settings.STORAGE_BUCKET_NAME
        self.folder = settings.STORAGE_FOLDER
        self.local_root = Path(settings.UPLOAD_DIRECTORY)

        if settings.STORAGE_PUBLIC_URL:
            self.public_url = settings.STORAGE_PUBLIC_URL.rstrip("/")
        else:
            # Served by the static mount in hobbi.main
            self.public_url = f"{settings.BASE_URL}{settings.API_V1_STR}/static"

        logger.info("Initializing ObjectStorage with configuration:")
        logger.info(f"  Bucket: {self.bucket}")
        logger.info(f"  Public URL: {self.public_url}")
        logger.info(f"  Endpoint: {settings.STORAGE_ENDPOINT or 'Not set'}")

        if self.client is None and all([settings.STORAGE_ENDPOINT, settings.STORAGE_ACCESS_KEY_ID, settings.STORAGE_SECRET_ACCESS_KEY]):
            logger.info("Creating S3 client for object storage...")
            self.client = boto3.client(
                "s3",
                endpoint_url=settings.STORAGE_ENDPOINT,
                aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID,
                aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY,
            )
        elif self.client is None:
            missing = [
                name for name in ("STORAGE_ENDPOINT", "STORAGE_ACCESS_KEY_ID", "STORAGE_SECRET_ACCESS_KEY")
                if not getattr(settings, name)
            ]
            logger.warning(f"Object storage not configured - missing: {', '.join(missing)}. Using local storage.")

    def generate_unique_name(self, filename: Optional[str]) -> str:
        file_extension = os.path.splitext(filename or "")[1].lower()
        return f"{uuid.uuid4().hex}{file_extension}"

    def key_for(self, name: str) -> str:
        return f"{self.folder}/{name}"

    def url_for(self, name: str) -> str:
        return f"{self.public_url}/{self.key_for(name)}"

    def suffix_of(self, url: str) -> str:
        """Object key of a URL produced by url_for"""
        prefix = f"{self.public_url}/"
        if url.startswith(prefix):
            return url[len(prefix):]
        return url

    def put_object(self, name: str, content: bytes, content_type: Optional[str] = None) -> str:
        key = self.key_for(name)
        if not self.client:
            local_path = self.local_root / key
            local_path.parent.mkdir(parents=True, exist_ok=True)
            local_path.write_bytes(content)
            logger.info(f"Saved file locally at {local_path}")
            return key

        logger.info(f"Uploading {len(content)} bytes to bucket '{self.bucket}' with key '{key}'")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload '{key}': {e}")
            raise ObjectStorageError(f"Failed to upload {key}")
        return key

    def delete(self, url_or_key: str) -> None:
        """Delete an object given its public URL or its key"""
        key = self.suffix_of(url_or_key)
        if not self.client:
            local_path = self.local_root / key
            if local_path.exists():
                local_path.unlink()
                logger.info(f"Deleted local file {local_path}")
            return

        logger.info(f"Deleting file with key '{key}' from bucket '{self.bucket}'")
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete '{key}': {e}")
            raise ObjectStorageError(f"Failed to delete {key}")


# Global instance for app-wide usage
object_storage = ObjectStorage()


def get_storage() -> ObjectStorage:
    """FastAPI dependency returning the app-wide storage instance"""
    return object_storage
