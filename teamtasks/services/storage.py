# teamtasks/services/storage.py
"""
S3-compatible blob store for attachment bytes (MinIO locally, AWS otherwise).
"""
import logging
import os
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from teamtasks.core.exceptions import StorageError
from teamtasks.core.settings import settings

logger = logging.getLogger("TaskHub.Storage")


def generate_stored_filename(original_filename: str) -> str:
    """uuid4 hex plus the lower-cased extension of the client's filename."""
    _, ext = os.path.splitext(original_filename or "")
    return f"{uuid.uuid4().hex}{ext.lower()}"


def object_key_for(stored_filename: str) -> str:
    return f"attachments/{stored_filename}"


class BlobStorage:
    def __init__(self, bucket_name: Optional[str] = None, client=None):
        self.bucket_name = bucket_name or settings.STORAGE_BUCKET
        self.s3_client = client or boto3.client(
            "s3",
            endpoint_url=settings.STORAGE_ENDPOINT_URL,
            aws_access_key_id=settings.STORAGE_ACCESS_KEY,
            aws_secret_access_key=settings.STORAGE_SECRET_KEY,
            region_name=settings.STORAGE_REGION,
        )

    def ensure_bucket(self) -> None:
        """Creates the bucket when it does not exist yet."""
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code not in ("404", "NoSuchBucket", "NotFound"):
                logger.error(f"Failed to check bucket {self.bucket_name}: {e}", exc_info=True)
                raise StorageError() from e
        except BotoCoreError as e:
            logger.error(f"Blob store unreachable: {e}", exc_info=True)
            raise StorageError() from e
        try:
            self.s3_client.create_bucket(Bucket=self.bucket_name)
            logger.info(f"Created bucket {self.bucket_name}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to create bucket {self.bucket_name}: {e}", exc_info=True)
            raise StorageError() from e

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {key}: {e}", exc_info=True)
            raise StorageError("Failed to store file") from e

    def get(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to download {key}: {e}", exc_info=True)
            raise StorageError("Failed to read file") from e

    def delete(self, key: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete {key}: {e}", exc_info=True)
            raise StorageError("Failed to delete file") from e
