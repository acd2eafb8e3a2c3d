"""Blob storage for recipe cover images (S3-compatible)."""

import logging
from abc import ABC, abstractmethod
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Key prefix of every blob issued by generate_upload_url
COVER_PREFIX = "covers/"


class BlobStore(ABC):
    """Interface for the blob store consumed by recipe and discovery code.

    Blob ids are opaque keys stored on the recipe row (``Recipe.cover_image``).
    """

    @abstractmethod
    def get_url(self, blob_id: str) -> str | None:
        """Return a URL the client can load the blob from, or None."""

    @abstractmethod
    def generate_upload_url(self) -> dict:
        """Issue a one-shot upload target.

        Returns:
            {"upload_url": str, "blob_id": str}
        """

    @abstractmethod
    def delete(self, blob_id: str) -> None:
        """Delete a blob. Deleting a missing blob is not an error."""


class S3BlobStore(BlobStore):
    """Blob store backed by an S3-compatible bucket (S3, R2, MinIO)."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.bucket = self.settings.storage_bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=self.settings.storage_endpoint_url,
            aws_access_key_id=self.settings.storage_access_key_id,
            aws_secret_access_key=self.settings.storage_secret_access_key,
            region_name=self.settings.storage_region,
        )

    def get_url(self, blob_id: str) -> str | None:
        if not blob_id:
            return None
        if self.settings.storage_public_url:
            return f"{self.settings.storage_public_url.rstrip('/')}/{blob_id}"
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": blob_id},
                ExpiresIn=self.settings.storage_url_expiration_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to sign URL for blob {blob_id}: {e}")
            return None

    def generate_upload_url(self) -> dict:
        blob_id = f"{COVER_PREFIX}{uuid4().hex}"
        upload_url = self._client.generate_presigned_url(
            "put_object",
            Params={"Bucket": self.bucket, "Key": blob_id},
            ExpiresIn=self.settings.storage_url_expiration_seconds,
        )
        return {"upload_url": upload_url, "blob_id": blob_id}

    def delete(self, blob_id: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=blob_id)
        logger.info(f"Deleted blob {blob_id}")


def cover_url(store: BlobStore, blob_id: str | None) -> str | None:
    """Resolve a recipe's cover image key to a URL (None when unset)."""
    return store.get_url(blob_id) if blob_id else None
