"""Supabase Storage client for kit images and laser files.

Blobs are addressed by an opaque storage id: the object path inside the
configured bucket. Browsers upload directly to a signed upload URL; the API
only hands out URLs and deletes objects.
"""
import logging
import uuid
from typing import Optional, Tuple

from supabase import create_client

from kitflow.config import settings


logger = logging.getLogger(__name__)


class StorageClient:
    """Client for Supabase Storage operations."""

    _client = None

    @classmethod
    def get_client(cls):
        """Get or create Supabase client."""
        if cls._client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise ValueError(
                    "Supabase credentials not configured. "
                    "Set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables."
                )
            cls._client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_KEY
            )
        return cls._client

    @classmethod
    def get_bucket(cls):
        """Get the storage bucket."""
        client = cls.get_client()
        return client.storage.from_(settings.SUPABASE_STORAGE_BUCKET)

    @classmethod
    def generate_upload_url(cls, folder: str = "uploads") -> Tuple[str, str]:
        """
        Reserve a new object path and sign an upload URL for it.

        Returns:
            (upload_url, storage_id)
        """
        storage_id = f"{folder}/{uuid.uuid4().hex}"
        result = cls.get_bucket().create_signed_upload_url(storage_id)
        upload_url = result.get("signed_url") or result.get("signedUrl")
        logger.info(f"Signed upload URL issued for {storage_id}")
        return upload_url, storage_id

    @classmethod
    def get_url(cls, storage_id: str) -> Optional[str]:
        """
        Signed download URL for a stored object.

        Returns None when the object does not exist or cannot be signed.
        """
        if not storage_id:
            return None
        try:
            result = cls.get_bucket().create_signed_url(
                storage_id,
                settings.STORAGE_URL_EXPIRY_SECONDS
            )
        except Exception as e:
            logger.warning(f"Could not sign URL for {storage_id}: {e}")
            return None
        return result.get("signedURL") or result.get("signedUrl")

    @classmethod
    def delete(cls, storage_id: str) -> bool:
        """
        Delete an object.

        Args:
            storage_id: Object path in the bucket

        Returns:
            True if a delete was issued
        """
        if not storage_id:
            return False

        cls.get_bucket().remove([storage_id])
        logger.info(f"Storage object deleted: {storage_id}")
        return True
