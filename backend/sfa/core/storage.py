"""Supabase Storage client for receipt and customer images."""
import logging
import uuid
from typing import Optional

from storage3.utils import StorageException
from supabase import create_client

from sfa.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a blob cannot be stored."""


class StorageClient:
    """
    Client for Supabase Storage operations.

    Files go to ``SUPABASE_STORAGE_BUCKET``; the public URL is what gets
    persisted on rows.
    """

    _client = None

    @classmethod
    def get_client(cls):
        """Get or create the Supabase client."""
        if cls._client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise StorageError(
                    "Supabase credentials not configured. "
                    "Set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables."
                )
            cls._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
        return cls._client

    @classmethod
    def get_bucket(cls):
        client = cls.get_client()
        return client.storage.from_(settings.SUPABASE_STORAGE_BUCKET)

    @classmethod
    def upload(
        cls,
        content: bytes,
        path: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload a file to Supabase Storage.

        Args:
            content: File content as bytes
            path: Storage path (e.g. "collection-receipts/abc.jpg")
            content_type: MIME type (e.g. "image/jpeg")

        Returns:
            Public URL of the uploaded file
        """
        if not content:
            raise StorageError("Refusing to store an empty file")

        bucket = cls.get_bucket()
        try:
            bucket.upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "upsert": "true",
                },
            )
        except StorageException as exc:
            raise StorageError(f"Unable to store {path}: {exc}") from exc

        logger.info("Stored blob %s (%s bytes, %s)", path, len(content), content_type)
        return cls.get_public_url(path)

    @classmethod
    def get_public_url(cls, path: str) -> str:
        return cls.get_bucket().get_public_url(path)

    @staticmethod
    def generate_path(folder: str, filename: str) -> str:
        """Build ``<folder>/<uuid>.<ext>`` keeping the original extension."""
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        return f"{folder}/{uuid.uuid4()}.{ext}"
