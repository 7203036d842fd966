"""
Object storage access for product media, review photos and logos.

Uploads raise StorageError. Removals never raise: objects that could not
be removed are logged and returned so callers can report them as orphaned.
"""

import mimetypes
from dataclasses import dataclass
from typing import Optional
import structlog

from config import get_supabase_client, settings
from exceptions import StorageError

logger = structlog.get_logger(__name__)


@dataclass
class UploadedFile:
    """File received from a multipart form."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def resolved_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "application/octet-stream"


class StorageService:
    """
    Thin wrapper over one Supabase Storage bucket.
    """

    def __init__(self, client=None, bucket: Optional[str] = None):
        self.db = client or get_supabase_client()
        self.bucket = bucket or settings.products_bucket

    def upload(self, path: str, file: UploadedFile) -> str:
        """
        Upload one file.

        Args:
            path: Object path inside the bucket
            file: File content and metadata

        Returns:
            The stored object path

        Raises:
            StorageError: If the upload fails
        """
        logger.debug(
            "uploading_to_storage",
            bucket=self.bucket,
            storage_path=path,
            size_bytes=len(file.content)
        )

        try:
            self.db.storage.from_(self.bucket).upload(
                path,
                file.content,
                file_options={"content-type": file.resolved_content_type}
            )
        except Exception as e:
            logger.error(
                "storage_upload_failed",
                bucket=self.bucket,
                storage_path=path,
                filename=file.filename,
                error=str(e)
            )
            raise StorageError("upload", path, str(e))

        logger.info("uploaded_to_storage", bucket=self.bucket, storage_path=path)
        return path

    def remove(self, paths: list[Optional[str]]) -> list[str]:
        """
        Remove objects one by one.

        Args:
            paths: Object paths; empty entries are ignored

        Returns:
            Paths that could not be removed (orphaned objects)
        """
        orphaned = []
        for path in paths:
            if not path:
                continue
            try:
                self.db.storage.from_(self.bucket).remove([path])
                logger.info("removed_from_storage", bucket=self.bucket, storage_path=path)
            except Exception as e:
                logger.error(
                    "storage_remove_failed",
                    bucket=self.bucket,
                    storage_path=path,
                    error=str(e)
                )
                orphaned.append(path)
        return orphaned

    def public_url(self, path: Optional[str]) -> Optional[str]:
        """Public URL for an object path; absolute URLs pass through."""
        if not path:
            return None
        if path.startswith("http"):
            return path
        base = settings.supabase_url.rstrip("/")
        return f"{base}/storage/v1/object/public/{self.bucket}/{path}"


# Singleton instances for convenience
_product_storage: Optional[StorageService] = None
_review_storage: Optional[StorageService] = None


def get_product_storage() -> StorageService:
    """Get or create the product media bucket wrapper."""
    global _product_storage
    if _product_storage is None:
        _product_storage = StorageService(bucket=settings.products_bucket)
    return _product_storage


def get_review_storage() -> StorageService:
    """Get or create the review photo bucket wrapper."""
    global _review_storage
    if _review_storage is None:
        _review_storage = StorageService(bucket=settings.reviews_bucket)
    return _review_storage
