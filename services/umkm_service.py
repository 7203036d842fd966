"""
UMKM profile service.

Profiles are created and edited by admins and are never hard-deleted.
"""

from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.umkm import (
    UMKMCreate,
    UMKMUpdate,
    UMKMResponse,
    UMKMDetail,
    UMKMProduct,
)
from exceptions import UMKMNotFoundError, DatabaseError
from services.storage_service import StorageService, UploadedFile
from utils.storage_paths import umkm_logo_path

logger = structlog.get_logger(__name__)


class UMKMService:
    """
    UMKM business logic.

    Handles CRUD operations for UMKM profiles.
    """

    def __init__(self, client=None, storage: Optional[StorageService] = None):
        self.db = client or get_supabase_client()
        self.storage = storage or StorageService(client=self.db, bucket=settings.products_bucket)
        self.table = "umkm_profiles"

    def _to_response(self, row: dict) -> UMKMResponse:
        return UMKMResponse(**row, logo_url=self.storage.public_url(row.get("logo_path")))

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> tuple[list[UMKMResponse], int]:
        """
        Get all UMKM profiles ordered by name.

        Returns:
            Tuple of (profiles list, total count)
        """
        logger.info("getting_umkm_profiles")

        try:
            result = (
                self.db.table(self.table)
                .select("*", count="exact")
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error("get_umkm_profiles_failed", error=str(e))
            raise DatabaseError("select", str(e))

        profiles = [self._to_response(row) for row in result.data]
        logger.info("umkm_profiles_retrieved", count=len(profiles))
        return profiles, result.count or len(profiles)

    def get_by_id(self, umkm_id: int) -> UMKMResponse:
        """
        Get a single UMKM profile.

        Raises:
            UMKMNotFoundError: If profile doesn't exist
        """
        logger.debug("getting_umkm", umkm_id=umkm_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", umkm_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_umkm_failed", umkm_id=umkm_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise UMKMNotFoundError(str(umkm_id))

        return self._to_response(result.data[0])

    def get_detail(self, umkm_id: int) -> UMKMDetail:
        """
        Get a UMKM profile with the products it owns.

        Raises:
            UMKMNotFoundError: If profile doesn't exist
        """
        profile = self.get_by_id(umkm_id)

        try:
            result = (
                self.db.table("products")
                .select("id, name, status")
                .eq("umkm_id", umkm_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_umkm_products_failed", umkm_id=umkm_id, error=str(e))
            raise DatabaseError("select", str(e))

        products = [
            UMKMProduct(id=row["id"], name=row["name"], status=row["status"])
            for row in result.data
        ]
        return UMKMDetail(**profile.model_dump(), products=products)

    def count(self) -> int:
        """Count registered UMKM profiles."""
        try:
            result = self.db.table(self.table).select("id", count="exact").execute()
            return result.count or 0
        except Exception as e:
            logger.error("count_umkm_failed", error=str(e))
            raise DatabaseError("count", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: UMKMCreate) -> UMKMResponse:
        """
        Register a new UMKM.

        Args:
            data: Validated profile fields

        Returns:
            Created UMKMResponse
        """
        logger.info("creating_umkm", name=data.name)

        try:
            result = (
                self.db.table(self.table)
                .insert(data.model_dump())
                .execute()
            )
        except Exception as e:
            logger.error("create_umkm_failed", name=data.name, error=str(e))
            raise DatabaseError("insert", str(e))

        profile = self._to_response(result.data[0])
        logger.info("umkm_created", umkm_id=profile.id, name=profile.name)
        return profile

    def update(self, umkm_id: int, data: UMKMUpdate) -> UMKMResponse:
        """
        Update an existing UMKM.

        Raises:
            UMKMNotFoundError: If profile doesn't exist
        """
        logger.info("updating_umkm", umkm_id=umkm_id)

        existing = self.get_by_id(umkm_id)

        update_data = data.model_dump(exclude_unset=True)
        if "email" in update_data:
            update_data["email"] = update_data["email"] or None
        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", umkm_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_umkm_failed", umkm_id=umkm_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info("umkm_updated", umkm_id=umkm_id, fields=list(update_data.keys()))
        return self._to_response(result.data[0])

    def upload_logo(self, umkm_id: int, file: UploadedFile) -> UMKMResponse:
        """
        Upload a new logo and point the profile at it.

        The previous logo object is removed afterwards; a failed removal
        only leaves an orphaned object behind.

        Raises:
            UMKMNotFoundError: If profile doesn't exist
            StorageError: If the upload fails
        """
        existing = self.get_by_id(umkm_id)
        new_path = self.storage.upload(umkm_logo_path(umkm_id, file.filename), file)

        try:
            result = (
                self.db.table(self.table)
                .update({"logo_path": new_path})
                .eq("id", umkm_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_umkm_logo_failed", umkm_id=umkm_id, error=str(e))
            self.storage.remove([new_path])
            raise DatabaseError("update", str(e))

        if existing.logo_path:
            self.storage.remove([existing.logo_path])

        logger.info("umkm_logo_updated", umkm_id=umkm_id, logo_path=new_path)
        return self._to_response(result.data[0])


# Singleton instance for convenience
_umkm_service: Optional[UMKMService] = None


def get_umkm_service() -> UMKMService:
    """Get or create UMKMService instance."""
    global _umkm_service
    if _umkm_service is None:
        _umkm_service = UMKMService()
    return _umkm_service
