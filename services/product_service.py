"""
Product service for admin CRUD operations.

Media handling is delegated to MediaService; this service owns the
product rows, the public unique code and the admin list/search.
"""

import secrets
import string
from typing import Optional
import structlog

from config import get_supabase_client
from models.product import (
    MediaMode,
    MediaReport,
    ProductCreate,
    ProductDetail,
    ProductListItem,
    ProductMutationResponse,
    ProductResponse,
    ProductStatus,
    ProductUpdate,
)
from models.umkm import UMKMResponse
from exceptions import (
    DatabaseError,
    MediaModeConflictError,
    ProductNotFoundError,
    ValidationError,
)
from services.media_service import MediaService, get_media_service, to_image_responses
from services.storage_service import StorageService, UploadedFile, get_product_storage

logger = structlog.get_logger(__name__)

UNIQUE_CODE_LENGTH = 10
UNIQUE_CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

DETAIL_SELECT = "*, umkm_profiles(*), product_images(*)"
LIST_SELECT = "*, umkm_profiles(name)"


def generate_unique_code(length: int = UNIQUE_CODE_LENGTH) -> str:
    """
    Random public code for a product's QR link.

    Collisions are not checked.
    """
    return "".join(secrets.choice(UNIQUE_CODE_ALPHABET) for _ in range(length))


def filter_products(products: list[ProductListItem], search: Optional[str]) -> list[ProductListItem]:
    """Case-insensitive match on product name, unique code or UMKM name."""
    if not search or not search.strip():
        return products
    needle = search.strip().lower()
    return [
        p for p in products
        if needle in p.name.lower()
        or needle in p.unique_code.lower()
        or (p.umkm_name is not None and needle in p.umkm_name.lower())
    ]


class ProductService:
    """
    Product business logic.

    Handles CRUD operations for products.
    """

    def __init__(
        self,
        client=None,
        storage: Optional[StorageService] = None,
        media: Optional[MediaService] = None
    ):
        self.db = client or get_supabase_client()
        self.storage = storage or get_product_storage()
        self.media = media or MediaService(client=self.db, storage=self.storage)
        self.table = "products"

    def to_response(self, row: dict) -> ProductResponse:
        return ProductResponse(**row, video_url=self.storage.public_url(row.get("video_path")))

    def to_detail(self, row: dict) -> ProductDetail:
        product = self.to_response(row)
        umkm_row = row.get("umkm_profiles")
        umkm = None
        if umkm_row:
            umkm = UMKMResponse(**umkm_row, logo_url=self.storage.public_url(umkm_row.get("logo_path")))
        return ProductDetail(
            **product.model_dump(),
            umkm=umkm,
            images=to_image_responses(row.get("product_images") or [], self.storage)
        )

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, search: Optional[str] = None) -> tuple[list[ProductListItem], int]:
        """
        Get all products with their UMKM name, newest first.

        Args:
            search: Optional text matched against name, code and UMKM name

        Returns:
            Tuple of (products list, total count)
        """
        logger.info("getting_products", search=search)

        try:
            result = (
                self.db.table(self.table)
                .select(LIST_SELECT)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        products = [
            ProductListItem(
                **self.to_response(row).model_dump(),
                umkm_name=(row.get("umkm_profiles") or {}).get("name")
            )
            for row in result.data
        ]
        products = filter_products(products, search)

        logger.info("products_retrieved", count=len(products))
        return products, len(products)

    def get_by_id(self, product_id: int) -> ProductResponse:
        """
        Get a single product row.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(str(product_id))

        return self.to_response(result.data[0])

    def get_detail(self, product_id: int) -> ProductDetail:
        """
        Get a product with its UMKM and images in one read.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        try:
            result = (
                self.db.table(self.table)
                .select(DETAIL_SELECT)
                .eq("id", product_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_detail_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(str(product_id))

        return self.to_detail(result.data[0])

    def count(self) -> int:
        """Count total products."""
        try:
            result = self.db.table(self.table).select("id", count="exact").execute()
            return result.count or 0
        except Exception as e:
            logger.error("count_products_failed", error=str(e))
            raise DatabaseError("count", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(
        self,
        data: ProductCreate,
        images: Optional[list[UploadedFile]] = None,
        video: Optional[UploadedFile] = None
    ) -> ProductMutationResponse:
        """
        Create a new product and attach its media.

        New products are always active and get a fresh unique code.

        Args:
            data: Validated product fields
            images: Carousel images in display order
            video: Product video

        Returns:
            ProductMutationResponse with the product and a media report

        Raises:
            MediaModeConflictError: If both images and a video are given
        """
        images = images or []
        if images and video is not None:
            raise MediaModeConflictError(len(images))

        unique_code = generate_unique_code()
        logger.info("creating_product", name=data.name, umkm_id=data.umkm_id, unique_code=unique_code)

        try:
            insert_data = {
                **data.model_dump(),
                "unique_code": unique_code,
                "status": ProductStatus.ACTIVE.value,
            }
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )
        except Exception as e:
            logger.error("create_product_failed", name=data.name, error=str(e))
            raise DatabaseError("insert", str(e))

        product_id = result.data[0]["id"]
        report = self.media.attach_initial_media(product_id, images, video)

        logger.info("product_created", product_id=product_id, unique_code=unique_code)

        return ProductMutationResponse(
            product=self.get_detail(product_id),
            media=report,
            message="Product created successfully"
        )

    def update(
        self,
        product_id: int,
        data: ProductUpdate,
        media_mode: Optional[MediaMode] = None,
        images: Optional[list[UploadedFile]] = None,
        video: Optional[UploadedFile] = None,
        remove_image_ids: Optional[list[int]] = None
    ) -> ProductMutationResponse:
        """
        Update product fields and, when a media mode is given, its media.

        Args:
            product_id: Product id
            data: Fields to update
            media_mode: Media mode chosen on the edit form
            images: New images (IMAGES mode)
            video: Replacement video (VIDEO mode)
            remove_image_ids: Existing images to delete (IMAGES mode)

        Raises:
            ProductNotFoundError: If product doesn't exist
            ValidationError: If images are marked for removal without a media mode
        """
        logger.info("updating_product", product_id=product_id, media_mode=media_mode)

        if remove_image_ids and media_mode is None:
            raise ValidationError(
                "remove_image_ids requires media_mode",
                details={"remove_image_ids": remove_image_ids}
            )

        existing = self.get_by_id(product_id)

        update_data = data.model_dump(exclude_unset=True, mode="json")
        if update_data:
            try:
                (
                    self.db.table(self.table)
                    .update(update_data)
                    .eq("id", product_id)
                    .execute()
                )
            except Exception as e:
                logger.error("update_product_failed", product_id=product_id, error=str(e))
                raise DatabaseError("update", str(e))

            logger.info("product_updated", product_id=product_id, fields=list(update_data.keys()))

        report = MediaReport()
        if media_mode is not None:
            report = self.media.update_media(
                existing,
                media_mode,
                images=images,
                video=video,
                remove_image_ids=remove_image_ids
            )

        return ProductMutationResponse(
            product=self.get_detail(product_id),
            media=report,
            message="Product updated successfully"
        )

    def delete(self, product_id: int) -> MediaReport:
        """
        Delete a product and its images, then remove its media objects.

        The product row goes first; nothing else is touched if that fails.
        Image rows normally cascade with it and are cleared explicitly
        afterwards for databases without the cascade.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("deleting_product", product_id=product_id)

        product = self.get_by_id(product_id)
        image_rows = self.media.get_image_rows(product_id)

        try:
            self.db.table(self.table).delete().eq("id", product_id).execute()
        except Exception as e:
            logger.error("delete_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("delete", str(e))

        try:
            self.db.table("product_images").delete().eq("product_id", product_id).execute()
        except Exception as e:
            logger.warning("delete_product_images_failed", product_id=product_id, error=str(e))

        report = self.media.purge(product, image_rows)
        logger.info("product_deleted", product_id=product_id, removed=len(report.removed))
        return report


# Singleton instance for convenience
_product_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService(media=get_media_service())
    return _product_service
