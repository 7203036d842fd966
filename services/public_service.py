"""
Public product pages reached by scanning a QR code.

Only active products resolve. Every successful resolution of the main
page writes a qr_scans row; sub-pages do not.
"""

from datetime import datetime, timezone
from typing import Mapping, Optional
import structlog

from config import get_supabase_client
from models.product import (
    ProductStatus,
    ProductWithImages,
    ProductWithReviews,
    ProductWithUMKM,
    PublicProductView,
)
from models.review import ReviewResponse, calculate_average_rating
from models.scan import UNKNOWN, QRScanCreate
from exceptions import DatabaseError, ProductNotFoundError
from services.product_service import DETAIL_SELECT, ProductService
from services.review_service import ReviewService
from services.storage_service import StorageService, get_product_storage, get_review_storage

logger = structlog.get_logger(__name__)


def client_ip(headers: Mapping[str, str]) -> str:
    """First hop of x-forwarded-for, or "unknown"."""
    forwarded = headers.get("x-forwarded-for")
    if not forwarded:
        return UNKNOWN
    first = forwarded.split(",")[0].strip()
    return first or UNKNOWN


class PublicService:
    """
    Read side of the public catalog.
    """

    def __init__(
        self,
        client=None,
        storage: Optional[StorageService] = None,
        review_storage: Optional[StorageService] = None
    ):
        self.db = client or get_supabase_client()
        self.products = ProductService(client=self.db, storage=storage or get_product_storage())
        self.reviews = ReviewService(client=self.db, storage=review_storage or get_review_storage())

    # ===================
    # RESOLUTION
    # ===================

    def _resolve_row(self, unique_code: str) -> dict:
        """Product row with UMKM and images for an active code."""
        try:
            result = (
                self.db.table("products")
                .select(DETAIL_SELECT)
                .eq("unique_code", unique_code)
                .eq("status", ProductStatus.ACTIVE.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("resolve_product_failed", unique_code=unique_code, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            logger.info("product_code_not_resolved", unique_code=unique_code)
            raise ProductNotFoundError(unique_code)

        return result.data[0]

    def resolve_product_id(self, unique_code: str) -> int:
        """
        Id of the active product behind a code.

        Raises:
            ProductNotFoundError: If no active product has this code
        """
        try:
            result = (
                self.db.table("products")
                .select("id")
                .eq("unique_code", unique_code)
                .eq("status", ProductStatus.ACTIVE.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("resolve_product_failed", unique_code=unique_code, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(unique_code)
        return result.data[0]["id"]

    def get_product_page(
        self,
        unique_code: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> PublicProductView:
        """
        Landing page for a scanned code.

        Args:
            unique_code: Public product code
            ip_address: Visitor IP, "unknown" when missing
            user_agent: Visitor user agent, "unknown" when missing

        Returns:
            PublicProductView with images, maker and approved reviews

        Raises:
            ProductNotFoundError: If the code is unknown or the product is inactive
        """
        detail = self.products.to_detail(self._resolve_row(unique_code))
        reviews = self.reviews.get_approved(detail.id)

        self.log_scan(detail.id, ip_address, user_agent)

        return PublicProductView(
            **detail.model_dump(),
            reviews=reviews,
            average_rating=self._average(reviews),
            review_count=len(reviews)
        )

    def log_scan(
        self,
        product_id: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> bool:
        """
        Record one page view.

        Failures are logged and swallowed so the page still renders.

        Returns:
            True when the row was written
        """
        scan = QRScanCreate(
            product_id=product_id,
            scanned_at=datetime.now(timezone.utc),
            ip_address=ip_address or UNKNOWN,
            user_agent=user_agent or UNKNOWN
        )

        try:
            self.db.table("qr_scans").insert(scan.model_dump(mode="json")).execute()
        except Exception as e:
            logger.warning("scan_log_failed", product_id=product_id, error=str(e))
            return False

        logger.info("product_scanned", product_id=product_id, ip_address=scan.ip_address)
        return True

    # ===================
    # SUB-PAGES
    # ===================

    def get_story(self, unique_code: str) -> ProductWithImages:
        """Story page: product text and images."""
        detail = self.products.to_detail(self._resolve_row(unique_code))
        return ProductWithImages(**detail.model_dump(exclude={"umkm"}))

    def get_gallery(self, unique_code: str) -> ProductWithImages:
        """Gallery page: product with its carousel."""
        detail = self.products.to_detail(self._resolve_row(unique_code))
        return ProductWithImages(**detail.model_dump(exclude={"umkm"}))

    def get_maker(self, unique_code: str) -> ProductWithUMKM:
        """Maker page: product with its UMKM profile."""
        detail = self.products.to_detail(self._resolve_row(unique_code))
        return ProductWithUMKM(**detail.model_dump(exclude={"images"}))

    def get_reviews(self, unique_code: str) -> ProductWithReviews:
        """Reviews page: approved reviews and their average."""
        product = self.products.to_response(self._resolve_row(unique_code))
        reviews = self.reviews.get_approved(product.id)
        return ProductWithReviews(
            **product.model_dump(),
            reviews=reviews,
            average_rating=self._average(reviews),
            review_count=len(reviews)
        )

    @staticmethod
    def _average(reviews: list[ReviewResponse]) -> float:
        return calculate_average_rating([r.rating for r in reviews])


# Singleton instance for convenience
_public_service: Optional[PublicService] = None


def get_public_service() -> PublicService:
    """Get or create PublicService instance."""
    global _public_service
    if _public_service is None:
        _public_service = PublicService()
    return _public_service
