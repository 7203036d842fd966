"""
Review service: public submission and admin moderation.

Submissions are all-or-nothing: if any photo fails to upload, the photos
already stored are removed and no review row is written.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.review import (
    AdminReviewResponse,
    ReviewCounts,
    ReviewFilter,
    ReviewListResponse,
    ReviewResponse,
    ReviewStatus,
    ReviewSubmission,
    is_valid_status_transition,
)
from exceptions import (
    DatabaseError,
    InvalidStatusTransitionError,
    ReviewNotFoundError,
    ReviewSubmissionError,
    StorageError,
)
from services.storage_service import StorageService, UploadedFile, get_review_storage
from utils.storage_paths import review_image_path

logger = structlog.get_logger(__name__)

ADMIN_SELECT = "*, products(name)"


class ReviewService:
    """
    Review business logic.

    Moderation moves: pending → approved/rejected, rejected → approved,
    approved → rejected. Deletion is allowed from any state.
    """

    def __init__(self, client=None, storage: Optional[StorageService] = None):
        self.db = client or get_supabase_client()
        self.storage = storage or get_review_storage()
        self.table = "reviews"

    def _to_response(self, row: dict) -> ReviewResponse:
        return ReviewResponse(
            **row,
            image_urls=[self.storage.public_url(p) for p in (row.get("review_images") or [])]
        )

    def _to_admin_response(self, row: dict) -> AdminReviewResponse:
        review = self._to_response(row)
        return AdminReviewResponse(
            **review.model_dump(),
            product_name=(row.get("products") or {}).get("name")
        )

    # ===================
    # MODERATION
    # ===================

    def get_all(self, status_filter: ReviewFilter = ReviewFilter.ALL) -> ReviewListResponse:
        """
        Get reviews for one moderation tab, newest first.

        The tab filter runs in the query; counts for every tab are
        returned alongside.

        Args:
            status_filter: Moderation tab

        Returns:
            ReviewListResponse
        """
        logger.info("getting_reviews", status_filter=status_filter.value)

        try:
            query = self.db.table(self.table).select(ADMIN_SELECT)
            if status_filter != ReviewFilter.ALL:
                query = query.eq("status", status_filter.value)
            result = query.order("created_at", desc=True).execute()
        except Exception as e:
            logger.error("get_reviews_failed", error=str(e))
            raise DatabaseError("select", str(e))

        reviews = [self._to_admin_response(row) for row in result.data]
        counts = self.count_by_status()

        logger.info("reviews_retrieved", count=len(reviews), status_filter=status_filter.value)

        return ReviewListResponse(data=reviews, counts=counts, filter=status_filter)

    def count_by_status(self) -> ReviewCounts:
        """Exact review counts per moderation tab."""
        try:
            counts = {}
            for status in ReviewStatus:
                result = (
                    self.db.table(self.table)
                    .select("id", count="exact")
                    .eq("status", status.value)
                    .execute()
                )
                counts[status.value] = result.count or 0
        except Exception as e:
            logger.error("count_reviews_failed", error=str(e))
            raise DatabaseError("count", str(e))

        return ReviewCounts(all=sum(counts.values()), **counts)

    def get_by_id(self, review_id: int) -> AdminReviewResponse:
        """
        Get a single review.

        Raises:
            ReviewNotFoundError: If review doesn't exist
        """
        try:
            result = (
                self.db.table(self.table)
                .select(ADMIN_SELECT)
                .eq("id", review_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_review_failed", review_id=review_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ReviewNotFoundError(str(review_id))

        return self._to_admin_response(result.data[0])

    def update_status(self, review_id: int, new_status: ReviewStatus) -> AdminReviewResponse:
        """
        Apply a moderation decision.

        Args:
            review_id: Review id
            new_status: APPROVED or REJECTED

        Returns:
            Updated AdminReviewResponse

        Raises:
            ReviewNotFoundError: If review doesn't exist
            InvalidStatusTransitionError: If the move is not allowed
        """
        logger.info("updating_review_status", review_id=review_id, new_status=new_status.value)

        existing = self.get_by_id(review_id)
        current_status = existing.status

        if current_status == new_status:
            return existing

        if not is_valid_status_transition(current_status, new_status):
            raise InvalidStatusTransitionError(
                current_status=current_status.value,
                new_status=new_status.value
            )

        try:
            (
                self.db.table(self.table)
                .update({"status": new_status.value})
                .eq("id", review_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_review_status_failed", review_id=review_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info(
            "review_status_updated",
            review_id=review_id,
            from_status=current_status.value,
            to_status=new_status.value
        )

        return self.get_by_id(review_id)

    def delete(self, review_id: int) -> bool:
        """
        Delete a review in any state, then its photos.

        Raises:
            ReviewNotFoundError: If review doesn't exist
        """
        logger.info("deleting_review", review_id=review_id)

        existing = self.get_by_id(review_id)

        try:
            self.db.table(self.table).delete().eq("id", review_id).execute()
        except Exception as e:
            logger.error("delete_review_failed", review_id=review_id, error=str(e))
            raise DatabaseError("delete", str(e))

        orphaned = self.storage.remove(existing.review_images)
        logger.info("review_deleted", review_id=review_id, orphaned=len(orphaned))
        return True

    # ===================
    # PUBLIC
    # ===================

    def get_approved(self, product_id: int) -> list[ReviewResponse]:
        """Approved reviews of a product, newest first."""
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("product_id", product_id)
                .eq("status", ReviewStatus.APPROVED.value)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_approved_reviews_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        return [self._to_response(row) for row in result.data]

    def submit(
        self,
        product_id: int,
        data: ReviewSubmission,
        images: Optional[list[UploadedFile]] = None
    ) -> ReviewResponse:
        """
        Store a visitor review as pending.

        Photos are uploaded one by one before the row is written. Any
        upload failure aborts the whole submission.

        Args:
            product_id: Reviewed product (already resolved as active)
            data: Validated submission
            images: Optional review photos

        Returns:
            The pending ReviewResponse

        Raises:
            ReviewSubmissionError: If a photo upload fails
            DatabaseError: If the review row cannot be written
        """
        images = images or []
        logger.info("submitting_review", product_id=product_id, rating=data.rating, photos=len(images))

        uploaded = []
        for file in images:
            try:
                uploaded.append(self.storage.upload(review_image_path(file.filename), file))
            except StorageError as e:
                self.storage.remove(uploaded)
                logger.error("review_photo_upload_failed", product_id=product_id, filename=file.filename)
                raise ReviewSubmissionError(
                    message=f"Could not upload photo {file.filename}",
                    details={"filename": file.filename, "reason": e.message}
                )

        record = {
            "product_id": product_id,
            "customer_name": data.customer_name,
            "rating": data.rating,
            "comment": data.comment,
            "review_images": uploaded,
            "status": ReviewStatus.PENDING.value,
        }

        try:
            result = self.db.table(self.table).insert(record).execute()
        except Exception as e:
            self.storage.remove(uploaded)
            logger.error("review_insert_failed", product_id=product_id, error=str(e))
            raise DatabaseError("insert", str(e))

        review = self._to_response(result.data[0])
        logger.info("review_submitted", review_id=review.id, product_id=product_id)
        return review


# Singleton instance for convenience
_review_service: Optional[ReviewService] = None


def get_review_service() -> ReviewService:
    """Get or create ReviewService instance."""
    global _review_service
    if _review_service is None:
        _review_service = ReviewService()
    return _review_service
