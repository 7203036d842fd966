"""
Admin review moderation routes.
"""

from fastapi import APIRouter, Query

from models.review import (
    AdminReviewResponse,
    ReviewFilter,
    ReviewListResponse,
    ReviewStatusUpdate,
)
from services.review_service import get_review_service
from routes.errors import handle_error

router = APIRouter()


@router.get("", response_model=ReviewListResponse)
async def list_reviews(
    status: ReviewFilter = Query(ReviewFilter.ALL, description="Moderation tab")
):
    """
    List reviews for one moderation tab, newest first.

    Counts for every tab are included.
    """
    try:
        service = get_review_service()
        return service.get_all(status_filter=status)

    except Exception as e:
        return handle_error(e)


@router.patch("/{review_id}/status", response_model=AdminReviewResponse)
async def update_review_status(review_id: int, data: ReviewStatusUpdate):
    """
    Approve or reject a review.

    Raises:
        404: Review not found
        422: Transition not allowed (nothing returns to pending)
    """
    try:
        service = get_review_service()
        return service.update_status(review_id, data.status)

    except Exception as e:
        return handle_error(e)


@router.delete("/{review_id}")
async def delete_review(review_id: int):
    """
    Delete a review in any state.

    Raises:
        404: Review not found
    """
    try:
        service = get_review_service()
        service.delete(review_id)
        return {"message": "Review deleted successfully"}

    except Exception as e:
        return handle_error(e)
