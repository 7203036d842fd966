"""
Review schemas and moderation rules.

Reviews enter as PENDING from the public page. Admins approve or reject
them; nothing ever goes back to PENDING.
"""

from pydantic import Field, computed_field, field_validator
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema


class ReviewStatus(str, Enum):
    """Moderation state of a review."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewFilter(str, Enum):
    """Moderation list tabs."""
    ALL = "all"
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


# Allowed moderation moves per current status
REVIEW_TRANSITIONS: dict[ReviewStatus, tuple[ReviewStatus, ...]] = {
    ReviewStatus.PENDING: (ReviewStatus.APPROVED, ReviewStatus.REJECTED),
    ReviewStatus.APPROVED: (ReviewStatus.REJECTED,),
    ReviewStatus.REJECTED: (ReviewStatus.APPROVED,),
}


def is_valid_status_transition(current: ReviewStatus, new: ReviewStatus) -> bool:
    """
    Check if a moderation transition is valid.

    Rules:
    - PENDING can be approved or rejected
    - REJECTED can be approved (recoverable)
    - APPROVED can be rejected
    - Nothing transitions to PENDING
    """
    return new in REVIEW_TRANSITIONS[current]


def calculate_average_rating(ratings: list[int]) -> float:
    """Arithmetic mean of ratings, 0 when there are none."""
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


class ReviewSubmission(BaseSchema):
    """
    Review sent from the public product page.

    There is no status field: submissions are always stored as pending.
    """

    customer_name: str = Field(..., min_length=1, max_length=100, description="Reviewer name")
    rating: int = Field(default=5, ge=1, le=5, description="Star rating, 1 to 5")
    comment: str = Field(..., min_length=1, max_length=2000, description="Review text")


class ReviewStatusUpdate(BaseSchema):
    """Moderation decision."""

    status: ReviewStatus


class ReviewResponse(BaseSchema):
    """Review as stored."""

    id: int
    product_id: int
    customer_name: str
    rating: int
    comment: str
    review_images: list[str] = Field(default_factory=list, description="Storage paths")
    image_urls: list[str] = Field(default_factory=list, description="Public photo URLs")
    status: ReviewStatus
    created_at: datetime

    @field_validator("review_images", mode="before")
    @classmethod
    def null_images_to_list(cls, v):
        """Older rows store NULL instead of an empty list."""
        return v or []


class AdminReviewResponse(ReviewResponse):
    """Review on the moderation screen."""

    product_name: Optional[str] = None

    @computed_field
    @property
    def allowed_actions(self) -> list[ReviewStatus]:
        """Status changes the moderator may apply next."""
        return list(REVIEW_TRANSITIONS[self.status])


class ReviewCounts(BaseSchema):
    """Reviews per moderation tab."""

    all: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0


class ReviewListResponse(BaseSchema):
    """Moderation list for one tab plus the counts of every tab."""

    data: list[AdminReviewResponse]
    counts: ReviewCounts
    filter: ReviewFilter


class ReviewSubmissionResponse(BaseSchema):
    """Result of a public submission."""

    review: ReviewResponse
    message: str = "Review submitted and waiting for approval"
