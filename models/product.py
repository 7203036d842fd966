"""
Product schemas for validation and serialization.

Joined query results get one explicit type per view instead of a loose
dict: ProductListItem, ProductWithUMKM, ProductWithImages,
ProductWithReviews, ProductDetail and PublicProductView.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin
from models.umkm import UMKMResponse
from models.review import ReviewResponse

DEFAULT_HISTORY = "No history provided"
DEFAULT_PHILOSOPHY = "No philosophy provided"


class ProductStatus(str, Enum):
    """Public visibility of a product."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class MediaMode(str, Enum):
    """A product shows either an image carousel or a single video."""
    IMAGES = "images"
    VIDEO = "video"


class ProductCreate(BaseSchema):
    """
    Create a new product.

    Required: umkm_id, name, description
    Optional: history, philosophy (placeholder text when blank)
    """

    umkm_id: int = Field(..., gt=0, description="Owning UMKM")
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: str = Field(..., min_length=1, description="Product description")
    history: str = Field(default=DEFAULT_HISTORY, description="Product history")
    philosophy: str = Field(default=DEFAULT_PHILOSOPHY, description="Product philosophy")

    @field_validator("history")
    @classmethod
    def default_history(cls, v: str) -> str:
        return v or DEFAULT_HISTORY

    @field_validator("philosophy")
    @classmethod
    def default_philosophy(cls, v: str) -> str:
        return v or DEFAULT_PHILOSOPHY


class ProductUpdate(BaseSchema):
    """
    Update existing product.

    All fields optional - only provided fields are updated.
    """

    umkm_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    history: Optional[str] = None
    philosophy: Optional[str] = None
    status: Optional[ProductStatus] = None

    @field_validator("history")
    @classmethod
    def default_history(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v or DEFAULT_HISTORY

    @field_validator("philosophy")
    @classmethod
    def default_philosophy(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v or DEFAULT_PHILOSOPHY


class ProductImageResponse(BaseSchema):
    """One image of a product carousel."""

    id: int
    product_id: int
    image_path: str
    image_url: Optional[str] = None
    alt_text: Optional[str] = None
    sort_order: int = 0
    is_featured: bool = False


class ProductResponse(BaseSchema, TimestampMixin):
    """
    Product response with all fields.

    Used for GET responses.
    """

    id: int = Field(..., description="Product id")
    umkm_id: int
    name: str
    description: str
    history: str
    philosophy: str
    video_path: Optional[str] = None
    video_url: Optional[str] = None
    unique_code: str = Field(..., description="Public code encoded in the QR link")
    status: ProductStatus

    @property
    def media_mode(self) -> MediaMode:
        """Current media mode, derived from the stored video reference."""
        return MediaMode.VIDEO if self.video_path else MediaMode.IMAGES


class ProductListItem(ProductResponse):
    """Row of the admin product table."""

    umkm_name: Optional[str] = None


class ProductListResponse(BaseSchema):
    """Admin product table."""

    data: list[ProductListItem]
    total: int


class ProductWithUMKM(ProductResponse):
    """Product with its maker."""

    umkm: Optional[UMKMResponse] = None


class ProductWithImages(ProductResponse):
    """Product with its ordered images."""

    images: list[ProductImageResponse] = Field(default_factory=list)


class ProductWithReviews(ProductResponse):
    """Product with approved reviews and their average."""

    reviews: list[ReviewResponse] = Field(default_factory=list)
    average_rating: float = 0
    review_count: int = 0


class ProductDetail(ProductWithImages):
    """Admin edit view: product, images and maker."""

    umkm: Optional[UMKMResponse] = None


class PublicProductView(ProductDetail):
    """Landing page payload for a scanned QR code."""

    reviews: list[ReviewResponse] = Field(default_factory=list)
    average_rating: float = 0
    review_count: int = 0


class MediaReport(BaseSchema):
    """
    Outcome of the media part of a create or edit.

    Media steps are best-effort: failed uploads are skipped and storage
    objects that could not be removed are listed as orphaned.
    """

    uploaded: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    orphaned: list[str] = Field(default_factory=list)


class ProductMutationResponse(BaseSchema):
    """Result of a product create or edit."""

    product: ProductDetail
    media: MediaReport
    message: str
