"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.umkm import (
    UMKMCreate,
    UMKMUpdate,
    UMKMResponse,
    UMKMProduct,
    UMKMDetail,
    UMKMListResponse,
)
from models.review import (
    ReviewStatus,
    ReviewFilter,
    REVIEW_TRANSITIONS,
    is_valid_status_transition,
    calculate_average_rating,
    ReviewSubmission,
    ReviewStatusUpdate,
    ReviewResponse,
    AdminReviewResponse,
    ReviewCounts,
    ReviewListResponse,
    ReviewSubmissionResponse,
)
from models.product import (
    ProductStatus,
    MediaMode,
    ProductCreate,
    ProductUpdate,
    ProductImageResponse,
    ProductResponse,
    ProductListItem,
    ProductListResponse,
    ProductWithUMKM,
    ProductWithImages,
    ProductWithReviews,
    ProductDetail,
    PublicProductView,
    MediaReport,
    ProductMutationResponse,
)
from models.scan import QRScanCreate
from models.dashboard import DashboardStats
from models.auth import LoginRequest, LoginResponse, AdminSession
from models.qr import QRCodeResponse

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # UMKM
    "UMKMCreate",
    "UMKMUpdate",
    "UMKMResponse",
    "UMKMProduct",
    "UMKMDetail",
    "UMKMListResponse",

    # Reviews
    "ReviewStatus",
    "ReviewFilter",
    "REVIEW_TRANSITIONS",
    "is_valid_status_transition",
    "calculate_average_rating",
    "ReviewSubmission",
    "ReviewStatusUpdate",
    "ReviewResponse",
    "AdminReviewResponse",
    "ReviewCounts",
    "ReviewListResponse",
    "ReviewSubmissionResponse",

    # Products
    "ProductStatus",
    "MediaMode",
    "ProductCreate",
    "ProductUpdate",
    "ProductImageResponse",
    "ProductResponse",
    "ProductListItem",
    "ProductListResponse",
    "ProductWithUMKM",
    "ProductWithImages",
    "ProductWithReviews",
    "ProductDetail",
    "PublicProductView",
    "MediaReport",
    "ProductMutationResponse",

    # Scans
    "QRScanCreate",

    # Dashboard
    "DashboardStats",

    # Auth
    "LoginRequest",
    "LoginResponse",
    "AdminSession",

    # QR
    "QRCodeResponse",
]
