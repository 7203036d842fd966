"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    ExternalServiceError,
    DatabaseError,
    StorageError,

    # UMKM
    UMKMNotFoundError,

    # Products
    ProductNotFoundError,
    ProductImageNotFoundError,
    MediaModeConflictError,

    # Reviews
    ReviewNotFoundError,
    InvalidStatusTransitionError,
    ReviewSubmissionError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "ExternalServiceError",
    "DatabaseError",
    "StorageError",

    # UMKM
    "UMKMNotFoundError",

    # Products
    "ProductNotFoundError",
    "ProductImageNotFoundError",
    "MediaModeConflictError",

    # Reviews
    "ReviewNotFoundError",
    "InvalidStatusTransitionError",
    "ReviewSubmissionError",
]
