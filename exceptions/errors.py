"""
Custom exception classes for the application.

Every error carries a machine-readable code and a human-readable message
that the admin and public clients surface as notifications.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class AuthenticationError(AppError):
    """Missing or invalid admin session (401)."""

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "AUTHENTICATION_REQUIRED",
        login_path: Optional[str] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=401,
            details={"login_path": login_path} if login_path else None
        )
        self.login_path = login_path


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


class StorageError(ExternalServiceError):
    """Object storage upload or removal failed (503)."""

    def __init__(self, operation: str, path: str, message: str):
        super().__init__(
            service="storage",
            message=f"Storage {operation} failed: {message}",
            details={"operation": operation, "path": path}
        )


# ===================
# UMKM ERRORS
# ===================

class UMKMNotFoundError(NotFoundError):
    """UMKM profile not found."""

    def __init__(self, umkm_id: str):
        super().__init__(
            resource="UMKM",
            identifier=umkm_id,
            code="UMKM_NOT_FOUND"
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found, or not publicly visible."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class ProductImageNotFoundError(NotFoundError):
    """Product image not found."""

    def __init__(self, image_id: str):
        super().__init__(
            resource="Product image",
            identifier=image_id,
            code="PRODUCT_IMAGE_NOT_FOUND"
        )


class MediaModeConflictError(ValidationError):
    """Images and a video submitted for the same product."""

    def __init__(self, image_count: int):
        super().__init__(
            code="MEDIA_MODE_CONFLICT",
            message="A product shows either images or a video, not both",
            details={"images": image_count, "video": True}
        )


# ===================
# REVIEW ERRORS
# ===================

class ReviewNotFoundError(NotFoundError):
    """Review not found."""

    def __init__(self, review_id: str):
        super().__init__(
            resource="Review",
            identifier=review_id,
            code="REVIEW_NOT_FOUND"
        )


class InvalidStatusTransitionError(ValidationError):
    """Invalid review status transition."""

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot transition from {current_status} to {new_status}",
            details={
                "current_status": current_status,
                "new_status": new_status,
                "reason": "Reviews never return to pending"
            }
        )


class ReviewSubmissionError(ExternalServiceError):
    """Review photo upload failed, so the review was not saved."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="review_submission",
            message=message,
            details=details
        )
