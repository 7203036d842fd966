"""
Shared error conversion for route handlers.

See AppError.to_dict() for the error response format.
"""

from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
import structlog

from exceptions import AppError, ValidationError

logger = structlog.get_logger(__name__)


def validation_error(e: PydanticValidationError, message: str = "Invalid form data") -> ValidationError:
    """Wrap a pydantic error raised while building a model from form fields."""
    errors = e.errors(include_url=False, include_context=False, include_input=False)
    return ValidationError(
        message=message,
        details={"errors": [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in errors
        ]}
    )


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, PydanticValidationError):
        e = validation_error(e)
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )
