"""
Public product routes reached by scanning a QR code.

No session is needed. Only active products resolve; anything else is 404.
"""

from fastapi import APIRouter, File, Form, Request, UploadFile
from typing import Optional

from models.product import (
    ProductWithImages,
    ProductWithReviews,
    ProductWithUMKM,
    PublicProductView,
)
from models.review import ReviewSubmission, ReviewSubmissionResponse
from services.public_service import client_ip, get_public_service
from services.review_service import get_review_service
from routes.errors import handle_error
from routes.forms import read_uploads

router = APIRouter()


@router.get("/{unique_code}", response_model=PublicProductView)
async def get_product_page(unique_code: str, request: Request):
    """
    Product landing page.

    Records a scan with the visitor's IP and user agent.

    Raises:
        404: Unknown code or inactive product
    """
    try:
        service = get_public_service()
        return service.get_product_page(
            unique_code,
            ip_address=client_ip(request.headers),
            user_agent=request.headers.get("user-agent")
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{unique_code}/story", response_model=ProductWithImages)
async def get_product_story(unique_code: str):
    """History and philosophy of a product."""
    try:
        return get_public_service().get_story(unique_code)

    except Exception as e:
        return handle_error(e)


@router.get("/{unique_code}/gallery", response_model=ProductWithImages)
async def get_product_gallery(unique_code: str):
    """Image carousel or video of a product."""
    try:
        return get_public_service().get_gallery(unique_code)

    except Exception as e:
        return handle_error(e)


@router.get("/{unique_code}/maker", response_model=ProductWithUMKM)
async def get_product_maker(unique_code: str):
    """The UMKM behind a product."""
    try:
        return get_public_service().get_maker(unique_code)

    except Exception as e:
        return handle_error(e)


@router.get("/{unique_code}/reviews", response_model=ProductWithReviews)
async def get_product_reviews(unique_code: str):
    """Approved reviews and the average rating."""
    try:
        return get_public_service().get_reviews(unique_code)

    except Exception as e:
        return handle_error(e)


@router.post("/{unique_code}/reviews", response_model=ReviewSubmissionResponse, status_code=201)
async def submit_review(
    unique_code: str,
    customer_name: str = Form(...),
    comment: str = Form(...),
    rating: int = Form(5),
    images: Optional[list[UploadFile]] = File(None)
):
    """
    Submit a review with optional photos.

    The review waits for moderation before it is shown.

    Raises:
        404: Unknown code or inactive product
        422: Validation error
        503: A photo failed to upload (nothing was saved)
    """
    try:
        data = ReviewSubmission(customer_name=customer_name, rating=rating, comment=comment)

        product_id = get_public_service().resolve_product_id(unique_code)
        review = get_review_service().submit(
            product_id,
            data,
            images=await read_uploads(images)
        )
        return ReviewSubmissionResponse(review=review)

    except Exception as e:
        return handle_error(e)
