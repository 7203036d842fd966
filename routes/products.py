"""
Admin product routes.

Create and edit take multipart forms so media can travel with the fields.
See AppError.to_dict() for error response format.
"""

from fastapi import APIRouter, File, Form, Query, Request, UploadFile
from fastapi.responses import Response
from typing import Optional
import structlog

from models.product import (
    MediaMode,
    MediaReport,
    ProductCreate,
    ProductDetail,
    ProductImageResponse,
    ProductListResponse,
    ProductMutationResponse,
    ProductStatus,
    ProductUpdate,
)
from models.qr import QRCodeResponse
from services.product_service import get_product_service
from services.media_service import get_media_service
from services.qr_service import get_qr_service
from routes.errors import handle_error
from routes.forms import drop_none, read_upload, read_uploads

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# ROUTES
# ===================

@router.get("", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Match name, code or UMKM name")
):
    """
    List all products, newest first.
    """
    try:
        service = get_product_service()
        products, total = service.get_all(search=search)
        return ProductListResponse(data=products, total=total)

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductDetail)
async def get_product(product_id: int):
    """
    Get a product with its images and UMKM.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        return service.get_detail(product_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ProductMutationResponse, status_code=201)
async def create_product(
    umkm_id: int = Form(...),
    name: str = Form(...),
    description: str = Form(...),
    history: str = Form(""),
    philosophy: str = Form(""),
    images: Optional[list[UploadFile]] = File(None),
    video: Optional[UploadFile] = File(None)
):
    """
    Create a new product with images or a video.

    Fields are validated before anything is written or uploaded.

    Raises:
        422: Validation error, or both images and a video submitted
    """
    try:
        data = ProductCreate(
            umkm_id=umkm_id,
            name=name,
            description=description,
            history=history,
            philosophy=philosophy
        )

        service = get_product_service()
        return service.create(
            data,
            images=await read_uploads(images),
            video=await read_upload(video)
        )

    except Exception as e:
        return handle_error(e)


@router.put("/{product_id}", response_model=ProductMutationResponse)
async def update_product(
    product_id: int,
    umkm_id: Optional[int] = Form(None),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    history: Optional[str] = Form(None),
    philosophy: Optional[str] = Form(None),
    status: Optional[ProductStatus] = Form(None),
    media_mode: Optional[MediaMode] = Form(None),
    images: Optional[list[UploadFile]] = File(None),
    video: Optional[UploadFile] = File(None),
    remove_image_ids: Optional[list[int]] = Form(None)
):
    """
    Update product fields and media.

    Only provided fields are updated. Media is only touched when
    media_mode is sent; the chosen mode replaces the other one.

    Raises:
        404: Product not found
        422: Validation error
    """
    try:
        data = ProductUpdate(**drop_none(
            umkm_id=umkm_id,
            name=name,
            description=description,
            history=history,
            philosophy=philosophy,
            status=status
        ))

        service = get_product_service()
        return service.update(
            product_id,
            data,
            media_mode=media_mode,
            images=await read_uploads(images),
            video=await read_upload(video),
            remove_image_ids=remove_image_ids
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}")
async def delete_product(product_id: int):
    """
    Delete a product and its media.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        report = service.delete(product_id)
        return {"message": "Product deleted successfully", "media": report.model_dump()}

    except Exception as e:
        return handle_error(e)


# ===================
# IMAGE ROUTES
# ===================

@router.delete("/{product_id}/images/{image_id}", response_model=MediaReport)
async def remove_product_image(product_id: int, image_id: int):
    """
    Remove one image from a product.

    Raises:
        404: Image not found on this product
    """
    try:
        service = get_media_service()
        return service.remove_image(product_id, image_id)

    except Exception as e:
        return handle_error(e)


@router.post("/{product_id}/images/{image_id}/featured", response_model=list[ProductImageResponse])
async def set_featured_image(product_id: int, image_id: int):
    """
    Make one image the featured image.

    Raises:
        404: Image not found on this product
    """
    try:
        service = get_media_service()
        return service.set_featured(product_id, image_id)

    except Exception as e:
        return handle_error(e)


# ===================
# QR ROUTES
# ===================

@router.get("/{product_id}/qr", response_model=QRCodeResponse)
async def get_product_qr(product_id: int, request: Request):
    """
    QR code screen for a product.

    Raises:
        404: Product not found
    """
    try:
        product = get_product_service().get_by_id(product_id)
        return get_qr_service().build(product, request_base_url=str(request.base_url))

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}/qr/download")
async def download_product_qr(product_id: int, request: Request):
    """
    Download the QR code as a PNG file.

    Raises:
        404: Product not found
    """
    try:
        product = get_product_service().get_by_id(product_id)
        filename, png = get_qr_service().download(product, request_base_url=str(request.base_url))
        return Response(
            content=png,
            media_type="image/png",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )

    except Exception as e:
        return handle_error(e)
