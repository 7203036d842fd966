"""
Admin UMKM profile routes.

Profiles have no delete route: products keep pointing at their maker.
"""

from fastapi import APIRouter, File, UploadFile

from models.umkm import (
    UMKMCreate,
    UMKMUpdate,
    UMKMResponse,
    UMKMDetail,
    UMKMListResponse,
)
from services.umkm_service import get_umkm_service
from exceptions import ValidationError
from routes.errors import handle_error
from routes.forms import read_upload

router = APIRouter()


@router.get("", response_model=UMKMListResponse)
async def list_umkm():
    """List all UMKM profiles ordered by name."""
    try:
        service = get_umkm_service()
        profiles, total = service.get_all()
        return UMKMListResponse(data=profiles, total=total)

    except Exception as e:
        return handle_error(e)


@router.get("/{umkm_id}", response_model=UMKMDetail)
async def get_umkm(umkm_id: int):
    """
    Get a UMKM profile with its products.

    Raises:
        404: UMKM not found
    """
    try:
        service = get_umkm_service()
        return service.get_detail(umkm_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=UMKMResponse, status_code=201)
async def create_umkm(data: UMKMCreate):
    """
    Register a new UMKM.

    Raises:
        422: Validation error
    """
    try:
        service = get_umkm_service()
        return service.create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{umkm_id}", response_model=UMKMResponse)
async def update_umkm(umkm_id: int, data: UMKMUpdate):
    """
    Update a UMKM profile.

    Only provided fields are updated.

    Raises:
        404: UMKM not found
        422: Validation error
    """
    try:
        service = get_umkm_service()
        return service.update(umkm_id, data)

    except Exception as e:
        return handle_error(e)


@router.post("/{umkm_id}/logo", response_model=UMKMResponse)
async def upload_umkm_logo(umkm_id: int, logo: UploadFile = File(...)):
    """
    Upload or replace the UMKM logo.

    Raises:
        404: UMKM not found
        422: No file selected
        503: Storage upload failed
    """
    try:
        upload = await read_upload(logo)
        if upload is None:
            raise ValidationError("No logo file selected")

        service = get_umkm_service()
        return service.upload_logo(umkm_id, upload)

    except Exception as e:
        return handle_error(e)
