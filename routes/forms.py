"""
Multipart form helpers.
"""

from typing import Optional

from fastapi import UploadFile

from services.storage_service import UploadedFile


async def read_upload(file: Optional[UploadFile]) -> Optional[UploadedFile]:
    """Read one form file; browsers send an unnamed empty part when none was chosen."""
    if file is None or not file.filename:
        return None
    return UploadedFile(
        filename=file.filename,
        content=await file.read(),
        content_type=file.content_type
    )


async def read_uploads(files: Optional[list[UploadFile]]) -> list[UploadedFile]:
    """Read form files in submission order, skipping empty parts."""
    uploads = []
    for file in files or []:
        upload = await read_upload(file)
        if upload is not None:
            uploads.append(upload)
    return uploads


def drop_none(**fields) -> dict:
    """Only the form fields that were actually sent."""
    return {k: v for k, v in fields.items() if v is not None}
