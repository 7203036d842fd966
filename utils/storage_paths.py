"""
Storage object naming.

Product media lives under products/images/ and products/videos/,
review photos under reviews/, UMKM logos under umkm/logos/.
"""

import time
import uuid
from typing import Optional

PRODUCT_IMAGES_PREFIX = "products/images"
PRODUCT_VIDEOS_PREFIX = "products/videos"
REVIEW_IMAGES_PREFIX = "reviews"
UMKM_LOGOS_PREFIX = "umkm/logos"

DEFAULT_EXTENSION = "bin"


def file_extension(filename: Optional[str]) -> str:
    """
    Extension of an uploaded file name, lowercased.

    - "photo.JPG" → "jpg"
    - "clip.final.mp4" → "mp4"
    - "README" → "bin"
    """
    if not filename or "." not in filename:
        return DEFAULT_EXTENSION
    ext = filename.rsplit(".", 1)[1].strip().lower()
    return ext or DEFAULT_EXTENSION


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _token() -> str:
    return uuid.uuid4().hex[:8]


def product_image_path(filename: Optional[str], index: int) -> str:
    """Path for the index-th image of one upload batch."""
    return f"{PRODUCT_IMAGES_PREFIX}/{_timestamp_ms()}_{index}_{_token()}.{file_extension(filename)}"


def product_video_path(filename: Optional[str]) -> str:
    return f"{PRODUCT_VIDEOS_PREFIX}/{_timestamp_ms()}_video_{_token()}.{file_extension(filename)}"


def review_image_path(filename: Optional[str]) -> str:
    """Review photos get random names so visitors cannot guess them."""
    return f"{REVIEW_IMAGES_PREFIX}/{uuid.uuid4().hex}.{file_extension(filename)}"


def umkm_logo_path(umkm_id: int, filename: Optional[str]) -> str:
    return f"{UMKM_LOGOS_PREFIX}/{umkm_id}_{_timestamp_ms()}_{_token()}.{file_extension(filename)}"
