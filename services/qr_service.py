"""
QR codes linking to public product pages.

Codes are rendered on demand and never stored.
"""

import base64
from io import BytesIO
from typing import Optional
import structlog

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from PIL import Image

from config import settings
from models.product import ProductResponse
from models.qr import QRCodeResponse

logger = structlog.get_logger(__name__)

QR_IMAGE_FORMAT = "PNG"


def product_url(base_url: str, unique_code: str) -> str:
    """Public page URL encoded in a product's QR code."""
    return f"{base_url.rstrip('/')}/product/{unique_code}"


def qr_filename(unique_code: str) -> str:
    return f"QR-{unique_code}.png"


def render_png(
    data: str,
    size: Optional[int] = None,
    margin: Optional[int] = None
) -> bytes:
    """
    Render data as a black-on-white QR code PNG.

    Args:
        data: Text to encode
        size: Width and height in pixels (default from settings)
        margin: Quiet zone in modules (default from settings)

    Returns:
        PNG bytes of exactly size x size pixels
    """
    size = size or settings.qr_size_px
    margin = settings.qr_margin if margin is None else margin

    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECT_M,
        box_size=1,
        border=margin,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").get_image()
    img = img.convert("RGB").resize((size, size), Image.NEAREST)

    buffer = BytesIO()
    img.save(buffer, format=QR_IMAGE_FORMAT)
    return buffer.getvalue()


def to_data_uri(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode()


class QRService:
    """
    Builds the QR screen and download for one product.
    """

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url or settings.public_base_url

    def _resolve_base_url(self, request_base_url: Optional[str]) -> str:
        base_url = self.base_url or request_base_url
        if not base_url:
            raise ValueError("No base URL available for QR links")
        return base_url

    def build(self, product: ProductResponse, request_base_url: Optional[str] = None) -> QRCodeResponse:
        """
        QR screen payload with the PNG inlined as a data URI.

        Args:
            product: Product to link to
            request_base_url: Origin of the current request, used when
                no public base URL is configured
        """
        url = product_url(self._resolve_base_url(request_base_url), product.unique_code)
        png = render_png(url)

        logger.info("qr_generated", product_id=product.id, product_url=url, size_bytes=len(png))

        return QRCodeResponse(
            product_id=product.id,
            product_name=product.name,
            unique_code=product.unique_code,
            product_url=url,
            filename=qr_filename(product.unique_code),
            image_data_uri=to_data_uri(png)
        )

    def download(self, product: ProductResponse, request_base_url: Optional[str] = None) -> tuple[str, bytes]:
        """
        PNG download for a product.

        Returns:
            Tuple of (filename, png bytes)
        """
        url = product_url(self._resolve_base_url(request_base_url), product.unique_code)
        png = render_png(url)
        logger.info("qr_downloaded", product_id=product.id, unique_code=product.unique_code)
        return qr_filename(product.unique_code), png


# Singleton instance for convenience
_qr_service: Optional[QRService] = None


def get_qr_service() -> QRService:
    """Get or create QRService instance."""
    global _qr_service
    if _qr_service is None:
        _qr_service = QRService()
    return _qr_service
