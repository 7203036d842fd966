"""
QR code schemas.
"""

from models.base import BaseSchema


class QRCodeResponse(BaseSchema):
    """QR code screen for one product."""

    product_id: int
    product_name: str
    unique_code: str
    product_url: str
    filename: str
    image_data_uri: str
