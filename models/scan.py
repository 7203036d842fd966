"""
QR scan audit records.
"""

from pydantic import Field
from datetime import datetime

from models.base import BaseSchema

UNKNOWN = "unknown"


class QRScanCreate(BaseSchema):
    """One public product page view."""

    product_id: int
    scanned_at: datetime
    ip_address: str = Field(default=UNKNOWN)
    user_agent: str = Field(default=UNKNOWN)
