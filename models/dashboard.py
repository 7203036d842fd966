"""
Admin dashboard schemas.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema


class DashboardStats(BaseSchema):
    """Headline counts for the admin dashboard."""

    total_products: int = Field(0, description="Products in the catalog")
    pending_reviews: int = Field(0, description="Reviews waiting for moderation")
    total_scans: int = Field(0, description="Public product page views")
    total_umkm: int = Field(0, description="Registered UMKM profiles")
    admin_email: Optional[str] = None
