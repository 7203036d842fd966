"""
UMKM profile schemas.

A UMKM profile is the small business behind one or more products.
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class UMKMCreate(BaseSchema):
    """
    Register a new UMKM.

    Required: name, owner_name, address, phone, story
    Optional: email, established_year
    """

    name: str = Field(..., min_length=1, max_length=200, description="Business name")
    owner_name: str = Field(..., min_length=1, max_length=200, description="Owner full name")
    address: str = Field(..., min_length=1, description="Business address")
    phone: str = Field(..., min_length=1, max_length=30, description="Contact phone")
    email: Optional[str] = Field(None, max_length=200, description="Contact email")
    story: str = Field(..., min_length=1, description="Business story")
    established_year: Optional[int] = Field(
        None,
        ge=1900,
        le=2100,
        description="Year the business was founded"
    )

    @field_validator("email")
    @classmethod
    def empty_email_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Blank form input means no email."""
        return v or None


class UMKMUpdate(BaseSchema):
    """
    Update an existing UMKM.

    All fields optional - only provided fields are updated.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    owner_name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    email: Optional[str] = Field(None, max_length=200)
    story: Optional[str] = Field(None, min_length=1)
    established_year: Optional[int] = Field(None, ge=1900, le=2100)


class UMKMResponse(BaseSchema, TimestampMixin):
    """UMKM profile with all fields."""

    id: int = Field(..., description="UMKM id")
    name: str
    owner_name: str
    address: str
    phone: str
    email: Optional[str] = None
    story: str
    established_year: Optional[int] = None
    logo_path: Optional[str] = None
    logo_url: Optional[str] = Field(None, description="Public URL of the logo")


class UMKMProduct(BaseSchema):
    """Product line shown on the UMKM detail screen."""

    id: int
    name: str
    status: str


class UMKMDetail(UMKMResponse):
    """UMKM profile with the products it owns."""

    products: list[UMKMProduct] = Field(default_factory=list)


class UMKMListResponse(BaseSchema):
    """All registered UMKM profiles."""

    data: list[UMKMResponse]
    total: int
