"""
Admin session schemas.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema


class LoginRequest(BaseSchema):
    """Email and password sign-in."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class AdminSession(BaseSchema):
    """Authenticated admin attached to a request."""

    user_id: str
    email: Optional[str] = None
    access_token: str = Field(..., exclude=True)


class LoginResponse(BaseSchema):
    """Successful sign-in."""

    user_id: str
    email: Optional[str] = None
    redirect_to: str
