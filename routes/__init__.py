"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.auth import router as auth_router, require_session
from routes.products import router as products_router
from routes.umkm import router as umkm_router
from routes.reviews import router as reviews_router
from routes.dashboard import router as dashboard_router
from routes.public import router as public_router

__all__ = [
    "auth_router",
    "require_session",
    "products_router",
    "umkm_router",
    "reviews_router",
    "dashboard_router",
    "public_router",
]
