"""
Business logic services.

Each service handles one domain area.
"""

from services.storage_service import (
    StorageService,
    UploadedFile,
    get_product_storage,
    get_review_storage,
)
from services.umkm_service import UMKMService, get_umkm_service
from services.media_service import MediaService, get_media_service
from services.product_service import ProductService, get_product_service
from services.review_service import ReviewService, get_review_service
from services.public_service import PublicService, get_public_service, client_ip
from services.qr_service import QRService, get_qr_service
from services.dashboard_service import DashboardService, get_dashboard_service
from services.auth_service import AuthService, get_auth_service

__all__ = [
    "StorageService",
    "UploadedFile",
    "get_product_storage",
    "get_review_storage",
    "UMKMService",
    "get_umkm_service",
    "MediaService",
    "get_media_service",
    "ProductService",
    "get_product_service",
    "ReviewService",
    "get_review_service",
    "PublicService",
    "get_public_service",
    "client_ip",
    "QRService",
    "get_qr_service",
    "DashboardService",
    "get_dashboard_service",
    "AuthService",
    "get_auth_service",
]
