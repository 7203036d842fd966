"""
Admin dashboard routes.
"""

from fastapi import APIRouter, Depends

from models.auth import AdminSession
from models.dashboard import DashboardStats
from services.dashboard_service import get_dashboard_service
from routes.auth import require_session
from routes.errors import handle_error

router = APIRouter()


@router.get("", response_model=DashboardStats)
async def get_dashboard(session: AdminSession = Depends(require_session)):
    """Headline counts and the signed-in admin."""
    try:
        service = get_dashboard_service()
        return service.get_stats(admin_email=session.email)

    except Exception as e:
        return handle_error(e)
