"""
Dashboard service for the admin landing page.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.dashboard import DashboardStats
from models.review import ReviewStatus
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class DashboardService:
    """Headline counts across the catalog."""

    def __init__(self, client=None):
        self.db = client or get_supabase_client()

    def _count(self, table: str, **filters) -> int:
        try:
            query = self.db.table(table).select("id", count="exact")
            for column, value in filters.items():
                query = query.eq(column, value)
            result = query.execute()
        except Exception as e:
            logger.error("dashboard_count_failed", table=table, error=str(e))
            raise DatabaseError("count", str(e), details={"table": table})
        return result.count or 0

    def get_stats(self, admin_email: Optional[str] = None) -> DashboardStats:
        """
        Exact counts for the dashboard cards.

        Args:
            admin_email: Email of the signed-in admin, shown in the greeting
        """
        stats = DashboardStats(
            total_products=self._count("products"),
            pending_reviews=self._count("reviews", status=ReviewStatus.PENDING.value),
            total_scans=self._count("qr_scans"),
            total_umkm=self._count("umkm_profiles"),
            admin_email=admin_email
        )

        logger.info(
            "dashboard_stats_computed",
            total_products=stats.total_products,
            pending_reviews=stats.pending_reviews,
            total_scans=stats.total_scans
        )
        return stats


# Singleton instance for convenience
_dashboard_service: Optional[DashboardService] = None


def get_dashboard_service() -> DashboardService:
    """Get or create DashboardService instance."""
    global _dashboard_service
    if _dashboard_service is None:
        _dashboard_service = DashboardService()
    return _dashboard_service
