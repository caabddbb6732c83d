# backoffice/services/dashboard_service.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import ListingStatus
from backoffice.models.admin import Admin
from backoffice.models.catalog import Category
from backoffice.models.listing import Listing

logger = logging.getLogger(__name__)


class DashboardService:
    """Aggregate counts for the dashboard. Soft-deleted listings are never counted."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_status_counts(self) -> Dict[ListingStatus, int]:
        result = await self.db.execute(
            select(Listing.status, func.count(Listing.id))
            .where(Listing.deleted_at.is_(None))
            .group_by(Listing.status)
        )
        counts = {status: 0 for status in ListingStatus}
        for status, count in result.all():
            counts[ListingStatus(status)] = count
        return counts

    async def get_workloads(self, admin_code: Optional[str] = None) -> List[Dict[str, Any]]:
        """Live worklist listings per admin, every admin included even at zero."""
        assigned = func.count(Listing.id)
        query = (
            select(Admin.id, Admin.admin_code, assigned)
            .outerjoin(
                Listing,
                (Listing.assigned_to == Admin.id)
                & (Listing.status == ListingStatus.WORKLIST)
                & Listing.deleted_at.is_(None),
            )
            .group_by(Admin.id, Admin.admin_code)
            .order_by(assigned.desc(), Admin.admin_code)
        )
        if admin_code:
            query = query.where(Admin.admin_code == admin_code)
        result = await self.db.execute(query)
        return [
            {"admin_id": admin_id, "admin_code": code, "count": count}
            for admin_id, code, count in result.all()
        ]

    async def get_stats(self, admin_code: Optional[str] = None) -> Dict[str, Any]:
        status_counts = await self.get_status_counts()
        categories = await self.db.execute(select(func.count(Category.id)))
        stats = {
            "listed": sum(status_counts.values()),
            "categories": categories.scalar() or 0,
            "status_counts": status_counts,
            "workloads": await self.get_workloads(admin_code),
            "selected_admin": admin_code or None,
        }
        logger.debug(f"Dashboard stats: {stats['listed']} live listings")
        return stats
