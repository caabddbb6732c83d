# backoffice/services/permission_service.py
import logging
import uuid
from typing import Dict, Mapping, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import ActivityAction, ActivitySection, AppSection
from backoffice.core.exceptions import AdminNotFoundError, DatabaseError
from backoffice.models.admin import Admin, AdminPermission
from backoffice.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)

# Sections are open unless a row says otherwise
DEFAULT_ACCESS = True


class PermissionService:
    """Per-admin section access. A missing row means allowed."""

    def __init__(self, db: AsyncSession, activity_logger: Optional[ActivityLogger] = None):
        self.db = db
        self.activity_logger = activity_logger or ActivityLogger(db)

    async def can_access(self, admin_id: Optional[uuid.UUID], section: AppSection) -> bool:
        if admin_id is None:
            return True
        result = await self.db.execute(
            select(AdminPermission.can_access).where(
                AdminPermission.admin_id == admin_id,
                AdminPermission.section == section.value,
            )
        )
        value = result.scalar_one_or_none()
        return DEFAULT_ACCESS if value is None else bool(value)

    async def get_permissions(self, admin_id: uuid.UUID) -> Dict[AppSection, bool]:
        """Full section map for an admin, defaults filled in."""
        await self._require_admin(admin_id)
        result = await self.db.execute(
            select(AdminPermission.section, AdminPermission.can_access).where(AdminPermission.admin_id == admin_id)
        )
        stored = {row.section: bool(row.can_access) for row in result}
        return {section: stored.get(section.value, DEFAULT_ACCESS) for section in AppSection}

    async def set_permissions(
        self,
        admin_id: uuid.UUID,
        permissions: Mapping[AppSection, bool],
        actor=None,
    ) -> Dict[AppSection, bool]:
        """
        Replace an admin's permission rows.

        Sections left out of ``permissions`` fall back to the default. The old
        rows are removed and the new ones written in the same transaction.
        """
        admin = await self._require_admin(admin_id)
        try:
            await self.db.execute(delete(AdminPermission).where(AdminPermission.admin_id == admin_id))
            for section, allowed in permissions.items():
                self.db.add(AdminPermission(admin_id=admin_id, section=AppSection(section).value, can_access=bool(allowed)))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update permissions for admin {admin_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to update permissions") from e

        denied = sorted(AppSection(s).value for s, allowed in permissions.items() if not allowed)
        logger.info(f"Permissions for {admin.admin_code} updated; denied: {denied or 'none'}")

        if actor is not None:
            await self.activity_logger.log_activity(
                actor.email,
                ActivityAction.PERMISSIONS_UPDATED,
                ActivitySection.ADMIN_PRIVILEGES,
                {"target_admin_id": str(admin_id), "admin_code": admin.admin_code, "denied_sections": denied},
                admin_id=actor.admin_id,
            )
        return await self.get_permissions(admin_id)

    async def _require_admin(self, admin_id: uuid.UUID) -> Admin:
        admin = await self.db.get(Admin, admin_id)
        if admin is None:
            raise AdminNotFoundError(f"Admin {admin_id} not found")
        return admin
