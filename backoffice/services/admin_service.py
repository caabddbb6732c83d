# backoffice/services/admin_service.py
"""
Admin records: listing, provisioning, freezing and removal.

Provisioning creates the login identity, the admin record and the admin role
grant in one transaction; the ADMIN_CREATED audit entry follows the commit.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import get_settings
from backoffice.core.enums import ActivityAction, ActivitySection, AdminStatus
from backoffice.core.exceptions import AdminNotFoundError, AdminProvisioningError, DatabaseError
from backoffice.models.activity_log import AdminActivityLog
from backoffice.models.admin import Admin, AdminPermission
from backoffice.models.auth import AuthUser, UserRole
from backoffice.models.listing import Listing
from backoffice.schemas.admin import AdminCreate
from backoffice.services.activity_logger import ActivityLogger
from backoffice.services.auth_service import hash_password

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, db: AsyncSession, activity_logger: Optional[ActivityLogger] = None):
        self.db = db
        self.activity_logger = activity_logger or ActivityLogger(db)

    async def list_admins(self, status: Optional[AdminStatus] = None) -> List[Admin]:
        query = select(Admin).order_by(Admin.created_at.desc(), Admin.admin_code)
        if status is not None:
            query = query.where(Admin.status == status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_admin(self, admin_id: uuid.UUID) -> Admin:
        admin = await self.db.get(Admin, admin_id)
        if admin is None:
            raise AdminNotFoundError(f"Admin {admin_id} not found")
        return admin

    async def get_admin_by_code(self, admin_code: str) -> Optional[Admin]:
        result = await self.db.execute(select(Admin).where(Admin.admin_code == admin_code))
        return result.scalar_one_or_none()

    async def create_admin(self, data: AdminCreate, actor=None) -> Tuple[AuthUser, Admin]:
        """
        Provision a new admin: login identity, admin record and role grant.

        Args:
            data: Validated provisioning request
            actor: The admin performing the provisioning (for the audit trail)

        Returns:
            (identity, admin)

        Raises:
            AdminProvisioningError: If the email or admin code is already taken
        """
        taken = await self.db.execute(
            select(AuthUser.id).where(AuthUser.email == data.email).union_all(
                select(Admin.id).where(or_(Admin.email == data.email, Admin.admin_code == data.admin_code))
            )
        )
        if taken.first() is not None:
            raise AdminProvisioningError(f"An account for {data.email} or admin code {data.admin_code} already exists")

        user = AuthUser(email=data.email, password_hash=hash_password(data.password))
        admin = Admin(
            admin_code=data.admin_code,
            name=data.name,
            email=data.email,
            phone=data.phone,
            status=AdminStatus.ACTIVE,
        )
        try:
            self.db.add(user)
            await self.db.flush()
            self.db.add(admin)
            await self.db.flush()
            self.db.add(UserRole(user_id=user.id, role=get_settings().ADMIN_ROLE))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Provisioning {data.email} hit a uniqueness conflict: {e}")
            raise AdminProvisioningError(f"An account for {data.email} or admin code {data.admin_code} already exists") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to provision admin {data.email}: {e}", exc_info=True)
            raise AdminProvisioningError("Failed to create admin") from e

        await self.db.refresh(admin)
        logger.info(f"Admin {admin.admin_code} ({admin.email}) provisioned")

        if actor is not None:
            await self.activity_logger.log_activity(
                actor.email,
                ActivityAction.ADMIN_CREATED,
                ActivitySection.ADMIN_PRIVILEGES,
                {"email": data.email, "admin_code": data.admin_code, "created_by": actor.email},
                admin_id=actor.admin_id,
            )
        return user, admin

    async def toggle_admin_status(self, admin_id: uuid.UUID) -> Admin:
        """Flip active <-> frozen."""
        admin = await self.get_admin(admin_id)
        new_status = admin.status.toggled()
        try:
            admin.status = new_status
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to change status of admin {admin_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to update admin status") from e

        await self.db.refresh(admin)
        logger.info(f"Admin {admin.admin_code} is now {new_status.value}")
        return admin

    async def delete_admin(self, admin_id: uuid.UUID) -> uuid.UUID:
        """
        Hard delete. Assigned listings keep their status with assigned_to cleared.
        Permissions go with the admin; activity entries stay, detached from it.
        """
        admin = await self.get_admin(admin_id)
        admin_code = admin.admin_code
        try:
            await self.db.execute(
                update(Listing)
                .where(Listing.assigned_to == admin_id)
                .values(assigned_to=None)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(delete(AdminPermission).where(AdminPermission.admin_id == admin_id))
            await self.db.execute(
                update(AdminActivityLog)
                .where(AdminActivityLog.admin_id == admin_id)
                .values(admin_id=None)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(delete(Admin).where(Admin.id == admin_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete admin {admin_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to delete admin") from e

        self.db.expunge(admin)
        logger.info(f"Admin {admin_code} deleted")
        return admin_id
