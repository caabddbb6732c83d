# backoffice/services/activity_logger.py
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backoffice.core.enums import ActivityAction, ActivitySection
from backoffice.models.activity_log import AdminActivityLog
from backoffice.models.admin import Admin

logger = logging.getLogger(__name__)


class ActivityLogger:
    """
    Service for appending entries to the admin activity trail.

    Logging is fire-and-forget: it runs after the triggering action has been
    committed and never raises. Entries are written through a session of
    their own, so a failed write is rolled back there and leaves the caller's
    session and loaded objects untouched.
    """

    def __init__(self, db: AsyncSession, session_factory=None):
        self.db = db
        self.session_factory = session_factory

    def _open_session(self) -> AsyncSession:
        if self.session_factory is None:
            self.session_factory = async_sessionmaker(self.db.bind, class_=AsyncSession, expire_on_commit=False)
        return self.session_factory()

    async def resolve_admin(self, session: AsyncSession, email: Optional[str], admin_id=None):
        """(id, admin_code) of the acting admin, by id when known, else by login email."""
        if admin_id is not None:
            query = select(Admin.id, Admin.admin_code).where(Admin.id == admin_id)
        elif email:
            query = select(Admin.id, Admin.admin_code).where(Admin.email == email.lower())
        else:
            return None
        result = await session.execute(query)
        return result.first()

    async def log_activity(
        self,
        actor_email: Optional[str],
        action: ActivityAction,
        section: Optional[ActivitySection] = None,
        details: Optional[Dict[str, Any]] = None,
        admin_id=None,
    ) -> Optional[AdminActivityLog]:
        """
        Record an admin action.

        The acting admin's code is kept in the details as ``actor_code`` so the
        entry stays attributable after the admin record is deleted.

        Args:
            actor_email: Email of the identity that performed the action
            action: What was done
            section: Optional pipeline section the action belongs to
            details: Optional JSON-serialisable payload
            admin_id: Admin to record against; resolved from actor_email if omitted

        Returns:
            The created AdminActivityLog, or None if nothing was written
        """
        session = self._open_session()
        try:
            admin = await self.resolve_admin(session, actor_email, admin_id)
            if admin is None:
                logger.debug(f"No admin record for {actor_email}; skipping activity {action.value}")
                return None

            log_entry = AdminActivityLog(
                admin_id=admin.id,
                action=action.value,
                section=section.value if section else None,
                details={**(details or {}), "actor_code": admin.admin_code},
                created_at=datetime.now(timezone.utc),
            )
            session.add(log_entry)
            await session.commit()

            logger.debug(
                f"Activity logged: {action.value} "
                f"(section: {section.value if section else 'N/A'}, admin: {admin.admin_code})"
            )
            return log_entry

        except Exception as e:
            logger.error(f"Error logging activity {action.value}: {str(e)}")
            try:
                await session.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after failed activity log also failed: {rollback_error}")
            # Don't raise, as logging should not interrupt the main flow
            return None

        finally:
            await session.close()
