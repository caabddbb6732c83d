# backoffice/models/activity_log.py
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.database import Base
from backoffice.models.types import JSONType


class AdminActivityLog(Base):
    """
    Append-only audit trail of significant admin actions.

    This includes:
    - Listing creation and assignment
    - Review decisions and batch publishing
    - Admin creation and permission changes
    """
    __tablename__ = "admin_activity_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Cleared when the admin is deleted; details["actor_code"] keeps the attribution
    admin_id = Column(Uuid, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(50), nullable=False, index=True)
    section = Column(String(50), nullable=True, index=True)

    # Store additional details in JSON format
    details = Column(JSONType, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    admin = relationship("Admin", back_populates="activities")

    def __repr__(self):
        return f"<AdminActivityLog {self.action} {self.section} by {self.admin_id}>"
