# backoffice/models/admin.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.enums import AdminStatus
from backoffice.database import Base
from backoffice.models.types import enum_column_type


class Admin(Base):
    """
    An operator of the back office.

    Admins are reference data: created through provisioning, frozen/activated by
    toggling ``status`` and hard-deleted. The link to a login identity is the
    shared email address.
    """
    __tablename__ = "admins"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_code = Column(String(20), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True, unique=True, index=True)
    phone = Column(String(50), nullable=True)
    status = Column(enum_column_type(AdminStatus, "adminstatus"), nullable=False, default=AdminStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    assigned_listings = relationship("Listing", back_populates="assignee", passive_deletes=True)
    permissions = relationship("AdminPermission", back_populates="admin", cascade="all, delete-orphan", passive_deletes=True)
    activities = relationship("AdminActivityLog", back_populates="admin", passive_deletes=True)

    @property
    def is_frozen(self) -> bool:
        return self.status == AdminStatus.FROZEN

    def __repr__(self):
        return f"<Admin {self.admin_code} ({self.status})>"


class AdminPermission(Base):
    """Per-section override; no row for a section means the admin may use it."""
    __tablename__ = "admin_permissions"
    __table_args__ = (UniqueConstraint("admin_id", "section", name="uq_admin_permissions_admin_section"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_id = Column(Uuid, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False, index=True)
    section = Column(String(50), nullable=False)
    can_access = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    admin = relationship("Admin", back_populates="permissions")

    def __repr__(self):
        return f"<AdminPermission {self.admin_id} {self.section}={self.can_access}>"
