"""
Listing model: the central mutable entity moving through the review pipeline.

A listing is created in ``cpv`` and advanced one edge at a time (see
``backoffice.core.enums.LISTING_TRANSITIONS``). ``deleted_at`` is a soft-delete
marker that hides the listing from every stage view without touching its status.
"""

import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.enums import ListingStatus, INITIAL_LISTING_STATUS
from backoffice.database import Base
from backoffice.models.types import enum_column_type


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    product_name = Column(String(200), nullable=False)
    title = Column(String(300), nullable=True)
    description = Column(Text, nullable=True)

    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False, index=True)
    brand_id = Column(Uuid, ForeignKey("brands.id"), nullable=True, index=True)

    status = Column(
        enum_column_type(ListingStatus, "listingstatus"),
        nullable=False,
        default=INITIAL_LISTING_STATUS,
        index=True,
    )
    assigned_to = Column(Uuid, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    created_by = Column(Uuid, ForeignKey("auth_users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="listings")
    brand = relationship("Brand", back_populates="listings")
    assignee = relationship("Admin", back_populates="assigned_listings")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def brand_name(self):
        return self.brand.name if self.brand else None

    @property
    def assignee_code(self):
        return self.assignee.admin_code if self.assignee else None

    def __repr__(self):
        return f"<Listing {self.id} '{self.product_name}' status={self.status}>"
