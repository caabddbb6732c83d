"""
Purpose: The central service for moving listings through the review pipeline.

Role: Owns every write to ``listings.status`` and ``listings.deleted_at``.

Pipeline (see ``LISTING_TRANSITIONS``):
- cpv -> assign        validation adds a title (and optional description)
- assign -> worklist   an active admin is picked and stored in assigned_to
- worklist -> nr       the operator marks the work complete
- nr -> pr | np        review decision, audited
- np -> nr             resubmission, the only backward edge
- pr -> published      batch publish, audited once per batch

Every transition is a conditional UPDATE on (id, current status, not deleted),
so an illegal edge is refused before writing and a listing moved by someone
else in the meantime is reported as a conflict rather than overwritten.

Soft delete sets deleted_at and leaves status alone; restore clears it;
purge removes the row and is only possible from the deleted view with an
explicit confirmation.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.core.enums import (
    ActivityAction,
    ActivitySection,
    AdminStatus,
    INITIAL_LISTING_STATUS,
    ListingStatus,
)
from backoffice.core.exceptions import (
    DatabaseError,
    InvalidTransitionError,
    ListingConflictError,
    ListingNotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from backoffice.models.admin import Admin
from backoffice.models.catalog import Brand, Category
from backoffice.models.listing import Listing
from backoffice.schemas.listing import ListingCreate, ListingDetails
from backoffice.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)


def ensure_transition(current: ListingStatus, target: ListingStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is a pipeline edge."""
    if not current.can_transition_to(target):
        raise InvalidTransitionError(current, target)


def _listing_query():
    return select(Listing).options(
        selectinload(Listing.category),
        selectinload(Listing.brand),
        selectinload(Listing.assignee),
    )


class ListingService:
    def __init__(self, db: AsyncSession, activity_logger: Optional[ActivityLogger] = None):
        self.db = db
        self.activity_logger = activity_logger or ActivityLogger(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_listing(self, listing_id: uuid.UUID, include_deleted: bool = True) -> Listing:
        query = _listing_query().where(Listing.id == listing_id).execution_options(populate_existing=True)
        if not include_deleted:
            query = query.where(Listing.deleted_at.is_(None))
        result = await self.db.execute(query)
        listing = result.scalar_one_or_none()
        if listing is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        return listing

    async def list_stage(self, status: ListingStatus, assigned_to: Optional[uuid.UUID] = None) -> List[Listing]:
        """Live (not soft-deleted) listings in one pipeline stage, oldest first."""
        query = (
            _listing_query()
            .where(Listing.status == status, Listing.deleted_at.is_(None))
            .order_by(Listing.created_at, Listing.id)
            .execution_options(populate_existing=True)
        )
        if assigned_to is not None:
            query = query.where(Listing.assigned_to == assigned_to)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_deleted(self) -> List[Listing]:
        query = (
            _listing_query()
            .where(Listing.deleted_at.is_not(None))
            .order_by(Listing.deleted_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def search(self, term: str, limit: Optional[int] = None) -> List[Listing]:
        """Case-insensitive match on product name, title or description (live listings only)."""
        term = (term or "").strip()
        if not term:
            return []
        pattern = f"%{term}%"
        query = (
            _listing_query()
            .where(
                Listing.deleted_at.is_(None),
                or_(
                    Listing.product_name.ilike(pattern),
                    Listing.title.ilike(pattern),
                    Listing.description.ilike(pattern),
                ),
            )
            .order_by(Listing.created_at.desc(), Listing.id)
            .execution_options(populate_existing=True)
        )
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_by_product_name(self, term: str) -> Optional[Listing]:
        """First live listing whose product name contains term."""
        term = (term or "").strip()
        if not term:
            return None
        query = (
            _listing_query()
            .where(Listing.deleted_at.is_(None), Listing.product_name.ilike(f"%{term}%"))
            .order_by(Listing.created_at, Listing.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_listing(self, data: ListingCreate, actor=None) -> Listing:
        """
        Creates a listing in the initial ``cpv`` stage.

        Args:
            data: Validated product name, category and optional brand
            actor: The identity creating the listing

        Returns:
            The created listing

        Raises:
            ReferenceNotFoundError: If the category or brand does not exist
        """
        await self._require_exists(Category, data.category_id, "Category")
        if data.brand_id is not None:
            await self._require_exists(Brand, data.brand_id, "Brand")

        listing = Listing(
            product_name=data.product_name,
            category_id=data.category_id,
            brand_id=data.brand_id,
            status=INITIAL_LISTING_STATUS,
            created_by=getattr(actor, "user_id", None),
        )
        try:
            self.db.add(listing)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create listing '{data.product_name}': {e}", exc_info=True)
            raise DatabaseError("Failed to create listing") from e

        logger.info(f"Listing {listing.id} '{listing.product_name}' created in {listing.status.value}")
        await self._audit(
            actor,
            ActivityAction.LISTING_CREATED,
            ActivitySection.CREATE_LISTING,
            {"listing_id": str(listing.id), "product_name": listing.product_name},
        )
        return await self.get_listing(listing.id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def add_details(self, listing_id: uuid.UUID, details: ListingDetails, actor=None) -> Listing:
        """cpv -> assign, storing the validated title and description."""
        if not details.title:
            raise ValidationError("Title is required")
        return await self._transition(
            listing_id,
            ListingStatus.ASSIGN,
            title=details.title,
            description=details.description,
        )

    async def assign_listing(self, listing_id: uuid.UUID, admin_id: uuid.UUID, actor=None) -> Listing:
        """assign -> worklist for the given (active) admin."""
        admin = await self.db.get(Admin, admin_id)
        if admin is None:
            raise ReferenceNotFoundError(f"Admin {admin_id} not found")
        if admin.status != AdminStatus.ACTIVE:
            raise ValidationError(f"Admin {admin.admin_code} is frozen and cannot receive work")

        listing = await self._transition(listing_id, ListingStatus.WORKLIST, assigned_to=admin.id)
        await self._audit(
            actor,
            ActivityAction.LISTING_ASSIGNED,
            ActivitySection.ASSIGN,
            {"listing_id": str(listing_id), "assigned_to": str(admin.id), "admin_code": admin.admin_code},
        )
        return listing

    async def complete_work(self, listing_id: uuid.UUID, actor=None) -> Listing:
        """worklist -> nr."""
        return await self._transition(listing_id, ListingStatus.NR)

    async def review_listing(self, listing_id: uuid.UUID, passed: bool, actor=None) -> Listing:
        """nr -> pr when passed, nr -> np otherwise. Both decisions are audited."""
        target = ListingStatus.PR if passed else ListingStatus.NP
        listing = await self._transition(listing_id, target)
        await self._audit(
            actor,
            ActivityAction.LISTING_PASSED if passed else ActivityAction.LISTING_REJECTED,
            ActivitySection.NR,
            {"listing_id": str(listing_id), "new_status": target.value},
        )
        return listing

    async def resubmit_listing(self, listing_id: uuid.UUID, actor=None) -> Listing:
        """np -> nr."""
        return await self._transition(listing_id, ListingStatus.NR)

    async def publish_listings(self, listing_ids: Iterable[uuid.UUID], actor=None) -> List[Listing]:
        """
        pr -> published for a whole selection at once.

        The batch is all-or-nothing: every id must be a live ``pr`` listing,
        otherwise nothing is published. One activity entry records the count.
        """
        ids = list(dict.fromkeys(listing_ids))
        if not ids:
            raise ValidationError("Select at least one listing to publish")

        result = await self.db.execute(
            select(Listing.id, Listing.status, Listing.deleted_at).where(Listing.id.in_(ids))
        )
        found = {row.id: row for row in result}

        missing = [str(i) for i in ids if i not in found or found[i].deleted_at is not None]
        if missing:
            raise ListingNotFoundError(f"Listings not found: {', '.join(missing)}")
        for listing_id in ids:
            ensure_transition(found[listing_id].status, ListingStatus.PUBLISHED)

        stmt = (
            update(Listing)
            .where(
                Listing.id.in_(ids),
                Listing.status == ListingStatus.PR,
                Listing.deleted_at.is_(None),
            )
            .values(status=ListingStatus.PUBLISHED)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount != len(ids):
                await self.db.rollback()
                raise ListingConflictError("Some selected listings changed while publishing; nothing was published")
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to publish {len(ids)} listings: {e}", exc_info=True)
            raise DatabaseError("Failed to publish listings") from e

        logger.info(f"Published {len(ids)} listings")
        await self._audit(
            actor,
            ActivityAction.LISTINGS_PUBLISHED,
            ActivitySection.PR,
            {"count": len(ids), "listing_ids": [str(i) for i in ids]},
        )

        published = await self.db.execute(
            _listing_query().where(Listing.id.in_(ids)).execution_options(populate_existing=True)
        )
        by_id = {listing.id: listing for listing in published.scalars().all()}
        return [by_id[i] for i in ids if i in by_id]

    # ------------------------------------------------------------------
    # Soft delete / restore / purge
    # ------------------------------------------------------------------

    async def soft_delete_listing(self, listing_id: uuid.UUID, actor=None) -> Listing:
        """Hide a live listing from every stage view. Status is left untouched."""
        listing = await self.get_listing(listing_id)
        if listing.is_deleted:
            raise ListingConflictError(f"Listing {listing_id} is already deleted")
        await self._conditional_update(
            listing_id,
            [Listing.deleted_at.is_(None)],
            {"deleted_at": datetime.now(timezone.utc)},
            conflict_message=f"Listing {listing_id} is already deleted",
        )
        logger.info(f"Listing {listing_id} moved to deleted listings")
        return await self.get_listing(listing_id)

    async def restore_listing(self, listing_id: uuid.UUID, actor=None) -> Listing:
        """Clear deleted_at; the listing reappears in the view for its status."""
        listing = await self.get_listing(listing_id)
        if not listing.is_deleted:
            raise ListingConflictError(f"Listing {listing_id} is not deleted")
        await self._conditional_update(
            listing_id,
            [Listing.deleted_at.is_not(None)],
            {"deleted_at": None},
            conflict_message=f"Listing {listing_id} is not deleted",
        )
        logger.info(f"Listing {listing_id} restored to {listing.status.value}")
        return await self.get_listing(listing_id)

    async def purge_listing(self, listing_id: uuid.UUID, confirm: bool = False, actor=None) -> uuid.UUID:
        """Permanently remove a soft-deleted listing. Requires confirm=True."""
        if not confirm:
            raise ValidationError("Permanent deletion must be confirmed")
        listing = await self.get_listing(listing_id)
        if not listing.is_deleted:
            raise ListingConflictError(
                f"Listing {listing_id} must be moved to deleted listings before it can be purged"
            )
        try:
            result = await self.db.execute(
                delete(Listing)
                .where(Listing.id == listing_id, Listing.deleted_at.is_not(None))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await self.db.rollback()
                raise ListingConflictError(f"Listing {listing_id} was restored or removed meanwhile")
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to purge listing {listing_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to delete listing") from e

        self.db.expunge(listing)
        logger.info(f"Listing {listing_id} permanently deleted")
        return listing_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _transition(self, listing_id: uuid.UUID, target: ListingStatus, **values: Any) -> Listing:
        listing = await self.get_listing(listing_id, include_deleted=False)
        current = listing.status
        ensure_transition(current, target)

        await self._conditional_update(
            listing_id,
            [Listing.status == current, Listing.deleted_at.is_(None)],
            {"status": target, **values},
            conflict_message=f"Listing {listing_id} is no longer in '{current.value}'",
        )
        logger.info(f"Listing {listing_id}: {current.value} -> {target.value}")
        return await self.get_listing(listing_id)

    async def _conditional_update(
        self,
        listing_id: uuid.UUID,
        conditions: list,
        values: Dict[str, Any],
        conflict_message: str,
    ) -> None:
        stmt = (
            update(Listing)
            .where(Listing.id == listing_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                await self.db.rollback()
                raise ListingConflictError(conflict_message)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update listing {listing_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to update listing") from e

    async def _require_exists(self, model, entity_id: uuid.UUID, label: str) -> None:
        if await self.db.get(model, entity_id) is None:
            raise ReferenceNotFoundError(f"{label} {entity_id} not found")

    async def _audit(self, actor, action: ActivityAction, section: ActivitySection, details: Dict[str, Any]):
        if actor is None:
            return None
        return await self.activity_logger.log_activity(
            getattr(actor, "email", None),
            action,
            section,
            details,
            admin_id=getattr(actor, "admin_id", None),
        )
