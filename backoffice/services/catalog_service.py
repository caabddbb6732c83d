# backoffice/services/catalog_service.py
"""
Categories and brands: the two lookup tables a listing points at.

Deleting an entry that listings still reference needs a replacement; the
reassignment and the delete are committed together.
"""

import logging
import uuid
from typing import List, Optional, Tuple, Type, Union

from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.exceptions import (
    DatabaseError,
    ReferenceInUseError,
    ReferenceNotFoundError,
    ValidationError,
)
from backoffice.models.catalog import Brand, Category
from backoffice.models.listing import Listing

logger = logging.getLogger(__name__)

CatalogModel = Union[Type[Category], Type[Brand]]

# Listing column that references each lookup table
_REFERENCE_COLUMNS = {
    Category: Listing.category_id,
    Brand: Listing.brand_id,
}


class CatalogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Categories

    async def list_categories(self) -> List[Category]:
        return await self._list(Category)

    async def create_category(self, name: str) -> Category:
        return await self._create(Category, name)

    async def delete_category(self, category_id: uuid.UUID, replacement_id: Optional[uuid.UUID] = None) -> int:
        return await self._delete(Category, category_id, replacement_id)

    async def category_stats(self) -> List[Tuple[Category, int]]:
        return await self._stats(Category)

    # Brands

    async def list_brands(self) -> List[Brand]:
        return await self._list(Brand)

    async def create_brand(self, name: str) -> Brand:
        return await self._create(Brand, name)

    async def delete_brand(self, brand_id: uuid.UUID, replacement_id: Optional[uuid.UUID] = None) -> int:
        return await self._delete(Brand, brand_id, replacement_id)

    async def brand_stats(self) -> List[Tuple[Brand, int]]:
        return await self._stats(Brand)

    # Shared implementation

    async def _list(self, model: CatalogModel):
        result = await self.db.execute(select(model).order_by(model.name))
        return list(result.scalars().all())

    async def _create(self, model: CatalogModel, name: str):
        name = (name or "").strip()
        if not name:
            raise ValidationError(f"{model.__name__} name is required")

        existing = await self.db.execute(select(model.id).where(func.lower(model.name) == name.lower()))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(f"{model.__name__} '{name}' already exists")

        entry = model(name=name)
        try:
            self.db.add(entry)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationError(f"{model.__name__} '{name}' already exists") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create {model.__name__.lower()} '{name}': {e}", exc_info=True)
            raise DatabaseError(f"Failed to create {model.__name__.lower()}") from e

        await self.db.refresh(entry)
        logger.info(f"{model.__name__} '{name}' created ({entry.id})")
        return entry

    async def count_references(self, model: CatalogModel, entry_id: uuid.UUID) -> int:
        """Listings pointing at the entry, soft-deleted ones included."""
        column = _REFERENCE_COLUMNS[model]
        result = await self.db.execute(select(func.count(Listing.id)).where(column == entry_id))
        return result.scalar() or 0

    async def _delete(self, model: CatalogModel, entry_id: uuid.UUID, replacement_id: Optional[uuid.UUID]) -> int:
        """
        Delete a category or brand, first moving its listings to replacement_id.

        Returns:
            Number of listings reassigned

        Raises:
            ReferenceNotFoundError: If the entry or its replacement does not exist
            ValidationError: If the replacement is the entry itself
            ReferenceInUseError: If listings reference the entry and no replacement was given
        """
        label = model.__name__
        entry = await self.db.get(model, entry_id)
        if entry is None:
            raise ReferenceNotFoundError(f"{label} {entry_id} not found")

        in_use = await self.count_references(model, entry_id)
        if in_use and replacement_id is None:
            raise ReferenceInUseError(
                f"{label} '{entry.name}' is used by {in_use} listing(s); choose a replacement first",
                listing_count=in_use,
            )

        if replacement_id is not None:
            if replacement_id == entry_id:
                raise ValidationError(f"A {label.lower()} cannot replace itself")
            if await self.db.get(model, replacement_id) is None:
                raise ReferenceNotFoundError(f"Replacement {label.lower()} {replacement_id} not found")

        column = _REFERENCE_COLUMNS[model]
        reassigned = 0
        try:
            if in_use:
                result = await self.db.execute(
                    update(Listing)
                    .where(column == entry_id)
                    .values({column.key: replacement_id})
                    .execution_options(synchronize_session=False)
                )
                reassigned = result.rowcount
            await self.db.execute(delete(model).where(model.id == entry_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {label.lower()} {entry_id}: {e}", exc_info=True)
            raise DatabaseError(f"Failed to delete {label.lower()}") from e

        self.db.expunge(entry)
        logger.info(f"{label} '{entry.name}' deleted, {reassigned} listing(s) moved to {replacement_id}")
        return reassigned

    async def _stats(self, model: CatalogModel):
        """Each entry with its count of live listings, busiest first."""
        column = _REFERENCE_COLUMNS[model]
        count = func.count(Listing.id)
        query = (
            select(model, count)
            .outerjoin(Listing, (column == model.id) & Listing.deleted_at.is_(None))
            .group_by(model.id)
            .order_by(count.desc(), model.name)
        )
        result = await self.db.execute(query)
        return [(entry, listing_count) for entry, listing_count in result.all()]
