# tests/unit/services/test_catalog_service.py
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from backoffice.core.enums import ListingStatus
from backoffice.core.exceptions import (
    DatabaseError,
    ReferenceInUseError,
    ReferenceNotFoundError,
    ValidationError,
)
from backoffice.models import Brand, Category, Listing
from backoffice.services.catalog_service import CatalogService
from backoffice.services.listing_service import ListingService


async def references(db_session, column, entry_id):
    result = await db_session.execute(select(func.count(Listing.id)).where(column == entry_id))
    return result.scalar()


async def test_create_category_trims_and_rejects_duplicates(db_session):
    service = CatalogService(db_session)

    created = await service.create_category("  Toys ")
    assert created.name == "Toys"

    with pytest.raises(ValidationError):
        await service.create_category("toys")


async def test_list_brands_sorted_by_name(db_session):
    service = CatalogService(db_session)
    await service.create_brand("Zeta")
    await service.create_brand("Alpha")

    assert [b.name for b in await service.list_brands()] == ["Alpha", "Zeta"]


async def test_delete_unused_category(db_session, category):
    service = CatalogService(db_session)

    assert await service.delete_category(category.id) == 0
    assert await service.list_categories() == []


async def test_delete_referenced_category_without_replacement_is_rejected(db_session, category, make_listing):
    await make_listing("One")
    await make_listing("Two")
    service = CatalogService(db_session)

    with pytest.raises(ReferenceInUseError) as exc_info:
        await service.delete_category(category.id)

    assert exc_info.value.listing_count == 2
    assert await db_session.get(Category, category.id) is not None


async def test_delete_referenced_category_with_replacement(db_session, category, make_listing):
    replacement = Category(name="Gadgets")
    db_session.add(replacement)
    await db_session.commit()
    first = await make_listing("One")
    await make_listing("Two", status=ListingStatus.NR)
    await ListingService(db_session).soft_delete_listing(first.id)
    service = CatalogService(db_session)

    reassigned = await service.delete_category(category.id, replacement_id=replacement.id)

    assert reassigned == 2
    assert await references(db_session, Listing.category_id, category.id) == 0
    assert await references(db_session, Listing.category_id, replacement.id) == 2
    assert [c.name for c in await service.list_categories()] == ["Gadgets"]


async def test_replacement_must_exist_and_differ(db_session, category, make_listing):
    await make_listing()
    service = CatalogService(db_session)

    with pytest.raises(ReferenceNotFoundError):
        await service.delete_category(category.id, replacement_id=uuid.uuid4())
    with pytest.raises(ValidationError):
        await service.delete_category(category.id, replacement_id=category.id)

    assert await references(db_session, Listing.category_id, category.id) == 1


async def test_delete_unknown_brand(db_session):
    with pytest.raises(ReferenceNotFoundError):
        await CatalogService(db_session).delete_brand(uuid.uuid4())


async def test_delete_brand_with_replacement(db_session, brand, make_listing):
    other = Brand(name="Globex")
    db_session.add(other)
    await db_session.commit()
    await make_listing("Branded", brand_id=brand.id)
    await make_listing("Unbranded")

    reassigned = await CatalogService(db_session).delete_brand(brand.id, replacement_id=other.id)

    assert reassigned == 1
    assert await db_session.get(Brand, brand.id) is None
    assert await references(db_session, Listing.brand_id, other.id) == 1


async def test_failed_delete_leaves_listings_untouched(db_session, category, make_listing, mocker):
    replacement = Category(name="Gadgets")
    db_session.add(replacement)
    await db_session.commit()
    await make_listing()
    category_id = category.id
    replacement_id = replacement.id
    service = CatalogService(db_session)

    real_execute = db_session.execute

    async def fail_on_delete(statement, *args, **kwargs):
        if getattr(statement, "is_delete", False):
            raise OperationalError("DELETE", {}, Exception("disk I/O error"))
        return await real_execute(statement, *args, **kwargs)

    mocker.patch.object(db_session, "execute", side_effect=fail_on_delete)

    with pytest.raises(DatabaseError):
        await service.delete_category(category_id, replacement_id=replacement_id)

    mocker.stopall()
    assert await references(db_session, Listing.category_id, category_id) == 1


async def test_stats_count_live_listings_only(db_session, category, brand, make_listing):
    await make_listing("Live", brand_id=brand.id)
    hidden = await make_listing("Hidden", brand_id=brand.id)
    await ListingService(db_session).soft_delete_listing(hidden.id)
    empty = Category(name="Empty")
    db_session.add(empty)
    await db_session.commit()
    service = CatalogService(db_session)

    category_counts = {entry.name: count for entry, count in await service.category_stats()}
    brand_counts = {entry.name: count for entry, count in await service.brand_stats()}

    assert category_counts == {"Electronics": 1, "Empty": 0}
    assert brand_counts == {"Acme": 1}
