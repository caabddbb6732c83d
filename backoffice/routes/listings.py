# backoffice/routes/listings.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.security import require_admin
from backoffice.dependencies import get_db
from backoffice.schemas.listing import ListingRead, PurgeResult
from backoffice.services.auth_service import CurrentUser
from backoffice.services.listing_service import ListingService

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("/{listing_id}", response_model=ListingRead)
async def get_listing(listing_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return ListingRead.from_orm_model(await ListingService(db).get_listing(listing_id))


@router.delete("/{listing_id}", response_model=ListingRead)
async def soft_delete_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Move a listing to deleted listings. Its status is kept for a later restore."""
    listing = await ListingService(db).soft_delete_listing(listing_id, actor=current_user)
    return ListingRead.from_orm_model(listing)


deleted_router = APIRouter(prefix="/deleted-listings", tags=["deleted listings"])


@deleted_router.get("", response_model=List[ListingRead])
async def list_deleted(db: AsyncSession = Depends(get_db)):
    listings = await ListingService(db).list_deleted()
    return [ListingRead.from_orm_model(listing) for listing in listings]


@deleted_router.post("/{listing_id}/restore", response_model=ListingRead)
async def restore_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).restore_listing(listing_id, actor=current_user)
    return ListingRead.from_orm_model(listing)


@deleted_router.delete("/{listing_id}", response_model=PurgeResult)
async def purge_listing(
    listing_id: uuid.UUID,
    confirm: bool = Query(False, description="Must be true to delete permanently"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    purged_id = await ListingService(db).purge_listing(listing_id, confirm=confirm, actor=current_user)
    return PurgeResult(id=purged_id)
