# backoffice/routes/create_new.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.security import require_admin
from backoffice.dependencies import get_db
from backoffice.schemas.catalog import CatalogEntryCreate, CatalogEntryRead
from backoffice.schemas.listing import ListingCreate, ListingRead
from backoffice.services.auth_service import CurrentUser
from backoffice.services.catalog_service import CatalogService
from backoffice.services.listing_service import ListingService

router = APIRouter(prefix="/create-new", tags=["create new"])


@router.post("/listings", response_model=ListingRead, status_code=status.HTTP_201_CREATED)
async def create_listing(
    data: ListingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).create_listing(data, actor=current_user)
    return ListingRead.from_orm_model(listing)


@router.get("/categories", response_model=List[CatalogEntryRead])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return [CatalogEntryRead.from_orm_model(c) for c in await CatalogService(db).list_categories()]


@router.post("/categories", response_model=CatalogEntryRead, status_code=status.HTTP_201_CREATED)
async def create_category(data: CatalogEntryCreate, db: AsyncSession = Depends(get_db)):
    return CatalogEntryRead.from_orm_model(await CatalogService(db).create_category(data.name))


@router.get("/brands", response_model=List[CatalogEntryRead])
async def list_brands(db: AsyncSession = Depends(get_db)):
    return [CatalogEntryRead.from_orm_model(b) for b in await CatalogService(db).list_brands()]


@router.post("/brands", response_model=CatalogEntryRead, status_code=status.HTTP_201_CREATED)
async def create_brand(data: CatalogEntryCreate, db: AsyncSession = Depends(get_db)):
    return CatalogEntryRead.from_orm_model(await CatalogService(db).create_brand(data.name))
