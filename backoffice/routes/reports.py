# backoffice/routes/reports.py
"""
Read-mostly sections: dashboard, data block, trend analysis and the draft placeholder.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.dependencies import get_db
from backoffice.schemas.catalog import CatalogDeleteResult
from backoffice.schemas.listing import ListingRead
from backoffice.schemas.reports import DashboardStats, DataBlockStats, SearchResults, TrendResult
from backoffice.services.catalog_service import CatalogService
from backoffice.services.dashboard_service import DashboardService
from backoffice.services.search_service import SearchService

dashboard_router = APIRouter(tags=["dashboard"])


@dashboard_router.get("/", response_model=DashboardStats)
async def dashboard(admin_code: Optional[str] = None, db: AsyncSession = Depends(get_db)):
    """Pipeline totals and worklist load per admin (optionally one admin_code)."""
    return DashboardStats(**await DashboardService(db).get_stats(admin_code))


data_block_router = APIRouter(prefix="/data-block", tags=["data block"])


@data_block_router.get("/search", response_model=SearchResults)
async def search_listings(q: str = Query("", max_length=200), db: AsyncSession = Depends(get_db)):
    listings = await SearchService(db).search_listings(q)
    return SearchResults(
        query=q,
        count=len(listings),
        listings=[ListingRead.from_orm_model(listing) for listing in listings],
    )


@data_block_router.get("/stats", response_model=DataBlockStats)
async def catalog_stats(db: AsyncSession = Depends(get_db)):
    return DataBlockStats(**await SearchService(db).catalog_stats())


@data_block_router.delete("/categories/{category_id}", response_model=CatalogDeleteResult)
async def delete_category(
    category_id: uuid.UUID,
    replacement_id: Optional[uuid.UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    """Delete a category; listings using it must be moved to replacement_id."""
    reassigned = await CatalogService(db).delete_category(category_id, replacement_id)
    return CatalogDeleteResult(id=category_id, reassigned=reassigned, replacement_id=replacement_id)


@data_block_router.delete("/brands/{brand_id}", response_model=CatalogDeleteResult)
async def delete_brand(
    brand_id: uuid.UUID,
    replacement_id: Optional[uuid.UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    reassigned = await CatalogService(db).delete_brand(brand_id, replacement_id)
    return CatalogDeleteResult(id=brand_id, reassigned=reassigned, replacement_id=replacement_id)


trend_router = APIRouter(prefix="/trend-analysis", tags=["trend analysis"])


@trend_router.get("", response_model=TrendResult)
async def trend_analysis(q: str = Query("", max_length=200), db: AsyncSession = Depends(get_db)):
    listing = await SearchService(db).trend_lookup(q)
    return TrendResult(
        query=q,
        found=listing is not None,
        listing=ListingRead.from_orm_model(listing) if listing else None,
    )


draft_router = APIRouter(prefix="/draft", tags=["draft"])


@draft_router.get("")
async def draft():
    return {"section": "Draft", "listings": [], "message": "Drafts are not available yet"}
