# backoffice/routes/pipeline.py
"""
One router per pipeline stage. Each lists the live listings in its stage and
exposes the mutation that moves a listing out of it. Section gates are attached
where the routers are mounted (see main.py).
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import AdminStatus, ListingStatus
from backoffice.core.security import require_admin
from backoffice.dependencies import get_db
from backoffice.models.listing import Listing
from backoffice.schemas.admin import AdminRead
from backoffice.schemas.listing import (
    ListingAssign,
    ListingDetails,
    ListingRead,
    PublishRequest,
    PublishResult,
    StageView,
)
from backoffice.services.admin_service import AdminService
from backoffice.services.auth_service import CurrentUser
from backoffice.services.listing_service import ListingService


def stage_view(status: ListingStatus, listings: List[Listing]) -> StageView:
    return StageView(
        status=status,
        label=status.label,
        count=len(listings),
        listings=[ListingRead.from_orm_model(listing) for listing in listings],
    )


# CPV: created, pending validation

cpv_router = APIRouter(prefix="/cpv", tags=["cpv"])


@cpv_router.get("", response_model=StageView)
async def list_cpv(db: AsyncSession = Depends(get_db)):
    return stage_view(ListingStatus.CPV, await ListingService(db).list_stage(ListingStatus.CPV))


@cpv_router.post("/{listing_id}/details", response_model=ListingRead)
async def add_details(
    listing_id: uuid.UUID,
    details: ListingDetails,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Validate a listing: store title/description and move it to assign."""
    listing = await ListingService(db).add_details(listing_id, details, actor=current_user)
    return ListingRead.from_orm_model(listing)


# Assign

assign_router = APIRouter(prefix="/assign", tags=["assign"])


@assign_router.get("", response_model=StageView)
async def list_assign(db: AsyncSession = Depends(get_db)):
    return stage_view(ListingStatus.ASSIGN, await ListingService(db).list_stage(ListingStatus.ASSIGN))


@assign_router.get("/admins", response_model=List[AdminRead])
async def list_assignable_admins(db: AsyncSession = Depends(get_db)):
    """Active admins that can receive work."""
    admins = await AdminService(db).list_admins(status=AdminStatus.ACTIVE)
    return [AdminRead.from_orm_model(admin) for admin in admins]


@assign_router.post("/{listing_id}", response_model=ListingRead)
async def assign_listing(
    listing_id: uuid.UUID,
    assignment: ListingAssign,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).assign_listing(listing_id, assignment.admin_id, actor=current_user)
    return ListingRead.from_orm_model(listing)


# Worklist

worklist_router = APIRouter(prefix="/worklist", tags=["worklist"])


@worklist_router.get("", response_model=StageView)
async def list_worklist(assigned_to: Optional[uuid.UUID] = None, db: AsyncSession = Depends(get_db)):
    listings = await ListingService(db).list_stage(ListingStatus.WORKLIST, assigned_to=assigned_to)
    return stage_view(ListingStatus.WORKLIST, listings)


@worklist_router.post("/{listing_id}/complete", response_model=ListingRead)
async def complete_work(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).complete_work(listing_id, actor=current_user)
    return ListingRead.from_orm_model(listing)


# NR: needs review

nr_router = APIRouter(prefix="/nr", tags=["nr"])


@nr_router.get("", response_model=StageView)
async def list_nr(db: AsyncSession = Depends(get_db)):
    return stage_view(ListingStatus.NR, await ListingService(db).list_stage(ListingStatus.NR))


@nr_router.post("/{listing_id}/pass", response_model=ListingRead)
async def pass_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).review_listing(listing_id, passed=True, actor=current_user)
    return ListingRead.from_orm_model(listing)


@nr_router.post("/{listing_id}/reject", response_model=ListingRead)
async def reject_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).review_listing(listing_id, passed=False, actor=current_user)
    return ListingRead.from_orm_model(listing)


# NP: not passed

np_router = APIRouter(prefix="/np", tags=["np"])


@np_router.get("", response_model=StageView)
async def list_np(db: AsyncSession = Depends(get_db)):
    return stage_view(ListingStatus.NP, await ListingService(db).list_stage(ListingStatus.NP))


@np_router.post("/{listing_id}/resubmit", response_model=ListingRead)
async def resubmit_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    listing = await ListingService(db).resubmit_listing(listing_id, actor=current_user)
    return ListingRead.from_orm_model(listing)


# PR: passed review

pr_router = APIRouter(prefix="/pr", tags=["pr"])


@pr_router.get("", response_model=StageView)
async def list_pr(db: AsyncSession = Depends(get_db)):
    return stage_view(ListingStatus.PR, await ListingService(db).list_stage(ListingStatus.PR))


@pr_router.post("/publish", response_model=PublishResult)
async def publish_listings(
    request: PublishRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Publish the selected listings as one batch."""
    listings = await ListingService(db).publish_listings(request.listing_ids, actor=current_user)
    return PublishResult(
        published=len(listings),
        listings=[ListingRead.from_orm_model(listing) for listing in listings],
    )
