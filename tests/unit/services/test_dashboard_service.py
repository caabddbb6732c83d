# tests/unit/services/test_dashboard_service.py
from backoffice.core.enums import ListingStatus
from backoffice.services.dashboard_service import DashboardService
from backoffice.services.listing_service import ListingService
from backoffice.services.search_service import SearchService


async def test_stats_count_live_listings_per_status(db_session, make_listing, lead_admin, operator):
    await make_listing("a", status=ListingStatus.CPV)
    await make_listing("b", status=ListingStatus.WORKLIST, assigned_to=operator.id)
    await make_listing("c", status=ListingStatus.WORKLIST, assigned_to=operator.id)
    await make_listing("d", status=ListingStatus.WORKLIST, assigned_to=lead_admin.id)
    gone = await make_listing("e", status=ListingStatus.WORKLIST, assigned_to=lead_admin.id)
    await ListingService(db_session).soft_delete_listing(gone.id)

    stats = await DashboardService(db_session).get_stats()

    assert stats["listed"] == 4
    assert stats["categories"] == 1
    assert stats["status_counts"][ListingStatus.WORKLIST] == 3
    assert stats["status_counts"][ListingStatus.PUBLISHED] == 0
    assert stats["workloads"] == [
        {"admin_id": operator.id, "admin_code": "B02", "count": 2},
        {"admin_id": lead_admin.id, "admin_code": "A01", "count": 1},
    ]
    assert stats["selected_admin"] is None


async def test_workloads_for_one_admin(db_session, make_listing, lead_admin, operator):
    await make_listing("b", status=ListingStatus.WORKLIST, assigned_to=operator.id)

    workloads = await DashboardService(db_session).get_workloads("A01")

    assert workloads == [{"admin_id": lead_admin.id, "admin_code": "A01", "count": 0}]


async def test_catalog_stats_shape(db_session, category, brand, make_listing):
    await make_listing("Widget", brand_id=brand.id)

    stats = await SearchService(db_session).catalog_stats()

    assert stats["categories"] == [{"id": category.id, "name": "Electronics", "listing_count": 1}]
    assert stats["brands"] == [{"id": brand.id, "name": "Acme", "listing_count": 1}]
