# tests/unit/services/test_activity_logger.py
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import inspect, select
from sqlalchemy.exc import OperationalError

from backoffice.core.enums import ActivityAction, ActivitySection
from backoffice.models import AdminActivityLog
from backoffice.services.activity_logger import ActivityLogger
from tests.conftest import ADMIN_EMAIL


def broken_session(commit_error, rollback_error=None):
    """A session whose admin lookup succeeds but whose commit fails."""
    session = MagicMock()
    row = MagicMock(id="some-admin", admin_code="A01")
    session.execute = AsyncMock(return_value=MagicMock(first=MagicMock(return_value=row)))
    session.commit = AsyncMock(side_effect=commit_error)
    session.rollback = AsyncMock(side_effect=rollback_error)
    session.close = AsyncMock()
    return session


async def test_log_activity_resolves_admin_by_email(db_session, lead_admin):
    logger = ActivityLogger(db_session)

    entry = await logger.log_activity(
        ADMIN_EMAIL.upper(),
        ActivityAction.LISTING_PASSED,
        ActivitySection.NR,
        {"listing_id": "abc"},
    )

    assert entry is not None
    stored = (await db_session.execute(select(AdminActivityLog))).scalar_one()
    assert stored.admin_id == lead_admin.id
    assert stored.action == "LISTING_PASSED"
    assert stored.section == "nr"
    assert stored.details == {"listing_id": "abc", "actor_code": "A01"}


async def test_log_activity_without_admin_record_writes_nothing(db_session):
    logger = ActivityLogger(db_session)

    assert await logger.log_activity("stranger@example.com", ActivityAction.ADMIN_CREATED) is None
    assert (await db_session.execute(select(AdminActivityLog))).scalars().all() == []


async def test_log_activity_swallows_database_errors(db_session):
    session = broken_session(OperationalError("INSERT", {}, Exception("database is locked")))
    logger = ActivityLogger(db_session, session_factory=lambda: session)

    result = await logger.log_activity("lead@example.com", ActivityAction.LISTINGS_PUBLISHED, admin_id="some-admin")

    assert result is None
    session.rollback.assert_awaited_once()
    session.close.assert_awaited_once()


async def test_log_activity_survives_failed_rollback(db_session):
    session = broken_session(RuntimeError("boom"), rollback_error=RuntimeError("still broken"))
    logger = ActivityLogger(db_session, session_factory=lambda: session)

    assert await logger.log_activity("lead@example.com", ActivityAction.ADMIN_CREATED, admin_id="some-admin") is None
    session.close.assert_awaited_once()


async def test_failed_write_leaves_callers_objects_loaded(db_session, lead_admin, make_listing, mocker):
    listing = await make_listing()
    expired_before = set(inspect(listing).expired_attributes), set(inspect(lead_admin).expired_attributes)
    mocker.patch(
        "backoffice.services.activity_logger.AdminActivityLog",
        side_effect=RuntimeError("audit table unavailable"),
    )

    result = await ActivityLogger(db_session).log_activity(ADMIN_EMAIL, ActivityAction.LISTING_CREATED)

    assert result is None
    assert (set(inspect(listing).expired_attributes), set(inspect(lead_admin).expired_attributes)) == expired_before
    assert listing.product_name == "Widget"
