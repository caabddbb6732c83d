# tests/unit/services/test_auth_service.py
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from backoffice.core.enums import AdminStatus
from backoffice.core.exceptions import NotAuthenticatedError, ValidationError
from backoffice.models import AuthSession
from backoffice.services.auth_service import (
    AuthService,
    hash_password,
    hash_token,
    verify_password,
)
from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD, create_identity


def test_password_hash_round_trip():
    hashed = hash_password("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_overlong_password_is_rejected():
    with pytest.raises(ValidationError):
        hash_password("x" * 73)
    assert not verify_password("x" * 73, hash_password("x" * 72))


def test_verify_against_garbage_hash():
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_token_hash_is_keyed_and_stable():
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")
    assert len(hash_token("abc")) == 64


async def test_login_stores_only_token_hash(db_session, lead_admin):
    token, session = await AuthService(db_session).login(ADMIN_EMAIL.upper(), ADMIN_PASSWORD)

    stored = await db_session.execute(select(AuthSession.token_hash))
    assert stored.scalars().all() == [hash_token(token)]
    assert token not in session.token_hash


async def test_login_with_wrong_password(db_session, lead_admin):
    with pytest.raises(NotAuthenticatedError):
        await AuthService(db_session).login(ADMIN_EMAIL, "wrong")


async def test_login_with_unknown_email(db_session):
    with pytest.raises(NotAuthenticatedError):
        await AuthService(db_session).login("nobody@example.com", ADMIN_PASSWORD)


async def test_session_lookup_and_logout(db_session, lead_admin):
    service = AuthService(db_session)
    token, _ = await service.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    user = await service.get_session_user(token)
    assert user.email == ADMIN_EMAIL

    assert await service.logout(token) is True
    assert await service.get_session_user(token) is None
    assert await service.logout(token) is False


async def test_expired_session_is_ignored(db_session, lead_admin):
    service = AuthService(db_session)
    token, session = await service.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    await db_session.execute(
        update(AuthSession)
        .where(AuthSession.id == session.id)
        .values(expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))
    )
    await db_session.commit()

    assert await service.get_session_user(token) is None


async def test_unknown_token(db_session):
    service = AuthService(db_session)
    assert await service.get_session_user("made-up") is None
    assert await service.get_session_user(None) is None


async def test_resolve_current_user_links_admin_by_email(db_session, lead_admin):
    service = AuthService(db_session)
    user = await service.get_user_by_email(ADMIN_EMAIL)

    current = await service.resolve_current_user(user)

    assert current.is_admin
    assert current.admin_id == lead_admin.id
    assert current.admin_code == "A01"
    assert not current.is_frozen


async def test_identity_without_admin_role(db_session):
    user, _ = await create_identity(db_session, "viewer@example.com", roles=())
    current = await AuthService(db_session).resolve_current_user(user)

    assert not current.is_admin
    assert current.admin_id is None


async def test_frozen_admin_is_flagged(db_session):
    user, _ = await create_identity(db_session, "frozen@example.com", admin_code="F09", status=AdminStatus.FROZEN)
    current = await AuthService(db_session).resolve_current_user(user)

    assert current.is_admin
    assert current.is_frozen
