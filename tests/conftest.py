# tests/conftest.py
import os

# Settings are read once and cached, so test defaults must be in place before
# anything from backoffice is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("CORS_ALLOW_ORIGINS", "http://localhost:3000")

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.core.config import get_settings
from backoffice.core.enums import AdminStatus, ListingStatus
from backoffice.database import Base
from backoffice.dependencies import get_db
from backoffice.main import app
from backoffice.models import Admin, AuthUser, Brand, Category, Listing, UserRole
from backoffice.services.auth_service import AuthService, hash_password

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "lead@example.com"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture(scope="function")
async def test_engine():
    """Create and configure the test database engine (function-scoped)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Provide a database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


# --- Seed data ---

async def create_identity(db_session, email, password=ADMIN_PASSWORD, roles=("admin",), admin_code=None, status=AdminStatus.ACTIVE):
    """Insert a login identity, its role grants and (optionally) an admin record."""
    user = AuthUser(email=email, password_hash=hash_password(password))
    db_session.add(user)
    await db_session.flush()
    for role in roles:
        db_session.add(UserRole(user_id=user.id, role=role))
    admin = None
    if admin_code:
        admin = Admin(admin_code=admin_code, name=f"Admin {admin_code}", email=email, status=status)
        db_session.add(admin)
    await db_session.commit()
    return user, admin


async def open_session(db_session, email, password=ADMIN_PASSWORD) -> str:
    token, _ = await AuthService(db_session).login(email, password)
    return token


@pytest.fixture
async def lead_admin(db_session):
    """The active admin used as the acting identity in most tests."""
    user, admin = await create_identity(db_session, ADMIN_EMAIL, admin_code="A01")
    return admin


@pytest.fixture
async def actor(db_session, lead_admin):
    """CurrentUser for the lead admin, as the request gate would build it."""
    service = AuthService(db_session)
    user = await service.get_user_by_email(ADMIN_EMAIL)
    return await service.resolve_current_user(user)


@pytest.fixture
async def operator(db_session):
    _, admin = await create_identity(db_session, "operator@example.com", admin_code="B02")
    return admin


@pytest.fixture
async def auth_headers(db_session, lead_admin):
    token = await open_session(db_session, ADMIN_EMAIL)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def category(db_session):
    entry = Category(name="Electronics")
    db_session.add(entry)
    await db_session.commit()
    return entry


@pytest.fixture
async def brand(db_session):
    entry = Brand(name="Acme")
    db_session.add(entry)
    await db_session.commit()
    return entry


@pytest.fixture
def make_listing(db_session, category):
    """Factory inserting a listing directly in any status."""

    async def _make(product_name="Widget", status=ListingStatus.CPV, **fields):
        listing = Listing(
            id=fields.pop("id", uuid.uuid4()),
            product_name=product_name,
            category_id=fields.pop("category_id", category.id),
            status=status,
            **fields,
        )
        db_session.add(listing)
        await db_session.commit()
        return listing

    return _make


# --- HTTP client ---

@pytest.fixture
async def client(session_factory):
    """Async client against the app, with every request using the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    """Provide test settings"""
    return get_settings()
