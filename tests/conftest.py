"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from taskflow.config import settings
from taskflow.core.auth import AuthenticationGate, create_access_token, hash_password
from taskflow.core.database import Base, get_db
from taskflow.core.rate_limit import FixedWindowRateLimiter, RateLimitStage
from taskflow.main import create_app

# Import all models to ensure they're registered with Base.metadata
from taskflow.modules.tasks.models import Tag, Task  # noqa: F401
from taskflow.modules.users.models import User
from tests.factories import TEST_PASSWORD, UserFactory


# In-memory SQLite unless a real database is provided
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _create_engine() -> AsyncEngine:
    if not TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(TEST_DATABASE_URL, poolclass=NullPool, echo=False)

    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    # pysqlite defers BEGIN; take over transaction control so SAVEPOINT works
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with a fresh schema."""
    engine = _create_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session shared by the test and the app under test."""
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance.

    Rate limiting is disabled so API tests never need Redis; the
    authentication gate is the real one.
    """
    application = create_app(
        stages=[
            RateLimitStage(FixedWindowRateLimiter(), enabled=False),
            AuthenticationGate(settings.secret_key, settings.jwt_algorithm),
        ]
    )

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# User Fixtures
# ============================================================


async def _make_user(db: AsyncSession) -> User:
    user = UserFactory.build(password_hash=hash_password(TEST_PASSWORD))
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest.fixture
async def user(db: AsyncSession) -> User:
    """Create a persisted test user whose password is ``TEST_PASSWORD``."""
    return await _make_user(db)


@pytest.fixture
async def other_user(db: AsyncSession) -> User:
    """Create a second user for isolation tests."""
    return await _make_user(db)


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    """Authorization headers carrying a valid token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def other_auth_headers(other_user: User) -> dict[str, str]:
    """Authorization headers carrying a valid token for ``other_user``."""
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}
