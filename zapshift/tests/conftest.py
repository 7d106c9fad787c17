"""
Centralized Test Configuration.
"""

import asyncio

import pytest
from httpx import AsyncClient, ASGITransport
from redis.exceptions import LockError
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from zapshift.app.main import app
from zapshift.app.core.identity import JWTIdentityVerifier, get_identity_verifier
from zapshift.app.core.redis_client import get_redis
from zapshift.app.db.session import Base, get_db
from zapshift.app.models.enums import UserRole
from zapshift.tests.factories import (
    ADMIN_EMAIL,
    RIDER_EMAIL,
    SENDER_EMAIL,
    auth_headers,
    create_rider,
    create_user,
)

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Redis stand-in with asyncio locks
class MockLock:
    """asyncio-backed stand-in for redis.asyncio.lock.Lock."""

    def __init__(self, lock: asyncio.Lock, blocking_timeout=None):
        self._lock = lock
        self.blocking_timeout = blocking_timeout

    async def acquire(self):
        try:
            await asyncio.wait_for(self._lock.acquire(), timeout=self.blocking_timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def release(self):
        if not self._lock.locked():
            raise LockError("Cannot release an unlocked lock")
        self._lock.release()


class MockRedis:
    def __init__(self):
        self.locks = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    def lock(self, name, timeout=None, blocking_timeout=None):
        if name not in self.locks:
            self.locks[name] = asyncio.Lock()
        return MockLock(self.locks[name], blocking_timeout=blocking_timeout)

    async def aclose(self):
        self._closed = True
        self.locks = {}


@pytest.fixture
def redis_client():
    return MockRedis()


@pytest.fixture(autouse=True)
def apply_overrides(redis_client):
    """Route the app's dependencies to the test database, mock Redis and local tokens."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client

    async def override_get_identity_verifier():
        return JWTIdentityVerifier()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_identity_verifier] = override_get_identity_verifier
    yield

    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def admin(db_session):
    """Admin user; returns auth headers."""
    await create_user(db_session, ADMIN_EMAIL, UserRole.ADMIN)
    return auth_headers(ADMIN_EMAIL)


@pytest.fixture
async def approved_rider(db_session):
    """Approved rider with a rider-role user; returns (rider, headers)."""
    await create_user(db_session, RIDER_EMAIL, UserRole.RIDER)
    rider = await create_rider(db_session)
    return rider, auth_headers(RIDER_EMAIL)


@pytest.fixture
async def sender(db_session):
    """Plain user booking parcels; returns auth headers."""
    await create_user(db_session, SENDER_EMAIL, UserRole.USER)
    return auth_headers(SENDER_EMAIL)


@pytest.fixture
async def race_sessions(tmp_path):
    """File-backed database so each request gets its own connection."""
    race_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    async with race_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(race_engine, class_=AsyncSession, expire_on_commit=False)

    await race_engine.dispose()
