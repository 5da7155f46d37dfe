"""
Centralized Test Configuration.

Every test gets a fresh in-memory SQLite database and an in-memory Redis
double; the FastAPI app is wired to both through dependency overrides.
"""

import os

# Must be set before the application settings are imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from swiftdrop.app.main import app
from swiftdrop.app.db.session import get_db, Base
from swiftdrop.app.core.jwt import create_access_token
from swiftdrop.app.core.security import get_password_hash
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.models.user import User
from swiftdrop.tests.helpers import register_user
import swiftdrop.app.core.redis_client as redis_client_module

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Session for fixture data creation and direct service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def redis_mock(monkeypatch):
    mock = MockRedis()
    monkeypatch.setattr(redis_client_module, "redis_client", mock)
    return mock


@pytest.fixture
async def client(session_factory, redis_mock):
    """Async client for testing."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def sender(client):
    return await register_user(client, "sender1", "sender")


@pytest.fixture
async def other_sender(client):
    return await register_user(client, "sender2", "sender")


@pytest.fixture
async def receiver(client):
    return await register_user(client, "receiver1", "receiver")


@pytest.fixture
async def admin(db_session):
    """Admins cannot self-register, so the account is inserted directly."""
    user = User(
        email="admin@test.com",
        username="admin",
        hashed_password=get_password_hash("admin123"),
        role=UserRole.ADMIN,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)

    token = create_access_token(data={"sub": user.username, "user_id": user.id, "role": user.role.value})
    return {"token": token, "user_id": user.id}
