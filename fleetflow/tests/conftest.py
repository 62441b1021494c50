"""
Centralized Test Configuration.
"""

from datetime import date, time

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from fleetflow.app.main import app
from fleetflow.app.db.session import get_db, Base
from fleetflow.app.core.redis_client import get_redis
from fleetflow.app.core.security import get_pin_hash
from fleetflow.app.models.enums import UserRole, VehicleStatus
from fleetflow.app.models.project import Project
from fleetflow.app.models.user import User
from fleetflow.app.models.vehicle import Vehicle
import fleetflow.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PIN = "1234"


def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

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
def mock_redis():
    return MockRedis()


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", set_sqlite_pragma)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db_session(session_factory):
    """Shared session for fixture data creation and assertions."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, mock_redis, monkeypatch):
    """Async client with the database and Redis swapped for test doubles."""
    monkeypatch.setattr(redis_client_module, "redis_client", mock_redis)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


# Data helpers

@pytest.fixture
def make_user(session_factory):
    async def _make_user(username, name=None, pin=DEFAULT_PIN, role=UserRole.USER, is_active=True):
        async with session_factory() as session:
            user = User(
                username=username,
                name=name or username.title(),
                hashed_pin=get_pin_hash(pin),
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user
    return _make_user


@pytest.fixture
def make_vehicle(session_factory):
    async def _make_vehicle(license_plate, name="Pool Car", starting_odometer=None,
                            status=VehicleStatus.AVAILABLE, is_active=True):
        async with session_factory() as session:
            vehicle = Vehicle(
                license_plate=license_plate,
                name=name,
                vehicle_type="SUV",
                status=status,
                is_active=is_active,
                starting_odometer=starting_odometer,
            )
            session.add(vehicle)
            await session.commit()
            await session.refresh(vehicle)
            return vehicle
    return _make_vehicle


@pytest.fixture
def login(client):
    async def _login(username, pin=DEFAULT_PIN):
        response = await client.post("/v1/auth/login", json={"username": username, "pin": pin})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _login


@pytest.fixture
async def admin(make_user):
    return await make_user("admin", name="Admin", role=UserRole.ADMIN)


@pytest.fixture
async def alice(make_user):
    return await make_user("alice", name="Alice")


@pytest.fixture
async def bob(make_user):
    return await make_user("bob", name="Bob")


@pytest.fixture
async def admin_headers(admin, login):
    return await login("admin")


@pytest.fixture
async def alice_headers(alice, login):
    return await login("alice")


@pytest.fixture
async def bob_headers(bob, login):
    return await login("bob")


@pytest.fixture
async def vehicle(make_vehicle):
    return await make_vehicle("B 1234 XY", name="White SUV")


@pytest.fixture
async def project(session_factory):
    async with session_factory() as session:
        project = Project(name="Field Survey")
        session.add(project)
        await session.commit()
        await session.refresh(project)
        return project


def trip_payload(project_name="Field Survey", vehicle_id=None, day=date(2024, 3, 4),
                 start=time(9, 0), end=time(11, 0), **overrides):
    """JSON body for POST/PUT /v1/trips."""
    payload = {
        "date": day.isoformat(),
        "start_time": start.strftime("%H:%M:%S"),
        "end_time": end.strftime("%H:%M:%S"),
        "purpose": "Site visit",
        "category": "FIELDWORK",
        "project_name": project_name,
        "companion_ids": [],
        "vehicle_id": vehicle_id,
    }
    payload.update(overrides)
    return payload
