"""Shared test fixtures for all test modules."""

import contextlib
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import database as db_module
from app.core.auth import create_access_token
from app.core.database import Base, get_db
from app.main import app
from app.models.user import UserRole
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.user_repository import UserRepository
from app.schemas.shipment import ShipmentCreate
from app.services.realtime import get_broadcaster

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


class FakeBroadcaster:
    """Records every emitted event instead of pushing it to sockets."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any, str | None]] = []

    async def emit(self, event: str, data: Any, room: str | None = None) -> None:
        self.events.append((event, data, room))

    def named(self, event: str) -> list[tuple[str, Any, str | None]]:
        return [e for e in self.events if e[0] == event]


class FailingBroadcaster:
    """Broadcaster whose every send fails."""

    async def emit(self, event: str, data: Any, room: str | None = None) -> None:
        raise ConnectionError("socket gone")


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def broadcaster():
    return FakeBroadcaster()


@pytest.fixture
def client(broadcaster):
    """Test client whose realtime events land in ``broadcaster``."""
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_broadcaster, None)


def make_user(db, name: str, role: UserRole = UserRole.USER, **kwargs):
    return UserRepository(db).create(name=name, role=role, **kwargs)


def make_shipment(db, **overrides):
    data = {
        "origin": "Chennai",
        "destination": "Mumbai",
        "vehicle_type": "Container",
        "load": "Full",
        "weight": Decimal("1200.00"),
        "price": Decimal("45000.00"),
    }
    data.update(overrides)
    return ShipmentRepository(db).create(ShipmentCreate(**data))


def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def driver(db_session):
    return make_user(db_session, "Dinesh", phone="+91 98400 00001", vehicle_number="TN01AB1234")


@pytest.fixture
def other_driver(db_session):
    return make_user(db_session, "Uma", phone="+91 98400 00002", vehicle_number="KA05CD5678")


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "Asha", role=UserRole.ADMIN)


@pytest.fixture
def shipment(db_session):
    return make_shipment(db_session)
