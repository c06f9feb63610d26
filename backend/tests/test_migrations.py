"""Tests that the migrations build the schema the models expect."""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "app" / "alembic" / "versions"


def _load_migrations():
    modules = {}
    for path in VERSIONS_DIR.glob("*.py"):
        spec = importlib.util.spec_from_file_location(path.stem, path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        modules[module.revision] = module

    ordered = []
    revision = None
    while True:
        children = [m for m in modules.values() if m.down_revision == revision]
        if not children:
            break
        assert len(children) == 1, "migration history must be linear"
        ordered.append(children[0])
        revision = children[0].revision
    assert len(ordered) == len(modules)
    return ordered


@pytest.fixture
def migrated():
    engine = create_engine("sqlite://")
    migrations = _load_migrations()
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            for migration in migrations:
                migration.upgrade()
    yield engine, migrations
    engine.dispose()


class TestMigrations:
    def test_creates_all_tables(self, migrated):
        engine, _ = migrated
        assert set(inspect(engine).get_table_names()) >= {
            "users",
            "shipments",
            "bookings",
            "admin_notifications",
            "user_notifications",
        }

    def test_booking_indexes(self, migrated):
        engine, _ = migrated
        indexes = {i["name"]: i for i in inspect(engine).get_indexes("bookings")}
        assert indexes["uq_bookings_active_shipment"]["unique"]
        assert indexes["uq_bookings_active_user_shipment"]["unique"]
        assert indexes["uq_bookings_code"]["unique"]

    def test_active_index_is_partial(self, migrated):
        engine, _ = migrated
        insert = text(
            "INSERT INTO bookings (id, shipment_id, user_id, user_name, status, shipment_details) "
            "VALUES (:id, 's1', :user, 'Dinesh', :status, '{}')"
        )
        with engine.begin() as conn:
            conn.execute(insert, {"id": "b1", "user": "u1", "status": "Rejected"})
            conn.execute(insert, {"id": "b2", "user": "u1", "status": "Cancelled"})
            conn.execute(insert, {"id": "b3", "user": "u2", "status": "Pending"})
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(insert, {"id": "b4", "user": "u3", "status": "Approved"})

    def test_downgrade_removes_everything(self, migrated):
        engine, migrations = migrated
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                for migration in reversed(migrations):
                    migration.downgrade()
        assert inspect(engine).get_table_names() == []
