"""
Shared pytest fixtures.

Uses a SQLite file database so no Postgres is required for tests.
Each test gets its own user id, which keeps every test's event log
isolated inside the shared database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///./test_craving.db"

import random
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.deps import get_chooser
from app.db.base import Base, SessionLocal, engine
from app.main import app
from app.services.event_store import EventStore, new_event

# Monday 2026-10-19 12:00 UTC; +1 day is a Tuesday (weekday factor 1.0).
MONDAY_NOON = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
TUESDAY_NOON = MONDAY_NOON + timedelta(days=1)
FRIDAY_NOON = MONDAY_NOON + timedelta(days=4)
SUNDAY_NOON = MONDAY_NOON - timedelta(days=1)


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def user_id() -> str:
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def store(db, user_id) -> EventStore:
    return EventStore(db, user_id)


@pytest.fixture()
def chooser() -> random.Random:
    return random.Random(0)


@pytest.fixture()
def make_event():
    """Factory for BehaviorEvents with sensible defaults (Tuesday noon)."""
    def _make(**overrides):
        fields = dict(
            mood="neutral",
            stress_level=5,
            craving_level=5,
            did_smoke=False,
            triggers=(),
            timestamp=TUESDAY_NOON,
        )
        fields.update(overrides)
        return new_event(**fields)
    return _make


@pytest.fixture()
def client(user_id):
    app.dependency_overrides[get_chooser] = lambda: random.Random(0)
    with TestClient(app, headers={"X-User-Id": user_id}) as c:
        yield c
    app.dependency_overrides.clear()
