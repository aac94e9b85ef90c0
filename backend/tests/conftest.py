"""Pytest fixtures — SQLite database for fast, isolated tests."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from event_scheduler.database import Base, get_db
from event_scheduler.main import app
from event_scheduler.services.timezones import TimezoneRegistry

# Import all models so they register with Base.metadata
from event_scheduler.models.profile import Profile                  # noqa: F401
from event_scheduler.models.event import Event, EventParticipant    # noqa: F401
from event_scheduler.models.audit_log import AuditLogEntry          # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def timezones():
    return TimezoneRegistry()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_profile(client: TestClient, name: str = "Test User", tz: str = "America/New_York") -> dict:
    """Helper — POST /api/profiles and return response JSON."""
    resp = client.post("/api/profiles/", json={"name": name, "timezone": tz})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(
    client: TestClient,
    participants: list,
    tz: str = "Asia/Kolkata",
    start_local: str = "2025-11-10T14:30",
    end_local: str = "2025-11-10T15:30",
    created_by: str = None,
) -> dict:
    """Helper — POST /api/events and return response JSON."""
    resp = client.post("/api/events/", json={
        "participants": participants,
        "event_timezone": tz,
        "start_local": start_local,
        "end_local": end_local,
        "created_by": created_by,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()
