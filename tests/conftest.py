"""Shared fixtures: in-memory database, static feeds, recording email sender."""

from __future__ import annotations

import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UNSUBSCRIBE_SECRET", "test-unsubscribe-secret")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mediatrack.database import Base, get_db
from mediatrack.domain.availability.feed_client import ICalFeedClient
from mediatrack.models import Task
from mediatrack.shared.exceptions import FeedFetchError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

NOW = datetime(2024, 1, 2, 9, 30)


def vevent(start: str, end: str | None, uid: str = "evt", date_param: bool = True) -> str:
    """Render a VEVENT block; ``end=None`` leaves DTEND out."""
    prefix = ";VALUE=DATE" if date_param and len(start) == 8 else ""
    lines = ["BEGIN:VEVENT", f"UID:{uid}", f"DTSTART{prefix}:{start}"]
    if end is not None:
        lines.append(f"DTEND{prefix}:{end}")
    lines += ["SUMMARY:Reserved", "END:VEVENT"]
    return "\r\n".join(lines)


def calendar(*events: str) -> str:
    return "\r\n".join(
        ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Bookings//EN", *events, "END:VCALENDAR"]
    )


class StaticFeedClient(ICalFeedClient):
    """Serves canned iCal text per URL; unknown URLs behave like a 404."""

    def __init__(self, feeds: dict[str, str] | None = None):
        super().__init__()
        self.feeds = dict(feeds or {})
        self.requested: list[str] = []

    async def fetch_text(self, ical_url: str) -> str:
        self.requested.append(ical_url)
        if ical_url not in self.feeds:
            raise FeedFetchError(ical_url, "HTTP 404", status_code=404)
        return self.feeds[ical_url]


class RecordingSender:
    """Async stand-in for the conflict email sender."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[dict] = []

    async def __call__(self, **kwargs) -> dict:
        if self.fail:
            raise RuntimeError("SMTP unavailable")
        self.calls.append(kwargs)
        return {"id": f"email-{len(self.calls)}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_task(db):
    def _make_task(task_id: str = "task-1", **fields) -> Task:
        defaults = {
            "property_name": "Beach House",
            "stage": "Shooting",
            "ical_url": "https://calendar.example.com/beach.ics",
            "assigned_photographer_email": "photo@example.com",
            "scheduled_by_email": "ops@example.com",
        }
        defaults.update(fields)
        task = Task(id=task_id, **defaults)
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    return _make_task


@pytest.fixture
def client(db):
    from mediatrack.main import app
    from mediatrack.shared.clock import get_now

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_now] = lambda: NOW
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
