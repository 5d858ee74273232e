"""
Pytest fixtures for wellbeing report tests.
"""
import os
import itertools
from datetime import datetime, timedelta, timezone

# Must be set before app.core.config builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Base, get_db
from app.core.security import create_access_token
from app.crud.user_auth import crud_user_auth
from app.models import ActivityLog, MoodLog, Plan, Status
from app.schemas.logs import ActivityLogEntry, MoodLogEntry
from main import app


def utc_now() -> datetime:
    """Naive UTC, the way timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# Users and logs
# ============================================================================

@pytest.fixture
def make_user(db):
    counter = itertools.count()

    def _make(plan: Plan = Plan.free, status: Status = Status.active):
        n = next(counter)
        return crud_user_auth.create(
            db, email=f"user{n}@example.com", username=f"user{n}", plan=plan, status=status
        )

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def add_mood(db):
    def _add(user, score, timestamp, mood="calm", stress=None, sleep=None):
        log = MoodLog(
            user_id=user.id, timestamp=timestamp, mood=mood, mood_score=score,
            stress_level=stress, sleep_hours=sleep,
        )
        db.add(log)
        db.commit()
        return log

    return _add


@pytest.fixture
def add_activity(db):
    def _add(user, minutes, timestamp, category="exercise", title="Workout"):
        log = ActivityLog(
            user_id=user.id, timestamp=timestamp, category=category,
            title=title, duration_minutes=minutes,
        )
        db.add(log)
        db.commit()
        return log

    return _add


def mood_entry(score, day=1, hour=9, mood="calm", stress=None, sleep=None) -> MoodLogEntry:
    return MoodLogEntry(
        timestamp=datetime(2025, 3, day, hour),
        mood=mood,
        mood_score=score,
        stress_level=stress,
        sleep_hours=sleep,
    )


def activity_entry(minutes, day=1, hour=18, category="exercise") -> ActivityLogEntry:
    return ActivityLogEntry(
        timestamp=datetime(2025, 3, day, hour),
        category=category,
        duration_minutes=minutes,
        title=category.title(),
    )


@pytest.fixture
def worked_example_logs():
    """Five check-ins over five days scoring 6, 6, 7, 8, 8 and one 30 minute workout."""
    moods = [mood_entry(score, day=day) for day, score in enumerate([6, 6, 7, 8, 8], start=1)]
    activities = [activity_entry(30, day=3)]
    return moods, activities


# ============================================================================
# API
# ============================================================================

@pytest.fixture
def auth_headers():
    def _headers(user, **token_kwargs):
        token = create_access_token({"sub": str(user.id)}, **token_kwargs)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def recent():
    """Timestamps inside the default seven day window."""
    now = utc_now()
    return [now - timedelta(days=d, hours=1) for d in range(6, 0, -1)]
