"""Shared fixtures: an in-memory sqlite store per test and row factories."""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from pacebeats_admin.db import Base, get_db, make_session_factory
from pacebeats_admin.main import app
from pacebeats_admin.models.gps_point import GPSPoint
from pacebeats_admin.models.heart_rate import HeartRateSample
from pacebeats_admin.models.music_history import MusicHistoryEntry
from pacebeats_admin.models.pace_interval import PaceInterval
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.session_alert import SessionAlert
from pacebeats_admin.models.user import User

BASE_TIME = datetime(2025, 3, 1, 7, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    # One shared connection so the app and the test see the same memory db
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = make_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    factory = make_session_factory(engine)

    def override_get_db():
        session = factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class Factory:
    """Inserts committed rows with sensible defaults."""

    def __init__(self, db):
        self.db = db
        self._n = 0

    def _add(self, row):
        self.db.add(row)
        self.db.commit()
        return row

    def user(self, **kw):
        self._n += 1
        kw.setdefault("email", f"runner{self._n}@example.com")
        kw.setdefault("username", f"runner{self._n}")
        kw.setdefault("created_at", BASE_TIME - timedelta(days=30))
        return self._add(User(**kw))

    def session(self, user, **kw):
        kw.setdefault("status", "completed")
        kw.setdefault("session_start_time", BASE_TIME)
        kw.setdefault("created_at", kw["session_start_time"] or BASE_TIME)
        kw.setdefault("run_type", "quick")
        return self._add(RunningSession(user_id=user.id, **kw))

    def heart_rate(self, session, offset, bpm, **kw):
        kw.setdefault("recorded_at", BASE_TIME + timedelta(seconds=offset))
        return self._add(
            HeartRateSample(
                session_id=session.id,
                timestamp_offset_seconds=offset,
                heart_rate_bpm=bpm,
                **kw,
            )
        )

    def alert(self, session, bpm, **kw):
        kw.setdefault("triggered_at", BASE_TIME)
        kw.setdefault("severity", "CRITICAL" if bpm >= 180 else "HIGH")
        kw.setdefault("alert_type", "CRITICAL_HR_ALERT" if bpm >= 180 else "HIGH_HR_WARNING")
        kw.setdefault("alert_message", f"Heart rate elevated: {bpm} BPM")
        return self._add(SessionAlert(session_id=session.id, heart_rate=bpm, **kw))

    def track(self, session, play_order, **kw):
        kw.setdefault("track_title", f"Track {play_order}")
        kw.setdefault("played_duration_seconds", 180)
        return self._add(MusicHistoryEntry(session_id=session.id, play_order=play_order, **kw))

    def gps(self, session, offset, **kw):
        kw.setdefault("latitude", 14.55)
        kw.setdefault("longitude", 121.02)
        return self._add(GPSPoint(session_id=session.id, timestamp_offset_seconds=offset, **kw))

    def pace_interval(self, session, number, **kw):
        kw.setdefault("start_offset_seconds", (number - 1) * 60)
        kw.setdefault("end_offset_seconds", number * 60)
        kw.setdefault("steps", 170)
        return self._add(PaceInterval(session_id=session.id, interval_number=number, **kw))


@pytest.fixture
def make(db):
    return Factory(db)
