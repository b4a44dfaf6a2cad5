import uuid
from datetime import timedelta

from pacebeats_admin.models.gps_point import GPSPoint
from pacebeats_admin.models.heart_rate import HeartRateSample
from pacebeats_admin.models.music_history import MusicHistoryEntry
from pacebeats_admin.models.pace_interval import PaceInterval
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.session_alert import SessionAlert

from conftest import BASE_TIME

CHILD_MODELS = (SessionAlert, HeartRateSample, MusicHistoryEntry, GPSPoint, PaceInterval)


def _populate(make, session):
    make.heart_rate(session, 0, 140)
    make.alert(session, 170)
    make.track(session, 1)
    make.gps(session, 0)
    make.pace_interval(session, 1)


# --------- GET /sessions/{user_id} --------- #

def test_user_sessions_unknown_user_is_404(client):
    r = client.get(f"/sessions/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json() == {"error": "User not found"}


def test_user_without_sessions(client, make):
    user = make.user(email="mara@example.com", username=None)

    r = client.get(f"/sessions/{user.id}")
    assert r.status_code == 200
    data = r.json()
    assert data["user"] == {"id": user.id, "email": "mara@example.com", "username": None}
    assert data["sessions"] == []


def test_user_sessions_newest_first_with_song_counts(client, make):
    user = make.user(email="mara@example.com", username=None)
    other = make.user()
    older = make.session(user, session_start_time=BASE_TIME, session_duration_seconds=1710)
    newer = make.session(
        user,
        session_start_time=BASE_TIME + timedelta(days=1),
        session_duration_seconds=1770,
        total_distance_km=5.2,
        avg_heart_rate_bpm=151,
    )
    make.session(other)

    make.track(older, 1)
    make.track(newer, 1, was_skipped=True)
    make.track(newer, 2, was_liked=True)

    r = client.get(f"/sessions/{user.id}")
    assert r.status_code == 200
    sessions = r.json()["sessions"]

    assert [s["id"] for s in sessions] == [newer.id, older.id]
    first, second = sessions
    assert first["session_id"] == newer.id
    assert first["user_name"] == "mara"
    assert first["user_email"] == "mara@example.com"
    assert first["duration_minutes"] == 30
    assert second["duration_minutes"] == 29
    assert first["distance_km"] == 5.2
    assert first["avg_heart_rate_bpm"] == 151
    assert first["total_songs"] == 2
    assert second["total_songs"] == 1
    # Per-song flags are only computed on the detail view
    assert first["skipped_songs"] == 0
    assert first["liked_songs"] == 0


def test_missing_run_type_is_passed_through(client, make):
    user = make.user()
    session = make.session(user, run_type=None)

    r = client.get(f"/sessions/{user.id}")
    assert r.status_code == 200
    assert r.json()["sessions"][0]["run_type"] is None

    r = client.get(f"/sessions/detail/{session.id}")
    assert r.status_code == 200
    assert r.json()["session"]["run_type"] is None


def test_user_sessions_music_failure_degrades_to_zero_songs(client, make, engine):
    user = make.user()
    make.session(user)
    MusicHistoryEntry.__table__.drop(engine)

    r = client.get(f"/sessions/{user.id}")
    assert r.status_code == 200
    (session,) = r.json()["sessions"]
    assert session["total_songs"] == 0


def test_user_sessions_query_failure_is_500(client, make, engine):
    user = make.user()
    RunningSession.__table__.drop(engine)

    r = client.get(f"/sessions/{user.id}")
    assert r.status_code == 500
    assert r.json()["details"]["query"] == "user sessions"


# --------- GET /sessions/detail/{session_id} --------- #

def test_detail_unknown_session_is_404(client):
    r = client.get(f"/sessions/detail/{uuid.uuid4()}")
    assert r.status_code == 404
    body = r.json()
    assert body == {"error": "Session not found"}
    assert "session" not in body


def test_detail_song_counts(client, make):
    user = make.user()
    session = make.session(user)
    make.track(session, 1, was_skipped=True, played_duration_seconds=20)
    make.track(session, 2, was_skipped=True, played_duration_seconds=10, was_liked=True)
    make.track(session, 3, played_duration_seconds=200)

    r = client.get(f"/sessions/detail/{session.id}")
    assert r.status_code == 200
    detail = r.json()["session"]
    assert detail["total_songs"] == 3
    assert detail["skipped_songs"] == 2
    assert detail["completed_songs"] == 1
    assert detail["liked_songs"] == 1
    assert detail["disliked_songs"] == 0
    assert detail["total_time_ms"] == 230_000


def test_detail_embeds_children_in_order(client, make):
    user = make.user(username="ana")
    session = make.session(user, session_duration_seconds=1800)
    make.heart_rate(session, 6, 150)
    make.heart_rate(session, 0, 140)
    make.track(session, 2, track_title="Second")
    make.track(session, 1, track_title="First")
    make.gps(session, 10)
    make.gps(session, 5)
    make.pace_interval(session, 2)
    make.pace_interval(session, 1)

    r = client.get(f"/sessions/detail/{session.id}")
    assert r.status_code == 200
    detail = r.json()["session"]
    assert detail["user_name"] == "ana"
    assert detail["duration_minutes"] == 30
    assert [h["timestamp_offset_seconds"] for h in detail["heart_rate_data"]] == [0, 6]
    assert [m["track_title"] for m in detail["music_history"]] == ["First", "Second"]
    assert [p["timestamp_offset_seconds"] for p in detail["gps_points"]] == [5, 10]
    assert [p["interval_number"] for p in detail["pace_intervals"]] == [1, 2]


def test_detail_missing_owner_is_not_fatal(client, make):
    ghost = make.user()
    session = make.session(ghost)
    make.db.delete(ghost)
    make.db.commit()

    r = client.get(f"/sessions/detail/{session.id}")
    assert r.status_code == 200
    detail = r.json()["session"]
    assert detail["user_email"] == ""
    assert detail["user_name"] == "Unknown"


def test_detail_child_failure_degrades_to_empty(client, make, engine):
    user = make.user()
    session = make.session(user)
    make.heart_rate(session, 0, 140)
    make.track(session, 1)
    GPSPoint.__table__.drop(engine)

    r = client.get(f"/sessions/detail/{session.id}")
    assert r.status_code == 200
    detail = r.json()["session"]
    assert detail["gps_points"] == []
    assert len(detail["heart_rate_data"]) == 1
    assert len(detail["music_history"]) == 1


# --------- DELETE /sessions/detail/{session_id} --------- #

def _counts(db):
    return {m.__tablename__: db.query(m).count() for m in (RunningSession, *CHILD_MODELS)}


def test_delete_unknown_session_is_404_without_writes(client, make, db):
    user = make.user()
    session = make.session(user)
    _populate(make, session)
    before = _counts(db)

    r = client.delete(f"/sessions/detail/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json() == {"error": "Session not found"}
    assert _counts(db) == before


def test_delete_removes_session_and_all_children(client, make, db):
    user = make.user()
    doomed = make.session(user)
    kept = make.session(user)
    _populate(make, doomed)
    _populate(make, kept)

    r = client.delete(f"/sessions/detail/{doomed.id}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Session deleted successfully"}

    assert db.query(RunningSession).filter(RunningSession.id == doomed.id).count() == 0
    for model in CHILD_MODELS:
        assert db.query(model).filter(model.session_id == doomed.id).count() == 0
        assert db.query(model).filter(model.session_id == kept.id).count() == 1

    assert client.get(f"/sessions/detail/{doomed.id}").status_code == 404


def test_delete_failure_rolls_back_everything(client, make, db, engine):
    user = make.user()
    session = make.session(user)
    _populate(make, session)
    PaceInterval.__table__.drop(engine)

    r = client.delete(f"/sessions/detail/{session.id}")
    assert r.status_code == 500
    assert r.json()["details"]["query"] == "delete session"

    # Deletes that ran before the failure were rolled back
    assert db.query(RunningSession).filter(RunningSession.id == session.id).count() == 1
    for model in (SessionAlert, HeartRateSample, MusicHistoryEntry, GPSPoint):
        assert db.query(model).filter(model.session_id == session.id).count() == 1
