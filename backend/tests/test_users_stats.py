from datetime import timedelta

from pacebeats_admin.models.music_history import MusicHistoryEntry
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.user import User

from conftest import BASE_TIME


def _by_id(users):
    return {u["user_id"]: u for u in users}


def test_no_users(client):
    r = client.get("/sessions/users")
    assert r.status_code == 200
    assert r.json() == {"users": []}


def test_user_without_sessions_falls_back_to_signup_date(client, make):
    user = make.user(email="new@example.com", username=None)

    r = client.get("/sessions/users")
    assert r.status_code == 200
    (row,) = r.json()["users"]
    assert row["user_id"] == user.id
    assert row["user_name"] == "new"
    assert row["total_sessions"] == 0
    assert row["total_distance_km"] == 0
    assert row["avg_heart_rate_bpm"] == 0
    assert row["total_songs"] == 0
    assert row["last_session_date"].startswith("2025-01-30")


def test_stats_are_grouped_per_user(client, make):
    ana = make.user(username="ana")
    ben = make.user(username="ben")

    a1 = make.session(
        ana,
        session_start_time=BASE_TIME,
        total_distance_km=5.123,
        session_duration_seconds=1800,
        avg_heart_rate_bpm=150,
    )
    a2 = make.session(
        ana,
        session_start_time=BASE_TIME + timedelta(days=2),
        total_distance_km=3.0,
        session_duration_seconds=1200,
        avg_heart_rate_bpm=None,
    )
    b1 = make.session(ben, total_distance_km=10.0, avg_heart_rate_bpm=160)

    make.track(a1, 1)
    make.track(a2, 1)
    make.track(a2, 2)
    for n in range(1, 6):
        make.track(b1, n)

    r = client.get("/sessions/users")
    assert r.status_code == 200
    users = _by_id(r.json()["users"])

    a = users[ana.id]
    assert a["total_sessions"] == 2
    assert a["total_distance_km"] == 8.12
    assert a["total_duration_seconds"] == 3000
    # The null heart rate is ignored, not counted as 0
    assert a["avg_heart_rate_bpm"] == 150
    # Only ana's own sessions' music
    assert a["total_songs"] == 3
    assert a["last_session_date"].startswith("2025-03-03")

    b = users[ben.id]
    assert b["total_sessions"] == 1
    assert b["avg_heart_rate_bpm"] == 160
    assert b["total_songs"] == 5


def test_last_session_date_falls_back_to_created_at(client, make):
    user = make.user()
    make.session(user, session_start_time=None, created_at=BASE_TIME + timedelta(days=5))

    r = client.get("/sessions/users")
    (row,) = r.json()["users"]
    assert row["last_session_date"].startswith("2025-03-06")


def test_music_failure_degrades_to_zero_songs(client, make, engine):
    user = make.user()
    make.session(user, total_distance_km=4.0)
    MusicHistoryEntry.__table__.drop(engine)

    r = client.get("/sessions/users")
    assert r.status_code == 200
    (row,) = r.json()["users"]
    assert row["total_sessions"] == 1
    assert row["total_songs"] == 0


def test_session_failure_degrades_to_no_sessions(client, make, engine):
    make.user()
    RunningSession.__table__.drop(engine)

    r = client.get("/sessions/users")
    assert r.status_code == 200
    (row,) = r.json()["users"]
    assert row["total_sessions"] == 0


def test_users_query_failure_is_500(client, engine):
    User.__table__.drop(engine)

    r = client.get("/sessions/users")
    assert r.status_code == 500
    body = r.json()
    assert "users" in body["error"]
    assert body["details"]["query"] == "users"
