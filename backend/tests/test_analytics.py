from datetime import datetime, time, timedelta, timezone

from pacebeats_admin.core.time_utils import utcnow
from pacebeats_admin.models.gps_point import GPSPoint
from pacebeats_admin.models.music_history import MusicHistoryEntry
from pacebeats_admin.models.pace_interval import PaceInterval

from conftest import BASE_TIME


def test_summary_counts_everything(client, make):
    recent = utcnow() - timedelta(days=3)
    ana = make.user()
    ben = make.user()
    make.user()
    s1 = make.session(ana, session_start_time=recent, total_distance_km=5.0,
                      session_duration_seconds=1800, avg_heart_rate_bpm=150)
    make.session(ben, session_start_time=recent - timedelta(days=60), total_distance_km=3.0,
                 session_duration_seconds=1200, avg_heart_rate_bpm=140)
    make.track(s1, 1)
    make.track(s1, 2)
    make.heart_rate(s1, 0, 140)
    make.gps(s1, 0)

    r = client.get("/analytics/summary")
    assert r.status_code == 200
    data = r.json()
    assert data["totalUsers"] == 3
    assert data["activeUsers"] == 1
    assert data["totalSessions"] == 2
    assert data["totalDistance"] == 8.0
    assert data["totalDuration"] == 3000
    assert data["avgSessionDuration"] == 1500
    assert data["avgSessionDistance"] == 4.0
    assert data["avgHeartRate"] == 145
    assert data["totalSongs"] == 2
    assert data["totalHeartRateData"] == 1
    assert data["totalGPSPoints"] == 1


def test_summary_query_failure_is_500(client, engine):
    GPSPoint.__table__.drop(engine)

    r = client.get("/analytics/summary")
    assert r.status_code == 500
    assert r.json()["details"]["query"] == "GPS point count"


def test_run_types(client, make):
    user = make.user()
    make.session(user, run_type="interval", session_duration_seconds=1200, total_distance_km=4.0)
    make.session(user, run_type="quick", session_duration_seconds=600, total_distance_km=2.0)
    make.session(user, run_type="quick", session_duration_seconds=900, total_distance_km=3.0,
                 avg_pace_min_per_km=5.5)

    r = client.get("/analytics/run-types")
    assert r.status_code == 200
    rows = {row["runType"]: row for row in r.json()}
    assert rows["quick"]["count"] == 2
    assert rows["quick"]["percentage"] == 66.67
    assert rows["quick"]["avgDuration"] == 750
    assert rows["quick"]["avgPace"] == 5.5
    assert rows["interval"]["avgDistance"] == 4.0


def _noon(days_ago):
    day = utcnow().date() - timedelta(days=days_ago)
    return datetime.combine(day, time(12), tzinfo=timezone.utc)


def test_user_growth(client, make):
    ana = make.user()
    make.user(created_at=_noon(1))
    make.session(ana, session_start_time=_noon(0))

    r = client.get("/analytics/user-growth", params={"days": 7})
    assert r.status_code == 200
    points = r.json()
    assert len(points) == 7
    assert points[-1]["date"] == utcnow().date().isoformat()
    assert points[0]["totalUsers"] == 1
    assert points[-2]["newUsers"] == 1
    assert points[-1] == {
        "date": utcnow().date().isoformat(),
        "newUsers": 0,
        "activeUsers": 1,
        "totalUsers": 2,
    }


def test_trend_window_is_validated(client):
    assert client.get("/analytics/user-growth", params={"days": 0}).status_code == 422
    assert client.get("/analytics/session-trends", params={"days": 400}).status_code == 422


def test_session_trends(client, make):
    user = make.user()
    make.session(user, session_start_time=_noon(1), session_duration_seconds=1200, total_distance_km=4.0,
                 avg_pace_min_per_km=5.0)
    make.session(user, session_start_time=_noon(1), session_duration_seconds=1800, total_distance_km=5.0)
    make.session(user, session_start_time=_noon(10))

    r = client.get("/analytics/session-trends", params={"days": 3})
    assert r.status_code == 200
    points = r.json()
    assert [p["sessions"] for p in points] == [0, 2, 0]
    assert points[1]["avgDuration"] == 1500
    assert points[1]["avgDistance"] == 4.5
    assert points[1]["avgPace"] == 5.0


def test_music_analytics(client, make):
    user = make.user()
    session = make.session(user)
    make.track(session, 1, track_title="Stronger", track_artist="Kanye", track_bpm=128, was_skipped=True)
    make.track(session, 2, track_title="Stronger", track_artist="Kanye", track_bpm=128, was_liked=True)
    make.track(session, 3, track_title="Sprint", track_bpm=185)

    r = client.get("/analytics/music")
    assert r.status_code == 200
    data = r.json()
    assert data["totalTracks"] == 2
    assert data["totalPlays"] == 3
    assert data["skipRate"] == 33.33
    assert data["likeRate"] == 33.33
    assert data["topTracks"][0]["title"] == "Stronger"
    assert data["topTracks"][0]["plays"] == 2
    assert data["topTracks"][1]["artist"] == "Unknown"
    assert data["bpmDistribution"] == [{"range": "120-140", "count": 2}, {"range": "180+", "count": 1}]


def test_music_analytics_failure_is_500(client, engine):
    MusicHistoryEntry.__table__.drop(engine)

    r = client.get("/analytics/music")
    assert r.status_code == 500
    assert r.json()["details"]["query"] == "music history"


def test_time_analytics(client, make):
    user = make.user()
    make.session(user, session_start_time=BASE_TIME, session_duration_seconds=1800)
    make.session(user, session_start_time=BASE_TIME + timedelta(days=1), session_duration_seconds=1200)

    r = client.get("/analytics/time")
    assert r.status_code == 200
    hours = r.json()
    assert len(hours) == 24
    assert hours[BASE_TIME.hour] == {"hour": BASE_TIME.hour, "sessions": 2, "users": 1, "avgDuration": 1500}
    assert sum(h["sessions"] for h in hours) == 2


def test_performance_metrics(client, make):
    user = make.user()
    make.session(user, avg_pace_min_per_km=5.5, avg_heart_rate_bpm=150, avg_cadence_spm=172.0,
                 avg_speed_kmh=10.9, calories_burned=320, total_steps=5200)
    make.session(user, avg_heart_rate_bpm=None, calories_burned=None, total_steps=4800)

    r = client.get("/analytics/performance")
    assert r.status_code == 200
    assert r.json() == {
        "avgPace": 5.5,
        "avgHeartRate": 150,
        "avgCadence": 172,
        "avgSpeed": 10.9,
        "totalCalories": 320,
        "totalSteps": 10000,
    }


def test_diagnostics_reports_each_table(client, make, engine):
    make.user()
    PaceInterval.__table__.drop(engine)

    r = client.get("/diagnostics")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is False
    tables = {t["table"]: t for t in data["tables"]}
    assert len(tables) == 7
    assert tables["users"] == {"table": "users", "accessible": True, "rows": 1, "error": None}
    assert tables["session_pace_intervals"]["accessible"] is False
    assert "session_pace_intervals" in tables["session_pace_intervals"]["error"]
