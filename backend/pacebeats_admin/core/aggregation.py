"""In-memory joins and aggregates over rows fetched in bulk.

The store is queried with plain selects; grouping, counting and averaging all
happen here, keyed by the foreign ids (``session_id``, ``user_id``). Functions
take ORM rows (or anything with the same attributes) and return plain dicts
ready for the response schemas.
"""
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from pacebeats_admin.core.constants import (
    ACTIVE_USER_WINDOW_DAYS,
    BPM_BUCKETS,
    DEFAULT_RUN_TYPE,
    TOP_TRACKS_LIMIT,
    TREND_DAYS,
    UNKNOWN_ARTIST,
    UNKNOWN_BPM,
    UNKNOWN_USER_NAME,
)
from pacebeats_admin.core.time_utils import as_utc, duration_minutes, round_half_up


def display_name(username: Optional[str], email: Optional[str]) -> str:
    """Username, else the local part of the email, else 'Unknown'."""
    if username:
        return username
    if email:
        return email.split("@")[0] or UNKNOWN_USER_NAME
    return UNKNOWN_USER_NAME


def count_by_session(session_ids: Iterable[str]) -> Counter:
    """Count music rows per session from their ``session_id`` values."""
    return Counter(session_ids)


def music_stats(entries) -> dict:
    total = 0
    skipped = 0
    liked = 0
    played_seconds = 0
    for e in entries:
        total += 1
        if e.was_skipped:
            skipped += 1
        if e.was_liked:
            liked += 1
        played_seconds += e.played_duration_seconds or 0
    return {
        "total_songs": total,
        "completed_songs": total - skipped,
        "skipped_songs": skipped,
        "liked_songs": liked,
        "disliked_songs": 0,  # no dislike flag in the schema
        "total_time_ms": played_seconds * 1000,
    }


def empty_music_stats(total_songs: int = 0) -> dict:
    # Per-song flags are only loaded on the detail view
    return {
        "total_songs": total_songs,
        "completed_songs": 0,
        "skipped_songs": 0,
        "liked_songs": 0,
        "disliked_songs": 0,
        "total_time_ms": 0,
    }


def session_view(session, user_email: Optional[str], user_name: str, music: dict) -> dict:
    """Flatten a running session row into the dashboard's session model."""
    return {
        "id": session.id,
        "session_id": session.id,
        "user_id": session.user_id,
        "user_email": user_email or "",
        "user_name": user_name,
        "started_at": session.session_start_time,
        "ended_at": session.session_end_time,
        "duration_seconds": session.session_duration_seconds or 0,
        "duration_minutes": duration_minutes(session.session_duration_seconds),
        "distance_km": session.total_distance_km or 0,
        "total_steps": session.total_steps or 0,
        "avg_pace_min_per_km": session.avg_pace_min_per_km,
        "avg_cadence_spm": session.avg_cadence_spm,
        "avg_heart_rate_bpm": session.avg_heart_rate_bpm,
        "max_heart_rate_bpm": session.max_heart_rate_bpm,
        "min_heart_rate_bpm": session.min_heart_rate_bpm,
        "avg_speed_kmh": session.avg_speed_kmh,
        **music,
        "run_type": session.run_type,
        "selected_emotion": session.selected_emotion,
        "selected_playlist": session.selected_playlist,
        "status": session.status,
        "created_at": session.created_at,
    }


def group_by_user(sessions) -> dict[str, list]:
    grouped: dict[str, list] = defaultdict(list)
    for s in sessions:
        grouped[s.user_id].append(s)
    return grouped


def session_started(session) -> Optional[datetime]:
    """Start time, falling back to the row's creation time."""
    return as_utc(session.session_start_time or session.created_at)


def average_heart_rate(sessions) -> int:
    """Rounded mean of avg_heart_rate_bpm over sessions that have one, else 0."""
    values = [s.avg_heart_rate_bpm for s in sessions if s.avg_heart_rate_bpm is not None]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def _recorded_mean(values) -> Optional[float]:
    # Nulls and zeros both mean "not recorded" for these session columns
    recorded = [v for v in values if v]
    if not recorded:
        return None
    return sum(recorded) / len(recorded)


def average_pace(sessions) -> float:
    """Mean avg_pace_min_per_km over sessions that recorded one, 2 places, else 0."""
    pace = _recorded_mean(s.avg_pace_min_per_km for s in sessions)
    return round(pace, 2) if pace is not None else 0


def songs_by_user(sessions, music_session_ids: Iterable[str]) -> Counter:
    """Music rows per user, attributing each row through its session's owner."""
    owner = {s.id: s.user_id for s in sessions}
    counts: Counter = Counter()
    for session_id in music_session_ids:
        user_id = owner.get(session_id)
        if user_id is not None:
            counts[user_id] += 1
    return counts


def user_stats(user, sessions: list, total_songs: int) -> dict:
    started = [d for d in (session_started(s) for s in sessions) if d is not None]
    last_session_date = max(started) if started else as_utc(user.created_at)

    return {
        "user_id": user.id,
        "user_email": user.email,
        "user_name": display_name(user.username, user.email),
        "total_sessions": len(sessions),
        "total_distance_km": round(sum(s.total_distance_km or 0 for s in sessions), 2),
        "total_duration_seconds": sum(s.session_duration_seconds or 0 for s in sessions),
        "avg_heart_rate_bpm": average_heart_rate(sessions),
        "total_songs": total_songs,
        "last_session_date": last_session_date,
        "created_at": user.created_at,
    }


def users_with_stats(users, sessions, music_session_ids: Iterable[str]) -> list[dict]:
    """Per-user stats in one pass over users, sessions and music rows."""
    by_user = group_by_user(sessions)
    songs = songs_by_user(sessions, music_session_ids)
    return [user_stats(u, by_user.get(u.id, []), songs.get(u.id, 0)) for u in users]


def analytics_summary(
    total_users: int,
    sessions,
    total_songs: int,
    total_heart_rate_rows: int,
    total_gps_points: int,
    now: datetime,
) -> dict:
    sessions = list(sessions)
    total_sessions = len(sessions)
    total_distance = sum(s.total_distance_km or 0 for s in sessions)
    total_duration = sum(s.session_duration_seconds or 0 for s in sessions)

    cutoff = as_utc(now) - timedelta(days=ACTIVE_USER_WINDOW_DAYS)
    active_users = {
        s.user_id
        for s in sessions
        if s.session_start_time is not None and as_utc(s.session_start_time) > cutoff
    }

    return {
        "totalUsers": total_users,
        "activeUsers": len(active_users),
        "totalSessions": total_sessions,
        "totalDistance": round(total_distance, 2),
        "totalDuration": total_duration,
        "totalSongs": total_songs,
        "avgSessionDuration": round_half_up(total_duration / total_sessions) if total_sessions else 0,
        "avgSessionDistance": round(total_distance / total_sessions, 2) if total_sessions else 0,
        # Sessions without a heart rate count as 0 here, unlike the per-user stats
        "avgHeartRate": (
            round_half_up(sum(s.avg_heart_rate_bpm or 0 for s in sessions) / total_sessions)
            if total_sessions
            else 0
        ),
        "totalHeartRateData": total_heart_rate_rows,
        "totalGPSPoints": total_gps_points,
    }


def run_type_breakdown(sessions) -> list[dict]:
    sessions = list(sessions)
    by_type: dict[str, list] = defaultdict(list)
    for s in sessions:
        by_type[s.run_type or DEFAULT_RUN_TYPE].append(s)

    results = []
    for run_type, rows in by_type.items():
        count = len(rows)
        results.append(
            {
                "runType": run_type,
                "count": count,
                "percentage": round(count / len(sessions) * 100, 2),
                "avgDuration": round_half_up(sum(s.session_duration_seconds or 0 for s in rows) / count),
                "avgDistance": round(sum(s.total_distance_km or 0 for s in rows) / count, 2),
                "avgPace": average_pace(rows),
            }
        )
    return results


def trend_window(today: date, days: int = TREND_DAYS) -> list[date]:
    """The ``days`` calendar days ending with ``today``, oldest first."""
    start = today - timedelta(days=days - 1)
    return [start + timedelta(days=i) for i in range(days)]


def user_growth(users, sessions, today: date, days: int = TREND_DAYS) -> list[dict]:
    """New, active and cumulative user counts for each day of the window.

    ``totalUsers`` is the running total at the end of each day, so users who
    signed up before the window are counted from the first day. ``activeUsers``
    is the number of distinct users who started a session that day.
    """
    window = trend_window(today, days)
    joined = Counter(as_utc(u.created_at).date() for u in users if u.created_at is not None)

    active: dict[date, set] = defaultdict(set)
    for s in sessions:
        started = session_started(s)
        if started is not None:
            active[started.date()].add(s.user_id)

    total = sum(n for day, n in joined.items() if day < window[0])
    points = []
    for day in window:
        total += joined.get(day, 0)
        points.append(
            {
                "date": day,
                "newUsers": joined.get(day, 0),
                "activeUsers": len(active.get(day, ())),
                "totalUsers": total,
            }
        )
    return points


def session_trends(sessions, today: date, days: int = TREND_DAYS) -> list[dict]:
    """Sessions per start day with their average duration, distance and pace.

    Days without a session are filled with zeros. Sessions with no start
    time are left out.
    """
    by_day: dict[date, list] = defaultdict(list)
    for s in sessions:
        started = as_utc(s.session_start_time)
        if started is not None:
            by_day[started.date()].append(s)

    points = []
    for day in trend_window(today, days):
        rows = by_day.get(day, [])
        count = len(rows)
        points.append(
            {
                "date": day,
                "sessions": count,
                "avgDuration": (
                    round_half_up(sum(s.session_duration_seconds or 0 for s in rows) / count)
                    if count
                    else 0
                ),
                "avgDistance": round(sum(s.total_distance_km or 0 for s in rows) / count, 2) if count else 0,
                "avgPace": average_pace(rows),
            }
        )
    return points


def bpm_range(bpm: Optional[float]) -> str:
    if not bpm or bpm <= 0:
        return UNKNOWN_BPM
    for upper, label in BPM_BUCKETS:
        if upper is None or bpm < upper:
            return label
    return UNKNOWN_BPM


def music_analytics(entries) -> dict:
    """Listening totals and rates, top tracks and artists, BPM spread."""
    entries = list(entries)
    plays = len(entries)
    # A track is its Spotify id when known, else its title
    unique_tracks = {e.spotify_track_id or e.track_title for e in entries}
    skipped = sum(1 for e in entries if e.was_skipped)
    liked = sum(1 for e in entries if e.was_liked)

    tracks: dict[str, dict] = {}
    artists: Counter = Counter()
    buckets: Counter = Counter()
    for e in entries:
        track = tracks.setdefault(
            e.track_title,
            {
                "title": e.track_title,
                "artist": e.track_artist or UNKNOWN_ARTIST,
                "plays": 0,
                "skips": 0,
                "completions": 0,
            },
        )
        track["plays"] += 1
        if e.was_skipped:
            track["skips"] += 1
        else:
            track["completions"] += 1
        artists[e.track_artist or UNKNOWN_ARTIST] += 1
        buckets[bpm_range(e.track_bpm)] += 1

    def rate(n: int) -> float:
        return round(n / plays * 100, 2) if plays else 0

    # sorted() is stable: ties keep first-played order
    top_tracks = sorted(tracks.values(), key=lambda t: t["plays"], reverse=True)[:TOP_TRACKS_LIMIT]
    labels = [label for _, label in BPM_BUCKETS] + [UNKNOWN_BPM]

    return {
        "totalTracks": len(unique_tracks),
        "totalPlays": plays,
        "avgPlaysPerTrack": round(plays / len(unique_tracks), 2) if unique_tracks else 0,
        "skipRate": rate(skipped),
        "completionRate": rate(plays - skipped),
        "likeRate": rate(liked),
        "topTracks": top_tracks,
        "topArtists": [
            {"artist": artist, "plays": n} for artist, n in artists.most_common(TOP_TRACKS_LIMIT)
        ],
        "bpmDistribution": [
            {"range": label, "count": buckets[label]} for label in labels if buckets[label]
        ],
    }


def hourly_activity(sessions) -> list[dict]:
    """Sessions, distinct users and average duration per UTC hour of day."""
    hours = {hour: {"sessions": 0, "users": set(), "duration": 0} for hour in range(24)}
    for s in sessions:
        started = session_started(s)
        if started is None:
            continue
        bucket = hours[started.hour]
        bucket["sessions"] += 1
        bucket["users"].add(s.user_id)
        bucket["duration"] += s.session_duration_seconds or 0

    return [
        {
            "hour": hour,
            "sessions": b["sessions"],
            "users": len(b["users"]),
            "avgDuration": round_half_up(b["duration"] / b["sessions"]) if b["sessions"] else 0,
        }
        for hour, b in hours.items()
    ]


def performance_metrics(sessions) -> dict:
    sessions = list(sessions)
    heart_rate = _recorded_mean(s.avg_heart_rate_bpm for s in sessions)
    cadence = _recorded_mean(s.avg_cadence_spm for s in sessions)
    speed = _recorded_mean(s.avg_speed_kmh for s in sessions)
    return {
        "avgPace": average_pace(sessions),
        "avgHeartRate": round_half_up(heart_rate) if heart_rate is not None else 0,
        "avgCadence": round_half_up(cadence) if cadence is not None else 0,
        "avgSpeed": round(speed, 2) if speed is not None else 0,
        "totalCalories": sum(s.calories_burned or 0 for s in sessions),
        "totalSteps": sum(s.total_steps or 0 for s in sessions),
    }
