import logging
from datetime import datetime, time, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from pacebeats_admin.core.aggregation import (
    analytics_summary,
    hourly_activity,
    music_analytics,
    performance_metrics,
    run_type_breakdown,
    session_trends,
    trend_window,
    user_growth,
)
from pacebeats_admin.core.constants import MAX_TREND_DAYS, TREND_DAYS
from pacebeats_admin.core.results import required
from pacebeats_admin.core.time_utils import utcnow
from pacebeats_admin.db import get_db
from pacebeats_admin.models.gps_point import GPSPoint
from pacebeats_admin.models.heart_rate import HeartRateSample
from pacebeats_admin.models.music_history import MusicHistoryEntry
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.user import User
from pacebeats_admin.schemas.analytics import (
    AnalyticsSummary,
    HourlyActivity,
    MusicAnalytics,
    PerformanceMetrics,
    RunTypeAnalytics,
    SessionTrendPoint,
    UserGrowthPoint,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _count(db: Session, model) -> int:
    return db.query(func.count()).select_from(model).scalar() or 0


@router.get("/summary", response_model=AnalyticsSummary)
def get_analytics_summary(db: Session = Depends(get_db)):
    """Dashboard overview totals."""
    logger.info("Fetching analytics summary")

    total_users = required(db, "user count", lambda: _count(db, User))
    sessions = required(db, "sessions", lambda: db.query(RunningSession).all())
    total_songs = required(db, "music history count", lambda: _count(db, MusicHistoryEntry))
    total_hr = required(db, "heart rate count", lambda: _count(db, HeartRateSample))
    total_gps = required(db, "GPS point count", lambda: _count(db, GPSPoint))

    return AnalyticsSummary(
        **analytics_summary(
            total_users=total_users,
            sessions=sessions,
            total_songs=total_songs,
            total_heart_rate_rows=total_hr,
            total_gps_points=total_gps,
            now=utcnow(),
        )
    )


@router.get("/run-types", response_model=list[RunTypeAnalytics])
def get_run_type_analytics(db: Session = Depends(get_db)):
    logger.info("Fetching run type analytics")
    sessions = required(db, "sessions", lambda: db.query(RunningSession).all())
    return [RunTypeAnalytics(**row) for row in run_type_breakdown(sessions)]


@router.get("/user-growth", response_model=list[UserGrowthPoint])
def get_user_growth(
    days: int = Query(TREND_DAYS, ge=1, le=MAX_TREND_DAYS),
    db: Session = Depends(get_db),
):
    """Daily new, active and cumulative users, oldest day first."""
    logger.info("Fetching user growth for the last %d days", days)
    today = utcnow().date()
    start = trend_window(today, days)[0]

    users = required(db, "users", lambda: db.query(User.created_at).all())
    sessions = required(
        db,
        "sessions",
        lambda: db.query(
            RunningSession.user_id,
            RunningSession.session_start_time,
            RunningSession.created_at,
        ).all(),
    )
    points = user_growth(users, sessions, today, days)
    logger.info("Loaded %d days of user growth (from %s)", len(points), start)
    return [UserGrowthPoint(**p) for p in points]


@router.get("/session-trends", response_model=list[SessionTrendPoint])
def get_session_trends(
    days: int = Query(TREND_DAYS, ge=1, le=MAX_TREND_DAYS),
    db: Session = Depends(get_db),
):
    """Sessions per day with average duration, distance and pace."""
    logger.info("Fetching session trends for the last %d days", days)
    today = utcnow().date()
    start = trend_window(today, days)[0]
    since = datetime.combine(start, time.min, tzinfo=timezone.utc)

    sessions = required(
        db,
        "sessions",
        lambda: (
            db.query(RunningSession)
            .filter(RunningSession.session_start_time >= since)
            .order_by(RunningSession.session_start_time.asc())
            .all()
        ),
    )
    points = session_trends(sessions, today, days)
    logger.info("Loaded %d days of session trends (from %s)", len(points), start)
    return [SessionTrendPoint(**p) for p in points]


@router.get("/music", response_model=MusicAnalytics)
def get_music_analytics(db: Session = Depends(get_db)):
    logger.info("Fetching music analytics")
    entries = required(db, "music history", lambda: db.query(MusicHistoryEntry).all())
    return MusicAnalytics(**music_analytics(entries))


@router.get("/time", response_model=list[HourlyActivity])
def get_time_analytics(db: Session = Depends(get_db)):
    """Sessions by hour of day (UTC), all 24 hours."""
    logger.info("Fetching time analytics")
    sessions = required(db, "sessions", lambda: db.query(RunningSession).all())
    return [HourlyActivity(**row) for row in hourly_activity(sessions)]


@router.get("/performance", response_model=PerformanceMetrics)
def get_performance_metrics(db: Session = Depends(get_db)):
    logger.info("Fetching performance metrics")
    sessions = required(db, "sessions", lambda: db.query(RunningSession).all())
    return PerformanceMetrics(**performance_metrics(sessions))
