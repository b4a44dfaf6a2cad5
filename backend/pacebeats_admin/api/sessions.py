import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pacebeats_admin.core.aggregation import (
    count_by_session,
    display_name,
    empty_music_stats,
    music_stats,
    session_view,
    users_with_stats,
)
from pacebeats_admin.core.errors import NotFoundError
from pacebeats_admin.core.results import optional, required
from pacebeats_admin.db import get_db
from pacebeats_admin.models.gps_point import GPSPoint
from pacebeats_admin.models.heart_rate import HeartRateSample
from pacebeats_admin.models.music_history import MusicHistoryEntry
from pacebeats_admin.models.pace_interval import PaceInterval
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.session_alert import SessionAlert
from pacebeats_admin.models.user import User
from pacebeats_admin.schemas.session import (
    GPSPointRead,
    HeartRateSampleRead,
    MusicHistoryRead,
    PaceIntervalRead,
    SessionDeleteResponse,
    SessionDetail,
    SessionDetailResponse,
    SessionView,
    UserSessionsResponse,
    UserSummary,
    UsersWithStatsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

# Tables that reference running_sessions.id; nothing cascades on the store side
SESSION_CHILD_MODELS = (
    SessionAlert,
    HeartRateSample,
    MusicHistoryEntry,
    GPSPoint,
    PaceInterval,
)


# Declared before /{user_id} so "users" is not captured as an id
@router.get("/users", response_model=UsersWithStatsResponse)
def list_users_with_stats(db: Session = Depends(get_db)):
    """Every user with session, distance, heart rate and music totals."""
    logger.info("Fetching users with session statistics")

    users = required(
        db,
        "users",
        lambda: db.query(User).order_by(User.created_at.desc()).all(),
    )
    if not users:
        logger.info("No users found")
        return UsersWithStatsResponse(users=[])

    sessions = optional(db, "sessions", lambda: db.query(RunningSession).all(), [])

    # Skip the music query entirely rather than send an empty IN filter
    session_ids = [s.id for s in sessions]
    music_session_ids: list[str] = []
    if session_ids:
        rows = optional(
            db,
            "music history",
            lambda: (
                db.query(MusicHistoryEntry.session_id)
                .filter(MusicHistoryEntry.session_id.in_(session_ids))
                .all()
            ),
            [],
        )
        music_session_ids = [r.session_id for r in rows]

    stats = users_with_stats(users, sessions, music_session_ids)
    logger.info("Processed %d users with stats", len(stats))
    return UsersWithStatsResponse(users=stats)


@router.get("/detail/{session_id}", response_model=SessionDetailResponse)
def get_session_detail(session_id: str, db: Session = Depends(get_db)):
    logger.info("Fetching details for session %s", session_id)

    session = required(db, "session", lambda: db.get(RunningSession, session_id))
    if session is None:
        raise NotFoundError("Session")

    # A missing owner only blanks the name and email
    user = optional(db, "session owner", lambda: db.get(User, session.user_id), None)
    if user is None:
        logger.warning("Owner %s of session %s not found", session.user_id, session_id)

    heart_rate_data = optional(
        db,
        "heart rate",
        lambda: (
            db.query(HeartRateSample)
            .filter(HeartRateSample.session_id == session_id)
            .order_by(HeartRateSample.timestamp_offset_seconds.asc())
            .all()
        ),
        [],
    )
    music_history = optional(
        db,
        "music history",
        lambda: (
            db.query(MusicHistoryEntry)
            .filter(MusicHistoryEntry.session_id == session_id)
            .order_by(MusicHistoryEntry.play_order.asc())
            .all()
        ),
        [],
    )
    gps_points = optional(
        db,
        "GPS points",
        lambda: (
            db.query(GPSPoint)
            .filter(GPSPoint.session_id == session_id)
            .order_by(GPSPoint.timestamp_offset_seconds.asc())
            .all()
        ),
        [],
    )
    pace_intervals = optional(
        db,
        "pace intervals",
        lambda: (
            db.query(PaceInterval)
            .filter(PaceInterval.session_id == session_id)
            .order_by(PaceInterval.interval_number.asc())
            .all()
        ),
        [],
    )

    email = user.email if user else None
    view = session_view(
        session,
        user_email=email,
        user_name=display_name(user.username if user else None, email),
        music=music_stats(music_history),
    )
    detail = SessionDetail(
        **view,
        heart_rate_data=[HeartRateSampleRead.model_validate(h) for h in heart_rate_data],
        music_history=[MusicHistoryRead.model_validate(m) for m in music_history],
        gps_points=[GPSPointRead.model_validate(p) for p in gps_points],
        pace_intervals=[PaceIntervalRead.model_validate(p) for p in pace_intervals],
    )

    logger.info(
        "Session detail loaded with %d HR points, %d tracks",
        len(heart_rate_data),
        len(music_history),
    )
    return SessionDetailResponse(session=detail)


def _delete_session_tree(db: Session, session_id: str) -> None:
    """Delete a session's child rows and then the session, in one transaction."""
    for model in SESSION_CHILD_MODELS:
        deleted = (
            db.query(model)
            .filter(model.session_id == session_id)
            .delete(synchronize_session=False)
        )
        logger.info("Deleted %d rows from %s", deleted, model.__tablename__)

    db.query(RunningSession).filter(RunningSession.id == session_id).delete(
        synchronize_session=False
    )
    db.commit()


@router.delete("/detail/{session_id}", response_model=SessionDeleteResponse)
def delete_session(session_id: str, db: Session = Depends(get_db)):
    logger.info("Deleting session %s", session_id)

    session = required(db, "session", lambda: db.get(RunningSession, session_id))
    if session is None:
        raise NotFoundError("Session")

    # Any failing delete rolls back all of them, so no orphans are left behind
    required(db, "delete session", lambda: _delete_session_tree(db, session_id))

    logger.info("Session %s deleted", session_id)
    return SessionDeleteResponse(success=True, message="Session deleted successfully")


@router.get("/{user_id}", response_model=UserSessionsResponse)
def list_user_sessions(user_id: str, db: Session = Depends(get_db)):
    logger.info("Fetching sessions for user %s", user_id)

    user = required(db, "user", lambda: db.get(User, user_id))
    if user is None:
        raise NotFoundError("User")

    sessions = required(
        db,
        "user sessions",
        lambda: (
            db.query(RunningSession)
            .filter(RunningSession.user_id == user_id)
            .order_by(RunningSession.session_start_time.desc().nulls_last())
            .all()
        ),
    )
    if not sessions:
        logger.info("No sessions found for user %s", user_id)
        return UserSessionsResponse(user=UserSummary.model_validate(user), sessions=[])

    logger.info("Found %d sessions", len(sessions))
    session_ids = [s.id for s in sessions]

    rows = optional(
        db,
        "music history",
        lambda: (
            db.query(MusicHistoryEntry.session_id)
            .filter(MusicHistoryEntry.session_id.in_(session_ids))
            .all()
        ),
        [],
    )
    songs = count_by_session(r.session_id for r in rows)

    user_name = display_name(user.username, user.email)
    # Per-song flags need the full music rows; only the detail view loads them
    views = [
        SessionView(
            **session_view(
                s,
                user_email=user.email,
                user_name=user_name,
                music=empty_music_stats(songs.get(s.id, 0)),
            )
        )
        for s in sessions
    ]
    return UserSessionsResponse(user=UserSummary.model_validate(user), sessions=views)
