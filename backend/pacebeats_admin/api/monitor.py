import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from pacebeats_admin.core.constants import ACTIVE_RUNNERS_LIMIT, LIVE_STATUSES
from pacebeats_admin.core.results import optional, required
from pacebeats_admin.db import get_db
from pacebeats_admin.models.heart_rate import HeartRateSample
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.session_alert import SessionAlert
from pacebeats_admin.schemas.monitor import (
    ActiveRunnersResponse,
    ActiveSessionRead,
    AlertRead,
    HeartRateReading,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["monitor"])


@router.get("/active-runners", response_model=ActiveRunnersResponse)
def get_active_runners(db: Session = Depends(get_db)):
    """
    Live runners for the IoT monitor.

    Returns sessions, heart rate readings and unresolved alerts as three flat
    lists; the monitor page correlates them by `session_id`.
    """
    logger.info("Loading active runners")

    sessions = required(
        db,
        "active sessions",
        lambda: (
            db.query(RunningSession)
            .options(joinedload(RunningSession.user))
            .filter(RunningSession.status.in_(LIVE_STATUSES))
            .order_by(RunningSession.last_heartbeat_at.desc().nulls_last())
            .limit(ACTIVE_RUNNERS_LIMIT)
            .all()
        ),
    )

    if not sessions:
        logger.info("No active sessions found")
        return ActiveRunnersResponse(sessions=[], heartRates=[], alerts=[])

    logger.info("Found %d active sessions", len(sessions))
    session_ids = [s.id for s in sessions]

    heart_rates = optional(
        db,
        "heart rate",
        lambda: (
            db.query(HeartRateSample)
            .filter(HeartRateSample.session_id.in_(session_ids))
            .order_by(HeartRateSample.recorded_at.desc())
            .all()
        ),
        [],
    )

    alerts = optional(
        db,
        "alerts",
        lambda: (
            db.query(SessionAlert)
            .filter(SessionAlert.session_id.in_(session_ids))
            .filter(SessionAlert.resolved.is_(False))
            .order_by(SessionAlert.triggered_at.desc())
            .all()
        ),
        [],
    )

    logger.info("Loaded %d HR readings, %d alerts", len(heart_rates), len(alerts))

    return ActiveRunnersResponse(
        sessions=[ActiveSessionRead.model_validate(s) for s in sessions],
        heartRates=[HeartRateReading.model_validate(h) for h in heart_rates],
        alerts=[AlertRead.model_validate(a) for a in alerts],
    )
