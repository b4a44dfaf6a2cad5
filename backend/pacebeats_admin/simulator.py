"""Live runner simulator.

Emulates the mobile app during a run so the IoT monitor has something to
show: it creates one active session, then every tick advances distance,
pace and heart rate, bumps ``last_heartbeat_at``, appends a heart rate sample
and raises an alert when the heart rate is high. Ctrl+C or the time limit
completes the session.

This is a demo fixture that writes straight to the store. It does not retry
failed writes and does not stop two simulators running for the same user.
"""
import argparse
import logging
import random
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pacebeats_admin.core.config import settings
from pacebeats_admin.core.constants import (
    HR_CRITICAL_BPM,
    HR_HIGH_BPM,
    SIM_DISTANCE_STEP_KM,
    SIM_HR_ABSOLUTE_CEILING,
    SIM_HR_FLOOR,
    SIM_HR_STEP,
    SIM_HR_WALK_CEILING,
    SIM_SPIKE_MAX,
    SIM_SPIKE_PROBABILITY,
    SIM_START_HR,
)
from pacebeats_admin.core.errors import NotFoundError
from pacebeats_admin.core.time_utils import format_elapsed, utcnow
from pacebeats_admin.db import build_store_url, make_session_factory
from pacebeats_admin.models.heart_rate import HeartRateSample
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.session_alert import SessionAlert
from pacebeats_admin.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class RunnerSimulation:
    """State carried from start through each tick to stop."""

    session_id: str
    started_at: datetime
    heart_rate: int = SIM_START_HR
    distance_km: float = 0.0
    ticks: int = 0

    def elapsed_seconds(self, now: datetime) -> int:
        return int((now - self.started_at).total_seconds())


def simulate_heart_rate(current: int, rng: random.Random) -> int:
    """Next heart rate: a -5..+4 bpm random walk with occasional spikes.

    The walk is clamped to [120, 185]; a spike can push it higher, but never
    past 190.
    """
    change = rng.randrange(2 * SIM_HR_STEP) - SIM_HR_STEP
    hr = max(SIM_HR_FLOOR, min(SIM_HR_WALK_CEILING, current + change))

    if rng.random() < SIM_SPIKE_PROBABILITY:
        hr += rng.randrange(SIM_SPIKE_MAX)

    return min(SIM_HR_ABSOLUTE_CEILING, max(SIM_HR_FLOOR, hr))


def calculate_pace(distance_km: float, elapsed_seconds: int) -> float:
    """Average pace in min/km; 0 before any distance is covered."""
    if distance_km <= 0:
        return 0.0
    return elapsed_seconds / 60 / distance_km


def heart_rate_alert(hr: int) -> Optional[dict]:
    """Alert fields for a reading at or above the HIGH threshold, else None."""
    if hr >= HR_CRITICAL_BPM:
        return {
            "alert_type": "CRITICAL_HR_ALERT",
            "alert_message": f"Heart rate critical: {hr} BPM",
            "severity": "CRITICAL",
        }
    if hr >= HR_HIGH_BPM:
        return {
            "alert_type": "HIGH_HR_WARNING",
            "alert_message": f"Heart rate elevated: {hr} BPM",
            "severity": "HIGH",
        }
    return None


def start_simulation(db: Session, user_email: str, now: datetime) -> RunnerSimulation:
    user = db.query(User).filter(User.email == user_email).first()
    if user is None:
        raise NotFoundError("User")

    session = RunningSession(
        user_id=user.id,
        session_start_time=now,
        status="active",
        run_type="quick",
        selected_emotion="energetic",
        selected_playlist="AI Recommendations",
        current_distance_km=0,
        current_pace_min_per_km=0,
        elapsed_time_seconds=0,
        last_heartbeat_at=now,
        total_distance_km=0,
        avg_heart_rate_bpm=SIM_START_HR,
        session_duration_seconds=0,
    )
    db.add(session)
    db.flush()

    db.add(
        HeartRateSample(
            session_id=session.id,
            heart_rate_bpm=SIM_START_HR,
            timestamp_offset_seconds=0,
            recorded_at=now,
        )
    )
    db.commit()

    logger.info("Session created: %s", session.id)
    return RunnerSimulation(session_id=session.id, started_at=now)


def tick(db: Session, sim: RunnerSimulation, now: datetime, rng: random.Random) -> Optional[dict]:
    """Push one update, as the mobile app would every few seconds.

    Returns the reading that was written, or None if a write failed. A failed
    write is rolled back and logged; the next tick carries on.
    """
    elapsed = sim.elapsed_seconds(now)
    sim.distance_km += SIM_DISTANCE_STEP_KM
    sim.heart_rate = simulate_heart_rate(sim.heart_rate, rng)
    sim.ticks += 1
    pace = calculate_pace(sim.distance_km, elapsed)
    hr = sim.heart_rate

    try:
        db.query(RunningSession).filter(RunningSession.id == sim.session_id).update(
            {
                RunningSession.current_distance_km: sim.distance_km,
                RunningSession.current_pace_min_per_km: pace,
                RunningSession.elapsed_time_seconds: elapsed,
                # The monitor's connection status depends on this
                RunningSession.last_heartbeat_at: now,
                RunningSession.avg_heart_rate_bpm: hr,
                RunningSession.total_distance_km: sim.distance_km,
                RunningSession.session_duration_seconds: elapsed,
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Update failed: %s", exc)
        return None

    db.add(
        HeartRateSample(
            session_id=sim.session_id,
            heart_rate_bpm=hr,
            timestamp_offset_seconds=elapsed,
            recorded_at=now,
        )
    )
    alert = heart_rate_alert(hr)
    if alert is not None:
        db.add(SessionAlert(session_id=sim.session_id, heart_rate=hr, triggered_at=now, **alert))
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Heart rate insert failed: %s", exc)
        return None

    level = alert["severity"] if alert else "NORMAL"
    logger.info(
        "%s | %.2f km | %.2f min/km | %d bpm %s",
        format_elapsed(elapsed),
        sim.distance_km,
        pace,
        hr,
        level,
    )
    return {"elapsed_seconds": elapsed, "distance_km": sim.distance_km, "pace": pace, "heart_rate": hr, "alert": alert}


def stop_simulation(db: Session, sim: RunnerSimulation, now: datetime) -> None:
    elapsed = sim.elapsed_seconds(now)
    db.query(RunningSession).filter(RunningSession.id == sim.session_id).update(
        {
            RunningSession.status: "completed",
            RunningSession.session_end_time: now,
            RunningSession.session_duration_seconds: elapsed,
            RunningSession.total_distance_km: sim.distance_km,
        },
        synchronize_session=False,
    )
    db.commit()
    logger.info("Session completed: %.2f km in %s", sim.distance_km, format_elapsed(elapsed))


def run_simulation(
    session_factory: sessionmaker,
    user_email: str,
    tick_seconds: float,
    max_seconds: float,
    rng: Optional[random.Random] = None,
    clock: Callable[[], datetime] = utcnow,
    sleep: Callable[[float], None] = time.sleep,
) -> RunnerSimulation:
    """Start, tick until the time limit or Ctrl+C, then complete the session."""
    rng = rng or random.Random()
    db = session_factory()
    try:
        sim = start_simulation(db, user_email, clock())
        logger.info("Updating every %s seconds, stopping after %s seconds", tick_seconds, max_seconds)
        try:
            while sim.elapsed_seconds(clock()) + tick_seconds <= max_seconds:
                sleep(tick_seconds)
                tick(db, sim, clock(), rng)
            logger.info("Time limit reached, auto-stopping")
        except KeyboardInterrupt:
            logger.info("Interrupted, ending session")
        finally:
            # Any exit leaves the session completed, never stuck as active
            db.rollback()
            stop_simulation(db, sim, clock())
        return sim
    finally:
        db.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate a live runner for the IoT monitor.")
    parser.add_argument("--email", default=settings.simulator_user_email, help="Email of the runner's user row")
    parser.add_argument("--tick-seconds", type=float, default=settings.simulator_tick_seconds)
    parser.add_argument("--max-minutes", type=float, default=settings.simulator_max_minutes)
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible heart rates")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stdout,
    )

    if not args.email:
        parser.error("--email is required (or set SIMULATOR_USER_EMAIL)")

    url = build_store_url(settings.supabase_db_url, settings.supabase_anon_key, key_name="SUPABASE_ANON_KEY")
    factory = make_session_factory(create_engine(url, pool_pre_ping=True))

    try:
        run_simulation(
            factory,
            args.email,
            tick_seconds=args.tick_seconds,
            max_seconds=args.max_minutes * 60,
            rng=random.Random(args.seed),
        )
    except NotFoundError:
        logger.error("User not found: %s", args.email)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
