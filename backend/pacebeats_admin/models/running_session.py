import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pacebeats_admin.db import Base
from pacebeats_admin.models.user import User


class RunningSession(Base):
    __tablename__ = "running_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # No ON DELETE CASCADE is assumed on the hosted schema
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    session_start_time = Column(DateTime(timezone=True), nullable=True)
    session_end_time = Column(DateTime(timezone=True), nullable=True)
    session_duration_seconds = Column(Integer, nullable=True)

    run_type = Column(String(20), nullable=True)  # quick, interval, long, ...
    # active, running, completed, paused, cancelled
    status = Column(String(20), nullable=False, server_default="active", index=True)

    # Totals once the run is done
    total_distance_km = Column(Float, nullable=True)
    total_steps = Column(Integer, nullable=True)
    avg_pace_min_per_km = Column(Float, nullable=True)
    avg_cadence_spm = Column(Float, nullable=True)
    avg_heart_rate_bpm = Column(Integer, nullable=True)
    max_heart_rate_bpm = Column(Integer, nullable=True)
    min_heart_rate_bpm = Column(Integer, nullable=True)
    avg_speed_kmh = Column(Float, nullable=True)
    calories_burned = Column(Integer, nullable=True)

    # Live values pushed by the mobile client while running
    current_distance_km = Column(Float, nullable=True)
    current_pace_min_per_km = Column(Float, nullable=True)
    elapsed_time_seconds = Column(Integer, nullable=True)
    # Drives the "is this runner still connected" check on the monitor
    last_heartbeat_at = Column(DateTime(timezone=True), nullable=True, index=True)

    selected_emotion = Column(String, nullable=True)
    selected_playlist = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship(User)
