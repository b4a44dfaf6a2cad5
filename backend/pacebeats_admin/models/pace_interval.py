from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.sql import func
from pacebeats_admin.db import Base


class PaceInterval(Base):
    __tablename__ = "session_pace_intervals"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("running_sessions.id"), nullable=False, index=True)

    interval_number = Column(Integer, nullable=False)  # 1-based
    start_offset_seconds = Column(Integer, nullable=False)
    end_offset_seconds = Column(Integer, nullable=False)
    steps = Column(Integer, nullable=False, default=0)
    distance_km = Column(Float, nullable=True)
    pace_min_per_km = Column(Float, nullable=True)
    cadence_spm = Column(Float, nullable=True)
    avg_heart_rate_bpm = Column(Integer, nullable=True)
    pace_source = Column(String, nullable=True)  # gps, steps

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
