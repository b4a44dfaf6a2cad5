from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from pacebeats_admin.db import Base


class HeartRateSample(Base):
    __tablename__ = "session_heart_rate_data"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("running_sessions.id"), nullable=False, index=True)

    timestamp_offset_seconds = Column(Integer, nullable=False)  # seconds since session start
    heart_rate_bpm = Column(Integer, nullable=False)
    is_connected = Column(Boolean, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=True)
