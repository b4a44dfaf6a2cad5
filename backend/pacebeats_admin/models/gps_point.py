from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from pacebeats_admin.db import Base


class GPSPoint(Base):
    __tablename__ = "session_gps_points"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("running_sessions.id"), nullable=False, index=True)

    timestamp_offset_seconds = Column(Integer, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    altitude_m = Column(Float, nullable=True)
    accuracy_m = Column(Float, nullable=True)
    speed_mps = Column(Float, nullable=True)
    distance_from_prev_m = Column(Float, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=True)
