from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.sql import func
from pacebeats_admin.db import Base


class MusicHistoryEntry(Base):
    __tablename__ = "session_music_history"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("running_sessions.id"), nullable=False, index=True)

    track_title = Column(String, nullable=False)
    track_artist = Column(String, nullable=True)
    track_duration_seconds = Column(Integer, nullable=True)
    track_bpm = Column(Float, nullable=True)
    spotify_track_id = Column(String, nullable=True)

    play_order = Column(Integer, nullable=False)  # 1-based within the session
    played_at_offset_seconds = Column(Integer, nullable=False, default=0)
    played_duration_seconds = Column(Integer, nullable=False, default=0)
    was_skipped = Column(Boolean, nullable=False, default=False)
    was_liked = Column(Boolean, nullable=False, default=False)

    recommended_by = Column(String, nullable=True)
    recommendation_trigger = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
