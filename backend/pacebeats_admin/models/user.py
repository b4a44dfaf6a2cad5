import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, Numeric, String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.sql import func
from pacebeats_admin.db import Base

# text[] in the hosted store, JSON elsewhere (local sqlite in tests)
StringList = JSON().with_variant(ARRAY(String), "postgresql")


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String, nullable=True, index=True)
    username = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Profile filled in by the mobile onboarding survey
    age = Column(Integer, nullable=True)
    height_cm = Column(Numeric(5, 1), nullable=True)
    weight_kg = Column(Numeric(5, 1), nullable=True)
    gender = Column(String, nullable=True)
    pace_band = Column(String, nullable=True)
    preferred_genres = Column(StringList, nullable=True)
    survey_completed = Column(Boolean, nullable=False, default=False)

    # Spotify OAuth
    spotify_user_id = Column(String, nullable=True)
    spotify_access_token = Column(String, nullable=True)
    spotify_refresh_token = Column(String, nullable=True)
    spotify_connected_at = Column(DateTime(timezone=True), nullable=True)
    spotify_token_expires_at = Column(DateTime(timezone=True), nullable=True)
