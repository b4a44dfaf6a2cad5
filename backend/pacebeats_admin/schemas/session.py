from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SessionView(BaseModel):
    """Flattened running session as the dashboard tables show it."""

    id: str
    session_id: str
    user_id: str
    user_email: str
    user_name: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_seconds: int
    duration_minutes: int
    distance_km: float
    total_steps: int
    avg_pace_min_per_km: Optional[float] = None
    avg_cadence_spm: Optional[float] = None
    avg_heart_rate_bpm: Optional[int] = None
    max_heart_rate_bpm: Optional[int] = None
    min_heart_rate_bpm: Optional[int] = None
    avg_speed_kmh: Optional[float] = None
    total_songs: int
    completed_songs: int
    skipped_songs: int
    liked_songs: int
    disliked_songs: int
    total_time_ms: int
    run_type: Optional[str] = None
    selected_emotion: Optional[str] = None
    selected_playlist: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class HeartRateSampleRead(BaseModel):
    id: int
    session_id: str
    timestamp_offset_seconds: int
    heart_rate_bpm: int
    is_connected: Optional[bool] = None
    recorded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MusicHistoryRead(BaseModel):
    id: int
    session_id: str
    track_title: str
    track_artist: Optional[str] = None
    track_duration_seconds: Optional[int] = None
    track_bpm: Optional[float] = None
    spotify_track_id: Optional[str] = None
    play_order: int
    played_at_offset_seconds: int
    played_duration_seconds: int
    was_skipped: bool
    was_liked: bool
    recommended_by: Optional[str] = None
    recommendation_trigger: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GPSPointRead(BaseModel):
    id: int
    session_id: str
    timestamp_offset_seconds: int
    latitude: float
    longitude: float
    altitude_m: Optional[float] = None
    accuracy_m: Optional[float] = None
    speed_mps: Optional[float] = None
    distance_from_prev_m: Optional[float] = None
    recorded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaceIntervalRead(BaseModel):
    id: int
    session_id: str
    interval_number: int
    start_offset_seconds: int
    end_offset_seconds: int
    steps: int
    distance_km: Optional[float] = None
    pace_min_per_km: Optional[float] = None
    cadence_spm: Optional[float] = None
    avg_heart_rate_bpm: Optional[int] = None
    pace_source: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SessionDetail(SessionView):
    heart_rate_data: list[HeartRateSampleRead] = []
    music_history: list[MusicHistoryRead] = []
    gps_points: list[GPSPointRead] = []
    pace_intervals: list[PaceIntervalRead] = []


class UserSessionsResponse(BaseModel):
    user: UserSummary
    sessions: list[SessionView]


class SessionDetailResponse(BaseModel):
    session: SessionDetail


class SessionDeleteResponse(BaseModel):
    success: bool
    message: str


class UserStats(BaseModel):
    user_id: str
    user_email: Optional[str] = None
    user_name: str
    total_sessions: int
    total_distance_km: float
    total_duration_seconds: int
    avg_heart_rate_bpm: int
    total_songs: int
    last_session_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UsersWithStatsResponse(BaseModel):
    users: list[UserStats]
