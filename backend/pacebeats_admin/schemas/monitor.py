from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RunnerUser(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ActiveSessionRead(BaseModel):
    """A live session row with its owner embedded under `users`."""

    id: str
    user_id: str
    session_start_time: Optional[datetime] = None
    session_end_time: Optional[datetime] = None
    session_duration_seconds: Optional[int] = None
    run_type: Optional[str] = None
    total_distance_km: Optional[float] = None
    current_distance_km: Optional[float] = None
    avg_pace_min_per_km: Optional[float] = None
    current_pace_min_per_km: Optional[float] = None
    avg_heart_rate_bpm: Optional[int] = None
    max_heart_rate_bpm: Optional[int] = None
    avg_speed_kmh: Optional[float] = None
    calories_burned: Optional[int] = None
    status: str
    elapsed_time_seconds: Optional[int] = None
    last_heartbeat_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    users: Optional[RunnerUser] = Field(default=None, validation_alias=AliasChoices("user", "users"))

    model_config = ConfigDict(from_attributes=True)


class HeartRateReading(BaseModel):
    session_id: str
    heart_rate_bpm: int
    recorded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AlertRead(BaseModel):
    session_id: str
    severity: str
    alert_message: Optional[str] = None
    triggered_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ActiveRunnersResponse(BaseModel):
    # camelCase keys are what the monitor page reads
    sessions: list[ActiveSessionRead]
    heartRates: list[HeartRateReading]
    alerts: list[AlertRead]
