import datetime
from typing import Optional

from pydantic import BaseModel


class AnalyticsSummary(BaseModel):
    totalUsers: int
    activeUsers: int
    totalSessions: int
    totalDistance: float
    totalDuration: int
    totalSongs: int
    avgSessionDuration: int
    avgSessionDistance: float
    avgHeartRate: int
    totalHeartRateData: int
    totalGPSPoints: int


class RunTypeAnalytics(BaseModel):
    runType: str
    count: int
    percentage: float
    avgDuration: int
    avgDistance: float
    avgPace: float


class UserGrowthPoint(BaseModel):
    date: datetime.date
    newUsers: int
    activeUsers: int
    totalUsers: int


class SessionTrendPoint(BaseModel):
    date: datetime.date
    sessions: int
    avgDuration: int
    avgDistance: float
    avgPace: float


class TrackPlays(BaseModel):
    title: str
    artist: str
    plays: int
    skips: int
    completions: int


class ArtistPlays(BaseModel):
    artist: str
    plays: int


class BpmBucket(BaseModel):
    range: str
    count: int


class MusicAnalytics(BaseModel):
    totalTracks: int
    totalPlays: int
    avgPlaysPerTrack: float
    skipRate: float
    completionRate: float
    likeRate: float
    topTracks: list[TrackPlays]
    topArtists: list[ArtistPlays]
    bpmDistribution: list[BpmBucket]


class HourlyActivity(BaseModel):
    hour: int
    sessions: int
    users: int
    avgDuration: int


class PerformanceMetrics(BaseModel):
    avgPace: float
    avgHeartRate: int
    avgCadence: int
    avgSpeed: float
    totalCalories: int
    totalSteps: int


class TableCheck(BaseModel):
    table: str
    accessible: bool
    rows: Optional[int] = None
    error: Optional[str] = None


class DiagnosticsResponse(BaseModel):
    ok: bool
    tables: list[TableCheck]
