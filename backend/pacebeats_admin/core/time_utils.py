import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """Return `dt` as an aware UTC datetime.

    Rows read back from sqlite (tests, local dev) come without tzinfo; treat
    those as UTC so they compare cleanly with rows from Postgres.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest int with .5 going up (the dashboard's rounding)."""
    return int(math.floor(value + 0.5))


def duration_minutes(duration_seconds: int | None) -> int:
    """
    Convert a session duration in seconds -> whole minutes.
    Example: 1710 -> 29, 1770 -> 30, None -> 0
    """
    return round_half_up((duration_seconds or 0) / 60)


def format_elapsed(total_seconds: int) -> str:
    """
    Format elapsed seconds as 'Mm Ss' for console output.
    Example: 125 -> '2m 5s'
    """
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes}m {seconds}s"
