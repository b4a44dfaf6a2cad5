"""Shared application constants.

Centralizes the status values, thresholds and limits used by the routes and
the live runner simulator so they are documented in one place.
"""

# Session statuses that count as a live runner
LIVE_STATUSES = ("active", "running")

# Max rows returned by the active runners feed
ACTIVE_RUNNERS_LIMIT = 50

# Heart rate alert thresholds (bpm)
HR_HIGH_BPM = 165
HR_CRITICAL_BPM = 180

# Analytics group sessions without a run type under this one
DEFAULT_RUN_TYPE = "quick"
# Display name when a user has neither username nor email
UNKNOWN_USER_NAME = "Unknown"

# Window for "active users" in the analytics summary
ACTIVE_USER_WINDOW_DAYS = 30

# Default length of the daily trend charts, and the longest allowed
TREND_DAYS = 30
MAX_TREND_DAYS = 365

TOP_TRACKS_LIMIT = 10
UNKNOWN_ARTIST = "Unknown"
# (exclusive upper bpm, label); None closes the last bucket
BPM_BUCKETS = (
    (100, "< 100"),
    (120, "100-120"),
    (140, "120-140"),
    (160, "140-160"),
    (180, "160-180"),
    (None, "180+"),
)
UNKNOWN_BPM = "Unknown"

# Simulator random walk bounds (bpm)
SIM_START_HR = 140
SIM_HR_STEP = 5
SIM_HR_FLOOR = 120
SIM_HR_WALK_CEILING = 185
SIM_HR_ABSOLUTE_CEILING = 190
SIM_SPIKE_PROBABILITY = 0.1
SIM_SPIKE_MAX = 20
# ~10 m every 3 s tick
SIM_DISTANCE_STEP_KM = 0.01
