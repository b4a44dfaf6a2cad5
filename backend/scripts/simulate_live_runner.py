"""
Simulate a live runner so the IoT monitor has a session to show.

Creates one active session for the given user, updates it every few seconds
with distance, pace and heart rate, and completes it on Ctrl+C or after the
time limit.

Usage:
  SUPABASE_DB_URL=postgresql+psycopg2://postgres@db.<project>.supabase.co:5432/postgres \
  SUPABASE_ANON_KEY=... \
  python backend/scripts/simulate_live_runner.py --email runner@example.com

Options:
  --tick-seconds 3     seconds between updates
  --max-minutes 5      auto-stop after this long
  --seed 42            reproducible heart rate sequence
"""
import sys

from pacebeats_admin.simulator import main


if __name__ == "__main__":
    sys.exit(main())
