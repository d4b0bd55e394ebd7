"""Shared constants and globals for backend modules."""

from __future__ import annotations

from pathlib import Path

# Subjective ratings collected on the summary screen use a 1..5 scale
DEFAULT_RATING = 3
RATING_MIN = 1
RATING_MAX = 5

# Buttons shown on the rest screen adjust the countdown by these amounts
REST_ADJUST_STEPS = (15, 30, -15)

# Training cycles a coach can assign; each has its own sets/reps/%1RM values
CYCLE_TYPES = ("endurance", "hypertrophie", "force")
DEFAULT_CYCLE = "endurance"

# Path to the local SQLite database holding runs and set logs
DEFAULT_DB_PATH = (
    Path(__file__).resolve().parent.parent / "data" / "strength.db"
)

# Session assigned by the coach: items, exercise catalog and cycle
DEFAULT_SESSION_PATH = (
    Path(__file__).resolve().parent.parent / "data" / "session.json"
)

__all__ = [
    "DEFAULT_RATING",
    "RATING_MIN",
    "RATING_MAX",
    "REST_ADJUST_STEPS",
    "CYCLE_TYPES",
    "DEFAULT_CYCLE",
    "DEFAULT_DB_PATH",
    "DEFAULT_SESSION_PATH",
]
