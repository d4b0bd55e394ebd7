"""Screens used during a strength run."""

from .rest_screen import RestScreen
from .run_intro_screen import RunIntroScreen
from .workout_active_screen import WorkoutActiveScreen
from .workout_summary_screen import WorkoutSummaryScreen

__all__ = [
    "RestScreen",
    "RunIntroScreen",
    "WorkoutActiveScreen",
    "WorkoutSummaryScreen",
]
