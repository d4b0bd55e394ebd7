"""UI screen modules for the strength runner."""

from .session import (
    RestScreen,
    RunIntroScreen,
    WorkoutActiveScreen,
    WorkoutSummaryScreen,
)

__all__ = [
    "RestScreen",
    "RunIntroScreen",
    "WorkoutActiveScreen",
    "WorkoutSummaryScreen",
]
