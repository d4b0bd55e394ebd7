import os
import sys
from pathlib import Path

import pytest

# Fixed metrics so Kivy/KivyMD imports do not need a window to query DPI.
os.environ.setdefault("KIVY_DPI", "96")
os.environ.setdefault("KIVY_METRICS_DENSITY", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.strength_runs import init_db  # noqa: E402
from tests.utils import FakeClock, RecordingCollaborator  # noqa: E402


@pytest.fixture
def blocks():
    """Two exercise blocks: a loaded bench press and a bodyweight row."""
    return [
        {
            "exercise_id": 1,
            "name": "Bench Press",
            "sets": 3,
            "reps": 5,
            "rest_seconds": 90,
            "percent_1rm": 75,
        },
        {
            "exercise_id": 2,
            "name": "Inverted Row",
            "sets": 2,
            "reps": 10,
            "rest_seconds": 0,
            "percent_1rm": 0,
        },
    ]


@pytest.fixture
def one_rms():
    return [{"exercise_id": 1, "weight": 100}, {"exercise_id": 1, "weight": 60}]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def collaborator():
    return RecordingCollaborator()


@pytest.fixture
def strength_db(tmp_path: Path) -> Path:
    """Create a temporary database with the strength tables."""
    return init_db(tmp_path / "strength.db")
