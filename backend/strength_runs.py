"""Local persistence of strength runs, set logs and one-rep maxes.

:class:`StrengthRunRecorder` provides the four operations a
:class:`~backend.strength_session.StrengthRun` expects from its
collaborator.  The module level helpers load the history needed to resume
a run and the one-rep-max records used for target weights.
"""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path

from backend import DEFAULT_DB_PATH

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "data" / "strength_schema.sql"


def init_db(db_path: Path = DEFAULT_DB_PATH) -> Path:
    """Create the strength tables in ``db_path`` if they do not exist."""

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(str(db_path)) as conn:
        conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
    return db_path


def _run_row_to_dict(row: sqlite3.Row) -> dict:
    return {key: row[key] for key in row.keys()}


def get_run_logs(run_id: int, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return the set logs of ``run_id`` in the order they were recorded."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT exercise_id, set_index, reps, weight
            FROM strength_set_logs
            WHERE run_id = ?
            ORDER BY completed_at, id
            """,
            (run_id,),
        )
        return [
            {"exercise_id": ex_id, "set_index": set_idx, "reps": reps, "weight": weight}
            for ex_id, set_idx, reps, weight in cursor.fetchall()
        ]


def get_in_progress_run(athlete_id: int, db_path: Path = DEFAULT_DB_PATH) -> dict | None:
    """Return the most recent unfinished run of ``athlete_id`` with its logs."""

    with sqlite3.connect(str(db_path)) as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT * FROM strength_session_runs
            WHERE athlete_id = ? AND status = 'in_progress'
            ORDER BY started_at DESC, id DESC
            LIMIT 1
            """,
            (athlete_id,),
        )
        row = cursor.fetchone()
    if row is None:
        return None
    run = _run_row_to_dict(row)
    run["logs"] = get_run_logs(run["id"], db_path)
    return run


def get_run_history(
    athlete_id: int, limit: int | None = None, db_path: Path = DEFAULT_DB_PATH
) -> list[dict]:
    """Return completed runs of ``athlete_id``, newest first."""

    query = (
        "SELECT * FROM strength_session_runs "
        "WHERE athlete_id = ? AND status = 'completed' "
        "ORDER BY completed_at DESC, id DESC"
    )
    with sqlite3.connect(str(db_path)) as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        if limit is not None:
            cursor.execute(query + " LIMIT ?", (athlete_id, limit))
        else:
            cursor.execute(query, (athlete_id,))
        return [_run_row_to_dict(row) for row in cursor.fetchall()]


def delete_run(run_id: int, db_path: Path = DEFAULT_DB_PATH) -> None:
    """Remove ``run_id`` and all of its set logs."""

    with sqlite3.connect(str(db_path)) as conn:
        conn.execute("DELETE FROM strength_set_logs WHERE run_id = ?", (run_id,))
        conn.execute("DELETE FROM strength_session_runs WHERE id = ?", (run_id,))


def get_one_rms(athlete_id: int, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return the one-rep-max records of ``athlete_id``, latest first."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT exercise_id, weight FROM one_rm_records
            WHERE athlete_id = ?
            ORDER BY recorded_at DESC, id DESC
            """,
            (athlete_id,),
        )
        return [
            {"exercise_id": ex_id, "weight": weight}
            for ex_id, weight in cursor.fetchall()
        ]


def record_one_rm(
    athlete_id: int,
    exercise_id: int,
    weight: float,
    db_path: Path = DEFAULT_DB_PATH,
) -> None:
    """Store a new one-rep-max for ``exercise_id``."""

    if weight <= 0:
        raise ValueError("One-rep max must be positive")
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            """
            INSERT INTO one_rm_records (athlete_id, exercise_id, weight, recorded_at)
            VALUES (?, ?, ?, ?)
            """,
            (athlete_id, exercise_id, weight, time.time()),
        )


class StrengthRunRecorder:
    """Persist one run of ``session_id`` (or ``assignment_id``) to SQLite."""

    def __init__(
        self,
        athlete_id: int,
        *,
        session_id: int | None = None,
        assignment_id: int | None = None,
        cycle: str | None = None,
        db_path: Path = DEFAULT_DB_PATH,
        run_id: int | None = None,
    ):
        self.athlete_id = athlete_id
        self.session_id = session_id
        self.assignment_id = assignment_id
        self.cycle = cycle
        self.db_path = Path(db_path)
        self.run_id = run_id

    def start(self) -> int:
        """Create the ``in_progress`` run once and return its id."""

        if self.run_id is not None:
            return self.run_id
        if self.session_id is None and self.assignment_id is None:
            raise ValueError("A session or assignment is required to start a run")
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.execute(
                """
                INSERT INTO strength_session_runs
                    (assignment_id, session_id, athlete_id, cycle_type,
                     status, progress_pct, started_at)
                VALUES (?, ?, ?, ?, 'in_progress', 0, ?)
                """,
                (
                    self.assignment_id,
                    self.session_id,
                    self.athlete_id,
                    self.cycle,
                    time.time(),
                ),
            )
            self.run_id = cursor.lastrowid
        return self.run_id

    def log_sets(self, entries: list[dict]) -> None:
        """Append ``entries`` to the run; ignored before the run exists."""

        if self.run_id is None:
            return
        now = time.time()
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.executemany(
                """
                INSERT INTO strength_set_logs
                    (run_id, exercise_id, set_index, reps, weight, completed_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        self.run_id,
                        entry["exercise_id"],
                        entry.get("set_number") or index + 1,
                        entry.get("reps"),
                        entry.get("weight"),
                        now,
                    )
                    for index, entry in enumerate(entries)
                ],
            )

    def report_progress(self, percent: int) -> None:
        if self.run_id is None:
            return
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                UPDATE strength_session_runs
                SET progress_pct = ?, status = 'in_progress'
                WHERE id = ?
                """,
                (percent, self.run_id),
            )

    def finish(self, payload: dict) -> None:
        """Mark the run completed with the athlete's ratings."""

        if self.run_id is None:
            raise RuntimeError("Run was never started")
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                UPDATE strength_session_runs
                SET status = 'completed', progress_pct = 100, completed_at = ?,
                    duration = ?, feeling = ?, fatigue = ?, comments = ?
                WHERE id = ?
                """,
                (
                    time.time(),
                    payload.get("duration"),
                    payload.get("feeling"),
                    payload.get("fatigue"),
                    payload.get("comments"),
                    self.run_id,
                ),
            )
