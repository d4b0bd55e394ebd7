"""Convenience imports for the strength runner.

The application and the tests import from here so they do not need to know
which backend module a helper lives in.
"""

from __future__ import annotations

from backend import (
    CYCLE_TYPES,
    DEFAULT_CYCLE,
    DEFAULT_DB_PATH,
    DEFAULT_RATING,
    DEFAULT_SESSION_PATH,
    RATING_MAX,
    RATING_MIN,
    REST_ADJUST_STEPS,
)
from backend.best_effort import BestEffortChannel
from backend.reconciliation import (
    ResumePoint,
    group_logs_by_exercise,
    next_step_from_logs,
    next_step_from_progress,
    normalize_log,
    normalize_logs,
    resolve_next_step,
    resolve_resume_point,
    resolve_set_number,
)
from backend.rest_timer import RestTimer
from backend.strength_runs import (
    StrengthRunRecorder,
    delete_run,
    get_in_progress_run,
    get_one_rms,
    get_run_history,
    init_db,
    record_one_rm,
)
from backend.strength_session import StrengthRun, parse_draft_value
from backend.template import (
    compute_target_weight,
    load_session_file,
    normalize_cycle,
    order_items,
    resolve_items,
)

__all__ = [
    "BestEffortChannel",
    "CYCLE_TYPES",
    "DEFAULT_CYCLE",
    "DEFAULT_DB_PATH",
    "DEFAULT_RATING",
    "DEFAULT_SESSION_PATH",
    "RATING_MAX",
    "RATING_MIN",
    "REST_ADJUST_STEPS",
    "RestTimer",
    "ResumePoint",
    "StrengthRun",
    "StrengthRunRecorder",
    "compute_target_weight",
    "delete_run",
    "get_in_progress_run",
    "get_one_rms",
    "get_run_history",
    "group_logs_by_exercise",
    "init_db",
    "load_session_file",
    "next_step_from_logs",
    "next_step_from_progress",
    "normalize_cycle",
    "normalize_log",
    "normalize_logs",
    "order_items",
    "parse_draft_value",
    "record_one_rm",
    "resolve_items",
    "resolve_next_step",
    "resolve_resume_point",
    "resolve_set_number",
]
