"""Work out where a previously started strength run should resume.

Two signals can be available when a run is reopened:

* the persisted set logs, which are the ground truth; the first block that
  still has fewer logs than target sets is where the athlete continues;
* a coarse progress percentage, used only when no set log exists at all
  (for example a run that reported progress without logging sets).

Both strategies are pure functions so they can be tested on their own and
calling them again with the same inputs always gives the same answer.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from backend.utils import round_half_up, to_number

# Older clients stored the set position under different names
SET_NUMBER_ALIASES = ("set_index", "set_number", "setIndex")


class ResumePoint(NamedTuple):
    step: int
    set_index: int
    draft_inputs: dict


def resolve_set_number(log: dict | None, fallback_index: int) -> int:
    """Return the set number declared by ``log`` or ``fallback_index``.

    The first alias present on the log is used.  Values that are not whole
    numbers greater than zero fall back to ``fallback_index``.
    """

    raw = None
    for alias in SET_NUMBER_ALIASES:
        if log and log.get(alias) is not None:
            raw = log[alias]
            break
    number = to_number(raw)
    if not math.isfinite(number) or number <= 0 or not number.is_integer():
        return fallback_index
    return int(number)


def normalize_log(log: dict, fallback_index: int) -> dict:
    """Return ``log`` with a single canonical ``set_number`` field."""

    entry = {
        key: value for key, value in log.items() if key not in SET_NUMBER_ALIASES
    }
    entry["set_number"] = resolve_set_number(log, fallback_index)
    return entry


def normalize_logs(logs: list[dict] | None) -> list[dict]:
    """Return ``logs`` in encounter order, each with a canonical set number.

    The fallback set number of a log is its 1-based position among the logs
    of the same exercise.
    """

    positions: dict = {}
    entries = []
    for log in logs or []:
        if not log:
            continue
        exercise_id = log.get("exercise_id")
        positions[exercise_id] = positions.get(exercise_id, 0) + 1
        entries.append(normalize_log(log, positions[exercise_id]))
    return entries


def group_logs_by_exercise(logs: list[dict] | None) -> dict:
    """Group normalized ``logs`` by ``exercise_id`` keeping encounter order.

    Logs without an exercise are dropped.
    """

    grouped: dict = {}
    for entry in normalize_logs(logs):
        if not entry.get("exercise_id"):
            continue
        grouped.setdefault(entry["exercise_id"], []).append(entry)
    return grouped


def next_step_from_logs(blocks: list[dict], grouped: dict) -> int:
    """Return the 1-based block to resume on given grouped logs.

    ``len(blocks) + 1`` means every block is fully logged.
    """

    for index, block in enumerate(blocks):
        existing = grouped.get(block.get("exercise_id"), [])
        if len(existing) < (block.get("sets") or 0):
            return index + 1
    return len(blocks) + 1


def next_step_from_progress(block_count: int, progress_percent) -> int:
    """Estimate the block to resume on from a progress percentage."""

    if block_count <= 0:
        return 0
    progress = to_number(progress_percent)
    if not math.isfinite(progress) or progress <= 0:
        return 0
    completed = round_half_up(progress / 100 * block_count)
    completed = min(block_count, max(0, completed))
    return min(block_count, completed + 1)


def resolve_next_step(
    blocks: list[dict] | None,
    logs: list[dict] | None,
    progress_percent=None,
) -> int:
    """Return the 1-based block to resume on, ``0`` for the intro screen."""

    blocks = blocks or []
    if not blocks:
        return 0
    if logs:
        return next_step_from_logs(blocks, group_logs_by_exercise(logs))
    return next_step_from_progress(len(blocks), progress_percent)


def resolve_resume_point(
    blocks: list[dict] | None,
    logs: list[dict] | None,
    progress_percent=None,
) -> ResumePoint:
    """Return the step, set and pre-filled drafts for a resumed run."""

    blocks = blocks or []
    step = resolve_next_step(blocks, logs, progress_percent)
    if not 0 < step <= len(blocks):
        return ResumePoint(step, 1, {})
    block = blocks[step - 1]
    existing = group_logs_by_exercise(logs).get(block.get("exercise_id"), [])
    drafts = {}
    for log in existing:
        drafts[log["set_number"] - 1] = {
            "reps": log.get("reps"),
            "weight": log.get("weight"),
        }
    set_index = min(max(block.get("sets") or 0, 1), len(existing) + 1)
    return ResumePoint(step, set_index, drafts)
