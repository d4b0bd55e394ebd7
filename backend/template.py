"""Preparation of session templates before a strength run starts.

A coach assigns a session whose items may target several training cycles.
Before the runner is opened the caller picks one cycle, keeps the matching
items in their configured order and resolves the cycle specific
sets/reps/rest/%1RM values from the exercise catalog.  The resulting list of
exercise blocks is what :class:`backend.strength_session.StrengthRun`
executes; it is not modified afterwards.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

from backend import CYCLE_TYPES, DEFAULT_CYCLE, DEFAULT_SESSION_PATH
from backend.utils import positive_or_none, round_half_up, to_number


def normalize_cycle(value: str | None) -> str:
    """Return ``value`` if it is a known cycle, else the default cycle."""

    if isinstance(value, str) and value.strip().lower() in CYCLE_TYPES:
        return value.strip().lower()
    return DEFAULT_CYCLE


def order_items(items: list[dict] | None) -> list[dict]:
    """Return ``items`` sorted by their ``order_index``.

    Items without a numeric order are placed after the ordered ones and keep
    their relative position.  When no item carries an order the list is
    returned unchanged.
    """

    items = list(items or [])
    indexed = []
    for index, item in enumerate(items):
        order = to_number(item.get("order_index"))
        indexed.append((index, order if math.isfinite(order) else None, item))
    if all(order is None for _, order, _ in indexed):
        return items

    def sort_key(entry):
        index, order, _ = entry
        if order is None:
            return (1, 0, index)
        return (0, order, index)

    return [item for _, _, item in sorted(indexed, key=sort_key)]


def cycle_items(items: list[dict] | None, cycle: str) -> list[dict]:
    """Return the items for ``cycle`` or every item when none match."""

    items = list(items or [])
    filtered = [item for item in items if item.get("cycle_type") == cycle]
    return order_items(filtered or items)


def resolve_exercise_params(exercise: dict | None, cycle: str) -> dict:
    """Read the cycle specific prescription of ``exercise`` from the catalog.

    Missing, non numeric or non positive values are reported as ``None``.
    """

    keys = {
        "sets": f"sets_{cycle}",
        "reps": f"reps_{cycle}",
        "percent_1rm": f"percent_1rm_{cycle}",
        "rest_series": f"rest_{cycle}",
        "rest_exercise": f"rest_exercise_{cycle}",
    }
    if not exercise:
        return {name: None for name in keys}
    return {name: positive_or_none(exercise.get(key)) for name, key in keys.items()}


def _as_int(value) -> int:
    number = to_number(value)
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


def _as_float(value) -> float:
    number = to_number(value)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def normalize_block(item: dict) -> dict:
    """Return ``item`` with the block fields coerced to usable values."""

    block = dict(item)
    block["sets"] = _as_int(item.get("sets"))
    block["reps"] = _as_int(item.get("reps"))
    block["rest_seconds"] = _as_int(item.get("rest_seconds"))
    block["percent_1rm"] = _as_float(item.get("percent_1rm"))
    block["notes"] = item.get("notes") or ""
    return block


def resolve_items(
    items: list[dict] | None,
    cycle: str | None,
    exercise_lookup: dict | None = None,
) -> list[dict]:
    """Build the executable exercise blocks of a session for ``cycle``."""

    cycle = normalize_cycle(cycle)
    exercise_lookup = exercise_lookup or {}
    blocks = []
    for item in cycle_items(items, cycle):
        params = resolve_exercise_params(
            exercise_lookup.get(item.get("exercise_id")), cycle
        )
        blocks.append(
            normalize_block(
                {
                    **item,
                    "sets": params["sets"] or 0,
                    "reps": params["reps"] or 0,
                    "rest_seconds": params["rest_series"] or 0,
                    "percent_1rm": params["percent_1rm"] or 0,
                }
            )
        )
    return blocks


def find_one_rm(one_rms: list[dict] | None, exercise_id) -> float:
    """Return the weight of the first record for ``exercise_id`` (or 0)."""

    for record in one_rms or []:
        if record.get("exercise_id") == exercise_id:
            weight = to_number(record.get("weight"))
            return weight if math.isfinite(weight) else 0.0
    return 0.0


def compute_target_weight(block: dict | None, one_rms: list[dict] | None) -> int:
    """Return the working weight prescribed by ``block``.

    Only blocks with a positive ``percent_1rm`` have a target; the weight is
    the athlete's one-rep max scaled by that percentage, rounded half up.
    """

    if not block:
        return 0
    percent = positive_or_none(block.get("percent_1rm"))
    if percent is None:
        return 0
    one_rm = find_one_rm(one_rms, block.get("exercise_id"))
    return round_half_up(one_rm * percent / 100)


def load_session_file(path: Path = DEFAULT_SESSION_PATH) -> dict:
    """Read an assigned session from ``path`` and resolve its blocks.

    The file holds ``session_id``, ``title``, ``cycle``, the session
    ``items`` and an ``exercises`` catalog keyed by exercise id.  The
    returned dict carries the same metadata plus the ready ``blocks``.
    """

    with Path(path).open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Session file {path} must contain an object")
    catalog = {}
    for key, exercise in (data.get("exercises") or {}).items():
        catalog[int(key)] = exercise
    cycle = normalize_cycle(data.get("cycle"))
    return {
        "session_id": data.get("session_id"),
        "assignment_id": data.get("assignment_id"),
        "title": data.get("title") or "",
        "cycle": cycle,
        "blocks": resolve_items(data.get("items"), cycle, catalog),
    }
