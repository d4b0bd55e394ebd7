"""Execution engine for a guided strength-training run.

The run walks through the exercise blocks of a prepared session template
(see :mod:`backend.template`).  ``current_step`` is ``0`` on the intro
screen, ``1..len(blocks)`` while exercising and ``len(blocks) + 1`` once the
run is complete.  Inside a block ``current_set_index`` counts sets from 1.

The list of logged sets held here is what the athlete sees.  Each new log is
also pushed to the collaborator through a :class:`BestEffortChannel`; if that
push fails the local list is kept as is and the backend catches up the next
time the run is loaded (see :mod:`backend.reconciliation`).
"""

from __future__ import annotations

import inspect
import logging
import math
import time

from backend import DEFAULT_RATING, RATING_MAX, RATING_MIN
from backend.best_effort import BestEffortChannel
from backend.reconciliation import normalize_logs, resolve_resume_point
from backend.rest_timer import RestTimer
from backend.template import compute_target_weight, normalize_block
from backend.utils import compact_number, round_half_up, to_number

DRAFT_FIELDS = ("weight", "reps")

INTRO = "intro"
ACTIVE = "active"
COMPLETE = "complete"


def parse_draft_value(field: str, text: str):
    """Return the number typed for ``field`` or ``None`` if unparsable.

    Weights accept a comma as decimal separator.
    """

    if field not in DRAFT_FIELDS:
        raise ValueError(f"Unknown draft field '{field}'")
    text = text or ""
    if field == "weight":
        text = text.replace(",", ".", 1)
    value = to_number(text)
    if not math.isfinite(value):
        return None
    return compact_number(value)


class StrengthRun:
    """State machine driving one strength run.

    ``collaborator`` may provide ``start()``, ``log_sets(entries)``,
    ``report_progress(percent)`` and ``finish(payload)``; any of them can be
    missing, synchronous or a coroutine function.  ``on_celebrate`` is called
    once when the last block is finished.
    """

    def __init__(
        self,
        blocks: list[dict],
        *,
        one_rms: list[dict] | None = None,
        collaborator=None,
        auto_rest: bool = True,
        on_celebrate=None,
        on_failure=None,
        clock=time.time,
    ):
        self.blocks = [normalize_block(block) for block in blocks or []]
        self.one_rms = list(one_rms or [])
        self.collaborator = collaborator
        self.auto_rest = auto_rest
        self.on_celebrate = on_celebrate
        self.channel = BestEffortChannel(on_failure)
        self.clock = clock

        self.current_step = 0
        self.current_set_index = 1
        self.logs: list[dict] = []
        self.draft_inputs: dict[int, dict] = {}
        self.rest = RestTimer()
        self.has_celebrated = False

        self.started_at = clock()
        self.completed_at: float | None = None

        self.difficulty = DEFAULT_RATING
        self.fatigue = DEFAULT_RATING
        self.comments = ""
        self.is_finishing = False
        self.finished = False

        # numeric entry surface for the current set
        self.entry_field: str | None = None
        self.entry_text = ""

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    @property
    def phase(self) -> str:
        if self.current_step == 0:
            return INTRO
        if self.current_step > self.block_count:
            return COMPLETE
        return ACTIVE

    @property
    def current_block(self) -> dict | None:
        if 0 < self.current_step <= self.block_count:
            return self.blocks[self.current_step - 1]
        return None

    @property
    def next_block(self) -> dict | None:
        if self.current_step < self.block_count:
            return self.blocks[self.current_step]
        return None

    @property
    def display_progress(self) -> int:
        """Percentage of blocks already behind the athlete."""
        if not self.block_count:
            return 0
        pct = round_half_up((self.current_step - 1) / self.block_count * 100)
        return min(100, max(0, pct))

    @property
    def target_weight(self) -> int:
        return compute_target_weight(self.current_block, self.one_rms)

    @property
    def current_logged_set(self) -> dict | None:
        """Return the log already recorded for the current set, if any."""
        block = self.current_block
        if block is None:
            return None
        found = None
        for log in self.logs:
            if (
                log.get("exercise_id") == block["exercise_id"]
                and log["set_number"] == self.current_set_index
            ):
                found = log
        return found

    @property
    def is_current_set_logged(self) -> bool:
        return self.current_logged_set is not None

    def _current_draft(self) -> dict:
        return self.draft_inputs.get(self.current_set_index - 1, {})

    @property
    def active_weight(self):
        logged = self.current_logged_set
        if logged and logged.get("weight") is not None:
            return logged["weight"]
        draft = self._current_draft().get("weight")
        return draft if draft is not None else self.target_weight

    @property
    def active_reps(self):
        logged = self.current_logged_set
        if logged and logged.get("reps") is not None:
            return logged["reps"]
        draft = self._current_draft().get("reps")
        if draft is not None:
            return draft
        block = self.current_block
        return block["reps"] if block else ""

    @property
    def total_volume(self) -> float:
        total = 0
        for log in self.logs:
            total += (log.get("weight") or 0) * (log.get("reps") or 0)
        return total

    @property
    def elapsed_seconds(self) -> int:
        end = self.completed_at if self.completed_at is not None else self.clock()
        return max(0, int(end - self.started_at))

    @property
    def can_finish(self) -> bool:
        return self.phase == COMPLETE and not self.is_finishing and not self.finished

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def load_history(self, logs: list[dict] | None, progress_percent=None) -> None:
        """Replace the log buffer with persisted history and resume.

        Each log is stored with a single ``set_number`` field whatever name
        the history used for it.
        """

        self.logs = normalize_logs(logs)
        point = resolve_resume_point(self.blocks, self.logs, progress_percent)
        self.current_step = point.step
        self.current_set_index = point.set_index
        self.draft_inputs = point.draft_inputs
        self.close_entry()
        if self.phase == COMPLETE:
            self._complete()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Leave the intro screen and begin the first block."""

        if self.phase != INTRO:
            return False
        self.channel.submit("start", getattr(self.collaborator, "start", None))
        self.started_at = self.clock()
        self.current_step = 1
        self.current_set_index = 1
        self.draft_inputs = {}
        if self.phase == COMPLETE:
            self._complete()
        return True

    def validate_set(self) -> bool:
        """Record the current set (unless already logged) and move on."""

        block = self.current_block
        if block is None:
            return False
        if not self.is_current_set_logged:
            draft = self._current_draft()
            entry = {
                "exercise_id": block["exercise_id"],
                "set_number": self.current_set_index,
                "reps": draft.get("reps") or block["reps"],
                "weight": draft.get("weight") or self.target_weight,
            }
            self.logs.append(entry)
            self.channel.submit(
                "log_sets", getattr(self.collaborator, "log_sets", None), [entry]
            )
            if self.auto_rest and block["rest_seconds"] > 0:
                self.rest.start(block["rest_seconds"])
        self.close_entry()
        if self.current_set_index >= block["sets"]:
            self._advance_exercise()
        else:
            self.current_set_index += 1
        return True

    def skip_exercise(self) -> bool:
        """Move on to the next block without logging the remaining sets."""

        if self.phase != ACTIVE:
            return False
        self.close_entry()
        self._advance_exercise()
        return True

    def start_rest(self) -> bool:
        """Start the rest countdown of the current block by hand."""

        block = self.current_block
        if block is None:
            return False
        return self.rest.start(block["rest_seconds"])

    def _advance_exercise(self) -> None:
        finished_step = self.current_step
        self.current_step += 1
        self.current_set_index = 1
        self.draft_inputs = {}
        percent = round_half_up(
            min(finished_step, self.block_count) / self.block_count * 100
        )
        self.channel.submit(
            "report_progress",
            getattr(self.collaborator, "report_progress", None),
            percent,
        )
        if self.phase == COMPLETE:
            self._complete()

    def _complete(self) -> None:
        if self.completed_at is None:
            self.completed_at = self.clock()
        if self.has_celebrated:
            return
        self.has_celebrated = True
        if self.on_celebrate is None:
            return
        try:
            self.on_celebrate()
        except Exception:
            logging.exception("Celebration failed")

    # ------------------------------------------------------------------
    # Draft entry
    # ------------------------------------------------------------------

    def draft_value(self, field: str):
        """Value shown for ``field`` of the current set before editing."""

        if field not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field '{field}'")
        value = self._current_draft().get(field)
        if value is not None:
            return value
        if field == "weight":
            return self.target_weight
        block = self.current_block
        return block["reps"] if block else None

    def open_entry(self, field: str) -> bool:
        if self.current_block is None:
            return False
        self.select_entry_field(field)
        return True

    def select_entry_field(self, field: str) -> None:
        value = self.draft_value(field)
        self.entry_field = field
        self.entry_text = str(value) if value else ""

    def append_entry(self, char: str) -> None:
        if self.entry_field is None:
            return
        if char == "." and "." in self.entry_text:
            return
        self.entry_text += char

    def backspace_entry(self) -> None:
        self.entry_text = self.entry_text[:-1]

    def commit_entry(self) -> bool:
        """Store the typed value as draft; stay open if it is not a number."""

        if self.entry_field is None or self.current_block is None:
            return False
        value = parse_draft_value(self.entry_field, self.entry_text)
        if value is None:
            return False
        self.set_draft(self.entry_field, value)
        self.close_entry()
        return True

    def close_entry(self) -> None:
        self.entry_field = None
        self.entry_text = ""

    def set_draft(self, field: str, value) -> None:
        if field not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field '{field}'")
        key = self.current_set_index - 1
        self.draft_inputs[key] = {**self.draft_inputs.get(key, {}), field: value}

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def set_rating(self, name: str, value: int) -> None:
        """Set the ``difficulty`` or ``fatigue`` rating (1..5)."""

        if name not in ("difficulty", "fatigue"):
            raise ValueError(f"Unknown rating '{name}'")
        if not RATING_MIN <= value <= RATING_MAX:
            raise ValueError(f"Rating must be between {RATING_MIN} and {RATING_MAX}")
        setattr(self, name, int(value))

    def build_finish_payload(self) -> dict:
        return {
            "duration": self.elapsed_seconds // 60,
            "feeling": self.difficulty,
            "fatigue": self.fatigue,
            "comments": self.comments,
            "logs": [dict(log) for log in self.logs],
        }

    async def finish(self) -> dict | None:
        """Hand the finish payload to the collaborator.

        Returns ``None`` while a previous submission is still pending.
        Failures propagate so the athlete can retry.
        """

        if self.phase != COMPLETE:
            raise RuntimeError("Run is not complete")
        if self.is_finishing or self.finished:
            return None
        payload = self.build_finish_payload()
        self.is_finishing = True
        try:
            func = getattr(self.collaborator, "finish", None)
            result = func(payload) if func is not None else None
            if inspect.isawaitable(result):
                await result
        finally:
            self.is_finishing = False
        self.finished = True
        logging.info("Strength run finished with %d sets", len(payload["logs"]))
        return payload

    def summary(self) -> str:
        """Return a formatted text summary of the run."""

        minutes, seconds = divmod(self.elapsed_seconds, 60)
        lines = [
            f"Duration: {minutes}m {seconds}s",
            f"Volume: {compact_number(float(self.total_volume))} kg",
        ]
        for block in self.blocks:
            block_logs = [
                log for log in self.logs if log.get("exercise_id") == block["exercise_id"]
            ]
            lines.append(f"\n{block.get('name') or block['exercise_id']}")
            for log in block_logs:
                lines.append(
                    f"  Set {log['set_number']}: {log.get('reps')} x {log.get('weight')}"
                )
        return "\n".join(lines)
