import asyncio

import pytest

from backend.strength_session import (
    ACTIVE,
    COMPLETE,
    INTRO,
    StrengthRun,
    parse_draft_value,
)
from tests.utils import AsyncCollaborator, FailingCollaborator


@pytest.fixture
def run(blocks, one_rms, collaborator, clock):
    return StrengthRun(blocks, one_rms=one_rms, collaborator=collaborator, clock=clock)


def test_new_run_waits_on_intro(run):
    assert run.phase == INTRO
    assert run.current_step == 0
    assert run.current_block is None
    assert not run.validate_set()
    assert not run.skip_exercise()


def test_start_calls_collaborator_once(run, collaborator):
    assert run.start()
    assert not run.start()
    assert run.phase == ACTIVE
    assert (run.current_step, run.current_set_index) == (1, 1)
    assert collaborator.named("start") == [("start",)]


def test_target_weight_uses_first_one_rm(run):
    run.start()
    assert run.target_weight == 75
    run.skip_exercise()
    assert run.target_weight == 0


def test_sum_of_sets_validations_complete_the_run(run, collaborator):
    run.start()
    validations = 0
    while run.phase != COMPLETE:
        assert run.validate_set()
        validations += 1
        if run.phase == ACTIVE:
            block = run.current_block
            assert 1 <= run.current_set_index <= block["sets"]
    assert validations == 3 + 2
    assert run.current_step == 3
    assert len(run.logs) == 5
    assert [len(call[1]) for call in collaborator.named("log_sets")] == [1] * 5
    assert collaborator.named("report_progress") == [
        ("report_progress", 50),
        ("report_progress", 100),
    ]


def test_new_log_uses_targets_without_drafts(run, collaborator):
    run.start()
    run.validate_set()
    assert run.logs == [
        {"exercise_id": 1, "set_number": 1, "reps": 5, "weight": 75}
    ]
    assert collaborator.named("log_sets")[0][1] == run.logs


def test_new_log_uses_draft_inputs(run):
    run.start()
    run.set_draft("weight", 80)
    run.set_draft("reps", 4)
    run.validate_set()
    assert run.logs[-1]["weight"] == 80
    assert run.logs[-1]["reps"] == 4
    assert run.current_set_index == 2
    assert run.active_weight == 75


def test_zero_draft_falls_back_to_target(run):
    run.start()
    run.set_draft("reps", 0)
    run.validate_set()
    assert run.logs[-1]["reps"] == 5


def test_auto_rest_starts_after_logged_set(run):
    run.start()
    run.validate_set()
    assert run.rest.is_resting
    assert run.rest.remaining == 90


def test_auto_rest_disabled(blocks, one_rms, clock):
    run = StrengthRun(blocks, one_rms=one_rms, auto_rest=False, clock=clock)
    run.start()
    run.validate_set()
    assert not run.rest.is_resting


def test_no_rest_for_block_without_rest(run):
    run.start()
    run.skip_exercise()
    run.validate_set()
    assert not run.rest.is_resting
    assert not run.start_rest()


def test_manual_rest(run):
    run.start()
    assert run.start_rest()
    assert run.rest.remaining == 90


def test_validate_while_resting_is_allowed(run):
    run.start()
    run.validate_set()
    run.rest.tick()
    assert run.validate_set()
    assert run.current_set_index == 3
    assert run.rest.remaining == 90


def test_already_logged_set_is_revisited_without_new_log(run, collaborator):
    run.load_history([{"exercise_id": 1, "set_number": 2, "reps": 6, "weight": 70}])
    assert (run.current_step, run.current_set_index) == (1, 2)
    assert run.is_current_set_logged
    assert run.active_weight == 70
    assert run.active_reps == 6

    run.validate_set()
    assert len(run.logs) == 1
    assert run.current_set_index == 3
    assert collaborator.named("log_sets") == []
    assert not run.rest.is_resting


def test_skip_exercise_reports_progress(run, collaborator):
    run.start()
    run.validate_set()
    assert run.skip_exercise()
    assert run.current_step == 2
    assert run.current_set_index == 1
    assert run.draft_inputs == {}
    assert collaborator.named("report_progress") == [("report_progress", 50)]


def test_display_progress(run):
    run.start()
    assert run.display_progress == 0
    run.skip_exercise()
    assert run.display_progress == 50
    run.skip_exercise()
    assert run.display_progress == 100


def test_celebration_fires_once(blocks, one_rms, clock):
    celebrations = []
    run = StrengthRun(
        blocks, one_rms=one_rms, on_celebrate=lambda: celebrations.append(1), clock=clock
    )
    run.start()
    run.skip_exercise()
    assert celebrations == []
    run.skip_exercise()
    assert celebrations == [1]
    assert run.has_celebrated
    for _ in range(3):
        assert not run.skip_exercise()
        _ = run.phase
    run.load_history(run.logs + [{"exercise_id": 1}] * 3 + [{"exercise_id": 2}] * 2)
    assert run.phase == COMPLETE
    assert celebrations == [1]


def test_completed_history_celebrates_on_load(blocks, clock):
    celebrations = []
    run = StrengthRun(blocks, on_celebrate=lambda: celebrations.append(1), clock=clock)
    run.load_history([{"exercise_id": 1}] * 3 + [{"exercise_id": 2}] * 2)
    assert run.phase == COMPLETE
    assert celebrations == [1]


def test_failing_celebration_does_not_break_completion(blocks, clock):
    def boom():
        raise RuntimeError("no window")

    run = StrengthRun(blocks, on_celebrate=boom, clock=clock)
    run.start()
    run.skip_exercise()
    run.skip_exercise()
    assert run.phase == COMPLETE
    assert run.has_celebrated


def test_load_history_from_progress(run):
    run.load_history([], 50)
    assert (run.current_step, run.current_set_index) == (2, 1)
    run.load_history(None, 0)
    assert run.phase == INTRO


def test_load_history_replaces_buffer(run):
    run.start()
    run.validate_set()
    history = [{"exercise_id": 1, "set_index": 1, "reps": 5, "weight": 75}]
    run.load_history(history)
    assert run.logs == [{"exercise_id": 1, "set_number": 1, "reps": 5, "weight": 75}]
    assert history[0]["set_index"] == 1
    assert run.draft_inputs == {0: {"reps": 5, "weight": 75}}


def test_reloaded_logs_share_the_canonical_set_number(run):
    run.load_history(
        [
            {"exercise_id": 1, "set_index": 1, "reps": 5, "weight": 75},
            {"exercise_id": 1, "setIndex": 2, "reps": 5, "weight": 75},
            {"exercise_id": 1, "reps": 4, "weight": 75},
        ]
    )
    assert [log["set_number"] for log in run.logs] == [1, 2, 3]
    run.validate_set()
    payload = run.build_finish_payload()
    assert len(payload["logs"]) == 4
    assert all("set_number" in log for log in payload["logs"])
    assert not any(
        alias in log for log in payload["logs"] for alias in ("set_index", "setIndex")
    )
    assert "Set 3: 4 x 75" in run.summary()


def test_parse_draft_value():
    assert parse_draft_value("weight", "82,5") == 82.5
    assert parse_draft_value("weight", "80") == 80
    assert parse_draft_value("reps", "8") == 8
    assert parse_draft_value("reps", "") == 0
    assert parse_draft_value("reps", "abc") is None
    with pytest.raises(ValueError):
        parse_draft_value("tempo", "1")


def test_entry_surface_commits_typed_value(run):
    run.start()
    assert run.open_entry("weight")
    assert run.entry_text == "75"
    run.backspace_entry()
    run.backspace_entry()
    for char in "77.5":
        run.append_entry(char)
    run.append_entry(".")
    assert run.entry_text == "77.5"
    assert run.commit_entry()
    assert run.entry_field is None
    assert run.draft_inputs == {0: {"weight": 77.5}}
    assert run.active_weight == 77.5


def test_entry_surface_stays_open_on_bad_text(run):
    run.start()
    run.open_entry("reps")
    run.entry_text = "5x"
    assert not run.commit_entry()
    assert run.entry_field == "reps"
    assert run.entry_text == "5x"
    assert run.draft_inputs == {}


def test_select_entry_field_switches_value(run):
    run.start()
    run.open_entry("weight")
    run.select_entry_field("reps")
    assert run.entry_field == "reps"
    assert run.entry_text == "5"


def test_entry_requires_active_block(run):
    assert not run.open_entry("weight")
    assert not run.commit_entry()


def test_failures_are_swallowed_and_reported(blocks, one_rms, clock):
    failures = []
    run = StrengthRun(
        blocks,
        one_rms=one_rms,
        collaborator=FailingCollaborator(),
        on_failure=lambda operation, exc: failures.append(operation),
        clock=clock,
    )
    assert run.start()
    run.validate_set()
    run.skip_exercise()
    assert run.current_step == 2
    assert len(run.logs) == 1
    assert failures == ["start", "log_sets", "report_progress"]


def test_failing_failure_hook_is_contained(blocks, clock):
    def hook(operation, exc):
        raise ValueError("hook")

    run = StrengthRun(
        blocks, collaborator=FailingCollaborator(), on_failure=hook, clock=clock
    )
    assert run.start()
    assert run.phase == ACTIVE


def test_async_collaborator_without_running_loop(blocks, one_rms, clock):
    collaborator = AsyncCollaborator()
    run = StrengthRun(blocks, one_rms=one_rms, collaborator=collaborator, clock=clock)
    run.start()
    run.validate_set()
    assert collaborator.named("start") == [("start",)]
    assert len(collaborator.named("log_sets")) == 1


def test_async_collaborator_inside_event_loop(blocks, one_rms, clock):
    collaborator = AsyncCollaborator()
    run = StrengthRun(blocks, one_rms=one_rms, collaborator=collaborator, clock=clock)

    async def scenario():
        run.start()
        run.validate_set()
        assert run.channel.pending == 2
        await run.channel.drain()

    asyncio.run(scenario())
    assert run.channel.pending == 0
    assert len(collaborator.calls) == 2


def _complete(run, clock=None, seconds=0):
    run.start()
    if clock is not None:
        clock.advance(seconds)
    while run.phase != COMPLETE:
        run.validate_set()


def test_finish_requires_complete_run(run):
    run.start()
    with pytest.raises(RuntimeError):
        asyncio.run(run.finish())


def test_finish_payload(run, collaborator, clock):
    _complete(run, clock, 125)
    run.set_rating("difficulty", 4)
    run.set_rating("fatigue", 2)
    run.comments = "Solide"
    clock.advance(600)
    payload = asyncio.run(run.finish())
    assert payload["duration"] == 2
    assert payload["feeling"] == 4
    assert payload["fatigue"] == 2
    assert payload["comments"] == "Solide"
    assert len(payload["logs"]) == 5
    assert collaborator.named("finish") == [("finish", payload)]
    assert run.finished
    assert not run.can_finish
    assert asyncio.run(run.finish()) is None


def test_default_ratings(run):
    payload = run.build_finish_payload()
    assert payload["feeling"] == 3
    assert payload["fatigue"] == 3


@pytest.mark.parametrize("name,value", [("difficulty", 0), ("fatigue", 6), ("mood", 3)])
def test_invalid_rating(run, name, value):
    with pytest.raises(ValueError):
        run.set_rating(name, value)


def test_finish_failure_allows_retry(blocks, clock):
    collaborator = FailingCollaborator(finish_failures=1)
    run = StrengthRun(blocks, collaborator=collaborator, clock=clock)
    _complete(run)
    with pytest.raises(ConnectionError):
        asyncio.run(run.finish())
    assert not run.is_finishing
    assert not run.finished
    assert run.can_finish
    assert asyncio.run(run.finish()) is not None
    assert collaborator.finish_calls == 2


def test_finish_is_disabled_while_pending(run):
    _complete(run)

    async def scenario():
        gate = asyncio.Event()

        class SlowCollaborator:
            async def finish(self, payload):
                await gate.wait()

        run.collaborator = SlowCollaborator()
        first = asyncio.ensure_future(run.finish())
        await asyncio.sleep(0)
        assert run.is_finishing
        assert not run.can_finish
        assert await run.finish() is None
        gate.set()
        return await first

    assert asyncio.run(scenario()) is not None
    assert run.finished


def test_volume_elapsed_and_summary(run, clock):
    _complete(run)
    assert run.total_volume == 3 * 75 * 5
    clock.advance(90)
    elapsed = run.elapsed_seconds
    clock.advance(90)
    assert run.elapsed_seconds == elapsed
    text = run.summary()
    assert "Bench Press" in text
    assert "Set 1: 5 x 75" in text
    assert "Inverted Row" in text
