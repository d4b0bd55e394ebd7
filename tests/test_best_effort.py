import asyncio
import logging

from backend.best_effort import BestEffortChannel


def test_missing_operation_is_ignored():
    channel = BestEffortChannel()
    channel.submit("start", None)
    assert channel.pending == 0


def test_sync_call_runs_immediately():
    received = []
    BestEffortChannel().submit("log_sets", received.append, [1])
    assert received == [[1]]


def test_sync_failure_is_logged_and_reported(caplog):
    failures = []

    def fail():
        raise ConnectionError("down")

    channel = BestEffortChannel(lambda op, exc: failures.append((op, str(exc))))
    with caplog.at_level(logging.WARNING):
        channel.submit("start", fail)
    assert failures == [("start", "down")]
    assert "start" in caplog.text


def test_coroutine_without_loop_completes_synchronously():
    received = []

    async def log(value):
        received.append(value)

    BestEffortChannel().submit("report_progress", log, 40)
    assert received == [40]


def test_coroutine_failure_inside_loop_is_reported():
    failures = []

    async def fail(value):
        raise ConnectionError("down")

    channel = BestEffortChannel(lambda op, exc: failures.append(op))

    async def scenario():
        channel.submit("report_progress", fail, 50)
        assert channel.pending == 1
        await channel.drain()

    asyncio.run(scenario())
    assert failures == ["report_progress"]
    assert channel.pending == 0


def test_failing_hook_does_not_propagate(caplog):
    def hook(op, exc):
        raise RuntimeError("hook")

    def fail():
        raise ConnectionError("down")

    with caplog.at_level(logging.ERROR):
        BestEffortChannel(hook).submit("start", fail)
    assert "Failure hook raised" in caplog.text
