"""Fake clocks and collaborators shared by the test modules."""


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingCollaborator:
    """Synchronous collaborator remembering every call it receives."""

    def __init__(self):
        self.calls = []

    def start(self):
        self.calls.append(("start",))

    def log_sets(self, entries):
        self.calls.append(("log_sets", [dict(e) for e in entries]))

    def report_progress(self, percent):
        self.calls.append(("report_progress", percent))

    def finish(self, payload):
        self.calls.append(("finish", payload))

    def named(self, name):
        return [call for call in self.calls if call[0] == name]


class AsyncCollaborator(RecordingCollaborator):
    """Same as :class:`RecordingCollaborator` but with coroutine methods."""

    async def start(self):
        super().start()

    async def log_sets(self, entries):
        super().log_sets(entries)

    async def report_progress(self, percent):
        super().report_progress(percent)

    async def finish(self, payload):
        super().finish(payload)


class FailingCollaborator:
    """Every operation raises, as an unreachable backend would."""

    def __init__(self, finish_failures: int = 1):
        self.finish_failures = finish_failures
        self.finish_calls = 0

    def start(self):
        raise ConnectionError("offline")

    def log_sets(self, entries):
        raise ConnectionError("offline")

    async def report_progress(self, percent):
        raise ConnectionError("offline")

    async def finish(self, payload):
        self.finish_calls += 1
        if self.finish_calls <= self.finish_failures:
            raise ConnectionError("offline")
