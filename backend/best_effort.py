"""Dispatch of fire-and-forget calls to the persistence collaborator.

Starting a run, logging a set and reporting progress are made at most once
and never retried.  Their outcome does not influence the runner: failures
are logged and forwarded to an optional ``on_failure(operation, exc)`` hook,
then dropped.  Collaborators may implement the operations either as plain
functions or as coroutines.
"""

from __future__ import annotations

import asyncio
import inspect
import logging


async def _await(awaitable):
    return await awaitable


class BestEffortChannel:
    """Run collaborator calls without letting them fail the caller."""

    def __init__(self, on_failure=None):
        self.on_failure = on_failure
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of scheduled calls that have not finished yet."""
        return len(self._pending)

    def submit(self, operation: str, func, *args) -> None:
        """Call ``func(*args)`` and swallow any failure."""

        if func is None:
            return
        try:
            result = func(*args)
        except Exception as exc:
            self._report(operation, exc)
            return
        if inspect.isawaitable(result):
            self._schedule(operation, result)

    def _schedule(self, operation: str, awaitable) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no event loop in this thread: complete the call synchronously
            try:
                asyncio.run(_await(awaitable))
            except Exception as exc:
                self._report(operation, exc)
            return

        task = loop.create_task(_await(awaitable))
        self._pending.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                self._report(operation, exc)

        task.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait until every scheduled call has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _report(self, operation: str, exc: BaseException) -> None:
        logging.warning("Best-effort %s call failed: %s", operation, exc)
        if self.on_failure is None:
            return
        try:
            self.on_failure(operation, exc)
        except Exception:
            logging.exception("Failure hook raised for %s", operation)
