"""Job queue — batch effect re-runs into one flush per microtask tick.

Pass queue_job as an effect's scheduler and every trigger within the same
synchronous stretch of code collapses into a single run:

    state = reactive({"count": 0})
    register_effect(lambda: print(state.count), scheduler=queue_job)
    state.count += 1
    state.count += 1
    # prints 2 once, after the current call stack unwinds

The flush is deferred through the microtask facility. By default that is
the running asyncio loop's call_soon(): FIFO, after the current call stack,
before any timer callback. Call set_microtask_scheduler() once to swap in
another host facility.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger("tracefx.scheduler")

Job = Callable[[], object]

# Runs of a single job allowed within one flush before it is treated as a cycle.
RECURSION_LIMIT = 100

# ─── Microtask facility ──────────────────────────────────────────────────────
_microtask: Callable[[Callable[[], None]], object] | None = None


def set_microtask_scheduler(fn: Callable[[Callable[[], None]], object] | None) -> None:
    """Set the facility used to defer a flush.

    fn(callback) must run callback after the current call stack unwinds,
    in FIFO order with other deferred callbacks. Pass None to restore the
    asyncio default.
    """
    global _microtask
    _microtask = fn


class InfiniteUpdateError(RuntimeError):
    """A job kept re-queuing itself within a single flush."""


class JobQueue:
    """Deduplicated, insertion-ordered set of jobs flushed together."""

    def __init__(self) -> None:
        self._jobs: dict[Job, None] = {}
        self._flush_pending = False

    def add(self, job: Job) -> None:
        """Queue job. Queuing the same job again before the flush is a no-op."""
        self._jobs[job] = None
        if not self._flush_pending:
            self._request_flush()

    def _request_flush(self) -> None:
        # Set first: a synchronous facility flushes before returning.
        self._flush_pending = True
        if _microtask is not None:
            _microtask(self.flush)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._flush_pending = False
            logger.debug(
                "No running event loop: %d job(s) wait for flush_jobs()",
                len(self._jobs),
            )
            return
        loop.call_soon(self.flush)

    def flush(self) -> None:
        """Run queued jobs in order, including jobs queued while flushing.

        A job that re-queues itself runs again in the same flush; doing so
        more than RECURSION_LIMIT times raises InfiniteUpdateError.
        """
        runs: dict[Job, int] = {}
        try:
            while self._jobs:
                job = next(iter(self._jobs))
                del self._jobs[job]
                count = runs[job] = runs.get(job, 0) + 1
                if count > RECURSION_LIMIT:
                    raise InfiniteUpdateError(
                        f"{job!r} was queued more than {RECURSION_LIMIT} times in one "
                        "flush. It most likely writes state that it also depends on."
                    )
                job()
        finally:
            self._flush_pending = False
            if self._jobs:
                # A job raised; the rest still get their flush.
                self._request_flush()
        if runs:
            logger.debug("Flushed %d job(s)", len(runs))

    def clear(self) -> None:
        """Drop all queued jobs without running them."""
        self._jobs.clear()

    def __len__(self) -> int:
        return len(self._jobs)


_queue = JobQueue()


def queue_job(job: Job) -> None:
    """Scheduler that batches a job into the next flush.

    Effects are jobs too, so this works directly as scheduler=queue_job.
    """
    _queue.add(job)


def flush_jobs() -> None:
    """Run every queued job now, synchronously."""
    _queue.flush()


def pending_jobs() -> int:
    """Number of jobs waiting for the next flush. Useful for testing."""
    return len(_queue)
