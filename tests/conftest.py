import pytest

from tracefx import scheduler


def _reset_queue():
    scheduler._queue.clear()
    scheduler._queue._flush_pending = False
    scheduler.set_microtask_scheduler(None)


@pytest.fixture(autouse=True)
def fresh_job_queue():
    """Jobs queued without an event loop must not leak into the next test."""
    _reset_queue()
    yield
    _reset_queue()
