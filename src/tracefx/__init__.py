"""tracefx: dependency-tracking reactivity for Python."""

from importlib.metadata import version as _version

__version__ = _version("tracefx")

from tracefx._bucket import track, trigger
from tracefx.reactive import Reactive, reactive, to_raw, is_reactive
from tracefx.effect import Effect, register_effect, untracked
from tracefx.scheduler import (
    InfiniteUpdateError,
    flush_jobs,
    pending_jobs,
    queue_job,
    set_microtask_scheduler,
)
from tracefx.computed import Computed, computed
from tracefx.watch import watch, traverse, WatchHandle

__all__ = [
    "track",
    "trigger",
    "Reactive",
    "reactive",
    "to_raw",
    "is_reactive",
    "Effect",
    "register_effect",
    "untracked",
    "InfiniteUpdateError",
    "flush_jobs",
    "pending_jobs",
    "queue_job",
    "set_microtask_scheduler",
    "Computed",
    "computed",
    "watch",
    "traverse",
    "WatchHandle",
]
