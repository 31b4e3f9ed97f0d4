"""watch() — call back with (new, old) whenever a source changes.

The source can be a getter, a Computed, or a reactive structure. A structure
is deep-traversed on every run, which reads (and so tracks) every key it
reaches: a write anywhere inside it fires the callback.

flush="sync" calls back inside the triggering write; "pre" behaves the same,
since there is no render phase to run ahead of. flush="post" queues the
callback into the job queue, so every write in the same tick collapses into
one call after the current call stack unwinds.
"""

from __future__ import annotations

from typing import Any, Callable

from tracefx.computed import Computed
from tracefx.effect import Effect, untracked
from tracefx.reactive import Reactive, to_raw
from tracefx.scheduler import queue_job

FLUSH_MODES = ("sync", "pre", "post")


class WatchHandle:
    """Disposable handle for a watcher."""

    __slots__ = ("_effect",)

    def __init__(self, effect: Effect) -> None:
        self._effect = effect

    @property
    def disposed(self) -> bool:
        return not self._effect.active

    def dispose(self) -> None:
        """Stop watching. Pending post-flush callbacks are dropped."""
        self._effect.dispose()


def traverse(value: Any, seen: set[int] | None = None) -> Any:
    """Read everything reachable from value so the active effect tracks it.

    Walks reactive handles key by key and lists/tuples item by item.
    Anything else is left alone. Cycles are cut with the seen-set.
    """
    if seen is None:
        seen = set()
    if isinstance(value, Reactive):
        raw = to_raw(value)
        if id(raw) in seen:
            return value
        seen.add(id(raw))
        for key in list(raw):
            traverse(value[key], seen)
    elif isinstance(value, (list, tuple)):
        if id(value) in seen:
            return value
        seen.add(id(value))
        for item in value:
            traverse(item, seen)
    return value


def watch(
    source: Any,
    callback: Callable[[Any, Any], None],
    *,
    immediate: bool = False,
    flush: str = "sync",
) -> WatchHandle:
    """Call callback(new, old) whenever source changes. Returns WatchHandle.

    Without immediate, the source is evaluated once now to capture the first
    old value and the callback waits for a change. With immediate, the
    callback runs right away with old set to None.

    Usage:
        state = reactive({"foo": 1, "bar": 2})

        watch(lambda: state.foo, lambda new, old: print(old, "->", new))
        state.foo += 1       # prints 1 -> 2

        watch(state, lambda new, old: print("changed"), flush="post")
        state.foo += 1
        state.bar += 1       # prints "changed" once, on the next tick
    """
    if flush not in FLUSH_MODES:
        raise ValueError(f"flush must be one of {FLUSH_MODES}, got {flush!r}")

    if isinstance(source, Computed):
        getter = lambda: source.value
    elif callable(source):
        getter = source
    else:
        getter = lambda: traverse(source)

    old_value = None

    def job() -> None:
        nonlocal old_value
        if not effect.active:
            return
        new_value = effect()
        with untracked():
            callback(new_value, old_value)
        old_value = new_value

    def scheduler(_effect: Effect) -> None:
        if flush == "post":
            queue_job(job)
        else:
            job()

    effect = Effect(getter, scheduler=scheduler, lazy=True)
    if immediate:
        job()
    else:
        old_value = effect()
    return WatchHandle(effect)
