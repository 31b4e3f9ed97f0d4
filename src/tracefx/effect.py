"""Effects — functions that re-run when the state they read changes.

Each run starts by leaving every dependency set the effect joined last time,
then re-joins whichever sets it reads during this run. Branches that are no
longer taken therefore stop triggering the effect.

An effect with a scheduler is not re-run by trigger() directly; the scheduler
receives the effect and decides when to call it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from tracefx._bucket import Dep
from tracefx._context import running

logger = logging.getLogger("tracefx.effect")

Scheduler = Callable[["Effect"], None]


class Effect:
    """A tracked unit of computation.

    Calling the effect runs the wrapped function with dependency tracking and
    returns its result (also kept in .value).
    """

    __slots__ = ("fn", "deps", "scheduler", "lazy", "value", "active", "__weakref__")

    def __init__(
        self,
        fn: Callable[[], Any],
        scheduler: Scheduler | None = None,
        lazy: bool = False,
    ) -> None:
        self.fn = fn
        self.deps: list[Dep] = []
        self.scheduler = scheduler
        self.lazy = lazy
        self.value: Any = None
        self.active = True

    def __call__(self):
        if not self.active:
            return self.fn()
        _cleanup(self)
        with running(self):
            self.value = self.fn()
        return self.value

    def dispose(self) -> None:
        """Stop this effect. Disconnects from all dependencies."""
        if not self.active:
            return
        self.active = False
        _cleanup(self)
        logger.debug("Disposed %r", self)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__name__", type(self.fn).__name__)
        state = "active" if self.active else "disposed"
        return f"Effect({name}, {state})"


def _cleanup(effect: Effect) -> None:
    for dep in effect.deps:
        dep.discard(effect)
    effect.deps.clear()


def register_effect(
    fn: Callable[[], Any],
    *,
    scheduler: Scheduler | None = None,
    lazy: bool = False,
) -> Effect:
    """Register fn as an effect. Runs it once now unless lazy.

    Returns the Effect (call it to run manually, .dispose() to stop).

    Usage:
        state = reactive({"text": "hello"})
        log = []

        @register_effect
        def render():
            log.append(state.text)
        # log == ["hello"]

        state.text = "world"
        # log == ["hello", "world"]

        render.dispose()
    """
    effect = Effect(fn, scheduler=scheduler, lazy=lazy)
    if not lazy:
        effect()
    return effect


@contextmanager
def untracked() -> Iterator[None]:
    """Reads inside the block are not attributed to any effect."""
    with running(None):
        yield
