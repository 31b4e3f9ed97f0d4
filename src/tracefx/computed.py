"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a getter in a lazy effect. When a dependency changes, the
effect's scheduler only marks the cache dirty and notifies whoever read the
computed; the getter runs again on the next .value read.

Two layers of tracking are involved:
- the inner effect tracks the getter's own dependencies;
- the computed tracks its readers under (self, "value"), so an outer effect
  reading .value re-runs when the computed is invalidated.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from tracefx._bucket import Trackable, track, trigger
from tracefx.effect import Effect

T = TypeVar("T")

_UNSET = object()


class Computed(Trackable, Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_getter", "_value", "_dirty", "_effect")

    def __init__(self, getter: Callable[[], T]) -> None:
        super().__init__()
        self._getter = getter
        self._value = _UNSET
        self._dirty = True
        self._effect = Effect(getter, scheduler=self._invalidate, lazy=True)

    @property
    def value(self) -> T:
        """Read the computed value. Recomputes if dirty."""
        if self._dirty:
            self._value = self._effect()
            self._dirty = False
        track(self, "value")
        return self._value

    @property
    def dirty(self) -> bool:
        return self._dirty

    def _invalidate(self, effect: Effect) -> None:
        """Scheduler of the inner effect: mark stale, notify readers.

        Never recomputes here; that happens on the next .value read.
        """
        if not self._dirty:
            self._dirty = True
            trigger(self, "value")

    def dispose(self) -> None:
        """Disconnect from all dependencies and readers.

        The computed is inert until read again; the next .value read
        re-evaluates from scratch and tracks its dependencies anew.
        """
        self._effect.dispose()
        self._effect = Effect(self._getter, scheduler=self._invalidate, lazy=True)
        self._deps_map.clear()
        self._dirty = True
        self._value = _UNSET

    def __repr__(self) -> str:
        name = getattr(self._getter, "__name__", type(self._getter).__name__)
        state = "dirty" if self._dirty else f"cached={self._value!r}"
        return f"Computed({name}, {state})"


def computed(getter: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a getter.

    Usage:
        state = reactive({"foo": 1, "bar": 2})

        @computed
        def total():
            return state.foo + state.bar

        total.value  # 3
        state.foo = 5
        total.value  # 7
    """
    return Computed(getter)
