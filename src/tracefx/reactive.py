"""Reactive handles — mutable mappings that track their readers.

Reading a key through a handle inside an effect subscribes that effect to the
key. Writing a key re-runs (or schedules) every effect subscribed to it.

Keys are reachable both as items (handle["count"]) and as attributes
(handle.count). Every mapping has at most one handle: wrapping it again, or
reaching it through another key or a cycle, yields the same handle. Nested
mappings come back wrapped, so writes deep inside a structure are observable
whichever path they go through.
"""

from __future__ import annotations

import weakref
from collections.abc import MutableMapping
from typing import Any, Hashable

from tracefx._bucket import Trackable, track, trigger

_HANDLE_SLOTS = frozenset({"_raw", "_deps_map"})

# id(raw mapping) -> its handle. A live handle keeps its mapping alive, so
# the id cannot be reused while the entry exists.
_handles: weakref.WeakValueDictionary[int, Reactive] = weakref.WeakValueDictionary()


class Reactive(Trackable):
    """Tracking wrapper around exactly one mutable mapping."""

    __slots__ = ("_raw",)

    def __init__(self, raw: MutableMapping) -> None:
        super().__init__()
        self._raw = raw

    def _wrap(self, value: Any) -> Any:
        if isinstance(value, Reactive) or not isinstance(value, MutableMapping):
            return value
        return _handle_for(value)

    # --- Read operations (track) ---

    def __getitem__(self, key: Hashable) -> Any:
        track(self, key)
        return self._wrap(self._raw[key])

    def __getattr__(self, name: str) -> Any:
        if name in _HANDLE_SLOTS or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __contains__(self, key: Hashable) -> bool:
        track(self, key)
        return key in self._raw

    # --- Write operations (trigger) ---

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self._raw[key] = value
        trigger(self, key)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _HANDLE_SLOTS:
            object.__setattr__(self, name, value)
        else:
            self[name] = value

    def __repr__(self) -> str:
        return f"Reactive({self._raw!r})"


def reactive(container: MutableMapping | Reactive) -> Reactive:
    """Wrap a mutable mapping in a tracking handle.

    Usage:
        state = reactive({"foo": 1, "bar": 2})

        register_effect(lambda: print(state.foo))  # prints 1
        state.foo += 1                               # prints 2
        state.bar += 1                               # nothing read bar
    """
    if isinstance(container, Reactive):
        return container
    if not isinstance(container, MutableMapping):
        raise TypeError(
            f"reactive() expects a mutable mapping, got {type(container).__name__}"
        )
    return _handle_for(container)


def _handle_for(raw: MutableMapping) -> Reactive:
    """The one handle for raw, created on first use."""
    handle = _handles.get(id(raw))
    if handle is None or handle._raw is not raw:
        handle = _handles[id(raw)] = Reactive(raw)
    return handle


def to_raw(handle: Reactive) -> MutableMapping:
    """The mapping behind a handle. Reads and writes on it are not observed."""
    return handle._raw


def is_reactive(value: object) -> bool:
    return isinstance(value, Reactive)
