"""Dependency bucket — which effects depend on which (container, key) pairs.

Every Trackable owns its own key -> Dep map. The bucket is the union of
those maps: looking up a container's dependencies is an attribute read, and
the map is released together with the container, so observing a container
never keeps it alive.

Each Dep is an insertion-ordered set of effects. Effects keep a reverse
index of the Deps they belong to (effect.deps) so cleanup is O(edges).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Hashable, Iterator

from tracefx._context import active_effect

if TYPE_CHECKING:
    from tracefx.effect import Effect


class Trackable:
    """Base for objects whose keys can be tracked and triggered."""

    __slots__ = ("_deps_map", "__weakref__")

    def __init__(self) -> None:
        self._deps_map: dict[Hashable, Dep] = {}


class Dep:
    """Effects subscribed to one key of one container."""

    __slots__ = ("key", "_owner", "_effects")

    def __init__(self, owner: dict[Hashable, Dep], key: Hashable) -> None:
        self.key = key
        self._owner = owner
        self._effects: dict[Effect, None] = {}

    def add(self, effect: Effect) -> bool:
        """Subscribe effect. Returns False if it was already subscribed."""
        if effect in self._effects:
            return False
        self._effects[effect] = None
        return True

    def discard(self, effect: Effect) -> None:
        """Unsubscribe effect. An emptied Dep removes itself from its owner."""
        self._effects.pop(effect, None)
        if not self._effects and self._owner.get(self.key) is self:
            del self._owner[self.key]

    def __contains__(self, effect: object) -> bool:
        return effect in self._effects

    def __iter__(self) -> Iterator[Effect]:
        return iter(self._effects)

    def __len__(self) -> int:
        return len(self._effects)

    def __repr__(self) -> str:
        return f"Dep({self.key!r}, {len(self._effects)} effects)"


def track(target: Trackable, key: Hashable) -> None:
    """Record that the active effect depends on (target, key)."""
    effect = active_effect()
    if effect is None:
        return
    deps_map = target._deps_map
    dep = deps_map.get(key)
    if dep is None:
        dep = deps_map[key] = Dep(deps_map, key)
    if dep.add(effect):
        effect.deps.append(dep)


def trigger(target: Trackable, key: Hashable) -> None:
    """Re-run or schedule every effect that depends on (target, key)."""
    dep = target._deps_map.get(key)
    if dep is None:
        return
    current = active_effect()
    # Snapshot: running an effect re-subscribes it to this same Dep.
    to_run = [effect for effect in dep if effect is not current]
    for effect in to_run:
        if not effect.active:
            continue
        if effect.scheduler is not None:
            effect.scheduler(effect)
        else:
            effect()


def dependents(target: Trackable, key: Hashable) -> list[Effect]:
    """Effects currently subscribed to (target, key). Useful for testing."""
    dep = target._deps_map.get(key)
    return list(dep) if dep is not None else []
