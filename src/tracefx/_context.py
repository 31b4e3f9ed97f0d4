"""Effect stack — which effect is running right now.

Uses a contextvar holding an immutable tuple of running effects. The top of
the stack is the active effect: any tracked read that happens now is
attributed to it. Nested effects push on top and restore the outer effect
when they finish, so attribution stays correct.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from tracefx.effect import Effect

# Running effects, innermost last. None marks an untracked section.
effect_stack: contextvars.ContextVar[tuple[Effect | None, ...]] = contextvars.ContextVar(
    "effect_stack", default=()
)


def active_effect() -> Effect | None:
    """The effect currently collecting dependencies, if any."""
    stack = effect_stack.get()
    return stack[-1] if stack else None


@contextmanager
def running(effect: Effect | None) -> Iterator[None]:
    """Push effect for the duration of the block. The pop always happens."""
    token = effect_stack.set(effect_stack.get() + (effect,))
    try:
        yield
    finally:
        effect_stack.reset(token)


def stack_depth() -> int:
    """Number of effects on the stack. Useful for testing."""
    return len(effect_stack.get())
