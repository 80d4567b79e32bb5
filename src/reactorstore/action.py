"""Actions and transactions — batched listener notification.

Writes inside `with transaction(store)` or an @action function still
invalidate getters immediately (a getter read inside the batch sees fresh
state), but store listeners are notified once, when the outermost scope
exits, instead of once per write.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, ParamSpec, TypeVar

if TYPE_CHECKING:
    from reactorstore.store import Store

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def transaction(store: Store) -> Iterator[None]:
    """Context manager for batching writes.

    Usage:
        with transaction(store):
            store.state.a = 1
            store.state.b = 2
            # listeners fire here, after both are set
    """
    tracker = store._tracker
    tracker.begin_batch()
    try:
        yield
    finally:
        tracker.end_batch()


def action(store: Store) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator factory: batch all writes to store made inside fn.

    Usage:
        @action(store)
        def swap():
            a, b = store.state.a, store.state.b
            store.state.a = b
            store.state.b = a
            # listeners see both changes at once, not one at a time
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with transaction(store):
                return fn(*args, **kwargs)

        return wrapper

    return decorator
