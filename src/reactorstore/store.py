"""Store — reactive root state plus a collection of named getters.

A Store wraps a plain dict or list as its root state and owns the getters
defined over it. Reading a getter through the store records the read, so a
getter that reads another getter is invalidated along with it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, TypeVar, overload

from reactorstore.action import action as _action, transaction as _transaction
from reactorstore._registry import Field, FieldKey
from reactorstore._tracking import Tracker
from reactorstore.errors import DuplicateName, NotFound
from reactorstore.getter import Getter, GetterFunction
from reactorstore.observable import is_reactive, wrap

logger = logging.getLogger("reactorstore.store")

F = TypeVar("F", bound=Callable[..., Any])


class GetterAccessor:
    """Read-only view of a store's getter values by name.

    Passed as the second argument to every getter function:
        store.define_getter("total", lambda state, getters: getters.subtotal + state.tax)
    """

    __slots__ = ("_store",)

    def __init__(self, store: Store) -> None:
        self._store = store

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._store.get_value(name)

    def __getitem__(self, name: str) -> Any:
        return self._store.get_value(name)

    def __contains__(self, name: object) -> bool:
        return name in self._store._getters

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._store._getters))

    def __len__(self) -> int:
        return len(self._store._getters)

    def __repr__(self) -> str:
        return f"GetterAccessor({list(self._store._getters)!r})"


class Store:
    """Reactive state container with memoized, dependency-tracked getters."""

    def __init__(
        self,
        initial_state: dict | list,
        *,
        name: str = "store",
        check_thread: bool = False,
    ) -> None:
        if is_reactive(initial_state):
            raise TypeError("initial_state is already reactive state owned by a store")
        if not isinstance(initial_state, (dict, list)):
            raise TypeError(
                f"Store root must be a dict or list, not {type(initial_state).__name__}"
            )
        self.name = name
        self._getters: dict[str, Getter] = {}
        self._tracker = Tracker(self._getters, name=name, check_thread=check_thread)
        self._state = wrap(initial_state, self._tracker)
        self._tracker.root = self._state
        self._accessor = GetterAccessor(self)

    @property
    def state(self) -> Any:
        """The reactive root. All reads and writes of state go through it."""
        return self._state

    @property
    def getters(self) -> GetterAccessor:
        return self._accessor

    # --- Getter definition ---

    def define_getter(self, name: str, fn: GetterFunction) -> Getter:
        """Register fn(state, getters) under name. Names are never overwritten."""
        if name in self._getters:
            raise DuplicateName(name)
        getter = Getter(name, fn, self._tracker)
        self._getters[name] = getter
        logger.debug("%s: defined getter %r", self.name, name)
        return getter

    def define_getters(self, fns: Mapping[str, GetterFunction]) -> list[Getter]:
        """Register several getters. Nothing is registered if any name is taken."""
        for name in fns:
            if name in self._getters:
                raise DuplicateName(name)
        return [self.define_getter(name, fn) for name, fn in fns.items()]

    @overload
    def getter(self, fn: GetterFunction) -> Getter: ...

    @overload
    def getter(self, fn: str) -> Callable[[GetterFunction], Getter]: ...

    def getter(self, fn):
        """Decorator form of define_getter. The function name is the getter name.

        Usage:
            @store.getter
            def doubled(state, getters):
                return state.count * 2

            @store.getter("tripled")
            def _(state, getters):
                return state.count * 3
        """
        if isinstance(fn, str):
            return lambda f: self.define_getter(fn, f)
        return self.define_getter(fn.__name__, fn)

    # --- Getter reads ---

    def _lookup(self, name: str) -> Getter:
        getter = self._getters.get(name)
        if getter is None:
            raise NotFound(name)
        return getter

    def get_value(self, name: str) -> Any:
        """Current value of getter name, recomputing it if invalid."""
        getter = self._lookup(name)
        # The cached-value slot is itself a field: callers depend on it.
        self._tracker.track(getter, Field.VALUE)
        return getter.run(self._state, self._accessor)

    run_getter = get_value

    def get_getter(self, name: str) -> Getter:
        """The Getter object for name. For diagnostics and tests."""
        return self._lookup(name)

    def dependency_keys(self, name: str) -> list[FieldKey]:
        """Fields recorded by the last computation of getter name."""
        return self._lookup(name).registry.keys()

    def invalidate_all(self) -> None:
        """Force every getter to recompute on its next read."""
        for getter in self._getters.values():
            getter.invalidate()

    # --- Listeners and batching ---

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Call listener(state) once per top-level write. Returns an unsubscribe function."""
        return self._tracker.subscribe(listener)

    def transaction(self):
        """Context manager: listeners are notified once when the block exits."""
        return _transaction(self)

    def action(self, fn: F) -> F:
        """Decorator: batch all writes made inside fn into one notification."""
        return _action(self)(fn)

    def __repr__(self) -> str:
        return f"Store({self.name!r}, getters={list(self._getters)!r})"
