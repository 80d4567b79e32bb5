"""Getters — named derived values with automatic dependency tracking.

A Getter wraps a function fn(state, getters). When run, it records every
(node, field) pair the function reads into a fresh DependencyRegistry and
caches the result. Any write to a recorded pair marks it invalid; the next
run recomputes.

Getters are lazy — they only recompute when read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from reactorstore._registry import DependencyRegistry, new_id
from reactorstore.errors import NotComputed

if TYPE_CHECKING:
    from reactorstore._tracking import Tracker
    from reactorstore.store import GetterAccessor

R = TypeVar("R")

GetterFunction = Callable[[Any, "GetterAccessor"], R]

logger = logging.getLogger("reactorstore.getter")

_UNSET = object()


class Getter(Generic[R]):
    """A memoized computation over store state and other getters."""

    __slots__ = ("_id", "name", "_fn", "_tracker", "_cache", "_valid", "_registry")

    def __init__(self, name: str, fn: GetterFunction, tracker: Tracker) -> None:
        self._id = new_id()
        self.name = name
        self._fn = fn
        self._tracker = tracker
        self._cache: Any = _UNSET
        self._valid = False
        self._registry = DependencyRegistry()

    @property
    def valid(self) -> bool:
        return self._valid

    @property
    def invalid(self) -> bool:
        return not self._valid

    @property
    def registry(self) -> DependencyRegistry:
        """Dependencies recorded by the last computation."""
        return self._registry

    @property
    def value(self) -> R:
        """The cached value. Raises NotComputed unless the getter is valid."""
        if not self._valid:
            raise NotComputed(f"Getter {self.name!r} not computed yet or invalid")
        return self._cache

    def invalidate(self) -> None:
        """Mark invalid. The stale cache is kept until the next run overwrites it."""
        self._valid = False

    def run(self, state: Any, getters: GetterAccessor) -> R:
        """Return the cached value, recomputing first if invalid."""
        if self._valid:
            return self._cache

        # A fresh registry per computation drops dependencies of paths no longer taken.
        registry = DependencyRegistry()
        with self._tracker.computing(self, registry):
            self._registry = registry
            result = self._fn(state, getters)
        self._cache = result
        self._valid = True
        logger.debug("computed getter %r (%d dependencies)", self.name, len(self._registry))
        return result

    def __repr__(self) -> str:
        state = f"cached={self._cache!r}" if self._valid else "invalid"
        return f"Getter({self.name!r}, {state})"
