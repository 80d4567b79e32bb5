"""Dependency tracking engine — the heart of reactorstore.

Each Store owns one Tracker. The tracker keeps the stack of getters that are
currently computing; every tracked read is attributed to all of them, so a
getter that calls another getter also depends on everything the callee read.

Writes go the other way: trigger() scans the store's getters and invalidates
those whose registry holds the written (node, field) pair, then cascades
through the getters that read the invalidated getter's value.

Batching: writes inside a transaction still invalidate immediately, but
listener notification is deferred until the outermost batch closes.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator

from reactorstore._registry import DependencyRegistry, Field, FieldKey, Node
from reactorstore.errors import CyclicDependency

if TYPE_CHECKING:
    from reactorstore.getter import Getter

    Listener = Callable[[object], None]

logger = logging.getLogger("reactorstore.tracking")


class Frame:
    """One running getter computation and the registry receiving its reads."""

    __slots__ = ("getter", "registry")

    def __init__(self, getter: Getter, registry: DependencyRegistry) -> None:
        self.getter = getter
        self.registry = registry


class Tracker:
    """Running-computation stack, invalidation scan and write notification."""

    def __init__(
        self,
        getters: dict[str, Getter],
        *,
        name: str = "store",
        check_thread: bool = False,
    ) -> None:
        self.name = name
        self._getters = getters
        self._stack: list[Frame] = []
        self._listeners: list[Listener] = []
        self._write_depth = 0
        self._batch_depth = 0
        self._changed = False
        self._check_thread = check_thread
        self._owner = threading.current_thread()
        self.root: object = None

    # --- Reads ---

    def track(self, node: Node, field: FieldKey) -> None:
        """Attribute a read to every computation on the stack."""
        for frame in self._stack:
            frame.registry.add(node, field)

    @property
    def running(self) -> list[str]:
        """Names of the getters currently computing, innermost last."""
        return [frame.getter.name for frame in self._stack]

    def is_running(self, getter: Getter) -> bool:
        return any(frame.getter is getter for frame in self._stack)

    @contextmanager
    def computing(self, getter: Getter, registry: DependencyRegistry) -> Iterator[None]:
        """Push a frame for getter; the frame is popped even if the body raises."""
        if self.is_running(getter):
            raise CyclicDependency(self.running + [getter.name])
        self._stack.append(Frame(getter, registry))
        try:
            yield
        finally:
            self._stack.pop()

    # --- Writes ---

    def trigger(self, node: Node, field: FieldKey) -> None:
        """Invalidate every valid getter that read (node, field), transitively."""
        self._changed = True
        for getter in list(self._getters.values()):
            if getter.valid and getter.registry.has(node, field):
                getter.invalidate()
                logger.debug("%s: invalidated getter %r on %r", self.name, getter.name, field)
                self.trigger(getter, Field.VALUE)

    def check_owner(self) -> None:
        if self._check_thread and threading.current_thread() is not self._owner:
            raise RuntimeError(
                f"{self.name}: state written from thread {threading.current_thread().name!r}, "
                f"owned by {self._owner.name!r}"
            )

    @contextmanager
    def writing(self) -> Iterator[None]:
        """Scope of one top-level mutating call. Nested scopes collapse into it."""
        self.check_owner()
        self._write_depth += 1
        try:
            yield
        finally:
            self._write_depth -= 1
            if self._write_depth == 0 and self._batch_depth == 0:
                self._flush()

    # --- Batching ---

    def begin_batch(self) -> None:
        """Enter a batching scope. Nested batches are supported."""
        self._batch_depth += 1

    def end_batch(self) -> None:
        """Exit a batching scope. The outermost exit notifies listeners once."""
        self._batch_depth -= 1
        if self._batch_depth == 0:
            self._flush()

    # --- Listeners ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def _flush(self) -> None:
        if not self._changed:
            return
        self._changed = False
        for listener in list(self._listeners):
            try:
                listener(self.root)
            except Exception:
                logger.exception("%s: listener %r failed", self.name, listener)
