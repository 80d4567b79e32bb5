"""Exceptions raised by reactorstore.

Every error derives from ReactorStoreError and from the builtin exception a
caller would naturally expect, so `except KeyError`-style code keeps working.
"""

from __future__ import annotations


class ReactorStoreError(Exception):
    """Base class for all reactorstore errors."""


class NotFound(ReactorStoreError, LookupError):
    """A getter name was read before it was registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Getter {name!r} not found")
        self.name = name


class DuplicateName(ReactorStoreError, ValueError):
    """A getter name was registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Getter {name!r} is already defined")
        self.name = name


class UnsupportedOperation(ReactorStoreError, TypeError):
    """Deleting a field or element from reactive state."""


class CyclicDependency(ReactorStoreError, RuntimeError):
    """A getter was asked to run while it is already running."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__("Cyclic getter dependency: " + " -> ".join(chain))
        self.chain = chain


class NotComputed(ReactorStoreError, RuntimeError):
    """A getter's cached value was read while it is invalid."""
