"""reactorstore: reactive state container with dependency-tracked getters."""

from importlib.metadata import version as _version

__version__ = _version("reactorstore")

from reactorstore._registry import DependencyRegistry, Field
from reactorstore.errors import (
    ReactorStoreError,
    NotFound,
    DuplicateName,
    UnsupportedOperation,
    CyclicDependency,
    NotComputed,
)
from reactorstore.observable import ReactiveDict, ReactiveList, is_reactive, to_plain
from reactorstore.getter import Getter
from reactorstore.action import action, transaction
from reactorstore.store import Store, GetterAccessor

__all__ = [
    "Store",
    "GetterAccessor",
    "Getter",
    "DependencyRegistry",
    "Field",
    "ReactiveDict",
    "ReactiveList",
    "is_reactive",
    "to_plain",
    "action",
    "transaction",
    "ReactorStoreError",
    "NotFound",
    "DuplicateName",
    "UnsupportedOperation",
    "CyclicDependency",
    "NotComputed",
]
