"""Dependency registry — the set of (node, field) pairs a getter read.

Nodes are identified by an integer id handed out at creation time, never by
value equality: two structurally equal dicts are distinct dependency keys.
"""

from __future__ import annotations

import enum
import itertools
from typing import Hashable, Iterator, Protocol, Union

# itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


class Field(enum.Enum):
    """Synthetic fields that are not data keys."""

    LENGTH = "length"  # element count of a list
    SHAPE = "shape"  # set of keys / order of elements changed
    VALUE = "value"  # a getter's cached-value slot

    def __repr__(self) -> str:
        return f"Field.{self.name}"


FieldKey = Union[Hashable, Field]


class Node(Protocol):
    _id: int


class DependencyRegistry:
    """Maps a field to the ids of the nodes whose field was read."""

    __slots__ = ("_fields",)

    def __init__(self) -> None:
        self._fields: dict[FieldKey, set[int]] = {}

    def add(self, node: Node, field: FieldKey) -> None:
        ids = self._fields.get(field)
        if ids is None:
            self._fields[field] = {node._id}
        else:
            ids.add(node._id)

    def has(self, node: Node, field: FieldKey) -> bool:
        ids = self._fields.get(field)
        return ids is not None and node._id in ids

    def reset(self) -> None:
        self._fields.clear()

    def keys(self) -> list[FieldKey]:
        """Field names present in the registry. Order is not meaningful."""
        return list(self._fields)

    def __contains__(self, field: FieldKey) -> bool:
        return field in self._fields

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._fields.values())

    def __iter__(self) -> Iterator[tuple[int, FieldKey]]:
        for field, ids in self._fields.items():
            for node_id in ids:
                yield node_id, field

    def __repr__(self) -> str:
        return f"DependencyRegistry({self.keys()!r})"
