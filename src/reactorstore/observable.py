"""Reactive containers — plain dicts and lists whose reads and writes are observed.

wrap() turns nested plain data into ReactiveDict / ReactiveList nodes. Reading
a field inside a getter computation registers the (node, field) pair with the
store's Tracker; writing it triggers invalidation of the getters that read it.

Lists treat every mutating call as one atomic write event: after the
underlying operation completes, Field.SHAPE is triggered once and
Field.LENGTH once if the element count changed. An O(n) insert at the front
costs one invalidation scan, not n.

Removing a key or deleting an element raises UnsupportedOperation: a getter
cannot be invalidated on removal of a field it never saw, so removal is
rejected rather than silently under-invalidating.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Hashable, Iterator

from reactorstore._registry import Field, new_id
from reactorstore.errors import UnsupportedOperation

if TYPE_CHECKING:
    from reactorstore._tracking import Tracker

# Immutable containers are the counterpart of frozen values: left as-is.
_IMMUTABLE = (tuple, frozenset, MappingProxyType)
# Mutable containers the engine cannot observe.
_UNSUPPORTED = (set, bytearray)


def is_reactive(value: object) -> bool:
    return isinstance(value, (ReactiveDict, ReactiveList))


def wrap(value: Any, tracker: Tracker, _memo: dict[int, Any] | None = None) -> Any:
    """Return value as reactive state bound to tracker.

    Scalars, immutable containers and already-reactive nodes are returned
    unchanged. Dicts and lists are copied into reactive nodes, children
    first; a plain container reached twice is wrapped once.
    """
    if is_reactive(value) or isinstance(value, _IMMUTABLE):
        return value
    if isinstance(value, _UNSUPPORTED):
        raise TypeError(f"Unsupported state type {type(value).__name__}")
    if not isinstance(value, (dict, list)):
        return value

    if _memo is None:
        _memo = {}
    existing = _memo.get(id(value))
    if existing is not None:
        return existing

    if isinstance(value, dict):
        node = ReactiveDict(tracker)
        _memo[id(value)] = node
        data = {key: wrap(item, tracker, _memo) for key, item in value.items()}
        object.__setattr__(node, "_data", data)
    else:
        node = ReactiveList(tracker)
        _memo[id(value)] = node
        node._items = [wrap(item, tracker, _memo) for item in value]
    return node


def to_plain(value: Any) -> Any:
    """Deep plain copy of reactive state. Reads are tracked."""
    if is_reactive(value):
        return value.to_plain()
    return value


class ReactiveDict:
    """An observable dict. Keys are fields; attribute access reads string keys.

    Reads of a key track (self, key). Membership, iteration and len() track
    Field.SHAPE, which is triggered when a new key is added.
    """

    __slots__ = ("_id", "_data", "_tracker")

    def __init__(self, tracker: Tracker) -> None:
        object.__setattr__(self, "_id", new_id())
        object.__setattr__(self, "_data", {})
        object.__setattr__(self, "_tracker", tracker)

    # --- Read operations (track) ---

    def __getitem__(self, key: Hashable) -> Any:
        self._tracker.track(self, key)
        return self._data[key]

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails: methods and slots win.
        if name.startswith("_"):
            raise AttributeError(name)
        self._tracker.track(self, name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def get(self, key: Hashable, default: Any = None) -> Any:
        self._tracker.track(self, key)
        return self._data.get(key, default)

    def __contains__(self, key: Hashable) -> bool:
        self._tracker.track(self, Field.SHAPE)
        return key in self._data

    def __iter__(self) -> Iterator[Hashable]:
        self._tracker.track(self, Field.SHAPE)
        return iter(list(self._data))

    def __len__(self) -> int:
        self._tracker.track(self, Field.SHAPE)
        return len(self._data)

    def __bool__(self) -> bool:
        self._tracker.track(self, Field.SHAPE)
        return bool(self._data)

    def keys(self) -> list[Hashable]:
        self._tracker.track(self, Field.SHAPE)
        return list(self._data)

    def values(self) -> list[Any]:
        return [value for _, value in self.items()]

    def items(self) -> list[tuple[Hashable, Any]]:
        self._tracker.track(self, Field.SHAPE)
        for key in self._data:
            self._tracker.track(self, key)
        return list(self._data.items())

    def to_plain(self) -> dict:
        return {key: to_plain(value) for key, value in self.items()}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReactiveDict):
            return dict(self.items()) == dict(other.items())
        if isinstance(other, Mapping):
            return dict(self.items()) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    # --- Write operations (trigger) ---

    def __setitem__(self, key: Hashable, value: Any) -> None:
        with self._tracker.writing():
            self._store(key, wrap(value, self._tracker))

    def __setattr__(self, name: str, value: Any) -> None:
        # Underscore names mirror __getattr__: never data, never the internal slots.
        if name.startswith("_") or hasattr(type(self), name):
            raise AttributeError(f"{name!r} cannot be set as an attribute; use item assignment")
        self[name] = value

    def update(self, other: Mapping | Iterable[tuple[Hashable, Any]] = (), **kwargs: Any) -> None:
        if isinstance(other, (Mapping, ReactiveDict)):
            pairs = list(other.items())
        else:
            pairs = list(other)
        pairs.extend(kwargs.items())
        with self._tracker.writing():
            # Wrap everything first so a bad value leaves the dict untouched.
            memo: dict[int, Any] = {}
            wrapped = [(key, wrap(value, self._tracker, memo)) for key, value in pairs]
            for key, value in wrapped:
                self._store(key, value)

    def setdefault(self, key: Hashable, default: Any = None) -> Any:
        if key not in self._data:
            self[key] = default
        return self[key]

    def _store(self, key: Hashable, value: Any) -> None:
        is_new = key not in self._data
        self._data[key] = value
        self._tracker.trigger(self, key)
        if is_new:
            self._tracker.trigger(self, Field.SHAPE)

    # --- Removal (rejected) ---

    def __delitem__(self, key: Hashable) -> None:
        raise UnsupportedOperation(f"Cannot delete key {key!r} from reactive state")

    def __delattr__(self, name: str) -> None:
        raise UnsupportedOperation(f"Cannot delete key {name!r} from reactive state")

    def pop(self, key: Hashable, *default: Any) -> Any:
        raise UnsupportedOperation(f"Cannot pop key {key!r} from reactive state")

    def popitem(self) -> tuple[Hashable, Any]:
        raise UnsupportedOperation("Cannot pop items from reactive state")

    def clear(self) -> None:
        raise UnsupportedOperation("Cannot clear reactive state")

    def __repr__(self) -> str:
        return f"ReactiveDict({self._data!r})"


class ReactiveList:
    """An observable list.

    Index reads track (self, index) plus both markers, len() tracks
    Field.LENGTH, everything that looks at all elements tracks both markers.
    """

    __slots__ = ("_id", "_items", "_tracker")

    def __init__(self, tracker: Tracker) -> None:
        self._id = new_id()
        self._items: list[Any] = []
        self._tracker = tracker

    def _track_all(self) -> None:
        self._tracker.track(self, Field.SHAPE)
        self._tracker.track(self, Field.LENGTH)

    # --- Read operations (track) ---

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            self._track_all()
            return self._items[index]
        # Tracked before the lookup: an out-of-range read depends on the length too.
        self._track_all()
        result = self._items[index]
        position = index + len(self._items) if index < 0 else index
        self._tracker.track(self, position)
        return result

    def __len__(self) -> int:
        self._tracker.track(self, Field.LENGTH)
        return len(self._items)

    def __bool__(self) -> bool:
        self._tracker.track(self, Field.LENGTH)
        return bool(self._items)

    def __iter__(self) -> Iterator[Any]:
        self._track_all()
        return iter(list(self._items))

    def __reversed__(self) -> Iterator[Any]:
        self._track_all()
        return reversed(list(self._items))

    def __contains__(self, item: Any) -> bool:
        self._track_all()
        return item in self._items

    def index(self, item: Any, *args: int) -> int:
        self._track_all()
        return self._items.index(item, *args)

    def count(self, item: Any) -> int:
        self._track_all()
        return self._items.count(item)

    def __add__(self, other: Iterable[Any]) -> list[Any]:
        self._track_all()
        return self._items + list(other)

    def to_plain(self) -> list:
        self._track_all()
        return [to_plain(item) for item in self._items]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (ReactiveList, list)):
            self._track_all()
            return self._items == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    # --- Write operations (one atomic trigger per call) ---

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._tracker.writing():
            before = len(self._items)
            yield
            self._tracker.trigger(self, Field.SHAPE)
            if len(self._items) != before:
                self._tracker.trigger(self, Field.LENGTH)

    def __setitem__(self, index: int | slice, value: Any) -> None:
        if isinstance(index, slice):
            memo: dict[int, Any] = {}
            wrapped = [wrap(item, self._tracker, memo) for item in value]
            with self._mutation():
                self._items[index] = wrapped
            return

        with self._tracker.writing():
            wrapped = wrap(value, self._tracker)
            position = index + len(self._items) if index < 0 else index
            self._items[index] = wrapped
            self._tracker.trigger(self, position)
            self._tracker.trigger(self, Field.SHAPE)

    def append(self, item: Any) -> None:
        wrapped = wrap(item, self._tracker)
        with self._mutation():
            self._items.append(wrapped)

    def extend(self, items: Iterable[Any]) -> None:
        memo: dict[int, Any] = {}
        wrapped = [wrap(item, self._tracker, memo) for item in items]
        with self._mutation():
            self._items.extend(wrapped)

    def __iadd__(self, items: Iterable[Any]) -> ReactiveList:
        self.extend(items)
        return self

    def __imul__(self, times: int) -> ReactiveList:
        with self._mutation():
            self._items *= times
        return self

    def insert(self, index: int, item: Any) -> None:
        wrapped = wrap(item, self._tracker)
        with self._mutation():
            self._items.insert(index, wrapped)

    def pop(self, index: int = -1) -> Any:
        with self._mutation():
            result = self._items.pop(index)
        return result

    def remove(self, item: Any) -> None:
        with self._mutation():
            self._items.remove(item)

    def clear(self) -> None:
        with self._mutation():
            self._items.clear()

    def sort(self, *, key: Any = None, reverse: bool = False) -> None:
        # Sort a copy: a failing comparison must not leave a half-sorted list.
        ordered = sorted(self._items, key=key, reverse=reverse)
        with self._mutation():
            self._items[:] = ordered

    def reverse(self) -> None:
        with self._mutation():
            self._items.reverse()

    # --- Removal (rejected) ---

    def __delitem__(self, index: int | slice) -> None:
        raise UnsupportedOperation(f"Cannot delete index {index!r} from reactive state")

    def __repr__(self) -> str:
        return f"ReactiveList({self._items!r})"
