"""In-memory property list trees.

A property list is a tree of :class:`Node` objects. Arrays hold their items
as children. Dictionaries hold alternating key nodes and value nodes, so the
original order of entries is kept; a lookup table maps key strings to value
nodes.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from typing import Any

__all__ = [
    "PlistError",
    "ParseError",
    "FormatError",
    "PlistType",
    "Node",
    "new_dict",
    "new_array",
    "new_string",
    "new_bool",
    "new_uint",
    "new_uid",
    "new_real",
    "new_data",
    "new_date",
    "new_null",
    "is_binary",
]

_INT64_MIN = -(1 << 63)
_UINT64_LIMIT = 1 << 64
_BINARY_MAGIC = b"bplist00"


class PlistError(Exception):
    """Base class for property list errors."""


class ParseError(PlistError):
    """Raised when serialized property list data cannot be parsed."""


class FormatError(PlistError):
    """Raised when a tree cannot be expressed in the requested format."""


class PlistType(enum.IntEnum):
    """Kind of value a node holds."""

    NONE = -1
    BOOLEAN = 0
    UINT = 1
    REAL = 2
    STRING = 3
    ARRAY = 4
    DICT = 5
    DATE = 6
    DATA = 7
    KEY = 8
    UID = 9
    NULL = 10


_CONTAINERS = (PlistType.ARRAY, PlistType.DICT)


def _coerce(kind: PlistType, value: Any) -> Any:
    if kind in _CONTAINERS or kind is PlistType.NULL:
        return None
    if kind in (PlistType.STRING, PlistType.KEY):
        if not isinstance(value, str):
            raise TypeError(f"{kind.name} value must be str")
        return value
    if kind is PlistType.BOOLEAN:
        return bool(value)
    if kind is PlistType.UINT:
        value = int(value)
        if not _INT64_MIN <= value < _UINT64_LIMIT:
            raise ValueError(f"integer out of range: {value}")
        return value
    if kind is PlistType.UID:
        value = int(value)
        if not 0 <= value < _UINT64_LIMIT:
            raise ValueError(f"UID out of range: {value}")
        return value
    if kind in (PlistType.REAL, PlistType.DATE):
        return float(value)
    if kind is PlistType.DATA:
        return bytes(value)
    raise ValueError(f"cannot create a node of type {kind.name}")


def _position(children: list[Node], node: Node) -> int:
    for pos, child in enumerate(children):
        if child is node:
            return pos
    raise ValueError("node is not a child of its parent")


class Node:
    """A single property list value, possibly holding child nodes."""

    __slots__ = ("type", "value", "parent", "children", "_index")

    def __init__(self, type: PlistType, value: Any = None) -> None:
        kind = PlistType(type)
        self.type = kind
        self.value = _coerce(kind, value)
        self.parent: Node | None = None
        self.children: list[Node] = []
        self._index: dict[str, Node] | None = {} if kind is PlistType.DICT else None

    def __repr__(self) -> str:
        if self.type in _CONTAINERS:
            return f"Node({self.type.name}, {len(self)} items)"
        return f"Node({self.type.name}, {self.value!r})"

    def __bool__(self) -> bool:
        return True

    def __len__(self) -> int:
        if self.type is PlistType.ARRAY:
            return len(self.children)
        if self.type is PlistType.DICT:
            return len(self.children) // 2
        raise TypeError(f"{self.type.name} node has no length")

    def __iter__(self) -> Iterator[Any]:
        """Iterate over array items, or over the keys of a dictionary."""
        if self.type is PlistType.ARRAY:
            return iter(list(self.children))
        if self.type is PlistType.DICT:
            return iter([key.value for key in self.children[::2]])
        raise TypeError(f"{self.type.name} node is not iterable")

    # -- helpers ---------------------------------------------------------

    def _require(self, kind: PlistType) -> None:
        if self.type is not kind:
            raise TypeError(f"expected a {kind.name} node, got {self.type.name}")

    @staticmethod
    def _check_free(item: Node) -> None:
        if not isinstance(item, Node):
            raise TypeError("item must be a Node")
        if item.parent is not None:
            raise ValueError("node already belongs to another container")

    def _set(self, kind: PlistType, value: Any) -> None:
        new_value = _coerce(kind, value)
        if kind not in _CONTAINERS:
            for child in self.children:
                child.parent = None
            self.children = []
            self._index = None
        self.type = kind
        self.value = new_value

    # -- copying ---------------------------------------------------------

    def copy(self) -> Node:
        """Return a deep copy of this node and everything below it."""
        clone = Node(self.type, self.value)
        for child in self.children:
            child_copy = child.copy()
            child_copy.parent = clone
            clone.children.append(child_copy)
        if clone.type is PlistType.DICT:
            clone._index = {
                key.value: value
                for key, value in zip(clone.children[::2], clone.children[1::2])
            }
        return clone

    # -- arrays ----------------------------------------------------------

    def array_item(self, index: int) -> Node:
        """Return the item at ``index`` of this array."""
        self._require(PlistType.ARRAY)
        if not 0 <= index < len(self.children):
            raise IndexError(f"array index out of range: {index}")
        return self.children[index]

    def array_index(self) -> int:
        """Return the position of this node within its parent array."""
        if self.parent is None or self.parent.type is not PlistType.ARRAY:
            raise TypeError("node is not an array item")
        return _position(self.parent.children, self)

    def set_array_item(self, index: int, item: Node) -> None:
        """Replace the item at ``index`` with ``item``."""
        old = self.array_item(index)
        self._check_free(item)
        old.parent = None
        self.children[index] = item
        item.parent = self

    def append(self, item: Node) -> None:
        """Add ``item`` at the end of this array."""
        self._require(PlistType.ARRAY)
        self._check_free(item)
        self.children.append(item)
        item.parent = self

    def insert(self, index: int, item: Node) -> None:
        """Insert ``item`` before position ``index`` of this array."""
        self._require(PlistType.ARRAY)
        if index < 0:
            raise IndexError(f"array index out of range: {index}")
        self._check_free(item)
        self.children.insert(index, item)
        item.parent = self

    def remove_array_item(self, index: int) -> None:
        """Remove the item at ``index`` from this array."""
        item = self.array_item(index)
        del self.children[index]
        item.parent = None

    def remove_from_array(self) -> None:
        """Remove this node from the array that holds it."""
        parent = self.parent
        pos = self.array_index()
        del parent.children[pos]
        self.parent = None

    # -- dictionaries ----------------------------------------------------

    def dict_items(self) -> Iterator[tuple[str, Node]]:
        """Yield ``(key, value)`` pairs of this dictionary in order."""
        self._require(PlistType.DICT)
        pairs = list(zip(self.children[::2], self.children[1::2]))
        for key, value in pairs:
            yield key.value, value

    def dict_item(self, key: str) -> Node | None:
        """Return the value stored under ``key``, or ``None``."""
        self._require(PlistType.DICT)
        return self._index.get(key)

    def set_dict_item(self, key: str, item: Node) -> None:
        """Store ``item`` under ``key``, replacing any previous value in place."""
        self._require(PlistType.DICT)
        if not isinstance(key, str):
            raise TypeError("dictionary keys must be str")
        self._check_free(item)
        old = self._index.get(key)
        if old is not None:
            pos = _position(self.children, old)
            old.parent = None
            self.children[pos] = item
        else:
            key_node = Node(PlistType.KEY, key)
            key_node.parent = self
            self.children.append(key_node)
            self.children.append(item)
        item.parent = self
        self._index[key] = item

    def remove_dict_item(self, key: str) -> None:
        """Remove the entry stored under ``key``."""
        self._require(PlistType.DICT)
        item = self._index.pop(key)
        pos = _position(self.children, item)
        key_node = self.children[pos - 1]
        del self.children[pos - 1:pos + 1]
        key_node.parent = None
        item.parent = None

    def dict_key(self) -> str:
        """Return the key under which this node is stored in its parent."""
        parent = self.parent
        if parent is None or parent.type is not PlistType.DICT:
            raise TypeError("node is not a dictionary item")
        if self.type is PlistType.KEY:
            raise TypeError("node is a dictionary key, not a value")
        pos = _position(parent.children, self)
        return parent.children[pos - 1].value

    def merge(self, source: Node) -> None:
        """Copy every entry of the dictionary ``source`` into this one."""
        self._require(PlistType.DICT)
        if not isinstance(source, Node) or source.type is not PlistType.DICT:
            raise TypeError("merge source must be a DICT node")
        for key, value in source.dict_items():
            self.set_dict_item(key, value.copy())

    def access_path(self, *args: Any) -> Node | None:
        """Follow array indices and dictionary keys down the tree.

        Returns ``None`` if a step leads nowhere. Steps taken at a node that
        is neither an array nor a dictionary leave the position unchanged.
        """
        current: Node | None = self
        for step in args:
            if current is None:
                break
            if current.type is PlistType.ARRAY:
                if 0 <= step < len(current.children):
                    current = current.children[step]
                else:
                    current = None
            elif current.type is PlistType.DICT:
                current = current._index.get(step)
        return current

    # -- setting values --------------------------------------------------

    def set_key(self, value: str) -> None:
        """Turn this node into a key named ``value``.

        Inside a dictionary the key must not clash with another entry.
        """
        if not isinstance(value, str):
            raise TypeError("key must be str")
        parent = self.parent
        in_dict = parent is not None and parent.type is PlistType.DICT
        if in_dict:
            existing = parent._index.get(value)
            if existing is not None:
                pos = _position(parent.children, existing)
                if parent.children[pos - 1] is self:
                    return
                raise ValueError(f"key already present in dictionary: {value!r}")
            if self.type is PlistType.KEY:
                pos = _position(parent.children, self)
                del parent._index[self.value]
                parent._index[value] = parent.children[pos + 1]
        self._set(PlistType.KEY, value)

    def set_string(self, value: str) -> None:
        self._set(PlistType.STRING, value)

    def set_bool(self, value: bool) -> None:
        self._set(PlistType.BOOLEAN, value)

    def set_uint(self, value: int) -> None:
        self._set(PlistType.UINT, value)

    def set_uid(self, value: int) -> None:
        self._set(PlistType.UID, value)

    def set_real(self, value: float) -> None:
        self._set(PlistType.REAL, value)

    def set_data(self, value: bytes) -> None:
        self._set(PlistType.DATA, value)

    def set_date(self, sec: int, usec: int) -> None:
        """Set a date as seconds and microseconds since 2001-01-01 UTC."""
        self._set(PlistType.DATE, sec + usec / 1000000)

    def date_value(self) -> tuple[int, int]:
        """Return a date as ``(seconds, microseconds)``."""
        self._require(PlistType.DATE)
        val = self.value
        sec = int(val)
        usec = int(abs((val - sec) * 1000000))
        return sec, usec


def new_dict() -> Node:
    return Node(PlistType.DICT)


def new_array() -> Node:
    return Node(PlistType.ARRAY)


def new_string(value: str) -> Node:
    return Node(PlistType.STRING, value)


def new_bool(value: bool) -> Node:
    return Node(PlistType.BOOLEAN, value)


def new_uint(value: int) -> Node:
    return Node(PlistType.UINT, value)


def new_uid(value: int) -> Node:
    return Node(PlistType.UID, value)


def new_real(value: float) -> Node:
    return Node(PlistType.REAL, value)


def new_data(value: bytes) -> Node:
    return Node(PlistType.DATA, value)


def new_date(sec: int, usec: int) -> Node:
    """Create a date node from seconds and microseconds since 2001-01-01 UTC."""
    return Node(PlistType.DATE, sec + usec / 1000000)


def new_null() -> Node:
    return Node(PlistType.NULL)


def is_binary(data: bytes) -> bool:
    """Return whether ``data`` starts with the binary property list magic."""
    return len(data) >= 8 and data[:8] == _BINARY_MAGIC