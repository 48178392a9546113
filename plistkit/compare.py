"""Value comparisons between property list nodes and plain Python values.

The ordering functions return ``-1``, ``0`` or ``1``. A node of the wrong
kind, or ``None``, always compares as ``-1``.
"""

from __future__ import annotations

import struct
import sys

from .node import Node, PlistType

__all__ = [
    "values_equal",
    "bool_is_true",
    "compare_uint",
    "compare_uid",
    "compare_real",
    "compare_date",
    "compare_string",
    "compare_string_prefix",
    "string_contains",
    "compare_key",
    "compare_key_prefix",
    "key_contains",
    "compare_data",
    "compare_data_prefix",
    "data_contains",
]

_UINT64_MASK = (1 << 64) - 1

_DBL_MIN = sys.float_info.min
_DBL_MAX = sys.float_info.max
_DBL_EPSILON = sys.float_info.epsilon


def _is(node: Node | None, kind: PlistType) -> bool:
    return isinstance(node, Node) and node.type is kind


def _sign(left, right) -> int:
    if left == right:
        return 0
    return -1 if left < right else 1


def _float_bits(value: float) -> bytes:
    return struct.pack("<d", value)


def values_equal(left: Node | None, right: Node | None) -> bool:
    """Return whether two nodes hold the same value.

    Scalars compare by value (reals and dates bit for bit), strings and keys
    by text, data by bytes. Arrays and dictionaries are only equal to
    themselves.
    """
    if not isinstance(left, Node) or not isinstance(right, Node):
        return False
    if left.type is not right.type:
        return False
    kind = left.type
    if kind in (PlistType.REAL, PlistType.DATE):
        return _float_bits(left.value) == _float_bits(right.value)
    if kind in (
        PlistType.BOOLEAN,
        PlistType.UINT,
        PlistType.UID,
        PlistType.STRING,
        PlistType.KEY,
        PlistType.DATA,
    ):
        return left.value == right.value
    if kind in (PlistType.ARRAY, PlistType.DICT):
        return left is right
    return False


def bool_is_true(node: Node | None) -> bool:
    """Return whether ``node`` is a boolean node holding true."""
    return _is(node, PlistType.BOOLEAN) and node.value is True


def compare_uint(node: Node | None, value: int) -> int:
    """Order an integer node against ``value`` as unsigned 64-bit numbers."""
    if not _is(node, PlistType.UINT):
        return -1
    return _sign(node.value & _UINT64_MASK, value & _UINT64_MASK)


def compare_uid(node: Node | None, value: int) -> int:
    """Order a UID node against ``value`` as unsigned 64-bit numbers."""
    if not _is(node, PlistType.UID):
        return -1
    return _sign(node.value & _UINT64_MASK, value & _UINT64_MASK)


def compare_real(node: Node | None, value: float) -> int:
    """Order a real node against ``value``, treating near-equal values as equal."""
    if not _is(node, PlistType.REAL):
        return -1
    a = node.value
    b = float(value)
    abs_a = abs(a)
    abs_b = abs(b)
    diff = abs(a - b)
    if a == b:
        return 0
    if a == 0 or b == 0 or abs_a + abs_b < _DBL_MIN:
        if diff < _DBL_EPSILON * _DBL_MIN:
            return 0
    elif diff / min(abs_a + abs_b, _DBL_MAX) < _DBL_EPSILON:
        return 0
    return -1 if a < b else 1


def compare_date(node: Node | None, sec: int, usec: int) -> int:
    """Order a date node against ``sec`` seconds and ``usec`` microseconds."""
    if not _is(node, PlistType.DATE):
        return -1
    node_sec, node_usec = node.date_value()
    date_val = ((node_sec << 32) | node_usec) & _UINT64_MASK
    cmp_val = ((sec << 32) | usec) & _UINT64_MASK
    return _sign(date_val, cmp_val)


def _compare_text(node: Node | None, kind: PlistType, value: str) -> int:
    if not _is(node, kind):
        return -1
    return _sign(node.value.encode("utf-8"), value.encode("utf-8"))


def _compare_text_prefix(node: Node | None, kind: PlistType, value: str, n: int) -> int:
    if not _is(node, kind):
        return -1
    return _sign(node.value.encode("utf-8")[:n], value.encode("utf-8")[:n])


def _text_contains(node: Node | None, kind: PlistType, substr: str) -> bool:
    if not _is(node, kind):
        return False
    return substr in node.value


def compare_string(node: Node | None, value: str) -> int:
    """Order a string node against ``value`` byte by byte."""
    return _compare_text(node, PlistType.STRING, value)


def compare_string_prefix(node: Node | None, value: str, n: int) -> int:
    """Order the first ``n`` bytes of a string node against those of ``value``."""
    return _compare_text_prefix(node, PlistType.STRING, value, n)


def string_contains(node: Node | None, substr: str) -> bool:
    """Return whether a string node contains ``substr``."""
    return _text_contains(node, PlistType.STRING, substr)


def compare_key(node: Node | None, value: str) -> int:
    """Order a key node against ``value`` byte by byte."""
    return _compare_text(node, PlistType.KEY, value)


def compare_key_prefix(node: Node | None, value: str, n: int) -> int:
    """Order the first ``n`` bytes of a key node against those of ``value``."""
    return _compare_text_prefix(node, PlistType.KEY, value, n)


def key_contains(node: Node | None, substr: str) -> bool:
    """Return whether a key node contains ``substr``."""
    return _text_contains(node, PlistType.KEY, substr)


def compare_data(node: Node | None, value: bytes) -> int:
    """Order a data node against ``value``: shorter first, then by content."""
    if not _is(node, PlistType.DATA):
        return -1
    value = bytes(value)
    if len(node.value) < len(value):
        return -1
    if len(node.value) > len(value):
        return 1
    return _sign(node.value, value)


def compare_data_prefix(node: Node | None, value: bytes, n: int) -> int:
    """Order the first ``n`` bytes of a data node against those of ``value``."""
    if not _is(node, PlistType.DATA):
        return -1
    value = bytes(value)
    if len(value) < n:
        raise ValueError(f"comparison value is shorter than {n} bytes")
    if len(node.value) < n:
        return -1
    return _sign(node.value[:n], value[:n])


def data_contains(node: Node | None, value: bytes) -> bool:
    """Return whether a data node contains the byte sequence ``value``."""
    if not _is(node, PlistType.DATA):
        return False
    return bytes(value) in node.value