"""Serialization of property list trees to the XML property list format."""

from __future__ import annotations

import base64
import math

from .node import FormatError, Node, PlistError, PlistType
from .time64 import gmtime64

__all__ = ["PROLOG", "EPILOG", "MAC_EPOCH", "format_real", "to_xml"]

PROLOG = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" '
    '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
    '<plist version="1.0">\n'
)
EPILOG = "</plist>\n"

# Seconds between the Unix epoch and 2001-01-01T00:00:00Z.
MAC_EPOCH = 978307200

# Longest date text that fits the fixed-size formatting buffer.
_MAX_DATE_LEN = 23


def _max_data_bytes_per_line(indent: int) -> int:
    return ((76 - (indent << 3)) >> 2) * 3


def format_real(value: float) -> str:
    """Format a real the way XML property lists store it."""
    value = float(value)
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "+infinity" if value > 0 else "-infinity"
    if value == 0.0:
        return "0.0"
    return format(value, ".17g")


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _format_date(value: float) -> str | None:
    if not math.isfinite(value):
        return None
    tm = gmtime64(int(value) + MAC_EPOCH)
    text = (
        f"{tm.tm_year + 1900}-{tm.tm_mon + 1:02d}-{tm.tm_mday:02d}"
        f"T{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}Z"
    )
    if len(text) > _MAX_DATE_LEN:
        return None
    return text


def _write_data(node: Node, depth: int, out: list[str]) -> None:
    indent = "\t" * depth
    out.append(f"{indent}<data>\n")
    payload: bytes = node.value
    line_indent = "\t" * min(depth, 8)
    step = _max_data_bytes_per_line(min(depth, 8))
    for start in range(0, len(payload), step):
        chunk = base64.b64encode(payload[start:start + step]).decode("ascii")
        out.append(f"{line_indent}{chunk}\n")
    out.append(f"{indent}</data>\n")


def _write(node: Node, depth: int, out: list[str]) -> None:
    if not isinstance(node, Node):
        raise TypeError("property list contains a value that is not a Node")
    indent = "\t" * depth
    kind = node.type

    if kind is PlistType.BOOLEAN:
        tag = "true" if node.value else "false"
        out.append(f"{indent}<{tag}/>\n")
    elif kind is PlistType.UINT:
        out.append(f"{indent}<integer>{node.value}</integer>\n")
    elif kind is PlistType.REAL:
        out.append(f"{indent}<real>{format_real(node.value)}</real>\n")
    elif kind in (PlistType.STRING, PlistType.KEY):
        tag = "string" if kind is PlistType.STRING else "key"
        out.append(f"{indent}<{tag}>{_escape(node.value)}</{tag}>\n")
    elif kind is PlistType.DATA:
        _write_data(node, depth, out)
    elif kind in (PlistType.ARRAY, PlistType.DICT):
        tag = "array" if kind is PlistType.ARRAY else "dict"
        if not node.children:
            out.append(f"{indent}<{tag}/>\n")
            return
        out.append(f"{indent}<{tag}>\n")
        for child in node.children:
            _write(child, depth + 1, out)
        out.append(f"{indent}</{tag}>\n")
    elif kind is PlistType.DATE:
        text = _format_date(node.value)
        if text is None:
            out.append(f"{indent}<date/>\n")
        else:
            out.append(f"{indent}<date>{text}</date>\n")
    elif kind is PlistType.UID:
        inner = "\t" * (depth + 1)
        out.append(f"{indent}<dict>\n")
        out.append(f"{inner}<key>CF$UID</key>\n")
        out.append(f"{inner}<integer>{node.value}</integer>\n")
        out.append(f"{indent}</dict>\n")
    elif kind is PlistType.NULL:
        raise FormatError("NULL values cannot be written as XML")
    else:
        raise PlistError(f"cannot write a node of type {kind.name}")


def to_xml(node: Node) -> str:
    """Serialize the tree below ``node`` as an XML property list document."""
    if not isinstance(node, Node):
        raise TypeError("to_xml expects a Node")
    out = [PROLOG]
    _write(node, 0, out)
    out.append(EPILOG)
    return "".join(out)