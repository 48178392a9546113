"""Parsing of XML property list documents into :class:`Node` trees."""

from __future__ import annotations

import base64
import re

from .node import (
    Node,
    ParseError,
    PlistType,
    new_array,
    new_bool,
    new_data,
    new_dict,
    new_string,
    new_uid,
    new_uint,
    new_real,
)
from .time64 import TM, timegm64
from .xmltext import ParseContext, join_text
from .xmlwriter import MAC_EPOCH

__all__ = ["parse_date", "from_xml"]

_UINT64_MASK = (1 << 64) - 1
_INT64_MAX = (1 << 63) - 1

_CONTAINERS = (PlistType.DICT, PlistType.ARRAY)

_INT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?)(?:0[xX]([0-9a-fA-F]+)|(0[0-7]*)|([1-9][0-9]*))"
)

_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*("
    r"[+-]?0x(?:[0-9a-f]+(?:\.[0-9a-f]*)?|\.[0-9a-f]+)(?:p[+-]?[0-9]+)?"
    r"|[+-]?(?:inf(?:inity)?|nan)"
    r"|[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:e[+-]?[0-9]+)?"
    r")",
    re.IGNORECASE,
)

_DATE_FIELDS = re.compile(
    r"\s*([+-]?\d+)(?:-(\d{1,2})(?:-(\d{1,2})"
    r"(?:T(\d{1,2})(?::(\d{1,2})(?::(\d{1,2}))?)?)?)?)?"
)

_B64_ALPHABET = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)

# Valid ranges for month, day, hour, minute and second, in that order.
_DATE_RANGES = ((1, 12), (1, 31), (0, 23), (0, 59), (0, 61))


def parse_date(text: str) -> TM:
    """Read ``YYYY-MM-DDThh:mm:ssZ`` into a broken-down UTC time.

    Reading stops at the first field that is missing or out of range; the
    fields not read stay zero.
    """
    tm = TM(tm_sec=0, tm_min=0, tm_hour=0, tm_mday=0, tm_mon=0,
            tm_year=0, tm_wday=0, tm_yday=0, tm_isdst=0)
    match = _DATE_FIELDS.match(text)
    if match is None:
        return tm
    tm.tm_year = int(match.group(1)) - 1900
    names = ("tm_mon", "tm_mday", "tm_hour", "tm_min", "tm_sec")
    for group, name, (low, high) in zip(match.groups()[1:], names, _DATE_RANGES):
        if group is None:
            break
        value = int(group)
        if not low <= value <= high:
            break
        setattr(tm, name, value - 1 if name == "tm_mon" else value)
    return tm


def _strtoull(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        return 0
    sign, hex_digits, octal, decimal = match.groups()
    if hex_digits is not None:
        value = int(hex_digits, 16)
    elif octal is not None:
        value = int(octal, 8)
    else:
        value = int(decimal)
    if value > _UINT64_MASK:
        return _UINT64_MASK
    if sign == "-":
        value = (-value) & _UINT64_MASK
    return value


def _parse_integer(text: str) -> int:
    is_negative = text[:1] == "-"
    if text[:1] in ("-", "+"):
        text = text[1:]
    value = _strtoull(text)
    if is_negative or value <= _INT64_MAX:
        if is_negative:
            value = (-value) & _UINT64_MASK
        if value > _INT64_MAX:
            value -= 1 << 64
    return value


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return 0.0
    literal = match.group(1)
    if "x" in literal.lower() and "n" not in literal.lower():
        return float.fromhex(literal)
    return float(literal)


def _decode_base64(text: str) -> bytes:
    cleaned = "".join(c for c in text.split("=", 1)[0] if c in _B64_ALPHABET)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned)


def _read_value(ctx: ParseContext, tag: str, is_empty: bool) -> Node | None:
    """Build the node for a non-string element, or ``None`` for unknown tags."""
    if tag == "dict":
        return new_dict()
    if tag == "array":
        return new_array()
    if tag in ("true", "false"):
        if not is_empty:
            ctx.text_parts(tag, True)
        return new_bool(tag == "true")
    if tag == "integer":
        value = 0
        if not is_empty:
            parts = ctx.text_parts(tag, True)
            if parts:
                value = _parse_integer(join_text(parts, False))
        return new_uint(value)
    if tag == "real":
        value = 0.0
        if not is_empty:
            parts = ctx.text_parts(tag, True)
            if parts:
                value = _atof(join_text(parts, False))
        return new_real(value)
    if tag == "data":
        payload = b""
        if not is_empty:
            parts = ctx.text_parts(tag, True)
            if parts:
                size = len(parts[0].text)
                if size > 0:
                    payload = _decode_base64(join_text(parts, False)[:size])
        return new_data(payload)
    if tag == "date":
        value = 0.0
        if not is_empty:
            timev = 0
            parts = ctx.text_parts(tag, True)
            if parts:
                content = join_text(parts, False)
                if 11 <= len(content) < 32:
                    timev = timegm64(parse_date(content))
            value = float(timev - MAC_EPOCH)
        return Node(PlistType.DATE, value)
    return None


def _skip_processing_instruction(ctx: ParseContext) -> None:
    ctx.find_str("?>", True)
    if ctx.pos > ctx.end - 2:
        raise ParseError("EOF while looking for <? tag closing marker")
    if not ctx.at("?>"):
        raise ParseError("couldn't find <? tag closing marker")
    ctx.pos += 2


def _skip_special(ctx: ParseContext) -> None:
    text = ctx.data
    if ctx.end - ctx.pos > 3 and ctx.at("!--"):
        ctx.pos += 3
        ctx.find_str("-->", False)
        if ctx.pos > ctx.end - 3 or not ctx.at("-->"):
            raise ParseError("couldn't find end of comment")
        ctx.pos += 3
    elif ctx.end - ctx.pos > 8 and ctx.at("!DOCTYPE"):
        ctx.pos += 8
        embedded_dtd = False
        while ctx.pos < ctx.end:
            ctx.find_next(" \t\r\n[>", True)
            if ctx.pos >= ctx.end:
                raise ParseError("EOF while parsing !DOCTYPE")
            if text[ctx.pos] == "[":
                embedded_dtd = True
                break
            if text[ctx.pos] == ">":
                ctx.pos += 1
                break
            ctx.skip_ws()
        if embedded_dtd:
            ctx.find_str("]>", True)
            if ctx.pos > ctx.end - 2 or not ctx.at("]>"):
                raise ParseError("couldn't find end of DOCTYPE")
            ctx.pos += 2
    else:
        start = ctx.pos
        ctx.find_next(" \r\n\t>", True)
        raise ParseError(
            f"invalid or incomplete special tag <{text[start:ctx.pos]}> encountered"
        )


def _read_tag(ctx: ParseContext) -> tuple[str, bool]:
    """Read a tag name up to its ``>``; return it and whether it is empty."""
    text = ctx.data
    start = ctx.pos
    ctx.find_next(" \r\n\t<>", False)
    if ctx.pos >= ctx.end:
        raise ParseError("unexpected EOF while parsing XML")
    tag = text[start:ctx.pos]
    if text[ctx.pos] != ">":
        ctx.find_next("<>", True)
    if ctx.pos >= ctx.end:
        raise ParseError("unexpected EOF while parsing XML")
    if text[ctx.pos] != ">":
        raise ParseError(f"missing '>' for tag <{tag}")
    is_empty = False
    if text[ctx.pos - 1] == "/":
        idx = ctx.pos - start - 1
        if idx < len(tag):
            tag = tag[:idx]
        is_empty = True
    ctx.pos += 1
    return tag, is_empty


def _pop_path(path: list[str], tag: str) -> None:
    if not path:
        raise ParseError("closing tag found without a matching opening tag")
    if path[-1] != tag:
        raise ParseError(f"unexpected </{tag}> found (for opening <{path[-1]}>)")
    path.pop()


def _parse(ctx: ParseContext) -> Node | None:
    text = ctx.data
    root: Node | None = None
    parent: Node | None = None
    keyname: str | None = None
    path: list[str] = []
    has_content = False

    while ctx.pos < ctx.end:
        ctx.skip_ws()
        if ctx.pos >= ctx.end:
            break
        if text[ctx.pos] != "<":
            start = ctx.pos
            ctx.find_next(" \t\r\n", False)
            raise ParseError(
                f"expected an opening tag, found {text[start:ctx.pos]!r}"
            )
        ctx.pos += 1
        if ctx.pos >= ctx.end:
            raise ParseError("EOF while parsing tag")

        marker = text[ctx.pos]
        if marker == "?":
            _skip_processing_instruction(ctx)
            continue
        if marker == "!":
            _skip_special(ctx)
            continue

        tag, is_empty = _read_tag(ctx)

        if tag == "plist":
            has_content = False
            if not path and root is not None:
                # another top-level <plist> is not read
                break
            if is_empty:
                raise ParseError("empty plist tag")
            path.append("plist")
            continue
        if tag == "/plist":
            if not has_content:
                raise ParseError("encountered empty plist tag")
            _pop_path(path, "plist")
            continue

        has_content = True

        if tag.startswith("/"):
            _pop_path(path, tag[1:])
            if parent is None:
                raise ParseError(f"unexpected closing tag <{tag}>")
            parent = parent.parent
            keyname = None
            if parent is None:
                return root
            continue

        if tag in ("string", "key"):
            value = ""
            if not is_empty:
                value = join_text(ctx.text_parts(tag, False), True)
                if (
                    tag == "key"
                    and keyname is None
                    and parent is not None
                    and parent.type is PlistType.DICT
                ):
                    keyname = value
                    continue
            node = new_string(value)
        else:
            node = _read_value(ctx, tag, is_empty)
            if node is None:
                suffix = "/" if is_empty else ""
                raise ParseError(f"unexpected tag <{tag}{suffix}> encountered")

        if root is None:
            root = node
            if node.type not in _CONTAINERS:
                return root
            parent = node
        elif parent is not None and parent.type is PlistType.DICT:
            if keyname is None:
                raise ParseError("missing key name while adding dict item")
            parent.set_dict_item(keyname, node)
        elif parent is not None and parent.type is PlistType.ARRAY:
            parent.append(node)
        else:
            raise ParseError("parent is not a structured node")

        if not is_empty and node.type in _CONTAINERS:
            path.append("dict" if node.type is PlistType.DICT else "array")
            parent = node
        keyname = None

    if path:
        raise ParseError(f"EOF encountered while </{path[-1]}> was expected")
    return root


def _as_uid(root: Node | None) -> Node | None:
    if root is None or root.type is not PlistType.DICT or len(root) != 1:
        return root
    value = root.dict_item("CF$UID")
    if value is not None and value.type is PlistType.UINT:
        return new_uid(value.value & _UINT64_MASK)
    return root


def from_xml(data: str | bytes) -> Node | None:
    """Parse an XML property list document.

    Returns the root node, or ``None`` if the document holds no value.
    A dictionary root whose only entry is an integer ``CF$UID`` becomes a
    UID node.
    """
    if data is None or len(data) == 0:
        raise ValueError("no XML data given")
    ctx = ParseContext(data)
    return _as_uid(_parse(ctx))