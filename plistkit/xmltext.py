"""Low-level scanning helpers for the XML property list reader.

:class:`ParseContext` walks over the document text with a cursor. Text
content of an element is collected as a list of :class:`TextPart` pieces so
that CDATA sections can be kept apart from text that still holds entity
references.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .node import ParseError

__all__ = ["TextPart", "ParseContext", "unescape_entities", "join_text"]

_WHITESPACE = " \t\r\n"
_TAG_END_CHARS = " \r\n\t>"

_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]+")
_DEC_DIGITS = re.compile(r"[0-9]+")

_NAMED_ENTITIES = (
    ("amp", "&"),
    ("apos", "'"),
    ("quot", '"'),
    ("lt", "<"),
    ("gt", ">"),
)


@dataclass(frozen=True)
class TextPart:
    """A run of element text; CDATA runs are taken literally."""

    text: str
    is_cdata: bool = False


class ParseContext:
    """A cursor over XML text, positioned at ``pos`` before ``end``."""

    def __init__(self, data: str | bytes) -> None:
        if isinstance(data, (bytes, bytearray, memoryview)):
            try:
                data = bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ParseError(f"document is not valid UTF-8: {exc}") from exc
        self.data: str = data
        self.pos = 0
        self.end = len(data)

    def __repr__(self) -> str:
        return f"ParseContext(pos={self.pos}, end={self.end})"

    def at(self, text: str) -> bool:
        """Return whether ``text`` starts at the current position."""
        return self.data.startswith(text, self.pos, self.end)

    def _skip_quoted(self) -> bool:
        """Step past an opening quote to its closing quote.

        Returns ``False`` if the document ends before the closing quote.
        """
        self.pos += 1
        self.find_char('"', False)
        return self.pos < self.end

    def skip_ws(self) -> None:
        """Advance past spaces, tabs and line breaks."""
        while self.pos < self.end and self.data[self.pos] in _WHITESPACE:
            self.pos += 1

    def find_char(self, char: str, skip_quotes: bool) -> None:
        """Advance to the next ``char``, or to the end.

        With ``skip_quotes``, text inside double quotes is passed over.
        """
        while self.pos < self.end and self.data[self.pos] != char:
            if skip_quotes and char != '"' and self.data[self.pos] == '"':
                if not self._skip_quoted():
                    return
            self.pos += 1

    def find_str(self, needle: str, skip_quotes: bool) -> None:
        """Advance to the next occurrence of ``needle``.

        If it is not found the cursor stops ``len(needle)`` characters before
        the end, so callers must check :meth:`at` afterwards.
        """
        limit = self.end - len(needle)
        while self.pos < limit:
            if self.data.startswith(needle, self.pos):
                break
            if skip_quotes and self.data[self.pos] == '"':
                if not self._skip_quoted():
                    return
            self.pos += 1

    def find_next(self, chars: str, skip_quotes: bool) -> None:
        """Advance to the next character that is one of ``chars``."""
        while self.pos < self.end:
            if skip_quotes and self.data[self.pos] == '"':
                if not self._skip_quoted():
                    return
            if self.data[self.pos] in chars:
                return
            self.pos += 1

    def _invalid_tag(self, prefix: str, tag: str) -> ParseError:
        start = self.pos
        self.find_next(_TAG_END_CHARS, True)
        name = self.data[start:self.pos]
        return ParseError(f"invalid tag <{prefix}{name}> encountered inside <{tag}>")

    def text_parts(self, tag: str, skip_ws: bool) -> list[TextPart]:
        """Collect the text of the element ``tag`` up to its closing tag.

        Comments are dropped, CDATA sections become separate parts, and any
        other markup inside the element is an error. The cursor is left just
        after the closing tag.
        """
        parts: list[TextPart] = []
        data = self.data
        if skip_ws:
            self.skip_ws()
        while True:
            p = self.pos
            self.find_char("<", False)
            if self.pos >= self.end or data[self.pos] != "<":
                raise ParseError(f"EOF while looking for closing </{tag}> tag")
            q = self.pos
            self.pos += 1
            if self.pos >= self.end:
                raise ParseError(f"EOF while parsing <{tag}> content")
            marker = data[self.pos]
            if marker == "!":
                self.pos += 1
                if self.pos >= self.end - 1:
                    raise ParseError("EOF while parsing <! special tag")
                if self.at("--"):
                    parts.append(TextPart(data[p:q]))
                    self.pos += 2
                    self.find_str("-->", False)
                    if self.pos > self.end - 3 or not self.at("-->"):
                        raise ParseError("EOF while looking for end of comment")
                    self.pos += 3
                elif data[self.pos] == "[":
                    self.pos += 1
                    if self.pos >= self.end - 8:
                        raise ParseError("EOF while parsing <![ tag")
                    if not self.at("CDATA["):
                        raise self._invalid_tag("![", tag)
                    if q > p:
                        parts.append(TextPart(data[p:q]))
                    self.pos += 6
                    p = self.pos
                    self.find_str("]]>", False)
                    if self.pos > self.end - 3 or not self.at("]]>"):
                        raise ParseError("EOF while looking for end of CDATA block")
                    parts.append(TextPart(data[p:self.pos], True))
                    self.pos += 3
                else:
                    raise self._invalid_tag("!", tag)
            elif marker == "/":
                break
            else:
                raise self._invalid_tag("", tag)

        self.pos += 1
        if self.pos >= self.end - len(tag) or not self.at(tag):
            raise ParseError(f"EOF or end tag mismatch while looking for </{tag}>")
        self.pos += len(tag)
        self.skip_ws()
        if self.pos >= self.end:
            raise ParseError("EOF while parsing closing tag")
        if data[self.pos] != ">":
            raise ParseError(
                f"invalid closing tag; expected '>', found {data[self.pos]!r}"
            )
        self.pos += 1

        if q > p:
            parts.append(TextPart(data[p:q]))
        return parts


def _numeric_reference(name: str) -> str:
    if len(name) > 8:
        raise ParseError(f"numerical character reference too long: &{name};")
    if name[1:2] in ("x", "X"):
        if len(name) < 3:
            raise ParseError(f"numerical character reference too short: &{name};")
        digits, pattern, base = name[2:], _HEX_DIGITS, 16
    else:
        if len(name) < 2:
            raise ParseError(f"numerical character reference too short: &{name};")
        digits, pattern, base = name[1:], _DEC_DIGITS, 10
    if not pattern.fullmatch(digits):
        raise ParseError(f"invalid numerical character reference: &{name};")
    value = int(digits, base)
    if value == 0 or value > 0x10FFFF:
        raise ParseError(f"invalid numerical character reference: &{name};")
    return chr(value)


def _entity(name: str) -> str:
    for prefix, replacement in _NAMED_ENTITIES:
        if name.startswith(prefix):
            return replacement
    if name.startswith("#"):
        return _numeric_reference(name)
    raise ParseError(f"invalid entity encountered: &{name};")


def unescape_entities(text: str) -> str:
    """Replace XML entity and character references in ``text``.

    The final character is never treated as the start of a reference.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n - 1:
        if text[i] == "&":
            semi = text.find(";", i)
            if semi < 0:
                raise ParseError("invalid entity sequence (missing terminating ';')")
            name = text[i + 1:semi]
            if not name:
                raise ParseError("invalid empty entity sequence &;")
            out.append(_entity(name))
            i = semi + 1
            continue
        out.append(text[i])
        i += 1
    out.append(text[i:])
    return "".join(out)


def join_text(parts: list[TextPart], unescape: bool) -> str:
    """Concatenate text parts, resolving entities outside CDATA if asked."""
    return "".join(
        unescape_entities(part.text) if unescape and not part.is_cdata else part.text
        for part in parts
    )