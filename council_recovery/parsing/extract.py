"""Key-scoped value extraction from malformed JSON.

When a response does not decode as a whole, each expected field is located
by its key and its value is cut out as a self-contained candidate. Damage
elsewhere in the document does not affect a field whose own span is intact.
"""

import re
from functools import lru_cache
from typing import NamedTuple

from council_recovery.parsing.repair import repair_truncated_json, trim_dangling_escape

_PRIMITIVE_START = frozenset("0123456789-tfn")
_PRIMITIVE_TOKEN = re.compile(r"[\w.+-]+")
# Unrecognized values run to the next structural delimiter or line break.
_RAW_VALUE = re.compile(r"[^,}\]\r\n]*")


class FieldSpan(NamedTuple):
    """A located field value.

    terminated is False when the value ran into end of input and had to be
    closed artificially. text is None when the key was found but its
    truncated value was too corrupted to close.
    """

    name: str
    text: str | None
    start: int
    terminated: bool

    @property
    def corrupted(self) -> bool:
        return self.text is None


@lru_cache(maxsize=256)
def _key_pattern(field_name: str) -> re.Pattern[str]:
    return re.compile(r'"' + re.escape(field_name) + r'"\s*:\s*', re.IGNORECASE)


def _string_span(text: str, field_name: str, start: int) -> FieldSpan:
    escaped = False
    for i in range(start + 1, len(text)):
        char = text[i]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            return FieldSpan(field_name, text[start : i + 1], start, True)
    return FieldSpan(field_name, trim_dangling_escape(text[start:]) + '"', start, False)


def _composite_span(text: str, field_name: str, start: int) -> FieldSpan:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return FieldSpan(field_name, text[start : i + 1], start, True)

    return FieldSpan(field_name, repair_truncated_json(text[start:]), start, False)


def _top_level_match(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    """First match of pattern that sits directly inside the outermost object."""
    depth = 0
    in_string = False
    escaped = False
    position = 0
    for match in pattern.finditer(text):
        for char in text[position : match.start()]:
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char in "{[":
                depth += 1
            elif char in "}]":
                depth -= 1
        position = match.start()
        if depth == 1 and not in_string:
            return match
    return None


def locate_field(text: str, field_name: str, top_level: bool = False) -> FieldSpan | None:
    """Find the first ``"field_name":`` (case-insensitive) and cut out its value.

    With top_level, keys nested inside other values are skipped. Returns None
    when the key is absent or nothing follows it; a key whose truncated
    composite value is too corrupted to close comes back as a corrupted span.
    """
    pattern = _key_pattern(field_name)
    match = _top_level_match(pattern, text) if top_level else pattern.search(text)
    if match is None:
        return None

    start = match.end()
    if start >= len(text):
        return None

    first = text[start]
    if first == '"':
        return _string_span(text, field_name, start)
    if first in "{[":
        return _composite_span(text, field_name, start)
    if first in _PRIMITIVE_START:
        token = _PRIMITIVE_TOKEN.match(text, start)
        return FieldSpan(field_name, token.group(), start, token.end() < len(text))

    raw = _RAW_VALUE.match(text, start)
    value = raw.group().strip()
    if not value:
        return None
    return FieldSpan(field_name, value, start, raw.end() < len(text))


def extract_field(text: str, field_name: str) -> str | None:
    """Return the value span of field_name as a standalone candidate, or None.

    None covers both an absent key and a value too corrupted to close.
    """
    span = locate_field(text, field_name)
    return span.text if span is not None else None
