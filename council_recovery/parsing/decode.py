"""Strict JSON decoding with a single repair retry."""

import json
from typing import NamedTuple

from pydantic import JsonValue

from council_recovery.parsing.repair import repair_truncated_json


class ParseAttempt(NamedTuple):
    success: bool
    value: JsonValue
    repaired: bool


def _reject_constant(name: str) -> None:
    raise ValueError(f"Non-standard JSON constant: {name}")


def decode_json(text: str) -> JsonValue:
    """Decode strict JSON.

    Raises ValueError for invalid JSON, NaN/Infinity literals included, and
    RecursionError for nesting deeper than the interpreter allows.
    """
    return json.loads(text, parse_constant=_reject_constant)


def _try_decode(text: str) -> tuple[bool, JsonValue]:
    try:
        return True, decode_json(text)
    except (ValueError, RecursionError):
        return False, None


def try_parse_json(text: str) -> ParseAttempt:
    """Decode text, falling back to one balance repair when it does not parse."""
    ok, value = _try_decode(text)
    if ok:
        return ParseAttempt(success=True, value=value, repaired=False)

    repaired = repair_truncated_json(text)
    if repaired is not None and repaired != text:
        ok, value = _try_decode(repaired)
        if ok:
            return ParseAttempt(success=True, value=value, repaired=True)

    return ParseAttempt(success=False, value=None, repaired=False)


def stringify(value: JsonValue) -> str:
    """Render a decoded value as section content: strings verbatim, the rest as indented JSON."""
    if isinstance(value, str):
        return value
    # The indenting encoder is pure Python and recurses deeper than the compact C one.
    for indent in (2, None):
        try:
            return json.dumps(value, indent=indent, ensure_ascii=False)
        except RecursionError:
            continue
    return ""
