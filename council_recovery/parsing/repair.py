"""Balance repair for truncated JSON.

LLM responses that hit their output-token limit stop mid-structure. This
module reconstructs the closing sequence such a response is missing: it
closes an interrupted string, drops a dangling key or trailing comma, and
appends the outstanding closers in LIFO order so that ``{"a": [1`` becomes
``{"a": [1]}``.

Text with more closers than openers, or with a closer that does not match
the innermost open bracket, is treated as corrupted rather than truncated
and is never repaired.
"""

import re
from dataclasses import dataclass, field

_CLOSER_FOR = {"{": "}", "[": "]"}
_OPENER_FOR = {"}": "{", "]": "["}

_PARTIAL_UNICODE_ESCAPE = re.compile(r"(\\+)u[0-9a-fA-F]{0,3}$")


@dataclass
class _ScanState:
    """Where a single left-to-right scan of the text ended up."""

    unclosed: list[str] = field(default_factory=list)
    in_string: bool = False
    string_start: int = -1
    last_string_start: int = -1
    last_string_end: int = -1


def _scan(text: str) -> _ScanState | None:
    """Track string state and unclosed openers; None on an unmatched closer."""
    state = _ScanState()
    escaped = False

    for i, char in enumerate(text):
        if state.in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                state.in_string = False
                state.last_string_start = state.string_start
                state.last_string_end = i
            continue

        if char == '"':
            state.in_string = True
            state.string_start = i
        elif char in _CLOSER_FOR:
            state.unclosed.append(char)
        elif char in _OPENER_FOR:
            if not state.unclosed or state.unclosed[-1] != _OPENER_FOR[char]:
                return None
            state.unclosed.pop()

    return state


def trim_dangling_escape(fragment: str) -> str:
    """Drop an escape sequence cut off at the end of a string fragment."""
    match = _PARTIAL_UNICODE_ESCAPE.search(fragment)
    if match and len(match.group(1)) % 2 == 1:
        fragment = fragment[: match.start()] + match.group(1)[:-1]
    trailing = len(fragment) - len(fragment.rstrip("\\"))
    if trailing % 2 == 1:
        fragment = fragment[:-1]
    return fragment


def _is_key_position(text: str, quote_index: int, unclosed: list[str]) -> bool:
    if not unclosed or unclosed[-1] != "{":
        return False
    before = text[:quote_index].rstrip()
    return before.endswith(("{", ","))


def repair_truncated_json(text: str) -> str | None:
    """Close a truncated JSON document.

    Returns the text unchanged when nothing is left open, None when a closer
    does not match the innermost opener, and otherwise a best-effort
    reconstruction. The result is not guaranteed to decode; callers validate
    it by decoding.
    """
    state = _scan(text)
    if state is None:
        return None
    if not state.unclosed:
        return text

    if not state.in_string:
        repaired = text.rstrip()
    elif _is_key_position(text, state.string_start, state.unclosed):
        # A half-written key has no value to keep.
        repaired = text[: state.string_start].rstrip()
    else:
        repaired = trim_dangling_escape(text) + '"'

    if repaired.endswith(":"):
        head = repaired[:-1].rstrip()
        if state.last_string_end == len(head) - 1 and state.last_string_start >= 0:
            repaired = head[: state.last_string_start].rstrip()

    if repaired.endswith(","):
        repaired = repaired[:-1].rstrip()

    return repaired + "".join(_CLOSER_FOR[opener] for opener in reversed(state.unclosed))
