"""Reader for delimiter-sectioned agent output.

Agents asked for sectioned output answer with blocks of the form::

    ===SECTION:architecture===
    ...body...
    ===END:architecture===

A block whose END marker never arrives runs to the next block (or end of
input) and is reported incomplete.
"""

import re

from council_recovery.domain.sections import KnownFieldSet, ParsedSection, SectionIssue
from council_recovery.parsing.decode import decode_json

_SECTION_START = re.compile(r"===SECTION:([A-Za-z0-9_\-]+)===")


def _section_from_block(name: str, body: str, terminated: bool) -> ParsedSection:
    try:
        parsed, decoded = decode_json(body), True
    except (ValueError, RecursionError):
        parsed, decoded = None, False
    return ParsedSection(
        name=name,
        content=body,
        parsed=parsed,
        decoded=decoded,
        complete=terminated,
        issue=None if terminated else SectionIssue.UNTERMINATED_VALUE,
    )


def parse_sectioned_output(raw: str, known_fields: KnownFieldSet | None = None) -> list[ParsedSection]:
    """Split raw output into sections; the first block of a repeated name wins.

    When known_fields is given, blocks with other names are ignored.
    """
    starts = list(_SECTION_START.finditer(raw))
    sections: dict[str, ParsedSection] = {}

    for index, match in enumerate(starts):
        name = match.group(1)
        if name in sections or (known_fields is not None and name not in known_fields):
            continue

        body_start = match.end()
        block_end = starts[index + 1].start() if index + 1 < len(starts) else len(raw)
        end_marker = raw.find(f"===END:{name}===", body_start, block_end)
        terminated = end_marker != -1
        body = raw[body_start : end_marker if terminated else block_end].strip()
        sections[name] = _section_from_block(name, body, terminated)

    return list(sections.values())
