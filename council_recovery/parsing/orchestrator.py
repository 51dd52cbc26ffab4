"""Multi-tier recovery of named sections from raw LLM output.

Tiers run in a fixed order and the first one that yields sections wins:

1. Strip markdown fences.
2. Decode the whole document; if that fails, balance-repair it and decode again.
3. Locate each known field by key and decode its value on its own.

Nothing in here raises. Every failure becomes a diagnostic string plus
``complete=False`` / ``parsed=None`` on the affected section, and a result
with no sections at all is reported as ``method=failed``.
"""

import structlog
from pydantic import JsonValue

from council_recovery.domain.sections import (
    KnownFieldSet,
    ParsedSection,
    RecoveryMethod,
    RecoveryResult,
    SectionIssue,
)
from council_recovery.parsing.decode import stringify, try_parse_json
from council_recovery.parsing.extract import FieldSpan, locate_field
from council_recovery.parsing.fences import strip_markdown_fences
from council_recovery.parsing.repair import repair_truncated_json

logger = structlog.get_logger(__name__)


class RecoveryParser:
    """Recovers the sections named by a KnownFieldSet from raw responses.

    Holds no state beyond its field set, so one instance can serve any
    number of threads or tasks.
    """

    def __init__(self, known_fields: KnownFieldSet):
        self.known_fields = known_fields

    def parse(self, raw: str) -> RecoveryResult:
        text = strip_markdown_fences(raw)
        diagnostics: list[str] = []

        result = self._parse_whole(text, diagnostics)
        if result is None:
            result = self._parse_fields(text, diagnostics)

        logger.debug(
            "recovery_parse_complete",
            method=result.method.value,
            sections=len(result.sections),
            incomplete=sum(1 for s in result.sections if not s.complete),
            missing=len(result.missing),
            input_chars=len(raw),
        )
        return result

    # ---- tier 2: whole document ----

    def _parse_whole(self, text: str, diagnostics: list[str]) -> RecoveryResult | None:
        attempt = try_parse_json(text)
        if not attempt.success:
            if repair_truncated_json(text) is None:
                diagnostics.append("Whole-document repair refused: unbalanced closing bracket")
            diagnostics.append("Direct JSON parse failed, trying section extraction")
            return None

        document = attempt.value
        if not isinstance(document, dict):
            diagnostics.append(
                f"Decoded document is a {type(document).__name__}, not an object, trying section extraction"
            )
            return None

        sections = tuple(
            _section_from_document(text, name, document[name], attempt.repaired)
            for name in self.known_fields
            if name in document
        )
        if not sections:
            diagnostics.append("Decoded document contains none of the expected sections, trying section extraction")
            return None

        method = RecoveryMethod.REPAIRED if attempt.repaired else RecoveryMethod.WHOLE
        if attempt.repaired:
            diagnostics.append("Truncated JSON document was repaired before decoding")
        return RecoveryResult(
            success=True,
            method=method,
            sections=sections,
            raw=text,
            diagnostics=tuple(diagnostics),
            missing=tuple(name for name in self.known_fields if name not in document),
        )

    # ---- tier 3: per-field extraction ----

    def _parse_fields(self, text: str, diagnostics: list[str]) -> RecoveryResult:
        sections: list[ParsedSection] = []
        missing: list[str] = []

        for name in self.known_fields:
            span = locate_field(text, name)
            if span is None:
                missing.append(name)
                continue
            if span.corrupted:
                diagnostics.append(f"Section '{name}' is corrupted, repair refused")
                continue
            section, diagnostic = _section_from_span(span)
            sections.append(section)
            if diagnostic:
                diagnostics.append(diagnostic)

        if not sections:
            diagnostics.append("All parsing methods failed")
            return RecoveryResult(
                success=False,
                method=RecoveryMethod.FAILED,
                sections=(),
                raw=text,
                diagnostics=tuple(diagnostics),
                missing=tuple(missing),
            )

        return RecoveryResult(
            success=True,
            method=RecoveryMethod.EXTRACTED,
            sections=tuple(sections),
            raw=text,
            diagnostics=tuple(diagnostics),
            missing=tuple(missing),
        )


def _section_from_document(text: str, name: str, value: JsonValue, repaired: bool) -> ParsedSection:
    # After a whole-document repair only the top-level values the repair touched are incomplete.
    complete = True
    if repaired:
        span = locate_field(text, name, top_level=True)
        complete = span is not None and span.terminated
    return ParsedSection(
        name=name,
        content=stringify(value),
        parsed=value,
        decoded=True,
        complete=complete,
        issue=None if complete else SectionIssue.REPAIRED,
    )


def _section_from_span(span: FieldSpan) -> tuple[ParsedSection, str | None]:
    attempt = try_parse_json(span.text)
    parsed: JsonValue = attempt.value if attempt.success else None

    if not attempt.success:
        issue = SectionIssue.DECODE_FAILURE
        diagnostic = f"Section '{span.name}' extracted but JSON parse failed"
    elif attempt.repaired:
        issue = SectionIssue.REPAIRED
        diagnostic = f"Section '{span.name}' JSON was repaired"
    elif not span.terminated:
        issue = SectionIssue.UNTERMINATED_VALUE
        diagnostic = f"Section '{span.name}' was truncated and closed by repair"
    else:
        issue = None
        diagnostic = None

    section = ParsedSection(
        name=span.name,
        content=span.text,
        parsed=parsed,
        decoded=attempt.success,
        complete=issue is None,
        issue=issue,
    )
    return section, diagnostic


def recover_sections(raw: str, known_fields: KnownFieldSet) -> RecoveryResult:
    """Functional form of RecoveryParser(known_fields).parse(raw)."""
    return RecoveryParser(known_fields).parse(raw)
