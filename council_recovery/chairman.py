"""Reading the chairman agent's final response.

The chairman is asked for ===SECTION:name=== blocks; when it answers with
JSON instead (fenced, truncated or otherwise), the multi-tier recovery
parser takes over. An upstream error message is the one case that raises.
"""

import structlog

from council_recovery.core.config import get_settings
from council_recovery.core.exceptions import UpstreamErrorResponse
from council_recovery.core.logging import preview
from council_recovery.domain.sections import KnownFieldSet, RecoveryMethod, RecoveryResult
from council_recovery.parsing.orchestrator import RecoveryParser
from council_recovery.parsing.sectioned import parse_sectioned_output

logger = structlog.get_logger(__name__)


def looks_like_error_response(raw: str) -> bool:
    """True when the agent relayed a provider error (rate limit, context length, outage)."""
    return raw.startswith("Error") or "Error from" in raw


def _sectioned_result(raw: str, known_fields: KnownFieldSet) -> RecoveryResult | None:
    sections = parse_sectioned_output(raw, known_fields)
    if not sections:
        return None
    found = {section.name for section in sections}
    return RecoveryResult(
        success=True,
        method=RecoveryMethod.SECTIONED,
        sections=tuple(sections),
        raw=raw,
        diagnostics=tuple(
            f"Section '{section.name}' has no END marker and may be truncated"
            for section in sections
            if not section.complete
        ),
        missing=tuple(name for name in known_fields if name not in found),
    )


def parse_chairman_output(raw: str, known_fields: KnownFieldSet | None = None) -> RecoveryResult:
    """Recover the chairman's sections, preferring the sectioned format.

    Args:
        raw: Final response text from the chairman agent
        known_fields: Sections to look for (defaults to Settings.known_sections)

    Returns:
        RecoveryResult; method is SECTIONED when delimiter blocks were found

    Raises:
        UpstreamErrorResponse: The response is an error message, not output
    """
    settings = get_settings()
    fields = known_fields if known_fields is not None else settings.known_field_set()

    if settings.debug_logging:
        logger.debug("chairman_response_received", chars=len(raw), preview=preview(raw, settings.preview_chars))

    if looks_like_error_response(raw):
        logger.error("chairman_returned_error", preview=preview(raw, settings.preview_chars))
        raise UpstreamErrorResponse(preview(raw, settings.preview_chars))

    result = _sectioned_result(raw, fields)
    if result is None:
        logger.info("chairman_no_sectioned_format", fallback="recovery_parser")
        result = RecoveryParser(fields).parse(raw)

    for note in result.diagnostics:
        logger.info("chairman_parse_note", note=note)

    if result.success:
        logger.info(
            "chairman_output_parsed",
            method=result.method.value,
            sections=len(result.sections),
            incomplete=[s.name for s in result.sections if not s.complete],
            missing=list(result.missing),
        )
    else:
        logger.warning("chairman_output_unparsed", diagnostics=list(result.diagnostics))

    return result
