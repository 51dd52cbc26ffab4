"""Recovery of named sections from malformed or truncated LLM JSON output."""

from council_recovery.domain.sections import (
    DEFAULT_KNOWN_SECTIONS,
    KnownFieldSet,
    ParsedSection,
    RecoveryMethod,
    RecoveryResult,
    SectionIssue,
)
from council_recovery.parsing.orchestrator import RecoveryParser, recover_sections

__all__ = [
    "DEFAULT_KNOWN_SECTIONS",
    "KnownFieldSet",
    "ParsedSection",
    "RecoveryMethod",
    "RecoveryParser",
    "RecoveryResult",
    "SectionIssue",
    "recover_sections",
]
__version__ = "0.1.0"
