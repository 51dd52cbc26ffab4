"""Structured-output recovery parsing.

Provides:
- strip_markdown_fences: Fence normalization
- repair_truncated_json: LIFO balance repair for truncated JSON
- extract_field / locate_field: Key-scoped value extraction
- RecoveryParser / recover_sections: Multi-tier orchestration
"""

from council_recovery.parsing.extract import FieldSpan, extract_field, locate_field
from council_recovery.parsing.fences import strip_markdown_fences
from council_recovery.parsing.orchestrator import RecoveryParser, recover_sections
from council_recovery.parsing.repair import repair_truncated_json

__all__ = [
    "FieldSpan",
    "RecoveryParser",
    "extract_field",
    "locate_field",
    "recover_sections",
    "repair_truncated_json",
    "strip_markdown_fences",
]
