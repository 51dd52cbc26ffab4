"""Name-keyed access to recovered sections for downstream assembly.

Missing or truncated sections degrade to empty/default values with a
warning; only require() raises.
"""

from collections.abc import Iterable

import structlog
from pydantic import JsonValue

from council_recovery.core.exceptions import SectionMissingError
from council_recovery.domain.sections import ParsedSection, RecoveryResult
from council_recovery.parsing.decode import try_parse_json

logger = structlog.get_logger(__name__)


class SectionLookup:
    """Maps section names to ParsedSections."""

    def __init__(self, sections: Iterable[ParsedSection]):
        self._sections: dict[str, ParsedSection] = {}
        for section in sections:
            self._sections.setdefault(section.name, section)

    @classmethod
    def from_result(cls, result: RecoveryResult) -> "SectionLookup":
        return cls(result.sections)

    def __contains__(self, name: object) -> bool:
        return name in self._sections

    def __len__(self) -> int:
        return len(self._sections)

    def require(self, name: str) -> ParsedSection:
        section = self._sections.get(name)
        if section is None:
            raise SectionMissingError(name)
        return section

    def get(self, name: str, required: bool = False) -> str:
        """Section content, or an empty string when the section is absent."""
        section = self._sections.get(name)
        if section is None:
            if required:
                logger.warning("required_section_missing", section=name)
            return ""
        if not section.complete:
            logger.warning("section_may_be_truncated", section=name, issue=section.issue)
        return section.content

    def get_json(self, name: str, required: bool = False, default: JsonValue = None) -> JsonValue:
        """Decoded section value, re-decoding (with repair) raw content when needed."""
        section = self._sections.get(name)
        if section is not None and section.decoded:
            return section.parsed

        content = self.get(name, required)
        if not content:
            return default

        attempt = try_parse_json(content)
        if not attempt.success:
            logger.warning("section_json_parse_failed", section=name)
            return default
        if attempt.repaired:
            logger.info("section_json_auto_repaired", section=name)
        return attempt.value

    def complete_names(self) -> list[str]:
        return [name for name, section in self._sections.items() if section.complete]

    def incomplete_names(self) -> list[str]:
        return [name for name, section in self._sections.items() if not section.complete]
