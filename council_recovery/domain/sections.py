"""Recovery data model.

Pure value types shared by every parsing tier. Nothing here is persisted;
a RecoveryResult is created per parse call and discarded once the caller has
read its sections.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import JsonValue

DEFAULT_KNOWN_SECTIONS: tuple[str, ...] = (
    "executive_summary",
    "ambiguities",
    "consensus_notes",
    "implementation_phases",
    "architecture",
    "data_model",
    "api_contracts",
    "user_flows",
    "security",
    "deployment",
    "confidence_level",
    "key_risks",
)


class RecoveryMethod(StrEnum):
    """Which tier produced the sections of a RecoveryResult."""

    WHOLE = "whole"
    REPAIRED = "repaired"
    EXTRACTED = "extracted"
    FAILED = "failed"
    SECTIONED = "sectioned"  # ===SECTION:name=== blocks, chairman reader only


class SectionIssue(StrEnum):
    """Why a section is not complete."""

    REPAIRED = "repaired"
    UNTERMINATED_VALUE = "unterminated_value"
    DECODE_FAILURE = "decode_failure"


@dataclass(frozen=True)
class KnownFieldSet:
    """Ordered, duplicate-free set of section names a parse expects to find."""

    names: tuple[str, ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for name in self.names:
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Section names must be non-empty strings, got {name!r}")
            if name in seen:
                raise ValueError(f"Duplicate section name: {name!r}")
            seen.add(name)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "KnownFieldSet":
        """Build from any iterable, keeping the first occurrence of each name."""
        return cls(tuple(dict.fromkeys(names)))

    @classmethod
    def of(cls, *names: str) -> "KnownFieldSet":
        return cls.from_names(names)

    @classmethod
    def default(cls) -> "KnownFieldSet":
        return cls(DEFAULT_KNOWN_SECTIONS)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names


@dataclass(frozen=True)
class ParsedSection:
    """One top-level named field recovered from a response.

    content is the extracted text of the field and is always populated.
    parsed holds its decode; decoded tells a JSON null apart from "never
    decoded". complete is True only when the value decoded without repair
    and its span ended naturally.
    """

    name: str
    content: str
    parsed: JsonValue = None
    decoded: bool = False
    complete: bool = False
    issue: SectionIssue | None = None


@dataclass(frozen=True)
class RecoveryResult:
    """Outcome of one recovery parse."""

    success: bool
    method: RecoveryMethod
    sections: tuple[ParsedSection, ...]
    raw: str
    diagnostics: tuple[str, ...] = ()
    missing: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.success and not self.sections:
            raise ValueError("A successful recovery must carry at least one section")
        if self.method == RecoveryMethod.FAILED and (self.sections or self.success):
            raise ValueError("A failed recovery carries no sections")
        names = [section.name for section in self.sections]
        if len(names) != len(set(names)):
            raise ValueError(f"Section names must be unique, got {names}")

    @property
    def names(self) -> list[str]:
        return [section.name for section in self.sections]

    def section(self, name: str) -> ParsedSection | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def as_dict(self) -> dict[str, ParsedSection]:
        return {section.name: section for section in self.sections}
