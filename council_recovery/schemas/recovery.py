"""Pydantic schemas for handing recovery results to the orchestration layer."""

from pydantic import BaseModel, Field, JsonValue

from council_recovery.domain.sections import RecoveryMethod, RecoveryResult, SectionIssue


class ParsedSectionResponse(BaseModel):
    name: str
    content: str = Field(..., description="Extracted text of the section")
    parsed: JsonValue = Field(None, description="Decoded value, null when the content did not decode")
    decoded: bool = False
    complete: bool = Field(..., description="True when decoded without any repair")
    issue: SectionIssue | None = None


class RecoveryReport(BaseModel):
    """Serializable view of a RecoveryResult."""

    success: bool
    method: RecoveryMethod
    sections: list[ParsedSectionResponse]
    diagnostics: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    raw_chars: int = Field(0, description="Length of the normalized input")

    @classmethod
    def from_result(cls, result: RecoveryResult) -> "RecoveryReport":
        return cls(
            success=result.success,
            method=result.method,
            sections=[
                ParsedSectionResponse(
                    name=section.name,
                    content=section.content,
                    parsed=section.parsed,
                    decoded=section.decoded,
                    complete=section.complete,
                    issue=section.issue,
                )
                for section in result.sections
            ],
            diagnostics=list(result.diagnostics),
            missing=list(result.missing),
            raw_chars=len(result.raw),
        )
