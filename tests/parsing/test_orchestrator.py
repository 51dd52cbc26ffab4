"""Tests for multi-tier recovery orchestration.

Tests enforce:
- Tier order: whole document, repaired document, per-field extraction
- Partial results flagged through complete/issue, never exceptions
- One diagnostic per field that needed repair or failed to decode
"""
import json

import pytest

from council_recovery.domain.sections import (
    KnownFieldSet,
    RecoveryMethod,
    RecoveryResult,
    SectionIssue,
)
from council_recovery.parsing.orchestrator import RecoveryParser, recover_sections

pytestmark = pytest.mark.unit


class TestWholeDocument:
    def test_clean_json(self):
        fields = KnownFieldSet.of("executive_summary", "architecture")
        result = recover_sections('{"executive_summary":"S","architecture":{"x":1}}', fields)

        assert result.success is True
        assert result.method == RecoveryMethod.WHOLE
        assert result.names == ["executive_summary", "architecture"]
        assert all(section.complete for section in result.sections)
        assert result.section("executive_summary").content == "S"
        assert result.section("architecture").content == '{\n  "x": 1\n}'
        assert result.section("architecture").parsed == {"x": 1}
        assert result.diagnostics == ()

    @pytest.mark.parametrize(
        "document",
        [
            {"executive_summary": "A comprehensive summary"},
            {"ambiguities": [{"id": "AMB-1", "question": "What DB?"}], "security": {"auth": "JWT"}},
            {"confidence_level": 0.9, "key_risks": [], "deployment": None},
            {"user_flows": ["Login", "Checkout"], "unrelated": {"ignored": True}},
        ],
    )
    def test_round_trip_of_valid_documents(self, known_fields, document):
        result = recover_sections(json.dumps(document), known_fields)

        assert result.method == RecoveryMethod.WHOLE
        recovered = {section.name: section.parsed for section in result.sections}
        assert recovered == {name: value for name, value in document.items() if name in known_fields}

    def test_sections_follow_known_field_order(self, known_fields):
        document = {"deployment": {"platform": "AWS"}, "executive_summary": "S", "architecture": {}}
        result = recover_sections(json.dumps(document), known_fields)
        assert result.names == ["executive_summary", "architecture", "deployment"]

    def test_missing_lists_absent_names(self, parser):
        result = parser.parse('{"executive_summary": "S"}')
        assert result.missing == ("architecture", "key_risks")

    def test_fenced_json(self, parser):
        raw = "```json\n" + json.dumps({"executive_summary": "S", "architecture": {"components": ["A"]}}) + "\n```"
        result = parser.parse(raw)
        assert result.method == RecoveryMethod.WHOLE
        assert result.raw.startswith("{")

    def test_json_null_value_is_decoded(self, parser):
        section = parser.parse('{"architecture": null}').section("architecture")
        assert section.parsed is None
        assert section.decoded is True
        assert section.complete is True


class TestRepairedDocument:
    def test_fenced_and_truncated(self, parser):
        raw = '```json\n{"executive_summary": "S", "architecture": {"components": ["A"'
        result = parser.parse(raw)

        assert result.success is True
        assert result.method == RecoveryMethod.REPAIRED
        assert result.names == ["executive_summary", "architecture"]
        assert result.section("architecture").parsed == {"components": ["A"]}

    def test_only_truncated_values_are_incomplete(self, parser):
        result = parser.parse('{"executive_summary": "S", "architecture": {"components": ["A"')

        summary = result.section("executive_summary")
        architecture = result.section("architecture")
        assert summary.complete is True
        assert architecture.complete is False
        assert architecture.issue == SectionIssue.REPAIRED
        assert architecture.decoded is True

    def test_repair_is_noted(self, parser):
        result = parser.parse('{"executive_summary": "Test", "architecture": {"components": ["A"')
        assert "Truncated JSON document was repaired before decoding" in result.diagnostics

    def test_nested_key_of_same_name_does_not_mask_truncation(self):
        fields = KnownFieldSet.of("architecture", "security")
        result = recover_sections('{"architecture": {"security": "x"}, "security": {"a": [1', fields)

        assert result.method == RecoveryMethod.REPAIRED
        assert result.section("architecture").complete is True
        security = result.section("security")
        assert security.parsed == {"a": [1]}
        assert security.complete is False
        assert security.issue == SectionIssue.REPAIRED


class TestFieldExtraction:
    def test_field_level_salvage(self, parser):
        raw = '{"executive_summary": "S"} some trailing explanation text {"architecture": broken]'
        result = parser.parse(raw)

        assert result.success is True
        assert result.method == RecoveryMethod.EXTRACTED

        summary = result.section("executive_summary")
        assert summary.complete is True
        assert summary.parsed == "S"

        architecture = result.section("architecture")
        assert architecture.content == "broken"
        assert architecture.parsed is None
        assert architecture.decoded is False
        assert architecture.complete is False
        assert architecture.issue == SectionIssue.DECODE_FAILURE
        assert "Section 'architecture' extracted but JSON parse failed" in result.diagnostics

    def test_corruption_is_diagnosed(self, parser):
        raw = '{"executive_summary": "S"} some trailing explanation text {"architecture": broken]'
        result = parser.parse(raw)
        assert result.diagnostics[0].startswith("Whole-document repair refused")

    def test_trailing_garbage(self, parser):
        result = parser.parse('{"executive_summary": "Test summary", "architecture": {"x": 1}, garbage here')

        assert result.method == RecoveryMethod.EXTRACTED
        assert result.names == ["executive_summary", "architecture"]
        assert result.section("architecture").parsed == {"x": 1}
        assert result.missing == ("key_risks",)

    def test_truncated_string_field(self, parser):
        raw = '{"executive_summary": "S", "architecture": {"x": 1}} and then {"key_risks": "half'
        result = parser.parse(raw)

        risks = result.section("key_risks")
        assert result.method == RecoveryMethod.EXTRACTED
        assert risks.parsed == "half"
        assert risks.decoded is True
        assert risks.complete is False
        assert risks.issue == SectionIssue.UNTERMINATED_VALUE
        assert "Section 'key_risks' was truncated and closed by repair" in result.diagnostics

    def test_one_diagnostic_per_field_in_field_order(self, parser):
        raw = '{"executive_summary": oops, "architecture": nope} tail {"key_risks": ["a"'
        result = parser.parse(raw)

        field_notes = [d for d in result.diagnostics if d.startswith("Section")]
        assert field_notes == [
            "Section 'executive_summary' extracted but JSON parse failed",
            "Section 'architecture' extracted but JSON parse failed",
            "Section 'key_risks' was truncated and closed by repair",
        ]

    def test_list_document_falls_through(self, parser):
        result = parser.parse('[{"executive_summary": "S"}]')
        assert result.method == RecoveryMethod.EXTRACTED
        assert result.section("executive_summary").parsed == "S"
        assert result.diagnostics[0].startswith("Decoded document is a list")

    def test_differently_cased_keys_are_extracted(self, parser):
        result = parser.parse('{"Executive_Summary": "S"}')
        assert result.method == RecoveryMethod.EXTRACTED
        assert result.names == ["executive_summary"]


class TestFailure:
    def test_no_fields_located(self, parser):
        result = parser.parse("I could not produce a plan this time.")

        assert result.success is False
        assert result.method == RecoveryMethod.FAILED
        assert result.sections == ()
        assert result.diagnostics[-1] == "All parsing methods failed"
        assert result.missing == ("executive_summary", "architecture", "key_risks")

    def test_object_without_known_fields(self, parser):
        result = parser.parse('{"foo": 1}')
        assert result.method == RecoveryMethod.FAILED
        assert "Decoded document contains none of the expected sections, trying section extraction" in result.diagnostics

    def test_corrupted_field_is_diagnosed_not_missing(self):
        result = recover_sections('{"architecture": {{]', KnownFieldSet.of("architecture"))

        assert result.method == RecoveryMethod.FAILED
        assert result.missing == ()
        assert "Section 'architecture' is corrupted, repair refused" in result.diagnostics

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "```",
            "```json",
            '"' * 7,
            "}}}{{{",
            "]][[",
            '{"executive_summary": "\\',
            '{"architecture": [[}',
            bytes(range(256)).decode("latin-1") * 50,
            "{" * 1_000_000,
            "[" * 1_000_000,
        ],
    )
    def test_never_raises(self, known_fields, raw):
        result = RecoveryParser(known_fields).parse(raw)

        assert isinstance(result, RecoveryResult)
        if result.success:
            assert result.sections
        if result.method == RecoveryMethod.FAILED:
            assert result.sections == ()


class TestParser:
    def test_parser_is_reusable(self, parser):
        first = parser.parse('{"executive_summary": "one"}')
        second = parser.parse('{"architecture": {"two": 2}}')
        assert first.names == ["executive_summary"]
        assert second.names == ["architecture"]
        assert first.diagnostics == second.diagnostics == ()

    def test_functional_form_matches_parser(self, spec_fields):
        raw = '{"executive_summary": "S", "architecture": {"components": ["A"'
        assert recover_sections(raw, spec_fields) == RecoveryParser(spec_fields).parse(raw)

    def test_logs_parse_outcome(self, parser, captured_logs):
        parser.parse('{"executive_summary": "S"}')

        events = [entry for entry in captured_logs if entry["event"] == "recovery_parse_complete"]
        assert len(events) == 1
        assert events[0]["method"] == "whole"
        assert events[0]["sections"] == 1
