"""Tests for decoding backend responses into findings."""

import pytest

from security_agent.models import RawFinding, Severity
from security_agent.pipeline import extract_findings


BARE = """[
  {"ruleId": "SQL-001", "title": "SQL Injection", "description": "Query built from input",
   "severity": "High", "lineNumber": 12, "codeSnippet": "q = 'SELECT' + x", "remediation": "Parameterize"}
]"""


class TestExtractFindings:
    """Tests for extract_findings."""

    def test_bare_array(self):
        """Given a bare JSON array, should decode every field."""
        # When
        findings = extract_findings(BARE)

        # Then
        assert findings == [RawFinding(
            rule_id="SQL-001",
            title="SQL Injection",
            description="Query built from input",
            severity="High",
            line_number=12,
            code_snippet="q = 'SELECT' + x",
            remediation="Parameterize",
        )]

    def test_prose_around_array_is_ignored(self):
        """Given prose and a markdown fence around the array, should give the same findings as the bare array."""
        # Given
        wrapped = f"Here is my analysis:\n```json\n{BARE}\n```\nLet me know if you need more."

        # When/Then
        assert extract_findings(wrapped) == extract_findings(BARE)

    def test_field_names_are_case_insensitive(self):
        """Given oddly cased keys, should still decode them."""
        findings = extract_findings('[{"RULEID": "X-1", "Title": "t", "LINENUMBER": 4, "FilePath": "a.py"}]')

        assert findings[0].rule_id == "X-1"
        assert findings[0].title == "t"
        assert findings[0].line_number == 4
        assert findings[0].file_path == "a.py"

    def test_id_and_file_aliases(self):
        findings = extract_findings('[{"id": "A-1", "file": "src/a.py"}]')
        assert findings[0].rule_id == "A-1"
        assert findings[0].file_path == "src/a.py"

    def test_rule_id_wins_over_id(self):
        findings = extract_findings('[{"id": "alias", "ruleId": "real"}]')
        assert findings[0].rule_id == "real"

    def test_missing_fields_default(self):
        """Given an object with only a title, should fill strings with empty values."""
        finding = extract_findings('[{"title": "Only title"}]')[0]

        assert finding.description == ""
        assert finding.severity == ""
        assert finding.line_number is None
        assert finding.code_snippet is None

    def test_empty_array(self):
        assert extract_findings("No issues found: []") == []

    def test_brackets_inside_prose_before_array_break_decoding(self):
        """Given a stray '[' before the array, the first-to-last slice is not valid JSON and gives no findings."""
        assert extract_findings('See [note] then [{"title": "x"}]') == []

    @pytest.mark.parametrize("text", [
        "",
        "I could not analyze this file.",
        "] backwards [",
        "[{\"title\": \"unterminated\"",
        "[not json at all]",
        '{"title": "object, not array"}',
        '[{"title": 5}]',
        '[{"lineNumber": "twelve"}]',
        '[{"lineNumber": true}]',
        '["just a string"]',
    ])
    def test_malformed_output_gives_no_findings(self, text):
        """Given malformed backend output, should return an empty list and never raise."""
        assert extract_findings(text) == []

    def test_integral_float_line_number(self):
        assert extract_findings('[{"lineNumber": 7.0}]')[0].line_number == 7


class TestSeverityParse:
    """Tests for free-text severity parsing."""

    @pytest.mark.parametrize("text", ["Critical", "critical", "CRITICAL", "  Critical "])
    def test_case_variants_decode_to_same_level(self, text):
        assert Severity.parse(text) is Severity.CRITICAL

    @pytest.mark.parametrize("text", ["Severe", "", "P1", None, 3])
    def test_unrecognized_resolves_to_info(self, text):
        assert Severity.parse(text) is Severity.INFO

    def test_raw_finding_converts_with_parsed_severity(self):
        finding = RawFinding(rule_id="R", title="t", severity="medium").to_finding("a.py")
        assert finding.severity is Severity.MEDIUM
        assert finding.file_path == "a.py"
        assert finding.id == "R"
