"""Tests for keeping findings in enabled rule categories."""

from security_agent.pipeline import RuleFilter, matches_category, normalize_text

from .helpers import make_finding


class TestNormalizeText:

    def test_normalize(self):
        assert normalize_text("Authentication & Authorization") == "authentication and authorization"
        assert normalize_text("CORS-Mis_config") == "cors mis config"
        assert normalize_text(None) == ""


class TestMatchesCategory:
    """Tests for the keyword and substring rules."""

    def test_category_word_in_title(self):
        """Given 'Injection' in the title, should match the SQL Injection category."""
        finding = make_finding(title="Possible injection via query string")
        assert matches_category(finding, "SQL Injection")

    def test_category_word_in_description(self):
        finding = make_finding(title="Unsafe query", description="Credentials are hardcoded in source")
        assert matches_category(finding, "Hardcoded Secrets")

    def test_category_word_in_identifier(self):
        finding = make_finding(title="Problem", description="", finding_id="CRYPTOGRAPHY-WEAK")
        assert matches_category(finding, "Insecure Cryptography")

    def test_short_words_are_ignored(self):
        """Given only 'SQL' in common, a 3-letter word should not count as a match."""
        finding = make_finding(title="SQL usage", description="plain", finding_id="X-1")
        assert not matches_category(finding, "SQL Tampering")

    def test_title_contained_in_category(self):
        finding = make_finding(title="CORS", description="", finding_id="X")
        assert matches_category(finding, "CORS Misconfiguration")

    def test_ampersand_normalization(self):
        finding = make_finding(title="Authentication and authorization bypass", finding_id="X")
        assert matches_category(finding, "Authentication & Authorization")

    def test_unrelated_finding(self):
        finding = make_finding(title="Slow loop", description="Performance issue", finding_id="PERF-1")
        assert not matches_category(finding, "SQL Injection")

    def test_empty_title_does_not_match_everything(self):
        finding = make_finding(title="", description="", finding_id="")
        assert not matches_category(finding, "Input Validation")


class TestRuleFilter:
    """Tests for RuleFilter."""

    def test_keeps_matching_and_drops_others(self):
        """Given one matching and one unrelated finding, should keep only the matching one."""
        # Given
        sql = make_finding(title="SQL Injection in login")
        perf = make_finding(title="Slow loop", description="Performance issue", finding_id="PERF-1")
        rule_filter = RuleFilter({"SQL Injection"})

        # When
        kept = rule_filter.apply([sql, perf])

        # Then
        assert kept == [sql]

    def test_disabled_filter_keeps_everything(self):
        perf = make_finding(title="Slow loop", description="Performance issue", finding_id="PERF-1")
        assert RuleFilter({"SQL Injection"}, enabled=False).apply([perf]) == [perf]

    def test_no_enabled_categories_keeps_everything(self):
        perf = make_finding(title="Slow loop", description="Performance issue", finding_id="PERF-1")
        rule_filter = RuleFilter(set())

        assert not rule_filter.active
        assert rule_filter.apply([perf]) == [perf]

    def test_refiltering_is_idempotent(self):
        """Given already filtered findings, filtering again should change nothing."""
        # Given
        findings = [
            make_finding(title="SQL Injection in login"),
            make_finding(title="Hardcoded password", description="Secrets in code", finding_id="SEC-2"),
            make_finding(title="Slow loop", description="Performance issue", finding_id="PERF-1"),
        ]
        rule_filter = RuleFilter({"SQL Injection", "Hardcoded Secrets"})

        # When
        once = rule_filter.apply(findings)
        twice = rule_filter.apply(once)

        # Then
        assert twice == once
        assert len(once) == 2
