"""Tests for matching backend-claimed paths to submitted paths."""

import pytest

from security_agent.pipeline import match_file_path, normalize_path


VALID = ["src/Api/UserController.cs", "src/A.cs", "lib/db/query.py"]


class TestMatchFilePath:
    """Tests for match_file_path."""

    @pytest.mark.parametrize("path", VALID)
    def test_verbatim_path_matches_itself(self, path):
        assert match_file_path(path, VALID) == path

    def test_backslashes_and_case_are_ignored(self):
        """Given a Windows-style claim, should match the forward-slash path."""
        assert match_file_path("src\\A.cs", ["src/A.cs"]) == "src/A.cs"
        assert match_file_path("SRC/a.CS", ["src/A.cs"]) == "src/A.cs"

    def test_shorter_suffix_matches_longer_path(self):
        """Given a shorter relative form, should match the submitted path ending with it."""
        assert match_file_path("db/query.py", VALID) == "lib/db/query.py"
        assert match_file_path("usercontroller.cs", VALID) == "src/Api/UserController.cs"

    def test_equality_preferred_over_suffix(self):
        """Given a claim equal to one path and a suffix of another, equality should win."""
        valid = ["x/a.cs", "a.cs"]
        assert match_file_path("A.CS", valid) == "a.cs"

    def test_first_suffix_match_wins(self):
        assert match_file_path("a.cs", ["one/a.cs", "two/a.cs"]) == "one/a.cs"

    @pytest.mark.parametrize("claimed", [None, "", "   ", "other/file.cs"])
    def test_no_match(self, claimed):
        assert match_file_path(claimed, VALID) is None


class TestNormalizePath:

    def test_normalize(self):
        assert normalize_path("Src\\Api\\X.CS") == "src/api/x.cs"
