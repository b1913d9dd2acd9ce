"""Tests for splitting files into analysis units.

Given-When-Then structure; no mocks needed.
"""

import pytest

from security_agent.models import AnalysisUnit
from security_agent.pipeline import estimate_tokens, plan_units, single_file_units


def files(count, size=100):
    paths = [f"src/file{i}.py" for i in range(count)]
    return paths, {p: "x" * size for p in paths}


class TestEstimateTokens:
    """Tests for the per-file token estimate."""

    def test_estimate_counts_content_overhead_and_path(self):
        """Given 400 chars of content and an 8-char path, should estimate 100 + 50 + 2."""
        assert estimate_tokens("abcd/efg", "y" * 400) == 152

    def test_empty_file_still_costs_overhead(self):
        assert estimate_tokens("", "") == 50


class TestPlanUnits:
    """Tests for the greedy batching planner."""

    def test_five_files_batch_size_two(self):
        """Given 5 files, batch size 2 and ample budget, should produce units [2, 2, 1] in order."""
        # Given
        paths, contents = files(5)

        # When
        units = plan_units(paths, contents, max_count=2, max_tokens=60000)

        # Then
        assert [len(u) for u in units] == [2, 2, 1]
        assert [p for u in units for p in u.paths] == paths

    def test_token_budget_closes_unit(self):
        """Given files that only fit one at a time, should put each in its own unit."""
        # Given - each file costs 250 + 50 + 3 tokens
        paths, contents = files(3, size=1000)

        # When
        units = plan_units(paths, contents, max_count=10, max_tokens=500)

        # Then
        assert [len(u) for u in units] == [1, 1, 1]

    def test_oversized_file_gets_its_own_unit(self):
        """Given a file over the budget between small files, should isolate it rather than drop it."""
        # Given
        paths = ["a.py", "huge.py", "b.py"]
        contents = {"a.py": "a", "huge.py": "h" * 100000, "b.py": "b"}

        # When
        units = plan_units(paths, contents, max_count=5, max_tokens=1000)

        # Then
        assert [u.paths for u in units] == [["a.py"], ["huge.py"], ["b.py"]]

    def test_missing_content_is_skipped(self):
        """Given a path with no content entry, should skip it without failing."""
        # Given
        paths = ["a.py", "missing.py", "b.py"]
        contents = {"a.py": "a", "b.py": "b"}

        # When
        units = plan_units(paths, contents, max_count=5, max_tokens=60000)

        # Then
        assert len(units) == 1
        assert units[0].paths == ["a.py", "b.py"]

    def test_no_content_at_all_gives_no_units(self):
        assert plan_units(["a.py"], {}, max_count=5, max_tokens=60000) == []

    def test_units_never_empty_and_respect_limits(self):
        """Given mixed sizes, every unit should be non-empty and within count and budget."""
        # Given
        paths = [f"f{i}.py" for i in range(12)]
        contents = {p: "z" * (i * 300) for i, p in enumerate(paths)}

        # When
        units = plan_units(paths, contents, max_count=3, max_tokens=1500)

        # Then
        for unit in units:
            assert len(unit) >= 1
            assert len(unit) <= 3
            assert unit.estimated_tokens <= 1500
        assert [p for u in units for p in u.paths] == paths

    def test_unit_count_grows_as_max_count_shrinks(self):
        """Given fixed input, fewer files per unit should never give fewer units."""
        # Given
        paths, contents = files(9)

        # When
        counts = [len(plan_units(paths, contents, max_count=n, max_tokens=60000)) for n in (9, 5, 3, 2, 1)]

        # Then
        assert counts == sorted(counts)
        assert counts[-1] == 9

    def test_zero_max_count_treated_as_one(self):
        paths, contents = files(2)
        assert [len(u) for u in plan_units(paths, contents, max_count=0, max_tokens=60000)] == [1, 1]


class TestSingleFileUnits:
    """Tests for the unbatched plan."""

    def test_one_unit_per_file_in_order(self):
        paths, contents = files(3)
        units = single_file_units(paths, contents)
        assert [u.paths for u in units] == [[p] for p in paths]
        assert all(u.is_single_file for u in units)


class TestAnalysisUnit:
    """Tests for the unit value type."""

    def test_empty_unit_rejected(self):
        with pytest.raises(ValueError):
            AnalysisUnit(files=())
