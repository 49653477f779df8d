"""Tests for overall scoring and summaries."""

import pytest

from repo_grader.schemas import CategoryResult, Signal
from repo_grader.scoring import (
    compute_overall_score,
    generate_next_steps,
    generate_risks,
    generate_strengths,
    round_half_up,
    score_to_grade,
)


def category(key: str, score: int, weight: float = 0.1, found=(), missing=()) -> CategoryResult:
    signals = [Signal(name=n, found=True) for n in found] + [Signal(name=n, found=False) for n in missing]
    return CategoryResult(key=key, label=key.title(), score=score, weight=weight, signals=signals)


class TestOverallScore:
    """Tests for the weighted mean."""

    def test_equal_weights(self):
        """Test a simple average."""
        assert compute_overall_score([category("a", 100, 0.5), category("b", 50, 0.5)]) == 75

    def test_unequal_weights(self):
        """Test weights do not need to sum to one."""
        assert compute_overall_score([category("a", 100, 3), category("b", 0, 1)]) == 75

    def test_empty_and_zero_weight(self):
        """Test the zero-weight guard."""
        assert compute_overall_score([]) == 0
        assert compute_overall_score([category("a", 90, 0)]) == 0

    def test_half_rounds_up(self):
        """Test 62.5 becomes 63, not banker's rounding to 62."""
        assert compute_overall_score([category("a", 75, 1), category("b", 50, 1)]) == 63
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestGrade:
    """Tests for letter grades."""

    @pytest.mark.parametrize(
        "score,grade",
        [(95, "A"), (85, "A"), (84, "B"), (75, "B"), (70, "B"), (60, "C"), (55, "C"), (45, "D"), (40, "D"), (39, "F"), (20, "F"), (0, "F")],
    )
    def test_thresholds(self, score, grade):
        """Test grade boundaries."""
        assert score_to_grade(score) == grade


class TestSummaries:
    """Tests for strengths, risks and next steps."""

    def test_strengths(self):
        """Test high scores list up to two found signals."""
        cats = [category("docs", 90, found=["README", "Examples", "Changelog"]), category("ci", 79, found=["X"])]
        assert generate_strengths(cats) == ["Strong docs: README, Examples"]

    def test_strength_needs_found_signal(self):
        """Test a high score with nothing found yields no sentence."""
        assert generate_strengths([category("docs", 95, missing=["README"])]) == []

    def test_risks(self):
        """Test low scores list up to two missing signals."""
        cats = [category("security", 10, missing=["SECURITY.md", "CODEOWNERS", "Dependabot"]), category("ci", 40, missing=["X"])]
        assert generate_risks(cats) == ["Weak security: missing SECURITY.md, CODEOWNERS"]

    def test_next_steps_weakest_first(self):
        """Test three steps in ascending score order, ties kept stable."""
        cats = [
            category("a", 50, missing=["A thing"]),
            category("b", 10, missing=["B thing"]),
            category("c", 30, missing=["C thing"]),
            category("d", 30, missing=["D thing"]),
            category("e", 90, missing=["E thing"]),
        ]
        assert generate_next_steps(cats) == [
            "Add b thing to improve b score",
            "Add c thing to improve c score",
            "Add d thing to improve d score",
        ]

    def test_next_steps_skip_complete_categories(self):
        """Test a weak category with nothing missing yields no step."""
        cats = [category("a", 0, found=["x"]), category("b", 20, missing=["Y"])]
        assert generate_next_steps(cats) == ["Add y to improve b score"]

    def test_empty(self):
        """Test no categories means no sentences."""
        assert generate_strengths([]) == [] and generate_risks([]) == [] and generate_next_steps([]) == []
