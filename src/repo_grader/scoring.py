"""
Overall scoring and narrative summaries.

Combines per-category results into a weighted overall score and letter
grade, and derives short strength, risk and next-step sentences from the
signals.
"""

import math
from collections.abc import Sequence

from repo_grader.schemas import CategoryResult, LetterGrade

# Minimum score for each grade, highest first
GRADE_THRESHOLDS: list[tuple[int, LetterGrade]] = [
    (85, "A"),
    (70, "B"),
    (55, "C"),
    (40, "D"),
]
STRENGTH_MIN_SCORE = 80
RISK_MAX_SCORE = 40
MAX_SIGNALS_PER_SENTENCE = 2
MAX_NEXT_STEPS = 3


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``round`` would go to even)."""
    return int(math.floor(value + 0.5))


def compute_overall_score(categories: Sequence[CategoryResult]) -> int:
    """
    Weighted mean of category scores.

    Returns 0 when there are no categories or every weight is zero.
    """
    total_weight = sum(c.weight for c in categories)
    if total_weight == 0:
        return 0
    weighted_sum = sum(c.score * c.weight for c in categories)
    return round_half_up(weighted_sum / total_weight)


def score_to_grade(score: int) -> LetterGrade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def generate_strengths(categories: Sequence[CategoryResult]) -> list[str]:
    """One sentence per high-scoring category naming its first found signals."""
    strengths = []
    for cat in categories:
        if cat.score < STRENGTH_MIN_SCORE:
            continue
        found = [s.name for s in cat.signals if s.found][:MAX_SIGNALS_PER_SENTENCE]
        if found:
            strengths.append(f"Strong {cat.label.lower()}: {', '.join(found)}")
    return strengths


def generate_risks(categories: Sequence[CategoryResult]) -> list[str]:
    """One sentence per low-scoring category naming its first missing signals."""
    risks = []
    for cat in categories:
        if cat.score >= RISK_MAX_SCORE:
            continue
        missing = [s.name for s in cat.signals if not s.found][:MAX_SIGNALS_PER_SENTENCE]
        if missing:
            risks.append(f"Weak {cat.label.lower()}: missing {', '.join(missing)}")
    return risks


def generate_next_steps(categories: Sequence[CategoryResult]) -> list[str]:
    """
    Suggest fixing the first missing signal of the weakest categories.

    Categories are ordered by ascending score (ties keep input order) and
    the lowest three are considered. A category with nothing missing
    yields no step, so fewer than three steps may come back.
    """
    steps = []
    weakest = sorted(categories, key=lambda c: c.score)[:MAX_NEXT_STEPS]
    for cat in weakest:
        missing = [s for s in cat.signals if not s.found]
        if missing:
            steps.append(f"Add {missing[0].name.lower()} to improve {cat.label.lower()} score")
    return steps
