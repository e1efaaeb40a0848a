"""Quality score and grade derived from finding counts."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from snippet_check.rules.base import Finding, Severity

SEVERITY_PENALTIES: dict[Severity, int] = {
    "error": 25,
    "warning": 5,
    "suggestion": 2,
}

GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def severity_counts(findings: Iterable[Finding]) -> dict[Severity, int]:
    """Count findings per severity, including zero counts."""
    counts = Counter(finding.severity for finding in findings)
    return {severity: counts.get(severity, 0) for severity in SEVERITY_PENALTIES}


def compute_score(errors: int, warnings: int, suggestions: int) -> int:
    """Return the 0-100 quality score for the given severity counts."""
    penalty = (
        SEVERITY_PENALTIES["error"] * errors
        + SEVERITY_PENALTIES["warning"] * warnings
        + SEVERITY_PENALTIES["suggestion"] * suggestions
    )
    return _clamp(100 - penalty)


def grade_for(score: int) -> str:
    """Map a score to a letter grade."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def _clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))
