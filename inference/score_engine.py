"""Integrity scoring: fixed deductions per violation and severity bands."""
from typing import List

from inference.violations import ViolationEvent, ViolationKind

INITIAL_SCORE = 100
MIN_SCORE = 0
MAX_SCORE = 100

DEDUCTIONS = {
    ViolationKind.FOCUS_LOST: 5,
    ViolationKind.NO_FACE: 10,
    ViolationKind.MULTIPLE_FACES: 15,
    ViolationKind.PHONE_DETECTED: 20,
    ViolationKind.NOTES_DETECTED: 15,
    ViolationKind.BOOK_DETECTED: 15,
}

# (lower bound, label, interpretation), highest band first
SEVERITY_BANDS = [
    (90, "Excellent", "Excellent - Highly trustworthy performance"),
    (75, "Good", "Good - Acceptable with minor concerns"),
    (60, "Average", "Average - Some compliance issues detected"),
    (40, "Poor", "Poor - Multiple policy violations"),
    (MIN_SCORE, "Critical", "Critical - Severe integrity concerns"),
]

RECOMMENDATION_BANDS = [
    (85, [
        "Candidate demonstrated excellent interview compliance",
        "Minimal supervision concerns identified",
        "Strongly recommended for next evaluation stage",
    ]),
    (70, [
        "Candidate showed acceptable compliance with minor issues",
        "Consider additional verification or clarification",
        "Conditionally recommended for further evaluation",
    ]),
    (50, [
        "Multiple compliance violations detected during interview",
        "Recommend re-interview under enhanced monitoring",
        "Consider alternative assessment methods if re-interview fails",
    ]),
    (MIN_SCORE, [
        "Critical integrity violations - Interview compromised",
        "Immediate re-assessment required under strict supervision",
        "Current interview results should not be considered valid",
    ]),
]


def clamp_score(score) -> int:
    return int(min(MAX_SCORE, max(MIN_SCORE, int(score))))


def _band(score, bands):
    score = clamp_score(score)
    for lower, *rest in bands:
        if score >= lower:
            return rest
    return list(bands[-1][1:])


def classify_severity(score: int) -> str:
    """Excellent / Good / Average / Poor / Critical, lower bounds inclusive."""
    return _band(score, SEVERITY_BANDS)[0]


def interpret_score(score: int) -> str:
    """Long-form interpretation line used by the report."""
    return _band(score, SEVERITY_BANDS)[1]


def recommendations_for(score: int) -> List[str]:
    return list(_band(score, RECOMMENDATION_BANDS)[0])


class ScoreEngine:
    """Applies violation deductions to a session's score."""

    def __init__(self):
        self.deductions = dict(DEDUCTIONS)

    def deduction_for(self, kind: ViolationKind) -> int:
        return self.deductions[kind]

    def apply(self, event: ViolationEvent, session) -> int:
        """
        Deduct for one event. The score only ever goes down and stops at 0.

        Returns:
            int: the session's new score
        """
        session.score = max(MIN_SCORE, clamp_score(session.score) - self.deduction_for(event.kind))
        return session.score
