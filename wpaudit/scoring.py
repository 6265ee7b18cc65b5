"""Turn check statuses into a score, a grade and ordered recommendations."""

import math
from typing import Dict, Iterable, List

from wpaudit.models import AuditCategory, CheckStatus, Recommendation

STATUS_POINTS = {
    CheckStatus.PASSED: 100,
    CheckStatus.INFO: 75,
    CheckStatus.WARNING: 50,
    CheckStatus.CRITICAL: 0,
}

GRADE_THRESHOLDS = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))

RECOMMENDATION_PRIORITY = {
    CheckStatus.CRITICAL: "critical",
    CheckStatus.WARNING: "high",
    CheckStatus.INFO: "medium",
}

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


def status_counts(categories: Iterable[AuditCategory]) -> Dict[str, int]:
    counts = {s.value: 0 for s in (CheckStatus.CRITICAL, CheckStatus.WARNING, CheckStatus.PASSED, CheckStatus.INFO)}
    for category in categories:
        for check in category.checks.values():
            counts[check.status.value] += 1
    return counts


def calculate_score(categories: Iterable[AuditCategory]) -> int:
    """Mean points over every check, rounded half up; 0 with no checks."""
    points = [
        STATUS_POINTS[check.status]
        for category in categories
        for check in category.checks.values()
    ]
    if not points:
        return 0
    return int(math.floor(sum(points) / len(points) + 0.5))


def grade_for(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def build_recommendations(categories: Iterable[AuditCategory]) -> List[Recommendation]:
    recommendations: List[Recommendation] = []
    for category in categories:
        for name, check in category.checks.items():
            if check.remediation is None:
                continue
            recommendations.append(Recommendation(
                priority=RECOMMENDATION_PRIORITY.get(check.status, "low"),
                category=category.label,
                check=name,
                action=check.remediation,
            ))
    return sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.priority])
