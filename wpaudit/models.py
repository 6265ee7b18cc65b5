from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class ScanMode(Enum):
    SINGLE_LINE = "single-line"
    WHOLE_CONTENT = "whole-content"


class CheckStatus(Enum):
    PASSED = "passed"
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


REVIEW_NOTE = (
    "This scan uses pattern matching and may produce false positives. "
    "Manual review recommended."
)


@dataclass(frozen=True)
class Rule:
    id: str
    group: str
    pattern: Pattern
    severity: Severity
    message: str
    remediation: str
    scan_mode: ScanMode = ScanMode.SINGLE_LINE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group": self.group,
            "severity": self.severity.value,
            "message": self.message,
            "remediation": self.remediation,
            "scan_mode": self.scan_mode.value,
        }


@dataclass(frozen=True)
class Finding:
    file: str
    line: int
    rule_id: str
    severity: Severity
    message: str
    remediation: str
    matched_text: str = ""

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "line": self.line,
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "remediation": self.remediation,
            "matched_text": self.matched_text,
        }


@dataclass
class ScanSummary:
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_rule: Dict[str, int] = field(default_factory=dict)  # top N, descending
    files_with_findings: int = 0
    files_scanned: int = 0
    file_limit_reached: bool = False
    unreadable_files: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "by_severity": dict(self.by_severity),
            "by_rule": dict(self.by_rule),
            "files_with_findings": self.files_with_findings,
            "files_scanned": self.files_scanned,
            "file_limit_reached": self.file_limit_reached,
            "unreadable_files": list(self.unreadable_files),
        }


@dataclass
class ScanReport:
    path: str
    files_scanned: int
    total_findings: int
    summary: ScanSummary
    findings: List[Finding] = field(default_factory=list)
    note: str = REVIEW_NOTE

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "files_scanned": self.files_scanned,
            "total_findings": self.total_findings,
            "summary": self.summary.to_dict(),
            "findings": [f.to_dict() for f in self.findings],
            "note": self.note,
        }


@dataclass
class CheckResult:
    status: CheckStatus
    message: str
    remediation: Optional[str] = None

    def __post_init__(self):
        # A passing check has nothing to fix.
        if self.status is CheckStatus.PASSED:
            self.remediation = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "remediation": self.remediation,
        }


@dataclass
class AuditCategory:
    key: str
    label: str
    checks: Dict[str, CheckResult] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "checks": {name: c.to_dict() for name, c in self.checks.items()},
        }


@dataclass
class Recommendation:
    priority: str  # critical, high, medium, low
    category: str
    check: str
    action: str

    def to_dict(self) -> dict:
        return {
            "priority": self.priority,
            "category": self.category,
            "check": self.check,
            "action": self.action,
        }


@dataclass
class AuditReport:
    wordpress_version: str
    php_version: str
    score: int
    grade: str
    summary: Dict[str, int] = field(default_factory=dict)
    categories: List[AuditCategory] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "wordpress_version": self.wordpress_version,
            "php_version": self.php_version,
            "score": self.score,
            "grade": self.grade,
            "summary": dict(self.summary),
            "categories": {c.key: c.to_dict() for c in self.categories},
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass
class ErrorResult:
    error: str
    path: str = ""
    available: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {"error": self.error}
        if self.path:
            data["path"] = self.path
        if self.available:
            data["available"] = list(self.available)
        return data
