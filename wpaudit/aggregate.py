"""Merge findings into a bounded, severity-ordered report."""

from collections import Counter
from typing import Iterable, List, Sequence

from wpaudit.config import MAX_FINDINGS, TOP_RULE_TYPES
from wpaudit.models import Finding, ScanReport, ScanSummary, Severity


def sort_findings(findings: Iterable[Finding]) -> List[Finding]:
    # sorted() is stable, so ties keep their discovery order.
    return sorted(findings, key=lambda f: f.severity.rank)


def summarize(findings: Sequence[Finding], top: int = TOP_RULE_TYPES) -> ScanSummary:
    by_severity = {s.value: 0 for s in Severity}
    by_rule: Counter = Counter()
    files = set()
    for f in findings:
        by_severity[f.severity.value] += 1
        by_rule[f.rule_id] += 1
        files.add(f.file)

    return ScanSummary(
        by_severity=by_severity,
        by_rule=dict(by_rule.most_common(top)),
        files_with_findings=len(files),
    )


def build_report(
    path: str,
    findings: Iterable[Finding],
    files_scanned: int,
    file_limit_reached: bool = False,
    unreadable_files: Sequence[str] = (),
    max_findings: int = MAX_FINDINGS,
) -> ScanReport:
    ordered = sort_findings(findings)
    summary = summarize(ordered)
    summary.files_scanned = files_scanned
    summary.file_limit_reached = file_limit_reached
    summary.unreadable_files = list(unreadable_files)

    return ScanReport(
        path=path,
        files_scanned=files_scanned,
        total_findings=len(ordered),
        summary=summary,
        findings=ordered[:max_findings] if max_findings else ordered,
    )
