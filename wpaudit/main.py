"""Security audit orchestrator.

Scans a WordPress code tree, optionally audits the configured live site,
creates GitHub issues for critical/high findings, and sends a Telegram digest.
"""

import json
import logging
import os
import sys
from typing import List, Optional

from github import Github, GithubException

from wpaudit.api import run_live_audit, scan_path
from wpaudit.config import Settings
from wpaudit.models import AuditReport, ErrorResult, Finding, Recommendation, ScanReport, Severity
from wpaudit.site import SnapshotError, load_site
from wpaudit.telegram import SEVERITY_ICONS, send_digest


def main() -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())

    settings = Settings.from_env()
    scan_target = os.environ.get("SCAN_PATH", "") or settings.base_dir
    scan_checks = os.environ.get("SCAN_CHECKS", "")
    run_audit = os.environ.get("RUN_SITE_AUDIT", "false").lower() == "true"
    output_format = os.environ.get("OUTPUT_FORMAT", "text").lower()
    create_issues = os.environ.get("CREATE_ISSUES", "false").lower() == "true"
    repo_name = os.environ.get("REPO_NAME", "")
    github_token = os.environ.get("GITHUB_TOKEN", "")
    telegram_bot_token = os.environ.get("TELEGRAM_BOT_TOKEN", "")
    telegram_chat_id = os.environ.get("TELEGRAM_CHAT_ID", "")

    if create_issues and not (repo_name and github_token):
        print("Error: REPO_NAME and GITHUB_TOKEN are required when CREATE_ISSUES is true.")
        sys.exit(1)

    checks = [c.strip() for c in scan_checks.split(",") if c.strip()]
    text = output_format != "json"
    if text:
        print(f"🔐 Starting WordPress security scan")
        print(f"📂 Scan path: {scan_target}")
        print(f"📋 Rule groups: {', '.join(checks) if checks else 'all'}")

    report = scan_path(scan_target, checks or None, settings)
    if isinstance(report, ErrorResult):
        print(f"Error: {report.error}: {report.path}")
        sys.exit(1)

    audit: Optional[AuditReport] = None
    if run_audit:
        try:
            site = load_site(settings.site_snapshot, settings.wp_root)
        except SnapshotError as e:
            print(f"⚠️ Site audit skipped: {e}")
        else:
            audit = run_live_audit(site, settings=settings)

    if text:
        _print_summary(report)
        if audit is not None:
            _print_audit(audit)
    else:
        output = {"scan": report.to_dict()}
        if audit is not None:
            output["audit"] = audit.to_dict()
        print(json.dumps(output, indent=2))

    if create_issues:
        gh = Github(github_token)
        try:
            gh_repo = gh.get_repo(repo_name)
        except GithubException as e:
            print(f"Error accessing repo {repo_name}: {e}")
            sys.exit(1)
        recommendations = audit.recommendations if audit is not None else []
        _create_issues(gh_repo, report.findings, recommendations)

    issues_url = f"https://github.com/{repo_name}/issues?q=label%3Asecurity" if repo_name else ""
    send_digest(report, repo_name or scan_target, telegram_bot_token, telegram_chat_id, issues_url, audit)

    critical_count = report.summary.by_severity.get(Severity.CRITICAL.value, 0)
    if critical_count > 0:
        if text:
            print(f"\n⛔ {critical_count} critical finding(s) detected!")
        sys.exit(1)

    if text:
        print("\n✅ Security scan complete.")


def _print_summary(report: ScanReport) -> None:
    counts = report.summary.by_severity

    print(f"\n{'='*50}")
    print(f"📊 Scan Summary for {report.path}")
    print(f"{'='*50}")
    print(f"  🔴 Critical: {counts.get('critical', 0)}")
    print(f"  🟠 High:     {counts.get('high', 0)}")
    print(f"  🟡 Medium:   {counts.get('medium', 0)}")
    print(f"  🔵 Low:      {counts.get('low', 0)}")
    print(f"  Total:       {report.total_findings}")
    print(f"  Files:       {report.files_scanned}")
    if report.summary.file_limit_reached:
        print(f"  ⚠️  File limit reached, remaining files not scanned")
    if report.summary.unreadable_files:
        print(f"  ⚠️  Unreadable: {len(report.summary.unreadable_files)}")
    print(f"{'='*50}")

    for f in report.findings:
        print(f"  {SEVERITY_ICONS[f.severity]} {f.file}:{f.line} [{f.rule_id}] {f.message}")
    if report.total_findings > len(report.findings):
        print(f"  ... {report.total_findings - len(report.findings)} more finding(s) not shown")
    print(f"\n{report.note}")


def _print_audit(audit: AuditReport) -> None:
    print(f"\n{'='*50}")
    print(f"🛡️ Site Audit: score {audit.score}/100, grade {audit.grade}")
    print(f"{'='*50}")
    for status, count in audit.summary.items():
        print(f"  {status.capitalize():<9} {count}")
    if audit.recommendations:
        print("\nRecommendations:")
        for rec in audit.recommendations:
            print(f"  [{rec.priority}] {rec.category}: {rec.action}")


def _create_issues(gh_repo, findings: List[Finding], recommendations: List[Recommendation] = ()) -> None:
    """Create GitHub issues for critical/high findings and critical audit results."""
    actionable = [
        f for f in findings
        if f.severity in (Severity.CRITICAL, Severity.HIGH)
    ]
    urgent = [r for r in recommendations if r.priority == "critical"]
    if not actionable and not urgent:
        print("\nNo critical/high findings — no issues to create.")
        return

    _ensure_labels(gh_repo)
    existing_titles = _get_existing_issue_titles(gh_repo)

    pending = [(_finding_title(f), _format_issue_body(f), f.severity.value) for f in actionable]
    pending += [(_recommendation_title(r), _format_recommendation_body(r), "critical") for r in urgent]

    created = 0
    skipped = 0
    for title, body, severity in pending:
        if title in existing_titles:
            skipped += 1
            continue
        try:
            gh_repo.create_issue(
                title=title,
                body=body,
                labels=["security", severity],
            )
            created += 1
            existing_titles.add(title)
        except GithubException as e:
            print(f"  Failed to create issue '{title}': {e}")

    print(f"\n📝 Issues: {created} created, {skipped} skipped (duplicates)")


def _ensure_labels(gh_repo) -> None:
    """Ensure security-related labels exist."""
    desired = {
        "security": "d93f0b",
        "critical": "b60205",
        "high": "e99695",
        "medium": "fbca04",
        "low": "0e8a16",
    }
    existing = {label.name for label in gh_repo.get_labels()}
    for name, color in desired.items():
        if name not in existing:
            try:
                gh_repo.create_label(name=name, color=color)
            except GithubException:
                pass  # Label might have been created concurrently


def _get_existing_issue_titles(gh_repo) -> set:
    """Get titles of existing open issues with the security label."""
    titles = set()
    try:
        issues = gh_repo.get_issues(state="open", labels=["security"])
        for issue in issues:
            titles.add(issue.title)
    except GithubException:
        pass
    return titles


def _finding_title(finding: Finding) -> str:
    return f"[{finding.rule_id}] {finding.message} ({finding.file}:{finding.line})"


def _recommendation_title(rec: Recommendation) -> str:
    return f"[site audit] {rec.category}: {rec.check}"


def _format_issue_body(finding: Finding) -> str:
    icon = SEVERITY_ICONS.get(finding.severity, "")
    lines = [
        f"## {icon} {finding.severity.value.upper()} — {finding.rule_id}",
        "",
        f"**Description:** {finding.message}",
        "",
        f"**File:** `{finding.file}`",
        f"**Line:** {finding.line}",
    ]
    if finding.matched_text:
        lines.extend(["", "```php", finding.matched_text, "```"])
    lines.extend(["", "### Remediation", finding.remediation])
    lines.extend(["", "---", "*Pattern-based finding; review manually before acting.*"])
    return "\n".join(lines)


def _format_recommendation_body(rec: Recommendation) -> str:
    lines = [
        f"## 🔴 CRITICAL — {rec.category}",
        "",
        f"**Check:** `{rec.check}`",
        "",
        "### Remediation",
        rec.action,
    ]
    return "\n".join(lines)


if __name__ == "__main__":
    main()
