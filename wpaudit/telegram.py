"""Telegram digest notification."""

import json
import logging
import urllib.error
import urllib.request
from datetime import datetime, timezone
from typing import Optional

from wpaudit.models import AuditReport, ScanReport, Severity

logger = logging.getLogger(__name__)

SEVERITY_ICONS = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🔵",
}


def send_digest(
    report: ScanReport,
    title: str,
    bot_token: str,
    chat_id: str,
    issues_url: str = "",
    audit: Optional[AuditReport] = None,
) -> bool:
    """Send a Telegram digest message summarizing a scan (and audit, if any)."""
    if not bot_token or not chat_id:
        print("Telegram credentials not configured, skipping notification.")
        return False

    message = _format_message(report, title, issues_url, audit)
    return _send_message(bot_token, chat_id, message)


def _format_message(
    report: ScanReport, title: str, issues_url: str, audit: Optional[AuditReport] = None
) -> str:
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    counts = report.summary.by_severity

    # Findings are already severity-ordered.
    top_findings = [
        f for f in report.findings if f.severity in (Severity.CRITICAL, Severity.HIGH)
    ][:5]

    lines = [
        f"🔐 Security Scan: {title}",
        f"📅 {now}",
        f"📂 {report.path} ({report.files_scanned} file(s) scanned)",
        "",
    ]
    for severity in Severity:
        lines.append(f"{SEVERITY_ICONS[severity]} {severity.value.capitalize()}: {counts.get(severity.value, 0)}")
    lines.append("")

    if top_findings:
        lines.append("⚠️ Top findings:")
        for f in top_findings:
            lines.append(f"  {SEVERITY_ICONS[f.severity]} {f.message} ({f.file}:{f.line})")
        lines.append("")

    if not report.total_findings:
        lines.append("✅ No vulnerabilities found!")
        lines.append("")

    if audit is not None:
        lines.append(f"🛡️ Site audit: {audit.score}/100 (grade {audit.grade})")
        lines.append("")

    if issues_url:
        lines.append(f"📋 Full details: {issues_url}")

    return "\n".join(lines)


def _send_message(bot_token: str, chat_id: str, message: str) -> bool:
    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    payload = json.dumps({
        "chat_id": chat_id,
        "text": message,
        "disable_web_page_preview": True,
    }).encode("utf-8")

    req = urllib.request.Request(
        url,
        data=payload,
        headers={"Content-Type": "application/json"},
    )

    try:
        with urllib.request.urlopen(req, timeout=10) as resp:
            return resp.status == 200
    except (urllib.error.URLError, urllib.error.HTTPError) as e:
        logger.warning("Failed to send Telegram message: %s", e)
        return False
