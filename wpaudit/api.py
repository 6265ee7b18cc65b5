"""Entry points offered to the assistant-tool dispatcher.

Invocation problems come back as ErrorResult values instead of exceptions;
per-file and per-probe failures are absorbed into the reports.
"""

import os
from typing import Iterable, Optional, Union

from wpaudit.aggregate import build_report
from wpaudit.audit import run_live_audit
from wpaudit.config import Settings
from wpaudit.file_scanner import is_scannable, read_source, relative_path, scan_source
from wpaudit.models import ErrorResult, ScanReport
from wpaudit.rules import RULES, list_rules, list_security_functions, select_rules
from wpaudit.walker import scan_tree

__all__ = [
    "list_rules",
    "list_security_functions",
    "resolve_path",
    "run_live_audit",
    "scan_file",
    "scan_path",
]


def resolve_path(path: str, base_dir: Optional[str] = None) -> str:
    """Absolute paths win; relative ones are tried against the WordPress root, then the cwd."""
    if os.path.isabs(path):
        return path
    relative = path.lstrip("/\\")
    for base in (base_dir, os.getcwd()):
        if base:
            candidate = os.path.join(base, relative)
            if os.path.exists(candidate):
                return candidate
    return path


def scan_path(
    path: str,
    checks: Optional[Iterable[str]] = None,
    settings: Optional[Settings] = None,
) -> Union[ScanReport, ErrorResult]:
    settings = settings or Settings()
    if not path:
        return ErrorResult(error="Path is required", path="")

    full_path = resolve_path(path, settings.base_dir)
    if not os.path.exists(full_path):
        return ErrorResult(error="Path not found", path=path)

    rules = select_rules(checks)

    if os.path.isfile(full_path):
        rel_path = relative_path(full_path, settings.base_dir)
        content = read_source(full_path) if is_scannable(full_path) else ""
        if content is None:
            return build_report(path, [], 0, unreadable_files=[rel_path],
                                max_findings=settings.max_findings)
        findings = scan_source(content, rel_path, rules) if content else []
        return build_report(path, findings, 1 if is_scannable(full_path) else 0,
                            max_findings=settings.max_findings)

    tree = scan_tree(
        full_path,
        rules,
        base_dir=settings.base_dir,
        max_files=settings.max_files,
        workers=settings.workers,
    )
    return build_report(
        path,
        tree.findings,
        tree.files_scanned,
        file_limit_reached=tree.file_limit_reached,
        unreadable_files=tree.unreadable_files,
        max_findings=settings.max_findings,
    )


def scan_file(path: str, settings: Optional[Settings] = None) -> Union[ScanReport, ErrorResult]:
    """Check one file against every rule; all findings, by severity then line."""
    settings = settings or Settings()
    full_path = resolve_path(path, settings.base_dir) if path else ""
    if not full_path or not os.path.isfile(full_path):
        return ErrorResult(error="File not found", path=path)

    rel_path = relative_path(full_path, settings.base_dir)
    content = read_source(full_path) if is_scannable(full_path) else ""
    if content is None:
        return build_report(path, [], 0, unreadable_files=[rel_path], max_findings=0)

    findings = sorted(scan_source(content, rel_path, RULES), key=lambda f: f.line) if content else []
    return build_report(path, findings, 1 if is_scannable(full_path) else 0, max_findings=0)
