"""Apply detection rules to a single source file."""

import logging
import os
from typing import Iterable, List, Optional

from wpaudit.config import MATCHED_TEXT_LIMIT, SCANNABLE_EXTENSIONS
from wpaudit.heuristics import is_false_positive
from wpaudit.models import Finding, Rule, ScanMode
from wpaudit.rules import RULES

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("//", "#", "*")


def is_scannable(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in SCANNABLE_EXTENSIONS


def read_source(path: str) -> Optional[str]:
    """Return the file's text, or None when it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None


def relative_path(path: str, base_dir: Optional[str]) -> str:
    if not base_dir:
        return path
    base = os.path.abspath(base_dir)
    full = os.path.abspath(path)
    if full == base or not full.startswith(base.rstrip(os.sep) + os.sep):
        return path
    return os.path.relpath(full, base)


def scan_source(content: str, rel_path: str, rules: Iterable[Rule] = RULES) -> List[Finding]:
    findings: List[Finding] = []
    lines = content.split("\n")

    for rule in rules:
        if rule.scan_mode is ScanMode.WHOLE_CONTENT:
            for match in rule.pattern.finditer(content):
                line_number = content.count("\n", 0, match.start()) + 1
                findings.append(_finding(rule, rel_path, line_number, lines[line_number - 1]))
            continue

        for index, line in enumerate(lines):
            if not rule.pattern.search(line):
                continue
            if line.strip().startswith(COMMENT_PREFIXES):
                continue
            if is_false_positive(rule.id, line):
                continue
            findings.append(_finding(rule, rel_path, index + 1, line))

    return findings


def scan_file(path: str, rules: Iterable[Rule] = RULES, base_dir: Optional[str] = None) -> List[Finding]:
    """Scan one file; non-source and unreadable files yield no findings."""
    if not is_scannable(path):
        return []
    content = read_source(path)
    if content is None:
        return []
    return scan_source(content, relative_path(path, base_dir), rules)


def _finding(rule: Rule, rel_path: str, line_number: int, line: str) -> Finding:
    code = line.strip()
    if len(code) > MATCHED_TEXT_LIMIT:
        code = code[:MATCHED_TEXT_LIMIT] + "..."
    return Finding(
        file=rel_path,
        line=line_number,
        rule_id=rule.id,
        severity=rule.severity,
        message=rule.message,
        remediation=rule.remediation,
        matched_text=code,
    )
