"""Recursive discovery and scanning of source trees."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from wpaudit.config import MAX_FILES, SCAN_WORKERS, SKIP_DIRS
from wpaudit.file_scanner import is_scannable, read_source, relative_path, scan_source
from wpaudit.models import Finding, Rule
from wpaudit.rules import RULES

logger = logging.getLogger(__name__)


@dataclass
class TreeScan:
    findings: List[Finding] = field(default_factory=list)
    files_scanned: int = 0
    file_limit_reached: bool = False
    unreadable_files: List[str] = field(default_factory=list)


def discover_files(root: str, max_files: int = MAX_FILES) -> Tuple[List[str], bool]:
    """Return up to ``max_files`` scannable paths under ``root`` in sorted order.

    Dependency directories are pruned before descent. The flag tells whether
    more eligible files existed than were returned.
    """
    found: List[str] = []
    for current, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
        for filename in sorted(files):
            if not is_scannable(filename):
                continue
            if len(found) >= max_files:
                logger.info("File limit of %d reached under %s", max_files, root)
                return found, True
            found.append(os.path.join(current, filename))
    return found, False


def scan_tree(
    root: str,
    rules: Iterable[Rule] = RULES,
    base_dir: Optional[str] = None,
    max_files: int = MAX_FILES,
    workers: int = SCAN_WORKERS,
) -> TreeScan:
    rules = tuple(rules)
    paths, limited = discover_files(root, max_files)
    result = TreeScan(file_limit_reached=limited)

    def scan_one(path: str):
        content = read_source(path)
        rel_path = relative_path(path, base_dir)
        if content is None:
            return rel_path, None
        return rel_path, scan_source(content, rel_path, rules)

    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(scan_one, paths))
    else:
        outcomes = [scan_one(path) for path in paths]

    for rel_path, findings in outcomes:
        if findings is None:
            result.unreadable_files.append(rel_path)
            continue
        result.files_scanned += 1
        result.findings.extend(findings)

    return result
