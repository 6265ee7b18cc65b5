"""
Central configuration and tunable limits.

- Module constants are the defaults.
- Settings.from_env() lets the CI entry point and the tool dispatcher
  override them through environment variables.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Scan bounds
MAX_FILES = 500
MAX_FINDINGS = 100
TOP_RULE_TYPES = 10
SCAN_WORKERS = 4
MATCHED_TEXT_LIMIT = 200

SCANNABLE_EXTENSIONS = {".php", ".phtml", ".inc"}

SKIP_DIRS = {"vendor", "node_modules", ".git"}

# Live audit
HEADER_TIMEOUT = 10
MAX_ADMINISTRATORS = 3
AUDIT_WORKERS = 4


@dataclass
class Settings:
    wp_root: Optional[str] = None
    site_snapshot: Optional[str] = None
    max_files: int = MAX_FILES
    max_findings: int = MAX_FINDINGS
    workers: int = SCAN_WORKERS
    header_timeout: float = HEADER_TIMEOUT

    @property
    def base_dir(self) -> str:
        return self.wp_root or os.getcwd()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            wp_root=env.get("WP_ROOT") or None,
            site_snapshot=env.get("SITE_SNAPSHOT") or None,
            max_files=_int(env.get("SCAN_MAX_FILES"), MAX_FILES),
            max_findings=_int(env.get("SCAN_MAX_FINDINGS"), MAX_FINDINGS),
            workers=_int(env.get("SCAN_WORKERS"), SCAN_WORKERS),
            header_timeout=_float(env.get("HEADER_TIMEOUT"), HEADER_TIMEOUT),
        )


def _int(value: Optional[str], default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _float(value: Optional[str], default: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default
