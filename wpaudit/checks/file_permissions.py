"""Permission posture of the config file and upload storage."""

import os
import stat
from typing import Dict

from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import SiteState

KEY = "file_permissions"
LABEL = "File Permissions"

SECURE_CONFIG_MODES = {0o400, 0o440, 0o600, 0o640, 0o644}


def run(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}
    checks["wp_config_permissions"] = _check_wp_config(site)

    if os.path.exists(site.path(".htaccess")):
        checks["htaccess_exists"] = CheckResult(CheckStatus.PASSED, ".htaccess file exists")
    else:
        checks["htaccess_exists"] = CheckResult(
            CheckStatus.INFO, "No .htaccess file found (may be using nginx or other server)"
        )

    if os.path.isdir(site.uploads_dir) and os.access(site.uploads_dir, os.W_OK):
        checks["uploads_dir"] = CheckResult(CheckStatus.PASSED, "Uploads directory is writable")
    else:
        checks["uploads_dir"] = CheckResult(
            CheckStatus.WARNING, "Uploads directory is not writable - uploads will fail"
        )

    if os.path.exists(os.path.join(site.uploads_dir, "index.php")):
        checks["uploads_index"] = CheckResult(
            CheckStatus.PASSED, "Uploads directory has index.php (prevents listing)"
        )
    else:
        checks["uploads_index"] = CheckResult(
            CheckStatus.INFO,
            "Uploads directory may allow directory listing",
            "Add an empty index.php to uploads directory",
        )

    return checks


def _check_wp_config(site: SiteState) -> CheckResult:
    path = site.path("wp-config.php")
    if not os.path.exists(path):
        path = os.path.join(os.path.dirname(os.path.abspath(site.abspath)), "wp-config.php")

    try:
        mode = stat.S_IMODE(os.stat(path).st_mode) & 0o777
    except OSError:
        return CheckResult(CheckStatus.WARNING, "wp-config.php not found in expected location")

    if mode in SECURE_CONFIG_MODES:
        return CheckResult(CheckStatus.PASSED, f"wp-config.php permissions: {mode:o}")
    return CheckResult(
        CheckStatus.WARNING,
        f"wp-config.php permissions: {mode:o}",
        "Set wp-config.php permissions to 400 or 440 for better security",
    )
