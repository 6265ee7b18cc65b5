"""Administrator account hygiene."""

from typing import Dict

from wpaudit.config import MAX_ADMINISTRATORS
from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import SiteState

KEY = "login_security"
LABEL = "Login & Access Security"

COMMON_ADMIN_LOGINS = {"admin", "administrator"}


def run(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}

    checks["default_login_url"] = CheckResult(
        CheckStatus.INFO,
        "Standard login URLs in use (/wp-admin/, /wp-login.php)",
        "Consider using a security plugin to change login URLs to reduce brute force attacks",
    )

    if any(u.login.lower() in COMMON_ADMIN_LOGINS for u in site.users):
        checks["admin_username"] = CheckResult(
            CheckStatus.WARNING,
            "Common admin username exists (admin/administrator) - easy to guess",
            "Create a new administrator account with a unique username and delete the common one",
        )
    else:
        checks["admin_username"] = CheckResult(CheckStatus.PASSED, "No common admin usernames found")

    if any(u.id == 1 and u.is_admin for u in site.users):
        checks["admin_user_id_1"] = CheckResult(
            CheckStatus.INFO,
            "Administrator has user ID 1 - easily enumerable via ?author=1",
            "Consider creating a new admin user and changing user ID 1 to a non-admin role",
        )
    else:
        checks["admin_user_id_1"] = CheckResult(CheckStatus.PASSED, "Administrator is not user ID 1")

    admin_count = sum(1 for u in site.users if u.is_admin)
    if admin_count > MAX_ADMINISTRATORS:
        checks["admin_count"] = CheckResult(
            CheckStatus.WARNING,
            f"Found {admin_count} administrator account(s)",
            "Review admin accounts - limit to necessary users only and use Editor role where possible",
        )
    else:
        checks["admin_count"] = CheckResult(CheckStatus.PASSED, f"Found {admin_count} administrator account(s)")

    return checks
