"""Files and responses that leak version or account information."""

import os
from typing import Dict

from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import SiteState

KEY = "information_disclosure"
LABEL = "Information Disclosure"

SENSITIVE_FILES = {
    "readme.html": "Contains WordPress version information",
    "license.txt": "Confirms WordPress installation",
    "wp-config-sample.php": "Sample config should be removed",
}

REST_USER_FILTERS = (
    "rest_endpoints",
    "rest_user_query",
    "rest_user_collection_params",
    "rest_prepare_user",
    "rest_authentication_errors",
)


def run(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}

    for filename, reason in SENSITIVE_FILES.items():
        key = filename.replace(".", "_").replace("-", "_")
        if os.path.exists(site.path(filename)):
            checks[key] = CheckResult(
                CheckStatus.WARNING,
                f"File {filename} is accessible: {reason}",
                f"Remove or restrict access to {filename}",
            )
        else:
            checks[key] = CheckResult(CheckStatus.PASSED, f"File {filename} not accessible")

    checks["debug_log"] = _check_debug_log(site)

    if os.path.exists(site.path("wp-admin", "install.php")):
        checks["install_php"] = CheckResult(
            CheckStatus.INFO,
            "install.php exists (WordPress protects this when already installed)",
        )
    else:
        checks["install_php"] = CheckResult(CheckStatus.PASSED, "install.php not found")

    checks["rest_api_users"] = _check_rest_api_users(site)
    checks["generator_tag"] = _check_generator_tag(site)
    return checks


def _check_debug_log(site: SiteState) -> CheckResult:
    if os.path.exists(os.path.join(site.content_dir, "debug.log")):
        return CheckResult(
            CheckStatus.CRITICAL,
            "debug.log exists and may be publicly accessible",
            "Delete debug.log or move it outside web root, and add .htaccess rules to block access",
        )
    return CheckResult(CheckStatus.PASSED, "No debug.log file found")


def _check_rest_api_users(site: SiteState) -> CheckResult:
    if any(site.has_filter(hook) for hook in REST_USER_FILTERS):
        return CheckResult(CheckStatus.PASSED, "REST API users endpoint appears to be protected")
    return CheckResult(
        CheckStatus.WARNING,
        "REST API users endpoint may be publicly accessible (/wp-json/wp/v2/users)",
        "Restrict REST API access to authenticated users or disable users endpoint",
    )


def _check_generator_tag(site: SiteState) -> CheckResult:
    if site.has_filter("the_generator"):
        return CheckResult(CheckStatus.PASSED, "Generator tag is filtered")
    return CheckResult(
        CheckStatus.WARNING,
        "WordPress version exposed in generator meta tag",
        "Add remove_action('wp_head', 'wp_generator') or filter 'the_generator'",
    )
