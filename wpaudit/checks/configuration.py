"""wp-config.php constants and transport security."""

from typing import Dict

from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import SiteState

KEY = "configuration"
LABEL = "Configuration Security"

SECURITY_KEYS = (
    "AUTH_KEY", "SECURE_AUTH_KEY", "LOGGED_IN_KEY", "NONCE_KEY",
    "AUTH_SALT", "SECURE_AUTH_SALT", "LOGGED_IN_SALT", "NONCE_SALT",
)
PLACEHOLDER_KEY = "put your unique phrase here"
DEFAULT_TABLE_PREFIX = "wp_"


def run(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}
    checks.update(_check_debug_flags(site))

    if site.enabled("DISALLOW_FILE_EDIT"):
        checks["file_edit_disabled"] = CheckResult(CheckStatus.PASSED, "File editing is disabled")
    else:
        checks["file_edit_disabled"] = CheckResult(
            CheckStatus.WARNING,
            "Theme/plugin editor is enabled - security risk",
            "Add define('DISALLOW_FILE_EDIT', true); to wp-config.php",
        )

    if site.enabled("DISALLOW_FILE_MODS"):
        checks["file_mods_disabled"] = CheckResult(
            CheckStatus.PASSED, "File modifications disabled (updates via dashboard blocked)"
        )
    else:
        checks["file_mods_disabled"] = CheckResult(CheckStatus.INFO, "File modifications allowed")

    if site.enabled("FORCE_SSL_ADMIN"):
        checks["force_ssl_admin"] = CheckResult(CheckStatus.PASSED, "SSL is forced for admin")
    else:
        checks["force_ssl_admin"] = CheckResult(
            CheckStatus.WARNING,
            "FORCE_SSL_ADMIN not set",
            "Add define('FORCE_SSL_ADMIN', true); to wp-config.php",
        )

    if site.is_https:
        checks["https_active"] = CheckResult(CheckStatus.PASSED, "Site is using HTTPS")
    else:
        checks["https_active"] = CheckResult(
            CheckStatus.CRITICAL,
            "Site is NOT using HTTPS",
            "Configure SSL certificate and redirect all traffic to HTTPS",
        )

    checks["security_keys"] = _check_security_keys(site)

    if site.table_prefix == DEFAULT_TABLE_PREFIX:
        checks["table_prefix"] = CheckResult(
            CheckStatus.INFO,
            "Using default table prefix (wp_)",
            "Consider using a custom table prefix for new installations",
        )
    else:
        checks["table_prefix"] = CheckResult(
            CheckStatus.PASSED, f"Using custom table prefix ({site.table_prefix})"
        )

    checks["auto_update_core"] = _check_auto_update(site)
    return checks


def _check_debug_flags(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}

    if site.enabled("WP_DEBUG"):
        checks["wp_debug"] = CheckResult(
            CheckStatus.WARNING,
            "WP_DEBUG is enabled",
            "Set WP_DEBUG to false in production: define('WP_DEBUG', false);",
        )
    else:
        checks["wp_debug"] = CheckResult(CheckStatus.PASSED, "WP_DEBUG is disabled")

    if site.enabled("WP_DEBUG_DISPLAY"):
        checks["wp_debug_display"] = CheckResult(
            CheckStatus.CRITICAL,
            "WP_DEBUG_DISPLAY is enabled - errors shown publicly!",
            "Disable immediately: define('WP_DEBUG_DISPLAY', false);",
        )
    else:
        checks["wp_debug_display"] = CheckResult(CheckStatus.PASSED, "WP_DEBUG_DISPLAY is disabled")

    if site.enabled("WP_DEBUG_LOG"):
        checks["wp_debug_log"] = CheckResult(
            CheckStatus.INFO,
            "WP_DEBUG_LOG is enabled - ensure debug.log is protected",
            "Ensure debug.log is not publicly accessible and is regularly cleared",
        )
    else:
        checks["wp_debug_log"] = CheckResult(CheckStatus.PASSED, "WP_DEBUG_LOG is disabled")

    return checks


def _check_security_keys(site: SiteState) -> CheckResult:
    missing = [
        name for name in SECURITY_KEYS
        if site.constant(name) in (None, "", PLACEHOLDER_KEY)
    ]
    if not missing:
        return CheckResult(CheckStatus.PASSED, "All security keys are properly defined")
    return CheckResult(
        CheckStatus.CRITICAL,
        "Security keys missing or using default values: " + ", ".join(missing),
        "Generate unique keys at https://api.wordpress.org/secret-key/1.1/salt/",
    )


def _check_auto_update(site: SiteState) -> CheckResult:
    # WordPress applies minor releases automatically unless told otherwise.
    setting = site.constant("WP_AUTO_UPDATE_CORE", "minor")
    if setting is True:
        label = "all updates"
    elif setting == "minor":
        label = "minor updates only"
    elif setting is False:
        label = "disabled"
    else:
        label = str(setting)

    status = CheckStatus.PASSED if setting is True or setting == "minor" else CheckStatus.INFO
    return CheckResult(status, f"Auto-update core: {label}")
