"""Core, plugin and theme update currency."""

from typing import Dict

from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import SiteState

KEY = "updates"
LABEL = "Update Status"


def run(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}

    if site.core_update:
        checks["core_update"] = CheckResult(
            CheckStatus.CRITICAL,
            f"WordPress update available: {site.core_update} (current: {site.wp_version})",
            "Update WordPress core immediately for security patches",
        )
    else:
        checks["core_update"] = CheckResult(
            CheckStatus.PASSED, f"WordPress core is up to date ({site.wp_version})"
        )

    if site.plugin_updates > 0:
        checks["plugin_updates"] = CheckResult(
            CheckStatus.WARNING,
            f"{site.plugin_updates} plugin(s) have updates available",
            "Update plugins to their latest versions",
        )
    else:
        checks["plugin_updates"] = CheckResult(CheckStatus.PASSED, "All plugins are up to date")

    if site.theme_updates > 0:
        checks["theme_updates"] = CheckResult(
            CheckStatus.WARNING,
            f"{site.theme_updates} theme(s) have updates available",
            "Update themes to their latest versions",
        )
    else:
        checks["theme_updates"] = CheckResult(CheckStatus.PASSED, "All themes are up to date")

    active = {_slug(p) for p in site.active_plugins}
    inactive = len({_slug(p) for p in site.installed_plugins} - active)
    if inactive > 0:
        checks["inactive_plugins"] = CheckResult(
            CheckStatus.INFO,
            f"{inactive} inactive plugin(s) - consider removing unused plugins",
            "Remove inactive plugins to reduce attack surface",
        )
    else:
        checks["inactive_plugins"] = CheckResult(CheckStatus.PASSED, "No inactive plugins")

    return checks


def _slug(plugin: str) -> str:
    # "akismet/akismet.php" and "akismet" name the same plugin.
    return plugin.split("/", 1)[0]
