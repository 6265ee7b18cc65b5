"""Legacy remote-procedure and link-back surface."""

import os
from typing import Dict

from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import SiteState

KEY = "xmlrpc"
LABEL = "XML-RPC Security"


def run(site: SiteState) -> Dict[str, CheckResult]:
    checks: Dict[str, CheckResult] = {}

    exposed = os.path.exists(site.path("xmlrpc.php")) and not site.xmlrpc_disabled
    if exposed:
        checks["xmlrpc_enabled"] = CheckResult(
            CheckStatus.WARNING,
            "XML-RPC is enabled - can be used for brute force and DDoS attacks",
            "Disable XML-RPC if not needed: add_filter('xmlrpc_enabled', '__return_false');",
        )
    else:
        checks["xmlrpc_enabled"] = CheckResult(CheckStatus.PASSED, "XML-RPC is disabled or blocked")

    if site.pings_open:
        checks["pingbacks"] = CheckResult(
            CheckStatus.WARNING,
            "Pingbacks are enabled - can be used for DDoS amplification",
            "Disable pingbacks in Settings > Discussion or via filter",
        )
    else:
        checks["pingbacks"] = CheckResult(CheckStatus.PASSED, "Pingbacks disabled")

    return checks
