"""Live configuration audit of a WordPress instance.

Each category module inspects the SiteState independently, so categories run
side by side on a small thread pool and are collected in their declared order
once all of them finish. A category that blows up is reported as a warning
rather than aborting the audit.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from wpaudit.checks import (
    configuration,
    file_permissions,
    information_disclosure,
    login_security,
    security_headers,
    updates,
    xmlrpc,
)
from wpaudit.config import AUDIT_WORKERS, Settings
from wpaudit.models import AuditCategory, AuditReport, CheckResult, CheckStatus
from wpaudit.scoring import build_recommendations, calculate_score, grade_for, status_counts
from wpaudit.site import SiteState

logger = logging.getLogger(__name__)

CHECK_MODULES = (
    information_disclosure,
    xmlrpc,
    login_security,
    configuration,
    updates,
    file_permissions,
    security_headers,
)


def run_live_audit(
    site: SiteState,
    fetch: Optional[security_headers.Fetcher] = None,
    settings: Optional[Settings] = None,
) -> AuditReport:
    settings = settings or Settings()

    def run_category(module) -> AuditCategory:
        try:
            if module is security_headers:
                checks = module.run(site, fetch=fetch, timeout=settings.header_timeout)
            else:
                checks = module.run(site)
        except Exception as e:
            logger.exception("%s checks failed", module.LABEL)
            checks = {f"{module.KEY}_error": CheckResult(
                CheckStatus.WARNING, f"Could not run {module.LABEL} checks: {e}"
            )}
        return AuditCategory(key=module.KEY, label=module.LABEL, checks=checks)

    with ThreadPoolExecutor(max_workers=AUDIT_WORKERS) as pool:
        categories = list(pool.map(run_category, CHECK_MODULES))

    score = calculate_score(categories)
    return AuditReport(
        wordpress_version=site.wp_version,
        php_version=site.php_version,
        score=score,
        grade=grade_for(score),
        summary=status_counts(categories),
        categories=categories,
        recommendations=build_recommendations(categories),
    )
