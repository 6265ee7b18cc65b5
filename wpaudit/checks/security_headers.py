"""HTTP response headers of the site's front page."""

from typing import Callable, Dict, Optional

from wpaudit.config import HEADER_TIMEOUT
from wpaudit.models import CheckResult, CheckStatus
from wpaudit.site import ProbeError, SiteState, fetch_headers

KEY = "security_headers"
LABEL = "Security Headers"

# header -> (display name, status when missing, purpose)
SECURITY_HEADERS = {
    "x-frame-options": ("X-Frame-Options", CheckStatus.WARNING, "Clickjacking protection"),
    "x-content-type-options": ("X-Content-Type-Options", CheckStatus.WARNING, "MIME sniffing protection"),
    "strict-transport-security": ("Strict-Transport-Security (HSTS)", CheckStatus.INFO, "Force HTTPS connections"),
    "content-security-policy": ("Content-Security-Policy", CheckStatus.INFO, "XSS and injection protection"),
    "x-xss-protection": ("X-XSS-Protection", CheckStatus.INFO, "Legacy XSS filter"),
    "referrer-policy": ("Referrer-Policy", CheckStatus.INFO, "Control referrer information"),
}

Fetcher = Callable[[str, float], Dict[str, str]]


def run(site: SiteState, fetch: Optional[Fetcher] = None, timeout: float = HEADER_TIMEOUT) -> Dict[str, CheckResult]:
    fetch = fetch or fetch_headers
    url = (site.home_url or "").rstrip("/") + "/"

    if url == "/":
        return {"headers_check": CheckResult(
            CheckStatus.WARNING, "Could not check security headers: site URL is not known"
        )}

    try:
        received = fetch(url, timeout)
    except ProbeError as e:
        return {"headers_check": CheckResult(
            CheckStatus.WARNING, f"Could not check security headers: {e}"
        )}

    headers = {name.lower(): value for name, value in received.items()}
    checks: Dict[str, CheckResult] = {}

    for header, (name, missing_status, purpose) in SECURITY_HEADERS.items():
        key = header.replace("-", "_")
        if header in headers:
            checks[key] = CheckResult(CheckStatus.PASSED, f"{name} header is set: {headers[header] or 'present'}")
        else:
            checks[key] = CheckResult(
                missing_status,
                f"{name} header is missing ({purpose})",
                f"Add {name} header for {purpose}",
            )

    if "x-powered-by" in headers:
        checks["x_powered_by"] = CheckResult(
            CheckStatus.WARNING,
            f"X-Powered-By header exposes PHP version: {headers['x-powered-by']}",
            "Hide X-Powered-By header in php.ini: expose_php = Off",
        )
    else:
        checks["x_powered_by"] = CheckResult(CheckStatus.PASSED, "X-Powered-By header is hidden")

    return checks
