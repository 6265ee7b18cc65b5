"""Assistant tool definitions and dispatch.

Every tool returns a JSON-ready dict; an error is a dict with an ``error`` key.
"""

import logging
from typing import Any, Dict, List, Optional

from wpaudit import api
from wpaudit.config import Settings
from wpaudit.rules import SECURITY_FUNCTIONS, group_names
from wpaudit.site import SnapshotError, load_site

logger = logging.getLogger(__name__)


class UnknownToolError(ValueError):
    pass


def _definition(name: str, description: str, properties: Optional[dict] = None,
                required: Optional[List[str]] = None) -> dict:
    definition: Dict[str, Any] = {"name": name, "description": description}
    if properties:
        definition["inputSchema"] = {"type": "object", "properties": properties}
        if required:
            definition["inputSchema"]["required"] = required
    return definition


TOOL_DEFINITIONS = [
    _definition(
        "security_audit",
        "Scan a file or directory for common WordPress security issues. Returns potential "
        "vulnerabilities with severity, location, and recommendations. Uses pattern matching "
        "and may have false positives.",
        {
            "path": {
                "type": "string",
                "description": "File or directory path to audit (relative to WordPress root)",
            },
            "checks": {
                "type": "array",
                "description": "Specific rule groups to run (optional). Available: " + ", ".join(group_names()),
                "items": {"type": "string"},
            },
        },
        ["path"],
    ),
    _definition(
        "security_check_file",
        "Check a specific file for security issues. Returns detailed findings with line numbers.",
        {"file_path": {"type": "string", "description": "Path to the file to check"}},
        ["file_path"],
    ),
    _definition(
        "list_security_functions",
        "List WordPress security functions with descriptions, organized by category.",
        {
            "category": {
                "type": "string",
                "description": "Filter by category (optional)",
                "enum": ["all"] + list(SECURITY_FUNCTIONS),
            },
        },
    ),
    _definition(
        "list_security_rules",
        "List the static scan rules with severity, message and remediation.",
        {
            "group": {
                "type": "string",
                "description": "Filter by rule group (optional)",
                "enum": ["all"] + group_names(),
            },
        },
    ),
    _definition(
        "site_security_audit",
        "Perform a WordPress site security audit: information disclosure, XML-RPC, login "
        "security, configuration, updates, file permissions and security headers. Returns a "
        "score, a grade and prioritized recommendations.",
    ),
]

TOOL_NAMES = frozenset(d["name"] for d in TOOL_DEFINITIONS)


def handles(name: str) -> bool:
    return name in TOOL_NAMES


def execute(name: str, arguments: Optional[Dict[str, Any]] = None,
            settings: Optional[Settings] = None, fetch=None) -> Dict[str, Any]:
    arguments = arguments or {}
    settings = settings or Settings.from_env()

    if name == "security_audit":
        if not arguments.get("path"):
            return {"error": "Missing required argument: path"}
        result = api.scan_path(arguments["path"], arguments.get("checks"), settings)
    elif name == "security_check_file":
        if not arguments.get("file_path"):
            return {"error": "Missing required argument: file_path"}
        result = api.scan_file(arguments["file_path"], settings)
    elif name == "list_security_functions":
        result = api.list_security_functions(arguments.get("category") or "all")
    elif name == "list_security_rules":
        result = api.list_rules(arguments.get("group"))
    elif name == "site_security_audit":
        try:
            site = load_site(settings.site_snapshot, settings.wp_root)
        except SnapshotError as e:
            logger.warning("Site audit unavailable: %s", e)
            return {"error": f"WordPress site state is not available: {e}"}
        result = api.run_live_audit(site, fetch=fetch, settings=settings)
    else:
        raise UnknownToolError(f"Unknown tool: {name}")

    return result if isinstance(result, dict) else result.to_dict()
