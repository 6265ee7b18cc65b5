"""
Live-state facts about a WordPress instance.

- SiteState is the read-only view the audit checks consume.
- Facts come from a JSON snapshot exported by the host, from the files of a
  WordPress root, or both (snapshot keys win over what the files say).
- fetch_headers() performs the single live HTTP probe.
"""

import json
import logging
import os
import re
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Set

from wpaudit.config import HEADER_TIMEOUT

logger = logging.getLogger(__name__)

USER_AGENT = "wpaudit-security-probe/1.0"

_DEFINE_RE = re.compile(
    r"""define\s*\(\s*['"](\w+)['"]\s*,\s*('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|[^)]+?)\s*\)""",
    re.IGNORECASE,
)
_TABLE_PREFIX_RE = re.compile(r"""\$table_prefix\s*=\s*['"]([^'"]*)['"]""")
_WP_VERSION_RE = re.compile(r"""\$wp_version\s*=\s*['"]([^'"]+)['"]""")

COUNT_FIELDS = ("plugin_updates", "theme_updates")
LIST_FIELDS = ("installed_plugins", "active_plugins")


class SnapshotError(Exception):
    """A site snapshot could not be loaded."""


class ProbeError(Exception):
    """A live HTTP probe failed."""


@dataclass
class UserRecord:
    id: int
    login: str
    roles: List[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return "administrator" in self.roles


@dataclass
class SiteState:
    abspath: str
    content_dir: str = ""
    uploads_dir: str = ""
    home_url: str = ""
    wp_version: str = "unknown"
    php_version: str = "unknown"
    constants: Dict[str, Any] = field(default_factory=dict)
    table_prefix: str = "wp_"
    filters: Set[str] = field(default_factory=set)
    xmlrpc_disabled: bool = False
    pings_open: bool = False
    users: List[UserRecord] = field(default_factory=list)
    core_update: Optional[str] = None  # offered version, None when current
    plugin_updates: int = 0
    theme_updates: int = 0
    installed_plugins: List[str] = field(default_factory=list)
    active_plugins: List[str] = field(default_factory=list)
    is_https: bool = False

    def __post_init__(self):
        if not self.content_dir:
            self.content_dir = os.path.join(self.abspath, "wp-content")
        if not self.uploads_dir:
            self.uploads_dir = os.path.join(self.content_dir, "uploads")

    def constant(self, name: str, default: Any = None) -> Any:
        return self.constants.get(name, default)

    def enabled(self, name: str) -> bool:
        """PHP-style ``defined(NAME) && NAME``."""
        return bool(self.constants.get(name))

    def has_filter(self, hook: str) -> bool:
        return hook in self.filters

    def path(self, *parts: str) -> str:
        return os.path.join(self.abspath, *parts)

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> "SiteState":
        if not isinstance(data, Mapping) or not data.get("abspath"):
            raise SnapshotError("Snapshot must be an object with an 'abspath' entry")
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        try:
            values["users"] = [_user(u) for u in data.get("users") or []]
            values["filters"] = set(data.get("filters") or [])
            values["constants"] = dict(data.get("constants") or {})
            for name in COUNT_FIELDS:
                if name in values:
                    values[name] = int(values[name] or 0)
            for name in LIST_FIELDS:
                if name in values:
                    values[name] = [str(item) for item in values[name] or []]
            if "is_https" not in data:
                values["is_https"] = str(data.get("home_url") or "").startswith("https://")
            return cls(**values)
        except (TypeError, ValueError, AttributeError) as e:
            raise SnapshotError(f"Malformed site snapshot: {e}") from e

    @classmethod
    def from_wordpress_root(cls, root: str, overrides: Optional[Mapping[str, Any]] = None) -> "SiteState":
        """Derive what the files of a WordPress install can tell."""
        data: Dict[str, Any] = {"abspath": root}
        config_text = _read(_locate_wp_config(root))
        if config_text:
            data["constants"] = parse_constants(config_text)
            prefix = _TABLE_PREFIX_RE.search(config_text)
            if prefix:
                data["table_prefix"] = prefix.group(1)
            home = data["constants"].get("WP_HOME") or data["constants"].get("WP_SITEURL")
            if isinstance(home, str):
                data["home_url"] = home

        version = _WP_VERSION_RE.search(_read(os.path.join(root, "wp-includes", "version.php")))
        if version:
            data["wp_version"] = version.group(1)

        plugins_dir = os.path.join(root, "wp-content", "plugins")
        if os.path.isdir(plugins_dir):
            data["installed_plugins"] = sorted(
                name for name in os.listdir(plugins_dir)
                if os.path.isdir(os.path.join(plugins_dir, name))
            )

        if overrides:
            for key, value in overrides.items():
                if key == "constants":
                    data.setdefault("constants", {}).update(value)
                else:
                    data[key] = value
        return cls.from_snapshot(data)


def load_snapshot(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise SnapshotError(f"Site snapshot not found: {path}")
    try:
        with open(path, "r", encoding="utf-8-sig") as fh:
            return json.load(fh)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno} column {e.colno})") from e


def load_site(snapshot_path: Optional[str] = None, wp_root: Optional[str] = None) -> SiteState:
    """Build a SiteState from whichever sources are configured."""
    snapshot = load_snapshot(snapshot_path) if snapshot_path else None
    if wp_root:
        return SiteState.from_wordpress_root(wp_root, overrides=snapshot)
    if snapshot is None:
        raise SnapshotError("No site snapshot or WordPress root configured")
    return SiteState.from_snapshot(snapshot)


def parse_constants(config_text: str) -> Dict[str, Any]:
    constants: Dict[str, Any] = {}
    for name, raw in _DEFINE_RE.findall(config_text):
        constants[name] = _php_literal(raw)
    return constants


def fetch_headers(url: str, timeout: float = HEADER_TIMEOUT) -> Dict[str, str]:
    """GET ``url`` and return its response headers with lowercased names.

    Error statuses still carry headers and are returned normally; only
    transport failures raise ProbeError.
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE

    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout, context=context) as resp:
            headers = resp.headers
    except urllib.error.HTTPError as e:
        headers = e.headers or {}
    except (urllib.error.URLError, OSError, ValueError) as e:
        reason = getattr(e, "reason", e)
        logger.warning("Header probe of %s failed: %s", url, reason)
        raise ProbeError(str(reason)) from e

    return {name.lower(): value for name, value in headers.items()}


def _php_literal(raw: str) -> Any:
    value = raw.strip()
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    try:
        return int(value)
    except ValueError:
        return value


def _user(entry: Any) -> UserRecord:
    if isinstance(entry, UserRecord):
        return entry
    return UserRecord(
        id=int(entry.get("id", 0)),
        login=str(entry.get("login", "")),
        roles=list(entry.get("roles", [])),
    )


def _locate_wp_config(root: str) -> str:
    path = os.path.join(root, "wp-config.php")
    if os.path.exists(path):
        return path
    # Commonly moved one level above the web root.
    return os.path.join(os.path.dirname(os.path.abspath(root)), "wp-config.php")


def _read(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as fh:
            return fh.read()
    except OSError:
        return ""
