"""Shared fixtures for the wpaudit test suite."""

import os

import pytest

from wpaudit.aggregate import build_report
from wpaudit.models import Finding, Severity
from wpaudit.site import SiteState, UserRecord


# ---------------------------------------------------------------------------
# Sample PHP sources
# ---------------------------------------------------------------------------

VULNERABLE_PLUGIN = """\
<?php
/*
 * Plugin Name: Demo
 */
$id = $_GET['id'];
$wpdb->query("DELETE FROM wp_posts WHERE ID = $id");
echo $title;
eval($code);
"""

CLEAN_PLUGIN = """\
<?php
$id = absint( $_GET['id'] );
echo esc_html( $title );
$row = $wpdb->get_row( $wpdb->prepare( "SELECT * FROM t WHERE id = %d", $id ) );
"""


@pytest.fixture
def vulnerable_plugin():
    return VULNERABLE_PLUGIN


@pytest.fixture
def clean_plugin():
    return CLEAN_PLUGIN


def write_file(root, rel_path, content=""):
    path = os.path.join(str(root), rel_path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        f.write(content)
    return path


# ---------------------------------------------------------------------------
# Scanner findings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_findings():
    return [
        Finding(
            file="plugins/demo/demo.php",
            line=6,
            rule_id="missing_prepare_query",
            severity=Severity.CRITICAL,
            message="SQL query with variable - possible SQL injection",
            remediation="Use $wpdb->prepare() for all queries with variables",
            matched_text='$wpdb->query("DELETE FROM wp_posts WHERE ID = $id");',
        ),
        Finding(
            file="plugins/demo/demo.php",
            line=5,
            rule_id="unsanitized_get",
            severity=Severity.HIGH,
            message="Direct $_GET access without sanitization",
            remediation="Use sanitize_text_field(), absint(), or appropriate sanitization function",
            matched_text="$id = $_GET['id'];",
        ),
        Finding(
            file="themes/demo/header.php",
            line=12,
            rule_id="unescaped_echo",
            severity=Severity.MEDIUM,
            message="Unescaped variable in echo statement",
            remediation="Use esc_html(), esc_attr(), or esc_url() before output",
            matched_text="echo $title;",
        ),
    ]


@pytest.fixture
def sample_report(sample_findings):
    return build_report("wp-content", sample_findings, files_scanned=2)


@pytest.fixture
def empty_report():
    return build_report("wp-content", [], files_scanned=3)


# ---------------------------------------------------------------------------
# Live site fixtures
# ---------------------------------------------------------------------------

GOOD_KEYS = {
    name: "k3y-" + name.lower() + "-0123456789abcdef"
    for name in (
        "AUTH_KEY", "SECURE_AUTH_KEY", "LOGGED_IN_KEY", "NONCE_KEY",
        "AUTH_SALT", "SECURE_AUTH_SALT", "LOGGED_IN_SALT", "NONCE_SALT",
    )
}

SECURE_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "Strict-Transport-Security": "max-age=31536000",
    "Content-Security-Policy": "default-src 'self'",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@pytest.fixture
def wp_root(tmp_path):
    """A hardened WordPress install on disk."""
    root = tmp_path / "wordpress"
    root.mkdir()
    config = write_file(root, "wp-config.php", "<?php\ndefine('DISALLOW_FILE_EDIT', true);\n")
    os.chmod(config, 0o640)
    write_file(root, ".htaccess", "# BEGIN WordPress\n")
    write_file(root, "wp-content/uploads/index.php", "<?php // Silence is golden.\n")
    return str(root)


@pytest.fixture
def hardened_site(wp_root):
    constants = dict(GOOD_KEYS)
    constants.update({
        "DISALLOW_FILE_EDIT": True,
        "DISALLOW_FILE_MODS": True,
        "FORCE_SSL_ADMIN": True,
    })
    return SiteState(
        abspath=wp_root,
        home_url="https://example.com",
        wp_version="6.5.2",
        php_version="8.2.10",
        constants=constants,
        table_prefix="wpx9_",
        filters={"the_generator", "rest_authentication_errors"},
        xmlrpc_disabled=True,
        users=[UserRecord(id=1, login="editor-jane", roles=["editor"]),
               UserRecord(id=2, login="ops-lead", roles=["administrator"])],
        installed_plugins=["akismet"],
        active_plugins=["akismet/akismet.php"],
        is_https=True,
    )


@pytest.fixture
def secure_fetch():
    def fetch(url, timeout):
        return dict(SECURE_HEADERS)
    return fetch
