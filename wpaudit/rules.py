"""Detection rules and security-function reference tables.

Rules are plain data: adding one means adding a row, never a branch.
Patterns flag syntactic shapes, not proven vulnerabilities.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from wpaudit.models import ErrorResult, Rule, ScanMode, Severity

_SANITIZE = "Use sanitize_text_field(), absint(), or appropriate sanitization function"
_ESCAPE = "Use esc_html(), esc_attr(), or esc_url() before output"
_PREPARE = "Use $wpdb->prepare() for all queries with variables"
_SHELL = "Avoid shell execution or use escapeshellarg() and escapeshellcmd()"


def _rule(rule_id, group, pattern, severity, message, remediation,
          flags=0, scan_mode=ScanMode.SINGLE_LINE) -> Rule:
    return Rule(
        id=rule_id,
        group=group,
        pattern=re.compile(pattern, flags),
        severity=severity,
        message=message,
        remediation=remediation,
        scan_mode=scan_mode,
    )


RULES: Tuple[Rule, ...] = (
    # Raw superglobal access
    _rule("unsanitized_get", "unsanitized_input", r"\$_GET\s*\[", Severity.HIGH,
          "Direct $_GET access without sanitization", _SANITIZE),
    _rule("unsanitized_post", "unsanitized_input", r"\$_POST\s*\[", Severity.HIGH,
          "Direct $_POST access without sanitization", _SANITIZE),
    _rule("unsanitized_request", "unsanitized_input", r"\$_REQUEST\s*\[", Severity.HIGH,
          "Direct $_REQUEST access without sanitization", _SANITIZE),
    _rule("unsanitized_server", "unsanitized_input",
          r"""\$_SERVER\s*\[\s*['"](?!REQUEST_METHOD|HTTPS|HTTP_HOST)[^\]]+['"]\s*\]""",
          Severity.MEDIUM,
          "Direct $_SERVER access - some values are user-controlled",
          "Sanitize $_SERVER values appropriately"),
    _rule("unsanitized_cookie", "unsanitized_input", r"\$_COOKIE\s*\[", Severity.HIGH,
          "Direct $_COOKIE access without sanitization",
          "Sanitize cookie values before use"),
    _rule("unsanitized_files", "unsanitized_input",
          r"""\$_FILES\s*\[.*\]\s*\[['"](?:name|type)['"]""", Severity.HIGH,
          "Using $_FILES name/type directly - can be spoofed",
          "Use wp_check_filetype_and_ext() for validation"),

    # String-built database queries
    _rule("missing_prepare_query", "sql_injection",
          r"""\$wpdb\s*->\s*query\s*\(\s*["'][^"']*\$""", Severity.CRITICAL,
          "SQL query with variable - possible SQL injection", _PREPARE),
    _rule("missing_prepare_get", "sql_injection",
          r"""\$wpdb\s*->\s*get_(?:var|row|col|results)\s*\(\s*["'][^"']*\$""",
          Severity.CRITICAL,
          "Database query with variable - possible SQL injection", _PREPARE),
    _rule("concat_in_query", "sql_injection",
          r"\$wpdb\s*->\s*(?:query|get_var|get_row|get_col|get_results)\s*\([^)]*\.\s*\$",
          Severity.CRITICAL,
          "String concatenation in database query - possible SQL injection",
          "Use $wpdb->prepare() instead of string concatenation"),

    # Unescaped output
    _rule("unescaped_echo", "xss", r"echo\s+\$(?!this\b|wpdb\b)", Severity.MEDIUM,
          "Unescaped variable in echo statement", _ESCAPE),
    _rule("unescaped_print", "xss", r"print\s+\$(?!this\b|wpdb\b)", Severity.MEDIUM,
          "Unescaped variable in print statement", _ESCAPE),
    _rule("unescaped_short_echo", "xss", r"<\?=\s*\$(?!this\b)", Severity.MEDIUM,
          "Unescaped variable in short echo tag", _ESCAPE),

    # Code and shell execution
    _rule("eval_usage", "dangerous_functions", r"\beval\s*\(", Severity.CRITICAL,
          "eval() usage detected - extremely dangerous",
          "Avoid eval() entirely - find alternative approach"),
    _rule("exec_usage", "dangerous_functions", r"\bexec\s*\(", Severity.CRITICAL,
          "exec() usage detected - potential command injection", _SHELL),
    _rule("system_usage", "dangerous_functions", r"\bsystem\s*\(", Severity.CRITICAL,
          "system() usage detected - potential command injection", _SHELL),
    _rule("passthru_usage", "dangerous_functions", r"\bpassthru\s*\(", Severity.CRITICAL,
          "passthru() usage detected - potential command injection", _SHELL),
    _rule("shell_exec_usage", "dangerous_functions", r"\bshell_exec\s*\(", Severity.CRITICAL,
          "shell_exec() usage detected - potential command injection", _SHELL),
    _rule("backtick_exec", "dangerous_functions", r"`[^`]*\$[^`]*`", Severity.CRITICAL,
          "Backtick execution with variable - potential command injection",
          "Avoid shell execution with user input"),
    _rule("unserialize_usage", "dangerous_functions", r"\bunserialize\s*\(\s*\$",
          Severity.HIGH,
          "unserialize() with variable - potential object injection",
          "Use json_decode() instead, or unserialize with allowed_classes: false"),

    # File access and inclusion
    _rule("file_get_contents_url", "file_operations", r"file_get_contents\s*\(\s*\$",
          Severity.MEDIUM,
          "file_get_contents() with variable - potential SSRF or path traversal",
          "Use wp_remote_get() for URLs, validate paths for files"),
    _rule("include_variable", "file_operations",
          r"\b(?:include|include_once|require|require_once)\s*[\(\s]+\$",
          Severity.CRITICAL,
          "Dynamic file inclusion - potential Local/Remote File Inclusion",
          "Use whitelist approach for file inclusion"),
    _rule("extract_usage", "dangerous_functions",
          r"\bextract\s*\(\s*\$_(?:GET|POST|REQUEST|COOKIE)", Severity.CRITICAL,
          "extract() with superglobal - variable injection vulnerability",
          "Never use extract() with user input"),

    # Request forgery; these shapes span lines
    _rule("missing_nonce_form", "nonce",
          r"""<form[^>]*method=["']post["'][^>]*>(?:(?!wp_nonce_field|_wpnonce).)*?</form>""",
          Severity.HIGH,
          "POST form without nonce field",
          "Add wp_nonce_field() inside the form",
          flags=re.IGNORECASE | re.DOTALL, scan_mode=ScanMode.WHOLE_CONTENT),
    # Bounded spans keep scan cost linear in file size.
    _rule("ajax_no_nonce", "nonce",
          r"wp_ajax_(?:nopriv_)?(\w+)(?:(?!\bfunction\s).){0,2000}?function\s+\w+\s*\([^)]*\)[^{;]*\{"
          r"(?:(?!check_ajax_referer|wp_verify_nonce)[^}])*\}",
          Severity.HIGH,
          "AJAX handler without nonce verification",
          "Add check_ajax_referer() at the start of handler",
          flags=re.DOTALL, scan_mode=ScanMode.WHOLE_CONTENT),
    _rule("missing_capability_check", "capability",
          r"""add_menu_page\s*\([^)]+["']manage_options["']\s*,\s*["'](\w+)["']""",
          Severity.MEDIUM,
          "Admin menu callback - verify capability check exists in callback",
          "Ensure current_user_can() check in callback function",
          flags=re.IGNORECASE),

    # Credentials
    _rule("md5_password", "credentials", r"md5\s*\(\s*\$.*password", Severity.HIGH,
          "MD5 used for password hashing - insecure",
          "Use wp_hash_password() for WordPress passwords",
          flags=re.IGNORECASE),
    _rule("hardcoded_password", "credentials",
          r"""["']password["']\s*=>\s*["'][^"']+["']""", Severity.HIGH,
          "Possible hardcoded password detected",
          "Store credentials in wp-config.php or environment variables"),
    _rule("hardcoded_api_key", "credentials",
          r"""(?:api[_-]?key|apikey|secret[_-]?key|access[_-]?token)\s*[=:]\s*["'][a-zA-Z0-9]{20,}["']""",
          Severity.HIGH,
          "Possible hardcoded API key or secret detected",
          "Store secrets in wp-config.php or environment variables",
          flags=re.IGNORECASE),

    # Debug flags
    _rule("debug_enabled", "configuration",
          r"""define\s*\(\s*["']WP_DEBUG["']\s*,\s*true\s*\)""", Severity.MEDIUM,
          "WP_DEBUG enabled - should be disabled in production",
          "Set WP_DEBUG to false in production"),
    _rule("display_errors", "configuration",
          r"""define\s*\(\s*["']WP_DEBUG_DISPLAY["']\s*,\s*true\s*\)""", Severity.HIGH,
          "WP_DEBUG_DISPLAY enabled - exposes errors publicly",
          "Set WP_DEBUG_DISPLAY to false in production"),

    # Legacy dynamic code
    _rule("preg_replace_e", "dangerous_functions",
          r"""preg_replace\s*\(\s*["'][^"']*/e["']""", Severity.CRITICAL,
          "preg_replace with /e modifier - code execution vulnerability",
          "Use preg_replace_callback() instead"),
    _rule("create_function", "dangerous_functions", r"\bcreate_function\s*\(",
          Severity.HIGH,
          "create_function() usage - deprecated and potentially dangerous",
          "Use anonymous functions (closures) instead"),
)

RULES_BY_ID: Dict[str, Rule] = {rule.id: rule for rule in RULES}

RULE_GROUPS: Dict[str, Tuple[str, ...]] = {}
for _r in RULES:
    RULE_GROUPS[_r.group] = RULE_GROUPS.get(_r.group, ()) + (_r.id,)
del _r


def select_rules(groups: Optional[Iterable[str]] = None) -> Tuple[Rule, ...]:
    """Return the rules belonging to ``groups``.

    A bare string names one group. Unknown group names are ignored. When
    nothing known was asked for the full rule set is returned, so a typo
    never silently disables scanning.
    """
    if not groups:
        return RULES
    if isinstance(groups, str):
        groups = [groups]
    wanted = set()
    for group in groups:
        wanted.update(RULE_GROUPS.get(group, ()))
    selected = tuple(rule for rule in RULES if rule.id in wanted)
    return selected or RULES


def list_rules(group: Optional[str] = None):
    if group in (None, "", "all"):
        return {
            "groups": sorted(RULE_GROUPS),
            "rules": [rule.to_dict() for rule in RULES],
        }
    if group not in RULE_GROUPS:
        return ErrorResult(error="Invalid rule group", available=sorted(RULE_GROUPS))
    return {
        "group": group,
        "rules": [RULES_BY_ID[rule_id].to_dict() for rule_id in RULE_GROUPS[group]],
    }


SECURITY_FUNCTIONS: Dict[str, Dict[str, str]] = {
    "sanitization": {
        "sanitize_text_field": "Sanitizes a string for safe database/output use. Removes tags, octets, encodes.",
        "sanitize_textarea_field": "Like sanitize_text_field but preserves newlines.",
        "sanitize_email": "Strips out all characters not allowed in an email.",
        "sanitize_file_name": "Sanitizes a filename, replacing whitespace with dashes.",
        "sanitize_html_class": "Sanitizes an HTML classname to ensure it only contains valid characters.",
        "sanitize_key": "Sanitizes a string key. Lowercase alphanumeric, dashes, underscores.",
        "sanitize_meta": "Sanitizes meta value based on meta key.",
        "sanitize_mime_type": "Sanitizes a MIME type string.",
        "sanitize_option": "Sanitizes various option values based on the option name.",
        "sanitize_sql_orderby": "Sanitizes an ORDER BY clause.",
        "sanitize_title": "Sanitizes a string into a valid title.",
        "sanitize_title_with_dashes": "Sanitizes a title, replacing whitespace with dashes.",
        "sanitize_user": "Sanitizes a username, stripping unsafe characters.",
        "sanitize_url": "Sanitizes a URL for database/redirect use.",
        "absint": "Returns the absolute integer value (positive).",
        "intval": "Returns integer value (can be negative).",
        "floatval": "Returns float value.",
        "wp_kses": "Filters content and keeps only allowed HTML elements.",
        "wp_kses_post": "Sanitizes content for allowed HTML tags for post content.",
        "wp_kses_data": "Sanitizes content with basic allowed HTML tags.",
        "wp_filter_nohtml_kses": "Strips all HTML from a text string.",
        "wp_strip_all_tags": "Properly strips all HTML tags including script and style.",
    },
    "escaping": {
        "esc_html": "Escapes for safe output in HTML context. Use for plain text.",
        "esc_attr": "Escapes for safe output in HTML attributes.",
        "esc_url": "Escapes a URL for safe output in href, src, etc.",
        "esc_url_raw": "Escapes a URL for database storage (no HTML entities).",
        "esc_js": "Escapes for safe output in JavaScript strings.",
        "esc_textarea": "Escapes for safe output in textarea elements.",
        "esc_sql": "Escapes data for use in SQL (prefer $wpdb->prepare()).",
        "esc_html__": "Retrieves translated string and escapes for HTML.",
        "esc_html_e": "Displays translated string escaped for HTML.",
        "esc_attr__": "Retrieves translated string and escapes for attributes.",
        "esc_attr_e": "Displays translated string escaped for attributes.",
        "wp_json_encode": "Encodes a variable into JSON with proper escaping.",
        "wp_specialchars_decode": "Converts HTML entities back to characters.",
    },
    "nonces": {
        "wp_create_nonce": "Creates a cryptographic nonce token.",
        "wp_verify_nonce": "Verifies that a nonce is correct and not expired.",
        "wp_nonce_field": "Outputs hidden nonce field for forms.",
        "wp_nonce_url": "Adds nonce to a URL.",
        "check_admin_referer": "Verifies nonce for admin screens.",
        "check_ajax_referer": "Verifies nonce for AJAX requests.",
        "wp_referer_field": "Outputs hidden referer field for forms.",
    },
    "capabilities": {
        "current_user_can": "Checks if current user has a specific capability.",
        "user_can": "Checks if a specific user has a capability.",
        "author_can": "Checks if post author has a capability.",
        "map_meta_cap": "Maps a capability to the primitive capabilities required.",
        "has_cap": "Checks if user has capability (method on WP_User).",
        "get_role": "Gets a role object by name.",
        "add_cap": "Adds a capability to a role.",
        "remove_cap": "Removes a capability from a role.",
    },
    "database": {
        "$wpdb->prepare": "Prepares a SQL query for safe execution with placeholders.",
        "$wpdb->insert": "Safely inserts a row into a table.",
        "$wpdb->update": "Safely updates a row in a table.",
        "$wpdb->delete": "Safely deletes a row from a table.",
        "$wpdb->replace": "Safely replaces a row in a table.",
        "$wpdb->esc_like": "Escapes special characters for use in LIKE clause.",
    },
    "validation": {
        "is_email": "Validates whether an email address is valid.",
        "wp_http_validate_url": "Validates a URL for safe HTTP requests.",
        "is_serialized": "Checks if data is serialized.",
        "is_serialized_string": "Checks if a string is serialized.",
        "wp_validate_boolean": "Validates and converts to boolean.",
        "validate_file": "Validates a file name and path.",
    },
}


def list_security_functions(category: str = "all"):
    if category in (None, "", "all"):
        return {
            "categories": list(SECURITY_FUNCTIONS),
            "functions": {name: dict(funcs) for name, funcs in SECURITY_FUNCTIONS.items()},
        }
    if category not in SECURITY_FUNCTIONS:
        return ErrorResult(error="Invalid category", available=list(SECURITY_FUNCTIONS))
    return {
        "category": category,
        "functions": dict(SECURITY_FUNCTIONS[category]),
    }


def group_names() -> List[str]:
    return sorted(RULE_GROUPS)
