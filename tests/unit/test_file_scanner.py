"""Tests for wpaudit.file_scanner — single-file rule application."""

import os
import tempfile
import time
from unittest.mock import patch

from wpaudit.file_scanner import relative_path, scan_file, scan_source
from wpaudit.models import Severity
from wpaudit.rules import RULES_BY_ID, select_rules


def _scan_text(text: str, filename: str = "test.php", rules=None):
    """Helper: write text to a temp dir and scan the single file."""
    with tempfile.TemporaryDirectory() as tmp:
        filepath = os.path.join(tmp, filename)
        with open(filepath, "w") as f:
            f.write(text)
        if rules is None:
            return scan_file(filepath, base_dir=tmp)
        return scan_file(filepath, rules, base_dir=tmp)


def _ids(findings):
    return sorted(f.rule_id for f in findings)


class TestLineMode:
    def test_three_line_scenario(self):
        rules = [RULES_BY_ID["unsanitized_get"], RULES_BY_ID["unescaped_echo"]]
        findings = _scan_text("$_GET['id'];\n// $_GET['x'];\necho $name;", rules=rules)
        assert len(findings) == 2
        by_line = {f.line: f.rule_id for f in findings}
        assert by_line == {1: "unsanitized_get", 3: "unescaped_echo"}

    def test_comment_lines_skipped(self):
        text = "<?php\n// eval($x);\n# eval($y);\n * eval($z);\n"
        assert _scan_text(text) == []

    def test_trailing_comment_not_skipped(self):
        findings = _scan_text("<?php\neval($x); // legacy\n")
        assert _ids(findings) == ["eval_usage"]

    def test_sanitized_input_suppressed(self):
        findings = _scan_text("<?php\n$id = absint( $_GET['id'] );\n")
        assert findings == []

    def test_unsanitized_input_reported(self):
        findings = _scan_text("<?php\n$id = $_GET['id'];\n")
        assert _ids(findings) == ["unsanitized_get"]
        assert findings[0].severity == Severity.HIGH

    def test_one_line_many_findings(self):
        findings = _scan_text("<?php\neval( $_POST['code'] );\n")
        assert _ids(findings) == ["eval_usage", "unsanitized_post"]

    def test_clean_file(self, clean_plugin):
        assert _scan_text(clean_plugin) == []

    def test_vulnerable_file(self, vulnerable_plugin):
        findings = _scan_text(vulnerable_plugin)
        assert _ids(findings) == [
            "eval_usage", "missing_prepare_query", "unescaped_echo", "unsanitized_get",
        ]

    def test_finding_metadata(self):
        findings = _scan_text("<?php\n\n    $out = shell_exec( $cmd );\n", "run.php")
        assert len(findings) == 1
        f = findings[0]
        assert f.file == "run.php"
        assert f.line == 3
        assert f.rule_id == "shell_exec_usage"
        assert f.matched_text == "$out = shell_exec( $cmd );"
        assert f.remediation

    def test_long_lines_truncated(self):
        line = "eval($x); " + "a" * 500
        findings = scan_source(line, "x.php")
        assert len(findings[0].matched_text) == 203
        assert findings[0].matched_text.endswith("...")


class TestWholeContentMode:
    def test_form_without_nonce(self):
        text = '<?php ?>\n<div>\n<form method="post" action="">\n<input name="a">\n</form>\n'
        findings = _scan_text(text)
        assert _ids(findings) == ["missing_nonce_form"]
        assert findings[0].line == 3

    def test_form_with_nonce_passes(self):
        text = "<form method='POST'>\n<?php wp_nonce_field( 'save' ); ?>\n</form>\n"
        assert _scan_text(text) == []

    def test_get_form_ignored(self):
        assert _scan_text('<form method="get">\n<input>\n</form>\n') == []

    def test_each_form_reported(self):
        text = (
            '<form method="post">\n</form>\n'
            '<form method="post">\n<?php wp_nonce_field(); ?>\n</form>\n'
            '<form method="post">\n</form>\n'
        )
        findings = [f for f in _scan_text(text) if f.rule_id == "missing_nonce_form"]
        assert [f.line for f in findings] == [1, 6]

    def test_ajax_handler_without_nonce(self):
        text = (
            "<?php\n"
            "add_action( 'wp_ajax_save_thing', 'save_thing' );\n"
            "function save_thing() {\n"
            "    update_option( 'thing', 1 );\n"
            "}\n"
        )
        findings = _scan_text(text)
        assert _ids(findings) == ["ajax_no_nonce"]
        assert findings[0].line == 2

    def test_ajax_handler_with_nonce_passes(self):
        text = (
            "<?php\n"
            "add_action( 'wp_ajax_save_thing', 'save_thing' );\n"
            "function save_thing() {\n"
            "    check_ajax_referer( 'save' );\n"
            "}\n"
        )
        assert _scan_text(text) == []

    def test_ajax_handler_with_return_type(self):
        text = (
            "<?php\n"
            "add_action( 'wp_ajax_nopriv_ping', 'ping' );\n"
            "function ping(): void {\n"
            "    wp_send_json( get_option( 'x' ) );\n"
            "}\n"
        )
        findings = _scan_text(text, rules=[RULES_BY_ID["ajax_no_nonce"]])
        assert [f.line for f in findings] == [2]

    def test_many_protected_ajax_handlers_scan_quickly(self):
        handler = (
            "add_action( 'wp_ajax_save_{n}', 'save_{n}' );\n"
            "function save_{n}() {{\n"
            "    check_ajax_referer( 'save_{n}' );\n"
            "    update_option( 'opt_{n}', absint( $_POST['v'] ) );\n"
            "}}\n"
        )
        source = "<?php\n" + "".join(handler.format(n=i) for i in range(200))
        start = time.monotonic()
        findings = scan_source(source, "plugin.php", [RULES_BY_ID["ajax_no_nonce"]])
        assert findings == []
        assert time.monotonic() - start < 2.0

    def test_unprotected_handler_found_among_protected_ones(self):
        protected = (
            "add_action( 'wp_ajax_ok_{n}', 'ok_{n}' );\n"
            "function ok_{n}() {{\n"
            "    check_ajax_referer( 'ok' );\n"
            "}}\n"
        )
        source = "<?php\n" + "".join(protected.format(n=i) for i in range(100))
        line = source.count("\n") + 1
        source += "add_action( 'wp_ajax_bad', 'bad' );\nfunction bad() {\n    delete_option( 'x' );\n}\n"
        findings = scan_source(source, "plugin.php", [RULES_BY_ID["ajax_no_nonce"]])
        assert [f.line for f in findings] == [line]

    def test_comments_not_skipped_in_whole_content_mode(self):
        text = '// <form method="post">\n// </form>\n'
        findings = _scan_text(text, rules=select_rules(["nonce"]))
        assert _ids(findings) == ["missing_nonce_form"]


class TestFileHandling:
    def test_non_php_files_skipped(self):
        for name in ("notes.txt", "app.js", "style.css"):
            assert _scan_text("eval($x);", name) == []

    def test_phtml_scanned(self):
        assert _ids(_scan_text("<?= $title ?>", "view.phtml")) == ["unescaped_short_echo"]

    def test_missing_file_returns_empty(self):
        assert scan_file("/nonexistent/path/file.php") == []

    def test_unreadable_file_returns_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            filepath = os.path.join(tmp, "a.php")
            with open(filepath, "w") as f:
                f.write("eval($x);")
            with patch("builtins.open", side_effect=PermissionError("denied")):
                assert scan_file(filepath) == []


class TestRelativePath:
    def test_inside_base(self):
        assert relative_path("/srv/wp/wp-content/a.php", "/srv/wp") == os.path.join("wp-content", "a.php")

    def test_outside_base(self):
        assert relative_path("/tmp/a.php", "/srv/wp") == "/tmp/a.php"

    def test_prefix_sibling_is_outside(self):
        assert relative_path("/srv/wp2/a.php", "/srv/wp") == "/srv/wp2/a.php"

    def test_no_base(self):
        assert relative_path("a.php", None) == "a.php"
