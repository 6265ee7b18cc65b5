"""End-to-end tests for the scan API and the live audit."""

import dataclasses
import os
from unittest.mock import patch

from tests.conftest import CLEAN_PLUGIN, VULNERABLE_PLUGIN, write_file
from wpaudit import audit
from wpaudit.api import resolve_path, run_live_audit, scan_file, scan_path
from wpaudit.config import Settings
from wpaudit.models import CheckStatus, ErrorResult, Severity


class TestLiveAudit:
    def test_hardened_site(self, hardened_site, secure_fetch):
        report = run_live_audit(hardened_site, fetch=secure_fetch)
        assert report.score == 99
        assert report.grade == "A"
        assert report.summary == {"critical": 0, "warning": 0, "passed": 37, "info": 1}
        assert [c.key for c in report.categories] == [
            "information_disclosure", "xmlrpc", "login_security", "configuration",
            "updates", "file_permissions", "security_headers",
        ]
        assert len(report.recommendations) == 1
        assert report.recommendations[0].check == "default_login_url"
        assert report.recommendations[0].priority == "medium"

    def test_recommendations_are_prioritized(self, hardened_site, secure_fetch):
        site = dataclasses.replace(hardened_site, is_https=False, plugin_updates=3)
        report = run_live_audit(site, fetch=secure_fetch)
        priorities = [r.priority for r in report.recommendations]
        assert priorities == ["critical", "high", "medium"]
        assert report.recommendations[0].check == "https_active"
        assert report.summary["critical"] == 1

    def test_failing_category_becomes_warning(self, hardened_site, secure_fetch):
        with patch.object(audit.updates, "run", side_effect=RuntimeError("boom")):
            report = run_live_audit(hardened_site, fetch=secure_fetch)
        category = next(c for c in report.categories if c.key == "updates")
        assert list(category.checks) == ["updates_error"]
        result = category.checks["updates_error"]
        assert result.status is CheckStatus.WARNING
        assert "boom" in result.message

    def test_header_timeout_from_settings(self, hardened_site):
        seen = []

        def fetch(url, timeout):
            seen.append(timeout)
            return {}

        run_live_audit(hardened_site, fetch=fetch, settings=Settings(header_timeout=3))
        assert seen == [3]

    def test_to_dict_is_keyed_by_category(self, hardened_site, secure_fetch):
        data = run_live_audit(hardened_site, fetch=secure_fetch).to_dict()
        assert data["categories"]["configuration"]["label"] == "Configuration Security"
        assert data["categories"]["configuration"]["checks"]["https_active"] == {
            "status": "passed",
            "message": "Site is using HTTPS",
            "remediation": None,
        }


class TestScanPath:
    def test_tree_scan(self, tmp_path):
        write_file(tmp_path, "wp-content/plugins/bad/bad.php", VULNERABLE_PLUGIN)
        write_file(tmp_path, "wp-content/plugins/good/good.php", CLEAN_PLUGIN)
        write_file(tmp_path, "wp-content/plugins/bad/vendor/lib.php", VULNERABLE_PLUGIN)
        write_file(tmp_path, "wp-content/plugins/bad/readme.txt", VULNERABLE_PLUGIN)

        report = scan_path("wp-content", settings=Settings(wp_root=str(tmp_path)))
        assert report.files_scanned == 2
        assert report.summary.files_with_findings == 1
        ranks = [f.severity.rank for f in report.findings]
        assert ranks == sorted(ranks)
        assert report.summary.by_severity["critical"] >= 1
        assert not report.summary.file_limit_reached

    def test_repeat_scans_are_identical(self, tmp_path):
        for i in range(6):
            write_file(tmp_path, f"p{i}/main.php", VULNERABLE_PLUGIN)
        settings = Settings(wp_root=str(tmp_path), workers=4)
        first = scan_path(str(tmp_path), settings=settings).to_dict()
        second = scan_path(str(tmp_path), settings=settings).to_dict()
        assert first == second

    def test_file_cap(self, tmp_path):
        for i in range(5):
            write_file(tmp_path, f"f{i}.php", CLEAN_PLUGIN)
        report = scan_path(str(tmp_path), settings=Settings(max_files=3))
        assert report.files_scanned == 3
        assert report.summary.file_limit_reached

    def test_findings_capped_but_counted(self, tmp_path):
        write_file(tmp_path, "many.php", "<?php\n" + "eval($x);\n" * 12)
        report = scan_path(str(tmp_path), settings=Settings(max_findings=5))
        assert report.total_findings == 12
        assert len(report.findings) == 5

    def test_non_php_file_scans_nothing(self, tmp_path):
        path = write_file(tmp_path, "notes.txt", VULNERABLE_PLUGIN)
        report = scan_path(path)
        assert report.files_scanned == 0
        assert report.total_findings == 0

    def test_errors(self, tmp_path):
        assert scan_path("").error == "Path is required"
        result = scan_path("missing", settings=Settings(wp_root=str(tmp_path)))
        assert isinstance(result, ErrorResult)
        assert result.to_dict() == {"error": "Path not found", "path": "missing"}


class TestScanFile:
    def test_single_file_uncapped(self, tmp_path):
        write_file(tmp_path, "many.php", "<?php\n" + "eval($x);\n" * 120)
        report = scan_file("many.php", Settings(wp_root=str(tmp_path)))
        assert report.total_findings == 120
        assert len(report.findings) == 120

    def test_severity_then_line_order(self, tmp_path):
        write_file(tmp_path, "demo.php", VULNERABLE_PLUGIN)
        report = scan_file("demo.php", Settings(wp_root=str(tmp_path)))
        keys = [(f.severity.rank, f.line) for f in report.findings]
        assert keys == sorted(keys)
        assert report.findings[0].severity is Severity.CRITICAL
        assert report.findings[0].file == "demo.php"

    def test_directory_is_not_a_file(self, tmp_path):
        result = scan_file(str(tmp_path))
        assert result.error == "File not found"


class TestResolvePath:
    def test_absolute_path_kept(self, tmp_path):
        assert resolve_path(str(tmp_path), "/elsewhere") == str(tmp_path)

    def test_relative_to_base(self, tmp_path):
        write_file(tmp_path, "wp-content/x.php")
        assert resolve_path("wp-content", str(tmp_path)) == os.path.join(str(tmp_path), "wp-content")

    def test_unresolvable_returned_unchanged(self, tmp_path):
        assert resolve_path("no/such/dir", str(tmp_path)) == "no/such/dir"
