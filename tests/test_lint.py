"""Project lint orchestration tests."""

from __future__ import annotations

from pathlib import Path

from rule_doctor.checks import build_checks
from rule_doctor.lint import lint_project
from tests.helpers_rules import mdc, write_legacy, write_rule


def test_empty_project_reports_no_files(tmp_path: Path) -> None:
    result = lint_project(tmp_path)
    assert result.no_files is True
    assert result.files == []
    assert result.total_errors == 0
    assert result.total_warnings == 0


def test_scans_both_legacy_and_modern_documents(tmp_path: Path) -> None:
    write_legacy(tmp_path, "# Rules")
    write_rule(tmp_path, "test.mdc", mdc("# Test\n", description="Test"))

    result = lint_project(tmp_path)
    assert [item.identifier for item in result.files] == [
        ".cursorrules",
        ".cursor/rules/test.mdc",
    ]
    assert result.total_warnings == 1
    assert result.total_errors == 0
    assert result.total_passed == 1
    assert len(result.rules) == 2


def test_unreadable_document_becomes_an_issue_and_scan_continues(tmp_path: Path) -> None:
    broken = write_rule(tmp_path, "a-broken.mdc", "")
    broken.write_bytes(b"\xff\xfe\xfa")
    write_rule(tmp_path, "b-ok.mdc", mdc("# Fine\n"))

    result = lint_project(tmp_path)
    assert len(result.files) == 2
    broken_result, ok_result = result.files
    assert len(broken_result.issues) == 1
    assert broken_result.issues[0].severity == "error"
    assert broken_result.issues[0].message.startswith("Could not read file")
    assert ok_result.issues == []
    assert [rule.identifier for rule in result.rules] == [".cursor/rules/b-ok.mdc"]


def test_totals_count_errors_and_warnings(tmp_path: Path) -> None:
    write_rule(tmp_path, "one.mdc", mdc("Write clean code.\n", always_apply=None))
    write_rule(tmp_path, "two.mdc", "no header, be consistent\n")

    result = lint_project(tmp_path)
    assert result.total_errors == 2
    assert result.total_warnings == 2
    assert result.total_passed == 0
    assert result.files[0].errors == 1
    assert result.files[0].warnings == 1


def test_custom_check_list_is_respected(tmp_path: Path) -> None:
    write_rule(tmp_path, "one.mdc", "no header, be consistent\n")

    result = lint_project(tmp_path, build_checks(enabled_check_ids=["vague_phrases"]))
    assert [issue.message for issue in result.files[0].issues] == [
        'Vague rule detected: "be consistent"'
    ]
