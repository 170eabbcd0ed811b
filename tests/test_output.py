"""Rendering tests."""

from __future__ import annotations

import json
from pathlib import Path

from rule_doctor.audit import audit_project
from rule_doctor.checks import Issue
from rule_doctor.doctor import NamedCheckResult, build_report
from rule_doctor.lint import FileLintResult, LintResult
from rule_doctor.output import (
    NO_FILES_MESSAGE,
    build_audit_payload,
    build_lint_payload,
    build_report_payload,
    render_audit_markdown,
    render_lint_human,
    render_lint_markdown,
    render_report_human,
    render_report_markdown,
    to_json,
)


def _lint_result() -> LintResult:
    return LintResult(
        files=[
            FileLintResult(
                identifier=".cursor/rules/a.mdc",
                issues=[
                    Issue("error", "Missing alwaysApply: true", hint="Add alwaysApply: true"),
                    Issue("warning", 'Vague rule detected: "be careful"', line=7),
                ],
            ),
            FileLintResult(identifier=".cursor/rules/b.mdc"),
        ]
    )


def test_render_lint_human_groups_by_file_with_summary() -> None:
    output = render_lint_human(_lint_result())
    assert ".cursor/rules/a.mdc" in output
    assert "  ✗ Missing alwaysApply: true" in output
    assert "    → Add alwaysApply: true" in output
    assert '⚠ Vague rule detected: "be careful" (line 7)' in output
    assert "  ✓ All checks passed" in output
    assert output.endswith("1 error, 1 warning, 1 passed")


def test_render_lint_handles_no_files() -> None:
    assert render_lint_human(LintResult()) == NO_FILES_MESSAGE
    assert NO_FILES_MESSAGE in render_lint_markdown(LintResult())


def test_lint_payload_has_stable_schema_keys() -> None:
    payload = json.loads(to_json(build_lint_payload(_lint_result())))
    assert set(payload.keys()) == {
        "files",
        "total_errors",
        "total_warnings",
        "total_passed",
        "no_files",
        "meta",
    }
    assert set(payload["meta"].keys()) == {"generated_at", "version"}
    first_issue = payload["files"][0]["issues"][0]
    assert set(first_issue.keys()) == {"severity", "message", "hint", "line"}
    assert payload["files"][0]["errors"] == 1
    assert payload["no_files"] is False


def test_report_renderers_show_grade_and_checks() -> None:
    report = build_report(
        [
            NamedCheckResult("Rules exist", "pass", "found", 20, 20),
            NamedCheckResult("Lint checks", "fail", "2 errors", 6, 30),
        ]
    )
    assert report.percentage == 52
    assert report.grade == "D"

    human = render_report_human(report)
    assert human.startswith("Health: D (52%)  26/50")
    assert "✗ Lint checks: 2 errors" in human

    markdown = render_report_markdown(report)
    assert "**Grade: D**" in markdown
    assert "| Lint checks | fail | 6/30 | 2 errors |" in markdown

    payload = build_report_payload(report)
    assert payload["grade"] == "D"
    assert [check["name"] for check in payload["checks"]] == ["Rules exist", "Lint checks"]


def test_audit_markdown_and_payload(tmp_path: Path) -> None:
    report = audit_project(tmp_path)
    markdown = render_audit_markdown(report)
    assert markdown.startswith("# Rule Audit Report")
    assert "## Conflicts\n\n✅ No conflicts detected" in markdown

    payload = build_audit_payload(report)
    assert [section["title"] for section in payload["sections"]][0] == "Token Budget"
    assert payload["budget"]["total"] == 0
    assert payload["conflicts"] == []
    assert payload["redundant"] == []
