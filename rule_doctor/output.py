"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from rule_doctor import __version__
from rule_doctor.audit import AuditReport
from rule_doctor.autofix import FixResult
from rule_doctor.checks import CheckInfo, Issue
from rule_doctor.doctor import Report
from rule_doctor.lint import LintResult

STATUS_ICONS = {"pass": "✓", "warn": "⚠", "fail": "✗", "info": "ℹ"}
SEVERITY_ICONS = {"error": "✗", "warning": "⚠", "info": "ℹ"}
MARKDOWN_ICONS = {
    "pass": "✅",
    "error": "❌",
    "warning": "⚠️",
    "fix": "🔧",
    "info": "ℹ️",
}
NO_FILES_MESSAGE = "No rule files found (.cursorrules or .cursor/rules/*.mdc)"


def render_lint_human(result: LintResult) -> str:
    """Render lint results as plain text grouped by file."""
    if result.no_files:
        return NO_FILES_MESSAGE

    lines: list[str] = []
    for file_result in result.files:
        lines.append(file_result.identifier)
        if not file_result.issues:
            lines.append("  ✓ All checks passed")
        for issue in file_result.issues:
            lines.extend(_issue_lines(issue))
        lines.append("")

    lines.append("─" * 50)
    parts: list[str] = []
    if result.total_errors:
        parts.append(_plural(result.total_errors, "error"))
    if result.total_warnings:
        parts.append(_plural(result.total_warnings, "warning"))
    if result.total_passed:
        parts.append(f"{result.total_passed} passed")
    lines.append(", ".join(parts))
    return "\n".join(lines)


def render_lint_markdown(result: LintResult) -> str:
    lines = ["# Rule Lint Report", ""]
    if result.no_files:
        lines.append(NO_FILES_MESSAGE)
        return "\n".join(lines)
    for file_result in result.files:
        lines.append(f"## {file_result.identifier}")
        lines.append("")
        if not file_result.issues:
            lines.append(f"{MARKDOWN_ICONS['pass']} All checks passed")
        for issue in file_result.issues:
            location = f" (line {issue.line})" if issue.line is not None else ""
            lines.append(f"{MARKDOWN_ICONS[issue.severity]} {issue.message}{location}")
        lines.append("")
    return "\n".join(lines)


def build_lint_payload(result: LintResult) -> dict[str, Any]:
    """Build stable JSON payload for CI and automation."""
    return {
        "files": [
            {
                "file": file_result.identifier,
                "errors": file_result.errors,
                "warnings": file_result.warnings,
                "issues": [_serialize_issue(issue) for issue in file_result.issues],
            }
            for file_result in result.files
        ],
        "total_errors": result.total_errors,
        "total_warnings": result.total_warnings,
        "total_passed": result.total_passed,
        "no_files": result.no_files,
        "meta": _meta(),
    }


def render_report_human(report: Report) -> str:
    lines = [f"Health: {report.grade} ({report.percentage}%)  {report.score}/{report.max_score}"]
    lines.append("")
    for check in report.checks:
        icon = STATUS_ICONS[check.status]
        lines.append(f"{icon} {check.name}: {check.detail}")
    return "\n".join(lines)


def render_report_markdown(report: Report) -> str:
    lines = [
        "# Rule Health Report",
        "",
        f"**Grade: {report.grade}** ({report.percentage}%, {report.score}/{report.max_score})",
        "",
        "| Check | Status | Points | Detail |",
        "| --- | --- | --- | --- |",
    ]
    for check in report.checks:
        lines.append(
            f"| {check.name} | {check.status} | {check.earned}/{check.max_points} "
            f"| {check.detail} |"
        )
    return "\n".join(lines)


def build_report_payload(report: Report) -> dict[str, Any]:
    return {
        "checks": [
            {
                "name": check.name,
                "status": check.status,
                "detail": check.detail,
                "earned": check.earned,
                "max_points": check.max_points,
            }
            for check in report.checks
        ],
        "score": report.score,
        "max_score": report.max_score,
        "grade": report.grade,
        "percentage": report.percentage,
        "meta": _meta(),
    }


def render_audit_human(report: AuditReport) -> str:
    lines: list[str] = []
    for section in report.sections:
        lines.append(section.title)
        for item in section.items:
            lines.append(f"  [{item.kind}] {item.text}")
        lines.append("")
    return "\n".join(lines).rstrip()


def render_audit_markdown(report: AuditReport) -> str:
    """Render the audit as a markdown document, one heading per section."""
    lines = ["# Rule Audit Report", ""]
    for section in report.sections:
        lines.append(f"## {section.title}")
        lines.append("")
        for item in section.items:
            lines.append(f"{MARKDOWN_ICONS[item.kind]} {item.text}")
        lines.append("")
    return "\n".join(lines)


def build_audit_payload(report: AuditReport) -> dict[str, Any]:
    return {
        "sections": [
            {
                "title": section.title,
                "items": [{"text": item.text, "kind": item.kind} for item in section.items],
            }
            for section in report.sections
        ],
        "budget": {
            "always_loaded": report.budget.always_loaded,
            "conditional_max": report.budget.conditional_max,
            "total": report.budget.total,
            "files": [
                {"file": entry.identifier, "tokens": entry.tokens, "tier": entry.tier}
                for entry in report.budget.files
            ],
        },
        "conflicts": [
            {"file_a": pair.first, "file_b": pair.second, "reason": pair.reason}
            for pair in report.cross.conflicts
        ],
        "redundant": [
            {
                "file_a": pair.first,
                "file_b": pair.second,
                "overlap_pct": pair.overlap_pct,
                "shared_lines": pair.shared_lines,
            }
            for pair in report.cross.redundant
        ],
        "lint_errors": report.lint_errors,
        "lint_warnings": report.lint_warnings,
        "meta": _meta(),
    }


def render_fix_human(result: FixResult, *, dry_run: bool) -> str:
    prefix = "Would fix" if dry_run else "Fixed"
    lines: list[str] = []
    for error in result.errors:
        lines.append(f"✗ {error}")
    for item in result.fixed:
        lines.append(f"{prefix} {item.identifier}: {item.change}")
    for item in result.splits:
        verb = "Would split" if dry_run else "Split"
        lines.append(f"{verb} {item.identifier} into {', '.join(item.parts)}")
    for pair in result.deduped:
        lines.append(
            f"Review {pair.first} and {pair.second}: {pair.overlap_pct}% overlap "
            "(manual merge needed)"
        )
    if not lines:
        lines.append("Nothing to fix.")
    return "\n".join(lines)


def build_fix_payload(result: FixResult, *, dry_run: bool) -> dict[str, Any]:
    return {
        "dry_run": dry_run,
        "fixed": [{"file": item.identifier, "change": item.change} for item in result.fixed],
        "splits": [{"file": item.identifier, "parts": list(item.parts)} for item in result.splits],
        "deduped": [
            {"file_a": pair.first, "file_b": pair.second, "overlap_pct": pair.overlap_pct}
            for pair in result.deduped
        ],
        "errors": list(result.errors),
    }


def build_checks_payload(infos: list[CheckInfo], *, config_source: str | None) -> dict[str, Any]:
    return {
        "checks": [
            {
                "check_id": info.check_id,
                "name": info.name,
                "description": info.description,
                "enabled": info.default_enabled,
            }
            for info in infos
        ],
        "meta": {"config_source": config_source},
    }


def to_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True)


def _serialize_issue(issue: Issue) -> dict[str, Any]:
    return {
        "severity": issue.severity,
        "message": issue.message,
        "hint": issue.hint,
        "line": issue.line,
    }


def _issue_lines(issue: Issue) -> list[str]:
    location = f" (line {issue.line})" if issue.line is not None else ""
    lines = [f"  {SEVERITY_ICONS[issue.severity]} {issue.message}{location}"]
    if issue.hint:
        lines.append(f"    → {issue.hint}")
    return lines


def _meta() -> dict[str, Any]:
    return {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "version": __version__,
    }


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"
