"""Full project audit assembled from lint, cross-analysis, and token data."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from rule_doctor.checks import build_checks
from rule_doctor.config import AppConfig
from rule_doctor.cross import CrossAnalysis, analyze_rules
from rule_doctor.doctor import CoverageGap
from rule_doctor.lint import LintResult, lint_project
from rule_doctor.tokens import TokenBudget, token_budget

ItemKind = Literal["pass", "info", "warning", "error", "fix"]

ALWAYS_LOADED_WARNING_TOKENS = 3000
TOTAL_WARNING_TOKENS = 5000
FILE_WARNING_TOKENS = 1500
FILE_SPLIT_TOKENS = 2000
MAX_ALWAYS_APPLY_RULES = 5


@dataclass(frozen=True, slots=True)
class AuditItem:
    text: str
    kind: ItemKind


@dataclass(slots=True)
class AuditSection:
    title: str
    items: list[AuditItem] = field(default_factory=list)


@dataclass(slots=True)
class AuditReport:
    """Sectioned audit plus the raw analysis it was built from."""

    sections: list[AuditSection]
    budget: TokenBudget
    cross: CrossAnalysis
    lint_errors: int
    lint_warnings: int


def audit_project(
    project_dir: Path,
    *,
    coverage_gaps: Sequence[CoverageGap] = (),
    config: AppConfig | None = None,
) -> AuditReport:
    """Run every analysis over ``project_dir`` and group findings into sections."""
    app_config = config or AppConfig()
    checks = build_checks(
        enabled_check_ids=app_config.check_enable,
        disabled_check_ids=app_config.check_disable,
        settings=app_config.lint,
    )
    lint = lint_project(project_dir, checks)
    budget = token_budget(lint.rules)
    cross = analyze_rules(lint.rules, redundancy=app_config.redundancy)

    sections = [
        _budget_section(budget),
        _lint_section(lint),
        _conflicts_section(cross),
        _redundancy_section(cross),
        _coverage_section(coverage_gaps),
        _fixes_section(lint, budget, cross),
    ]
    return AuditReport(
        sections=sections,
        budget=budget,
        cross=cross,
        lint_errors=lint.total_errors,
        lint_warnings=lint.total_warnings,
    )


def _budget_section(budget: TokenBudget) -> AuditSection:
    always_kind: ItemKind = (
        "warning" if budget.always_loaded > ALWAYS_LOADED_WARNING_TOKENS else "info"
    )
    total_kind: ItemKind = "warning" if budget.total > TOTAL_WARNING_TOKENS else "info"
    items = [
        AuditItem(f"Always loaded: ~{budget.always_loaded} tokens", always_kind),
        AuditItem(f"Conditional (max): ~{budget.conditional_max} tokens", "info"),
        AuditItem(f"Total: ~{budget.total} tokens", total_kind),
    ]
    for entry in budget.files:
        kind: ItemKind = "warning" if entry.tokens > FILE_WARNING_TOKENS else "info"
        items.append(
            AuditItem(f"  {entry.identifier}: ~{entry.tokens} tokens ({entry.tier})", kind)
        )
    return AuditSection("Token Budget", items)


def _lint_section(lint: LintResult) -> AuditSection:
    items = [
        AuditItem(f"{file.identifier}: {issue.message}", issue.severity)
        for file in lint.files
        for issue in file.issues
    ]
    return AuditSection("Lint Issues", items or [AuditItem("No issues found", "pass")])


def _conflicts_section(cross: CrossAnalysis) -> AuditSection:
    items = [
        AuditItem(f"{pair.first} vs {pair.second}: {pair.reason}", "warning")
        for pair in cross.conflicts
    ]
    return AuditSection("Conflicts", items or [AuditItem("No conflicts detected", "pass")])


def _redundancy_section(cross: CrossAnalysis) -> AuditSection:
    items = [
        AuditItem(
            f"{pair.first} and {pair.second}: {pair.overlap_pct}% overlap "
            f"({pair.shared_lines} shared lines)",
            "warning",
        )
        for pair in cross.redundant
    ]
    return AuditSection("Redundancy", items or [AuditItem("No redundant rules found", "pass")])


def _coverage_section(gaps: Sequence[CoverageGap]) -> AuditSection:
    items = []
    for gap in gaps:
        text = f"No rules for {gap.extension} files."
        if gap.suggested_rules:
            text += f" Consider adding: {', '.join(gap.suggested_rules)}"
        items.append(AuditItem(text, "warning"))
    return AuditSection(
        "Coverage Gaps",
        items or [AuditItem("All detected file types have matching rules", "pass")],
    )


def _fixes_section(lint: LintResult, budget: TokenBudget, cross: CrossAnalysis) -> AuditSection:
    fixes: list[AuditItem] = []
    if any(rule.kind == "legacy" for rule in lint.rules):
        fixes.append(AuditItem("Convert .cursorrules to .mdc rules in .cursor/rules/", "fix"))
    if lint.total_errors > 0:
        fixes.append(
            AuditItem("Run `rule-doctor fix` to repair frontmatter and structural issues", "fix")
        )
    for entry in budget.files:
        if entry.tokens > FILE_SPLIT_TOKENS:
            fixes.append(
                AuditItem(
                    f"Split {entry.identifier} into smaller focused rules "
                    f"(~{entry.tokens} tokens is heavy)",
                    "fix",
                )
            )
    if sum(1 for rule in lint.rules if rule.scope.always_apply) > MAX_ALWAYS_APPLY_RULES:
        fixes.append(
            AuditItem(
                "Too many alwaysApply rules. Convert some to glob-targeted rules to save tokens.",
                "fix",
            )
        )
    for pair in cross.redundant:
        fixes.append(AuditItem(f"Merge or deduplicate {pair.first} and {pair.second}", "fix"))
    return AuditSection(
        "Suggested Fixes",
        fixes or [AuditItem("No fixes needed. Setup looks good.", "pass")],
    )
