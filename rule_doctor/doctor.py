"""Project health scoring.

A fixed sequence of weighted checks each contributes ``(earned, max)`` points.
The totals become a percentage and a letter grade. Empty projects get
``info`` results instead of failures where a measurement is meaningless.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rule_doctor.checks import build_checks
from rule_doctor.config import AppConfig
from rule_doctor.lint import LintResult, lint_project
from rule_doctor.loader import LEGACY_FILENAME, find_rule_files
from rule_doctor.tokens import estimate_tokens

logger = logging.getLogger(__name__)

CheckStatus = Literal["pass", "warn", "fail", "info"]
Grade = Literal["A", "B", "C", "D", "F"]

SKILL_DIRS = (Path(".claude") / "skills", Path(".cursor") / "skills", Path("skills"))
SKILL_MARKER = "SKILL.md"

GRADE_THRESHOLDS: tuple[tuple[float, Grade], ...] = (
    (90, "A"),
    (75, "B"),
    (60, "C"),
    (40, "D"),
)


@dataclass(frozen=True, slots=True)
class CoverageGap:
    """A project file type with no matching rule, supplied by the caller."""

    extension: str
    suggested_rules: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class NamedCheckResult:
    """Outcome of one weighted health check."""

    name: str
    status: CheckStatus
    detail: str
    earned: int
    max_points: int


@dataclass(frozen=True, slots=True)
class Report:
    """Aggregate health report for a project."""

    checks: tuple[NamedCheckResult, ...]
    score: int
    max_score: int
    grade: Grade
    percentage: int


def score_project(
    project_dir: Path,
    *,
    coverage_gaps: Sequence[CoverageGap] = (),
    config: AppConfig | None = None,
) -> Report:
    """Run the weighted health checks against ``project_dir``."""
    app_config = config or AppConfig()
    checks = build_checks(
        enabled_check_ids=app_config.check_enable,
        disabled_check_ids=app_config.check_disable,
        settings=app_config.lint,
    )
    lint = lint_project(project_dir, checks)
    # Unreadable documents still count as present.
    has_modern = any(kind == "modern" for _, kind in find_rule_files(project_dir))
    has_legacy = (project_dir / LEGACY_FILENAME).is_file()
    total_tokens = sum(estimate_tokens(rule.raw_text) for rule in lint.rules)

    results = [
        _rules_exist(has_modern=has_modern, has_legacy=has_legacy),
        _no_legacy(has_modern=has_modern, has_legacy=has_legacy),
        _lint_clean(lint),
        _token_budget(total_tokens),
        _coverage(coverage_gaps),
        _skills(has_skills(project_dir)),
    ]
    return build_report(results)


def build_report(results: Sequence[NamedCheckResult]) -> Report:
    """Total weighted results into a :class:`Report`."""
    score = sum(item.earned for item in results)
    max_score = sum(item.max_points for item in results)
    pct = (score / max_score) * 100 if max_score else 0.0
    return Report(
        checks=tuple(results),
        score=score,
        max_score=max_score,
        grade=grade_for(pct),
        percentage=math.floor(pct + 0.5),
    )


def grade_for(percentage: float) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return grade
    return "F"


def has_skills(project_dir: Path) -> bool:
    """True when any skills directory holds a sub-directory with a SKILL.md."""
    for skill_dir in SKILL_DIRS:
        root = project_dir / skill_dir
        if not root.is_dir():
            continue
        try:
            entries = list(root.iterdir())
        except OSError as exc:
            logger.debug("cannot list %s: %s", root, exc)
            continue
        if any(entry.is_dir() and (entry / SKILL_MARKER).is_file() for entry in entries):
            return True
    return False


def _rules_exist(*, has_modern: bool, has_legacy: bool) -> NamedCheckResult:
    if has_modern:
        return NamedCheckResult(
            "Rules exist", "pass", ".cursor/rules/ found with .mdc files", 20, 20
        )
    if has_legacy:
        return NamedCheckResult(
            "Rules exist",
            "warn",
            "Only .cursorrules found. Convert it to .mdc rules in .cursor/rules/",
            5,
            20,
        )
    return NamedCheckResult(
        "Rules exist", "fail", "No rules found. Add .mdc files under .cursor/rules/", 0, 20
    )


def _no_legacy(*, has_modern: bool, has_legacy: bool) -> NamedCheckResult:
    name = "No legacy .cursorrules"
    if not has_legacy:
        return NamedCheckResult(name, "pass", "Using modern .mdc format only", 10, 10)
    if has_modern:
        return NamedCheckResult(
            name,
            "warn",
            ".cursorrules exists alongside .mdc rules and may cause conflicts. "
            "Consider removing it.",
            5,
            10,
        )
    return NamedCheckResult(
        name, "warn", "Using legacy .cursorrules. Convert it to .mdc rules.", 0, 10
    )


def _lint_clean(lint: LintResult) -> NamedCheckResult:
    name = "Lint checks"
    errors = lint.total_errors
    warnings = lint.total_warnings
    if errors == 0 and warnings == 0:
        return NamedCheckResult(name, "pass", "All rules pass lint checks", 30, 30)
    if errors == 0:
        return NamedCheckResult(
            name,
            "warn",
            f"{_plural(warnings, 'warning')} found. Run `rule-doctor lint` to see details.",
            20,
            30,
        )
    return NamedCheckResult(
        name,
        "fail",
        f"{_plural(errors, 'error')}, {_plural(warnings, 'warning')}. "
        "Run `rule-doctor lint` to fix.",
        max(0, 10 - errors * 2),
        30,
    )


def _token_budget(total_tokens: int) -> NamedCheckResult:
    name = "Token budget"
    if total_tokens == 0:
        return NamedCheckResult(name, "info", "No rules to measure", 0, 15)
    if total_tokens < 2000:
        return NamedCheckResult(
            name, "pass", f"~{total_tokens} tokens, well within budget", 15, 15
        )
    if total_tokens < 5000:
        return NamedCheckResult(
            name,
            "warn",
            f"~{total_tokens} tokens, getting heavy. Consider trimming or splitting rules.",
            10,
            15,
        )
    return NamedCheckResult(
        name,
        "fail",
        f"~{total_tokens} tokens, very heavy. This is loaded into context on every request.",
        5,
        15,
    )


def _coverage(gaps: Sequence[CoverageGap]) -> NamedCheckResult:
    name = "Coverage"
    if not gaps:
        return NamedCheckResult(name, "pass", "Rules cover your project file types", 15, 15)
    missing = ", ".join(gap.extension for gap in gaps)
    if len(gaps) <= 2:
        return NamedCheckResult(name, "warn", f"Missing rules for: {missing}", 10, 15)
    return NamedCheckResult(name, "fail", f"Missing rules for: {missing}", 5, 15)


def _skills(found: bool) -> NamedCheckResult:
    name = "Agent skills"
    if found:
        return NamedCheckResult(name, "pass", "Skills directory found", 10, 10)
    return NamedCheckResult(
        name,
        "info",
        "No agent skills found. Skills are optional but help with complex workflows.",
        5,
        10,
    )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"
