"""Per-document lint orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from rule_doctor.checks import Check, Issue, default_checks
from rule_doctor.loader import Rule, find_rule_files, read_rule_file, relative_identifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FileLintResult:
    """Issues found in a single rule document."""

    identifier: str
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")


@dataclass(slots=True)
class LintResult:
    """Lint output for a whole project."""

    files: list[FileLintResult] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)

    @property
    def no_files(self) -> bool:
        return not self.files

    @property
    def total_errors(self) -> int:
        return sum(item.errors for item in self.files)

    @property
    def total_warnings(self) -> int:
        return sum(item.warnings for item in self.files)

    @property
    def total_passed(self) -> int:
        return sum(1 for item in self.files if not item.issues)


def lint_rule(rule: Rule, checks: list[Check] | None = None) -> list[Issue]:
    """Run every check against ``rule`` and concatenate issues in check order."""
    active_checks = checks if checks is not None else default_checks()
    issues: list[Issue] = []
    for check in active_checks:
        issues.extend(check.evaluate(rule))
    return issues


def lint_project(project_dir: Path, checks: list[Check] | None = None) -> LintResult:
    """Lint every rule document in ``project_dir``.

    Documents are read and linted one at a time. A document that cannot be read
    is reported as a single error issue and the scan moves on.
    """
    active_checks = checks if checks is not None else default_checks()
    result = LintResult()
    for path, kind in find_rule_files(project_dir):
        identifier = relative_identifier(project_dir, path)
        try:
            rule = read_rule_file(project_dir, path, kind)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("cannot read %s: %s", path, exc)
            result.files.append(
                FileLintResult(
                    identifier=identifier,
                    issues=[
                        Issue(
                            severity="error",
                            message=f"Could not read file: {exc}",
                            hint="Check file permissions and encoding (UTF-8 expected)",
                        )
                    ],
                )
            )
            continue

        result.rules.append(rule)
        result.files.append(
            FileLintResult(identifier=identifier, issues=lint_rule(rule, active_checks))
        )
    return result
