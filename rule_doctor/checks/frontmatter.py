"""Frontmatter presence and validity check for modern rule documents."""

from __future__ import annotations

from rule_doctor.checks.base import Issue
from rule_doctor.loader import Rule


class FrontmatterCheck:
    """Requires a valid header with alwaysApply, a description, and list-style globs."""

    check_id = "frontmatter"

    def evaluate(self, rule: Rule) -> list[Issue]:
        if rule.kind != "modern":
            return []

        header = rule.header
        if not header.found:
            return [
                Issue(
                    severity="error",
                    message="Missing YAML frontmatter",
                    hint="Add --- block with description and alwaysApply: true",
                )
            ]
        if header.error is not None or header.data is None:
            return [
                Issue(
                    severity="error",
                    message=f"Invalid YAML frontmatter: {header.error}",
                    hint="Fix the frontmatter indentation or run `rule-doctor fix`",
                )
            ]

        issues: list[Issue] = []
        data = header.data
        if data.get("alwaysApply") is not True:
            issues.append(
                Issue(
                    severity="error",
                    message="Missing alwaysApply: true",
                    hint="Add alwaysApply: true to frontmatter for agent mode",
                )
            )
        if not data.get("description"):
            issues.append(
                Issue(
                    severity="warning",
                    message="Missing description in frontmatter",
                    hint="Add a description so the agent knows when to apply this rule",
                )
            )
        globs = data.get("globs")
        if isinstance(globs, str) and "," in globs and not globs.strip().startswith("["):
            issues.append(
                Issue(
                    severity="error",
                    message="Bad glob syntax: use a YAML list, not a comma-separated string",
                    hint='Use globs:\n  - "*.ts"\n  - "*.tsx"',
                )
            )
        return issues
