"""Advisory for the legacy single-file rules format."""

from __future__ import annotations

from rule_doctor.checks.base import Issue
from rule_doctor.loader import Rule


class LegacyFormatCheck:
    """Warns that a legacy rules file may be ignored in agent mode."""

    check_id = "legacy_format"

    def evaluate(self, rule: Rule) -> list[Issue]:
        if rule.kind != "legacy":
            return []
        return [
            Issue(
                severity="warning",
                message=".cursorrules may be ignored in agent mode",
                hint="Use .cursor/rules/*.mdc with alwaysApply: true for agent mode compatibility",
            )
        ]
