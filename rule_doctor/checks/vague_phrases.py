"""Detection of generic, non-actionable guidance."""

from __future__ import annotations

from rule_doctor.checks.base import Issue
from rule_doctor.frontmatter import header_length
from rule_doctor.loader import Rule

VAGUE_PHRASES = (
    "write clean code",
    "follow best practices",
    "be consistent",
    "write maintainable code",
    "handle errors properly",
    "use proper naming",
    "keep it simple",
    "write readable code",
    "follow conventions",
    "use good patterns",
    "write efficient code",
    "be careful",
    "think before coding",
    "write good tests",
    "follow solid principles",
    "use common sense",
    "write quality code",
    "follow the style guide",
    "be thorough",
    "write robust code",
)


class VaguePhrasesCheck:
    """Flags platitudes an agent cannot act on, once per phrase."""

    check_id = "vague_phrases"

    def __init__(self, phrases: tuple[str, ...] = VAGUE_PHRASES) -> None:
        self.phrases = phrases

    def evaluate(self, rule: Rule) -> list[Issue]:
        offset = header_length(rule.raw_text) if rule.kind == "modern" else 0
        lowered = rule.body.lower()
        issues: list[Issue] = []
        for phrase in self.phrases:
            index = lowered.find(phrase)
            if index == -1:
                continue
            # Line numbers are relative to the whole document, header included.
            line = rule.raw_text.count("\n", 0, offset + index) + 1
            issues.append(
                Issue(
                    severity="warning",
                    message=f'Vague rule detected: "{phrase}"',
                    hint="Replace with a concrete, checkable instruction",
                    line=line,
                )
            )
        return issues
