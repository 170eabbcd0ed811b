"""Document length check."""

from __future__ import annotations

from rule_doctor.checks.base import Issue
from rule_doctor.loader import Rule


class FileLengthCheck:
    """Flags documents too long to be reliably loaded into context."""

    check_id = "file_length"

    def __init__(self, max_lines_warning: int = 150, max_lines_error: int = 300) -> None:
        self.max_lines_warning = max_lines_warning
        self.max_lines_error = max_lines_error

    def evaluate(self, rule: Rule) -> list[Issue]:
        line_count = len(rule.raw_text.split("\n"))
        if line_count > self.max_lines_error:
            return [
                Issue(
                    severity="error",
                    message=(
                        f"File is {line_count} lines "
                        f"(max recommended: {self.max_lines_warning})"
                    ),
                    hint="Long files may exceed the context window. Split into multiple .mdc files",
                )
            ]
        if line_count > self.max_lines_warning:
            return [
                Issue(
                    severity="warning",
                    message=f"File is {line_count} lines, consider splitting (too long)",
                    hint="Shorter files are more reliably loaded into context.",
                )
            ]
        return []
