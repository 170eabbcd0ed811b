"""Base check protocol and issue model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from rule_doctor.loader import Rule

Severity = Literal["error", "warning", "info"]


@dataclass(frozen=True, slots=True)
class Issue:
    """A single diagnostic emitted by a check."""

    severity: Severity
    message: str
    hint: str | None = None
    line: int | None = None


class Check(Protocol):
    """Protocol for per-document lint checks."""

    check_id: str

    def evaluate(self, rule: Rule) -> list[Issue]:
        """Evaluate one rule document and return issues."""
