"""Approximate token accounting for rule documents.

Counts use a fixed four-characters-per-token ratio. The numbers are only
meaningful relative to each other, which is all the budget checks need.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from rule_doctor.loader import Rule, Tier

CHARS_PER_TOKEN = 4


@dataclass(frozen=True, slots=True)
class FileTokens:
    """Token estimate for one document."""

    identifier: str
    tokens: int
    tier: Tier


@dataclass(slots=True)
class TokenBudget:
    """Always-loaded versus conditionally-loaded token totals."""

    always_loaded: int = 0
    conditional_max: int = 0
    files: list[FileTokens] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.always_loaded + self.conditional_max


def estimate_tokens(text: str) -> int:
    """Approximate model tokens as ``ceil(len(text) / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def token_budget(rules: list[Rule]) -> TokenBudget:
    """Break down estimated tokens by load tier, heaviest documents first."""
    budget = TokenBudget()
    for rule in rules:
        entry = FileTokens(
            identifier=rule.identifier,
            tokens=estimate_tokens(rule.raw_text),
            tier=rule.tier,
        )
        if entry.tier == "always":
            budget.always_loaded += entry.tokens
        else:
            budget.conditional_max += entry.tokens
        budget.files.append(entry)
    budget.files.sort(key=lambda item: item.tokens, reverse=True)
    return budget
