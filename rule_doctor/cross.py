"""Cross-document analysis: conflicting and redundant rule pairs."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from itertools import combinations

from rule_doctor.config import RedundancySettings
from rule_doctor.loader import Rule

logger = logging.getLogger(__name__)

UNIVERSAL_GLOBS = frozenset({"**/*", "**"})
EXTENSION_GLOB_RE = re.compile(r"\*\.(\w+)$")


@dataclass(frozen=True, slots=True)
class Contradiction:
    """Two directives that cannot both be followed."""

    tag: str
    first_label: str
    first: re.Pattern[str]
    second_label: str
    second: re.Pattern[str]

    @property
    def reason(self) -> str:
        return f'Conflicting style: "{self.first_label}" vs "{self.second_label}"'

    def matches(self, body_a: str, body_b: str) -> bool:
        forward = self.first.search(body_a) is not None and self.second.search(body_b) is not None
        backward = self.second.search(body_a) is not None and self.first.search(body_b) is not None
        return forward or backward


def _contradiction(
    tag: str, first_label: str, first: str, second_label: str, second: str
) -> Contradiction:
    return Contradiction(
        tag=tag,
        first_label=first_label,
        first=re.compile(first, re.IGNORECASE),
        second_label=second_label,
        second=re.compile(second, re.IGNORECASE),
    )


CONTRADICTIONS = (
    _contradiction(
        "semicolons",
        "always use semicolons",
        r"always use semicolons",
        "never use semicolons",
        r"never use semicolons|no semicolons",
    ),
    _contradiction(
        "quotes",
        "use single quotes",
        r"use single quotes",
        "use double quotes",
        r"use double quotes",
    ),
    _contradiction("indentation", "use tabs", r"use tabs", "use spaces", r"use spaces"),
    _contradiction(
        "styling",
        "use css modules",
        r"use css modules",
        "use tailwind / styled-components",
        r"use tailwind|use styled-components",
    ),
    _contradiction(
        "imports",
        "use relative imports",
        r"use relative imports",
        "use absolute imports / path aliases",
        r"use absolute imports|use path aliases",
    ),
    _contradiction(
        "paradigm",
        "prefer classes",
        r"prefer classes",
        "prefer functions",
        r"prefer functions|prefer functional",
    ),
    _contradiction(
        "exports",
        "use default exports",
        r"use default exports",
        "use named exports",
        r"use named exports|no default exports",
    ),
    _contradiction(
        "functions",
        "use arrow functions",
        r"use arrow functions",
        "use function declarations",
        r"use function declarations|avoid arrow functions",
    ),
    _contradiction(
        "any_type", "use any", r"use any", "never use any", r"never use any|avoid any|no any"
    ),
)


@dataclass(frozen=True, slots=True)
class ConflictPair:
    """Two rules with overlapping scope and contradictory directives."""

    first: str
    second: str
    reasons: tuple[str, ...]
    severity: str = "warning"

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


@dataclass(frozen=True, slots=True)
class RedundancyPair:
    """Two rules sharing a high proportion of identical lines."""

    first: str
    second: str
    overlap_pct: int
    shared_lines: int


@dataclass(slots=True)
class CrossAnalysis:
    """Pairwise analysis output."""

    conflicts: list[ConflictPair] = field(default_factory=list)
    redundant: list[RedundancyPair] = field(default_factory=list)


def analyze_rules(
    rules: list[Rule], redundancy: RedundancySettings | None = None
) -> CrossAnalysis:
    """Compute conflicting and redundant pairs over all unordered rule pairs."""
    return CrossAnalysis(
        conflicts=find_conflicts(rules),
        redundant=find_redundancy(rules, settings=redundancy),
    )


def globs_overlap(a: str, b: str) -> bool:
    """Conservative overlap test for two glob patterns."""
    if a == b:
        return True
    if a in UNIVERSAL_GLOBS or b in UNIVERSAL_GLOBS:
        return True
    ext_a = EXTENSION_GLOB_RE.search(a)
    ext_b = EXTENSION_GLOB_RE.search(b)
    return bool(ext_a and ext_b and ext_a.group(1) == ext_b.group(1))


def scopes_overlap(a: Rule, b: Rule) -> bool:
    return any(
        globs_overlap(glob_a, glob_b) for glob_a in a.scope.globs for glob_b in b.scope.globs
    )


def find_contradictions(body_a: str, body_b: str) -> list[str]:
    """Return one reason per contradiction table entry matched across the bodies."""
    lowered_a = body_a.lower()
    lowered_b = body_b.lower()
    return [entry.reason for entry in CONTRADICTIONS if entry.matches(lowered_a, lowered_b)]


def find_conflicts(rules: list[Rule]) -> list[ConflictPair]:
    conflicts: list[ConflictPair] = []
    for a, b in combinations(rules, 2):
        if not a.scope.always_apply and not b.scope.always_apply and not scopes_overlap(a, b):
            continue
        reasons = find_contradictions(a.body, b.body)
        if reasons:
            logger.debug("conflict between %s and %s", a.identifier, b.identifier)
            conflicts.append(
                ConflictPair(first=a.identifier, second=b.identifier, reasons=tuple(reasons))
            )
    return conflicts


def find_redundancy(
    rules: list[Rule], settings: RedundancySettings | None = None
) -> list[RedundancyPair]:
    """Report pairs whose shared-line ratio exceeds the threshold.

    The ratio's denominator is the smaller document's line set.
    """
    effective = settings or RedundancySettings()
    line_sets = [_normalized_lines(rule.body, effective.min_line_length) for rule in rules]

    redundant: list[RedundancyPair] = []
    for (index_a, a), (index_b, b) in combinations(enumerate(rules), 2):
        lines_a = line_sets[index_a]
        lines_b = line_sets[index_b]
        if not lines_a or not lines_b:
            continue
        shared = len(lines_a & lines_b)
        ratio = shared / min(len(lines_a), len(lines_b))
        if ratio > effective.threshold:
            redundant.append(
                RedundancyPair(
                    first=a.identifier,
                    second=b.identifier,
                    overlap_pct=_round_half_up(ratio * 100),
                    shared_lines=shared,
                )
            )
    return redundant


def _normalized_lines(body: str, min_length: int) -> frozenset[str]:
    stripped = (line.strip() for line in body.split("\n"))
    return frozenset(line for line in stripped if len(line) > min_length)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
