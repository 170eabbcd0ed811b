"""Discovery and loading of rule documents from a project directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rule_doctor.frontmatter import (
    FrontmatterResult,
    HeaderValue,
    parse_frontmatter,
    strip_frontmatter,
)

logger = logging.getLogger(__name__)

LEGACY_FILENAME = ".cursorrules"
RULES_DIR = Path(".cursor") / "rules"
RULE_SUFFIX = ".mdc"

RuleKind = Literal["modern", "legacy"]
Tier = Literal["always", "glob", "manual"]


class RuleLoadError(OSError):
    """Raised when an existing rule source cannot be listed or read."""


@dataclass(frozen=True, slots=True)
class RuleScope:
    """Where a rule applies automatically."""

    always_apply: bool = False
    globs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Rule:
    """One analyzable rule document."""

    identifier: str
    raw_text: str
    header: FrontmatterResult
    body: str
    scope: RuleScope
    kind: RuleKind

    @property
    def tier(self) -> Tier:
        if self.kind == "legacy" or self.scope.always_apply:
            return "always"
        if self.scope.globs:
            return "glob"
        return "manual"


def build_rule(identifier: str, text: str, kind: RuleKind) -> Rule:
    """Build a :class:`Rule` from already-read document text."""
    header = parse_frontmatter(text)
    if kind == "legacy":
        return Rule(
            identifier=identifier,
            raw_text=text,
            header=header,
            body=text,
            scope=RuleScope(),
            kind=kind,
        )
    return Rule(
        identifier=identifier,
        raw_text=text,
        header=header,
        body=strip_frontmatter(text),
        scope=derive_scope(header),
        kind=kind,
    )


def derive_scope(header: FrontmatterResult) -> RuleScope:
    """Derive automatic scope from decoded header data."""
    if not header.found or header.data is None:
        return RuleScope()
    return RuleScope(
        always_apply=header.data.get("alwaysApply") is True,
        globs=decode_globs(header.data.get("globs")),
    )


def decode_globs(value: HeaderValue | None) -> tuple[str, ...]:
    """Decode a ``globs`` header value into an ordered tuple of patterns."""
    if isinstance(value, tuple):
        items = [_strip_quotes(item.strip()) for item in value]
        return tuple(item for item in items if item)
    if not isinstance(value, str):
        return ()
    trimmed = value.strip()
    if not trimmed:
        return ()
    if trimmed.startswith("["):
        inner = trimmed[1:-1] if trimmed.endswith("]") else trimmed[1:]
        items = [_strip_quotes(item.strip()) for item in inner.split(",")]
        return tuple(item for item in items if item)
    return (trimmed,)


def find_rule_files(project_dir: Path) -> list[tuple[Path, RuleKind]]:
    """Return rule document paths in scan order: legacy file first, then rules dir.

    A missing rules directory yields no modern documents. A rules directory that
    exists but cannot be listed raises :class:`RuleLoadError`.
    """
    found: list[tuple[Path, RuleKind]] = []
    legacy = project_dir / LEGACY_FILENAME
    if legacy.is_file():
        found.append((legacy, "legacy"))

    rules_dir = project_dir / RULES_DIR
    if rules_dir.is_dir():
        try:
            entries = sorted(rules_dir.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            raise RuleLoadError(f"Cannot list rules directory {rules_dir}: {exc}") from exc
        for entry in entries:
            if entry.suffix == RULE_SUFFIX and entry.is_file():
                found.append((entry, "modern"))

    logger.debug("found %d rule documents under %s", len(found), project_dir)
    return found


def read_rule_file(project_dir: Path, path: Path, kind: RuleKind) -> Rule:
    """Read and parse one document; I/O and decode errors propagate."""
    text = path.read_text(encoding="utf-8")
    return build_rule(relative_identifier(project_dir, path), text, kind)


def load_rules(project_dir: Path) -> list[Rule]:
    """Load every rule document in ``project_dir``.

    Returns an empty list when neither rule source exists. Unreadable documents
    raise :class:`RuleLoadError` rather than being skipped.
    """
    rules: list[Rule] = []
    for path, kind in find_rule_files(project_dir):
        try:
            rules.append(read_rule_file(project_dir, path, kind))
        except (OSError, UnicodeDecodeError) as exc:
            raise RuleLoadError(f"Cannot read rule file {path}: {exc}") from exc
    return rules


def relative_identifier(project_dir: Path, path: Path) -> str:
    try:
        return path.relative_to(project_dir).as_posix()
    except ValueError:
        return path.as_posix()


def _strip_quotes(item: str) -> str:
    if item[:1] in ("'", '"'):
        item = item[1:]
    if item[-1:] in ("'", '"'):
        item = item[:-1]
    return item
