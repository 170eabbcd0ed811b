"""Automatic repairs for rule documents."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from rule_doctor.cross import RedundancyPair, find_redundancy
from rule_doctor.frontmatter import (
    FRONTMATTER_RE,
    FrontmatterResult,
    HeaderValue,
    parse_frontmatter,
    strip_frontmatter,
)
from rule_doctor.loader import (
    RULE_SUFFIX,
    RULES_DIR,
    Rule,
    build_rule,
    find_rule_files,
    relative_identifier,
)
from rule_doctor.tokens import estimate_tokens

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1500
MINIMAL_FRONTMATTER = "---\ndescription: \nalwaysApply: false\n---\n"

MISSING_SPACE_RE = re.compile(r"^(\w+):(\S)", re.MULTILINE)
FLOW_GLOBS_RE = re.compile(r"globs:\s*\[([^\]]*)\]")
SECTION_SPLIT_RE = re.compile(r"(?=^## )", re.MULTILINE)
PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")


@dataclass(frozen=True, slots=True)
class SplitPart:
    body: str
    suffix: str


@dataclass(frozen=True, slots=True)
class SplitPlan:
    """How an oversized document would be divided."""

    parts: tuple[SplitPart, ...]
    header: FrontmatterResult


@dataclass(frozen=True, slots=True)
class FixedFile:
    identifier: str
    change: str


@dataclass(frozen=True, slots=True)
class SplitFile:
    identifier: str
    parts: tuple[str, ...]


@dataclass(slots=True)
class FixResult:
    """What ``autofix_project`` changed, or would change on a dry run."""

    fixed: list[FixedFile] = field(default_factory=list)
    splits: list[SplitFile] = field(default_factory=list)
    deduped: list[RedundancyPair] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def fix_frontmatter(text: str) -> str:
    """Repair common header mistakes; unchanged text means nothing to fix."""
    header = parse_frontmatter(text)
    if not header.found:
        return MINIMAL_FRONTMATTER + text
    if header.error is None:
        return text

    match = FRONTMATTER_RE.match(text)
    if match is None:
        return text
    block = _dedent_orphans(match.group("block"))
    block = MISSING_SPACE_RE.sub(r"\1: \2", block)
    block = FLOW_GLOBS_RE.sub(_quote_glob_items, block)
    return f"---\n{block}\n---" + text[match.end() :]


def plan_split(text: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> SplitPlan | None:
    """Plan a split of ``text`` into parts under ``max_tokens``; None if it fits.

    Bodies with ``## `` sections are packed greedily section by section.
    Bodies without sections are halved by paragraph. A body that cannot be
    divided into two non-empty parts is left alone.
    """
    if estimate_tokens(text) <= max_tokens:
        return None

    header = parse_frontmatter(text)
    body = strip_frontmatter(text)
    sections = [section for section in SECTION_SPLIT_RE.split(body) if section.strip()]

    if len(sections) <= 1:
        paragraphs = [item for item in PARAGRAPH_SPLIT_RE.split(body) if item.strip()]
        middle = (len(paragraphs) + 1) // 2
        chunks = ["\n\n".join(paragraphs[:middle]), "\n\n".join(paragraphs[middle:])]
    else:
        chunks = []
        current: list[str] = []
        current_tokens = 0
        for section in sections:
            section_tokens = estimate_tokens(section)
            if current and current_tokens + section_tokens > max_tokens:
                chunks.append("\n".join(current))
                current = [section]
                current_tokens = section_tokens
            else:
                current.append(section)
                current_tokens += section_tokens
        if current:
            chunks.append("\n".join(current))

    chunks = [chunk for chunk in chunks if chunk.strip()]
    if len(chunks) < 2:
        return None
    return SplitPlan(
        parts=tuple(
            SplitPart(body=chunk, suffix=f"-part{index}")
            for index, chunk in enumerate(chunks, start=1)
        ),
        header=header,
    )


def render_frontmatter(data: Mapping[str, HeaderValue]) -> str:
    lines = []
    for key, value in data.items():
        if isinstance(value, bool):
            lines.append(f"{key}: {'true' if value else 'false'}")
        elif isinstance(value, tuple):
            items = ", ".join(f'"{item}"' for item in value)
            lines.append(f"{key}: [{items}]")
        elif _needs_quotes(value):
            lines.append(f'{key}: "{value}"')
        else:
            lines.append(f"{key}: {value}")
    return "---\n" + "\n".join(lines) + "\n---\n"


def _needs_quotes(value: str) -> bool:
    # Strings that would decode differently if written bare.
    if value in ("true", "false") or value != value.strip():
        return True
    return len(value) >= 2 and value[0] == value[-1] == '"'


def autofix_project(
    project_dir: Path,
    *,
    dry_run: bool = False,
    split: bool = True,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> FixResult:
    """Repair headers, split oversized documents, and flag redundant pairs.

    Redundant pairs are never merged automatically. Documents that cannot be
    read are reported in ``errors`` and skipped.
    """
    result = FixResult()
    rules_dir = project_dir / RULES_DIR
    if not rules_dir.is_dir():
        result.errors.append(f"No {RULES_DIR.as_posix()}/ directory found")
        return result

    unreadable: set[Path] = set()
    for path in _rule_paths(rules_dir):
        original = _read_or_report(path, result, unreadable)
        if original is None:
            continue
        fixed = fix_frontmatter(original)
        if fixed == original:
            continue
        if not dry_run:
            path.write_text(fixed, encoding="utf-8")
        logger.debug("repaired frontmatter in %s", path)
        result.fixed.append(FixedFile(identifier=path.name, change="frontmatter repaired"))

    if split:
        for path in _rule_paths(rules_dir):
            text = _read_or_report(path, result, unreadable)
            if text is None:
                continue
            plan = plan_split(text, max_tokens=max_tokens)
            if plan is None:
                continue
            names = tuple(f"{path.stem}{part.suffix}{RULE_SUFFIX}" for part in plan.parts)
            if not dry_run:
                _write_split(path, plan, names)
            result.splits.append(SplitFile(identifier=path.name, parts=names))

    result.deduped.extend(find_redundancy(_readable_rules(project_dir, result, unreadable)))
    return result


def _read_or_report(path: Path, result: FixResult, unreadable: set[Path]) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        if path not in unreadable:
            unreadable.add(path)
            result.errors.append(f"Cannot read rule file {path.name}: {exc}")
        logger.debug("skipping unreadable %s: %s", path, exc)
        return None


def _readable_rules(project_dir: Path, result: FixResult, unreadable: set[Path]) -> list[Rule]:
    rules = []
    for path, kind in find_rule_files(project_dir):
        text = _read_or_report(path, result, unreadable)
        if text is not None:
            rules.append(build_rule(relative_identifier(project_dir, path), text, kind))
    return rules


def _write_split(path: Path, plan: SplitPlan, names: tuple[str, ...]) -> None:
    prefix = ""
    if plan.header.found and plan.header.data is not None:
        prefix = render_frontmatter(plan.header.data)
    for part, name in zip(plan.parts, names):
        (path.parent / name).write_text(prefix + part.body, encoding="utf-8")
    path.unlink()


def _rule_paths(rules_dir: Path) -> list[Path]:
    return sorted(
        entry for entry in rules_dir.iterdir() if entry.suffix == RULE_SUFFIX and entry.is_file()
    )


def _dedent_orphans(block: str) -> str:
    lines = block.split("\n")
    repaired: list[str] = []
    previous = ""
    for line in lines:
        stripped = line.strip()
        if (
            stripped
            and line[:1] in (" ", "\t")
            and not stripped.startswith("-")
            and not previous.rstrip().endswith(":")
        ):
            line = stripped
        if stripped:
            previous = line
        repaired.append(line)
    return "\n".join(repaired)


def _quote_glob_items(match: re.Match[str]) -> str:
    items = []
    for raw in match.group(1).split(","):
        item = raw.strip().strip("\"'")
        if item:
            items.append(f'"{item}"')
    return f"globs: [{', '.join(items)}]"
