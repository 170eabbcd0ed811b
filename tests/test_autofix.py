"""Autofix tests."""

from __future__ import annotations

from pathlib import Path

from rule_doctor.autofix import (
    MINIMAL_FRONTMATTER,
    autofix_project,
    fix_frontmatter,
    plan_split,
    render_frontmatter,
)
from rule_doctor.frontmatter import parse_frontmatter
from tests.helpers_rules import mdc, numbered_lines, write_rule


def _sections(*letters: str, size: int = 4000) -> str:
    return "".join(f"## Section {letter}\n{letter * size}\n" for letter in letters)


def test_fix_adds_minimal_frontmatter_when_missing() -> None:
    text = "# Rule\nDo things.\n"
    fixed = fix_frontmatter(text)
    assert fixed == MINIMAL_FRONTMATTER + text
    assert parse_frontmatter(fixed).ok


def test_fix_leaves_valid_frontmatter_untouched() -> None:
    text = mdc("# Rule\n")
    assert fix_frontmatter(text) == text


def test_fix_repairs_indentation_spacing_and_glob_quotes() -> None:
    text = "---\ndescription:Bad YAML\n  invalid: indentation\n"
    text += "globs: [*.ts, '*.tsx']\n---\n# Rule\n"
    fixed = fix_frontmatter(text)

    result = parse_frontmatter(fixed)
    assert result.error is None
    assert result.data == {
        "description": "Bad YAML",
        "invalid": "indentation",
        "globs": '["*.ts", "*.tsx"]',
    }
    assert fixed.endswith("---\n# Rule\n")


def test_plan_split_returns_none_within_budget() -> None:
    assert plan_split(mdc("# Small\n")) is None


def test_plan_split_packs_sections_under_budget() -> None:
    plan = plan_split(mdc(_sections("a", "b", "c")), max_tokens=1500)
    assert plan is not None
    assert [part.suffix for part in plan.parts] == ["-part1", "-part2", "-part3"]
    assert plan.parts[1].body.startswith("## Section b")
    assert plan.header.ok


def test_plan_split_halves_by_paragraph_without_sections() -> None:
    body = "\n\n".join(letter * 2000 for letter in "abcd")
    plan = plan_split(mdc(body), max_tokens=1500)
    assert plan is not None
    assert len(plan.parts) == 2
    assert plan.parts[0].body == "a" * 2000 + "\n\n" + "b" * 2000


def test_plan_split_keeps_single_oversized_paragraph_whole() -> None:
    assert plan_split(mdc("x" * 8000, description="Big"), max_tokens=1500) is None


def test_autofix_does_not_split_single_paragraph_into_empty_part(tmp_path: Path) -> None:
    rules_dir = tmp_path / ".cursor" / "rules"
    text = mdc("x" * 8000, description="Big")
    write_rule(tmp_path, "big.mdc", text)

    result = autofix_project(tmp_path)
    assert result.splits == []
    assert (rules_dir / "big.mdc").read_text(encoding="utf-8") == text
    assert not (rules_dir / "big-part2.mdc").exists()


def test_render_frontmatter_round_trips_through_parser() -> None:
    data = {"description": "Split", "alwaysApply": True, "globs": ("*.ts", "*.tsx")}
    rendered = render_frontmatter(data)
    assert parse_frontmatter(rendered + "body").data == {
        "description": "Split",
        "alwaysApply": True,
        "globs": '["*.ts", "*.tsx"]',
    }


def test_autofix_reports_missing_rules_directory(tmp_path: Path) -> None:
    result = autofix_project(tmp_path)
    assert result.errors == ["No .cursor/rules/ directory found"]
    assert result.fixed == []


def test_autofix_reports_unreadable_file_and_continues(tmp_path: Path) -> None:
    broken = write_rule(tmp_path, "a-broken.mdc", "")
    broken.write_bytes(b"\xff\xfe\xfa")
    write_rule(tmp_path, "b-bare.mdc", "# Bare\n")

    result = autofix_project(tmp_path)
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Cannot read rule file a-broken.mdc")
    assert [item.identifier for item in result.fixed] == ["b-bare.mdc"]
    assert broken.read_bytes() == b"\xff\xfe\xfa"


def test_autofix_dry_run_does_not_write(tmp_path: Path) -> None:
    path = write_rule(tmp_path, "bare.mdc", "# Bare\n")
    write_rule(tmp_path, "big.mdc", mdc(_sections("a", "b", "c")))

    result = autofix_project(tmp_path, dry_run=True)
    assert [item.identifier for item in result.fixed] == ["bare.mdc"]
    assert [item.identifier for item in result.splits] == ["big.mdc"]
    assert path.read_text(encoding="utf-8") == "# Bare\n"
    assert (tmp_path / ".cursor" / "rules" / "big.mdc").exists()


def test_autofix_writes_repairs_and_splits(tmp_path: Path) -> None:
    rules_dir = tmp_path / ".cursor" / "rules"
    write_rule(tmp_path, "bare.mdc", "# Bare\n")
    write_rule(tmp_path, "big.mdc", mdc(_sections("a", "b", "c"), description="Big"))

    result = autofix_project(tmp_path)
    assert (rules_dir / "bare.mdc").read_text(encoding="utf-8").startswith("---\n")
    assert result.splits[0].parts == ("big-part1.mdc", "big-part2.mdc", "big-part3.mdc")
    assert not (rules_dir / "big.mdc").exists()
    part = (rules_dir / "big-part2.mdc").read_text(encoding="utf-8")
    assert part.startswith("---\ndescription: Big\nalwaysApply: true\n---\n## Section b")


def test_autofix_flags_redundant_pairs_without_merging(tmp_path: Path) -> None:
    body = numbered_lines("Shared", 10)
    write_rule(tmp_path, "a.mdc", mdc(body))
    write_rule(tmp_path, "b.mdc", mdc(body))

    result = autofix_project(tmp_path, split=False)
    (pair,) = result.deduped
    assert pair.overlap_pct == 100
    assert (tmp_path / ".cursor" / "rules" / "a.mdc").exists()
    assert (tmp_path / ".cursor" / "rules" / "b.mdc").exists()


def test_render_frontmatter_keeps_quoted_booleans_as_strings() -> None:
    header = parse_frontmatter('---\nalwaysApply: "true"\ndescription: "false"\n---\n')
    assert header.data is not None
    rendered = render_frontmatter(header.data)
    assert rendered == '---\nalwaysApply: "true"\ndescription: "false"\n---\n'
    assert parse_frontmatter(rendered).data == header.data


def test_split_preserves_string_always_apply(tmp_path: Path) -> None:
    rules_dir = tmp_path / ".cursor" / "rules"
    text = '---\ndescription: Big\nalwaysApply: "true"\n---\n' + _sections("a", "b")
    write_rule(tmp_path, "big.mdc", text)

    autofix_project(tmp_path)
    part = (rules_dir / "big-part1.mdc").read_text(encoding="utf-8")
    assert part.startswith('---\ndescription: Big\nalwaysApply: "true"\n---\n')
    assert parse_frontmatter(part).data["alwaysApply"] == "true"  # type: ignore[index]
