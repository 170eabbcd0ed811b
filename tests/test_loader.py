"""Rule discovery and loading tests."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from rule_doctor.loader import (
    RuleLoadError,
    RuleScope,
    build_rule,
    decode_globs,
    load_rules,
)
from tests.helpers_rules import mdc, write_legacy, write_rule


def test_empty_project_loads_no_rules(tmp_path: Path) -> None:
    assert load_rules(tmp_path) == []


def test_loads_legacy_first_then_sorted_modern_rules(tmp_path: Path) -> None:
    write_legacy(tmp_path, "# Rules\nUse TypeScript strictly.\n")
    write_rule(tmp_path, "zeta.mdc", mdc("# Zeta\n"))
    write_rule(tmp_path, "alpha.mdc", mdc("# Alpha\n"))
    write_rule(tmp_path, "notes.md", "# ignored\n")

    rules = load_rules(tmp_path)
    assert [rule.identifier for rule in rules] == [
        ".cursorrules",
        ".cursor/rules/alpha.mdc",
        ".cursor/rules/zeta.mdc",
    ]
    assert [rule.kind for rule in rules] == ["legacy", "modern", "modern"]


def test_modern_rule_body_and_scope_are_derived(tmp_path: Path) -> None:
    write_rule(tmp_path, "ts.mdc", mdc("# TS\nUse strict mode.\n", globs='["*.ts", "*.tsx"]'))

    (rule,) = load_rules(tmp_path)
    assert rule.body == "# TS\nUse strict mode.\n"
    assert rule.scope == RuleScope(always_apply=True, globs=("*.ts", "*.tsx"))
    assert rule.tier == "always"
    assert rule.header.found is True


def test_always_apply_requires_boolean_true() -> None:
    rule = build_rule("x.mdc", '---\nalwaysApply: "true"\nglobs: "*.py"\n---\nbody\n', "modern")
    assert rule.scope.always_apply is False
    assert rule.scope.globs == ("*.py",)
    assert rule.tier == "glob"


def test_rule_without_scope_is_manual() -> None:
    rule = build_rule("x.mdc", mdc("body\n", always_apply=False), "modern")
    assert rule.tier == "manual"


def test_legacy_rule_keeps_full_text_as_body() -> None:
    text = "---\nnot: a header for legacy files\n---\nbody\n"
    rule = build_rule(".cursorrules", text, "legacy")
    assert rule.body == text
    assert rule.scope == RuleScope()
    assert rule.tier == "always"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ()),
        (True, ()),
        ("", ()),
        ("*.ts", ("*.ts",)),
        ('["*.ts", \'*.tsx\', ]', ("*.ts", "*.tsx")),
        ("[]", ()),
        (("*.py", '"*.pyi"', ""), ("*.py", "*.pyi")),
    ],
)
def test_decode_globs(value: object, expected: tuple[str, ...]) -> None:
    assert decode_globs(value) == expected  # type: ignore[arg-type]


def test_rules_are_immutable(tmp_path: Path) -> None:
    write_rule(tmp_path, "a.mdc", mdc("body\n"))
    (rule,) = load_rules(tmp_path)
    with pytest.raises(dataclasses.FrozenInstanceError):
        rule.body = "changed"  # type: ignore[misc]


def test_unreadable_rule_file_raises_load_error(tmp_path: Path) -> None:
    path = write_rule(tmp_path, "broken.mdc", "")
    path.write_bytes(b"\xff\xfe\xfa invalid utf-8")

    with pytest.raises(RuleLoadError):
        load_rules(tmp_path)
