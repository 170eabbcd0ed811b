"""CLI tests."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from rule_doctor import __version__
from rule_doctor.cli import app
from tests.helpers_rules import mdc, write_rule

runner = CliRunner()


def test_version_flag_prints_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_lint_exits_nonzero_on_errors(tmp_path: Path) -> None:
    write_rule(tmp_path, "bad.mdc", "# No frontmatter\n")

    result = runner.invoke(app, ["lint", str(tmp_path)])
    assert result.exit_code == 1
    assert "Missing YAML frontmatter" in result.stdout


def test_lint_clean_project_exits_zero(tmp_path: Path) -> None:
    write_rule(tmp_path, "good.mdc", mdc("# Good\nReturn Result types.\n"))

    result = runner.invoke(app, ["lint", str(tmp_path)])
    assert result.exit_code == 0
    assert "All checks passed" in result.stdout


def test_lint_empty_project_reports_no_files(tmp_path: Path) -> None:
    result = runner.invoke(app, ["lint", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["no_files"] is True


def test_lint_fail_on_warning_from_config(tmp_path: Path) -> None:
    write_rule(tmp_path, "vague.mdc", mdc("Be thorough.\n"))
    (tmp_path / ".rule-doctor.toml").write_text('fail_on = "warning"\n', encoding="utf-8")

    result = runner.invoke(app, ["lint", str(tmp_path)])
    assert result.exit_code == 1


def test_doctor_json_reports_grade(tmp_path: Path) -> None:
    write_rule(tmp_path, "good.mdc", mdc("# Good\nReturn Result types.\n"))

    result = runner.invoke(
        app, ["doctor", str(tmp_path), "--format", "json", "--coverage-gap", ".go"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["percentage"] == 90
    assert payload["grade"] == "A"
    assert payload["checks"][4]["detail"] == "Missing rules for: .go"


def test_doctor_fail_below(tmp_path: Path) -> None:
    result = runner.invoke(app, ["doctor", str(tmp_path), "--fail-below", "80"])
    assert result.exit_code == 1
    assert "Health: C (60%)" in result.stdout


def test_audit_markdown(tmp_path: Path) -> None:
    result = runner.invoke(app, ["audit", str(tmp_path), "--format", "markdown"])
    assert result.exit_code == 0
    assert "# Rule Audit Report" in result.stdout
    assert "## Suggested Fixes" in result.stdout


def test_fix_dry_run_leaves_files(tmp_path: Path) -> None:
    path = write_rule(tmp_path, "bare.mdc", "# Bare\n")

    result = runner.invoke(app, ["fix", str(tmp_path), "--dry-run", "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["dry_run"] is True
    assert payload["fixed"] == [{"file": "bare.mdc", "change": "frontmatter repaired"}]
    assert path.read_text(encoding="utf-8") == "# Bare\n"


def test_checks_command_lists_enabled_state_from_config(tmp_path: Path) -> None:
    (tmp_path / ".rule-doctor.toml").write_text(
        '[checks]\ndisable = ["file_length"]\n', encoding="utf-8"
    )

    result = runner.invoke(app, ["checks", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    states = {item["check_id"]: item["enabled"] for item in payload["checks"]}
    assert states == {
        "frontmatter": True,
        "legacy_format": True,
        "vague_phrases": True,
        "file_length": False,
    }
    assert payload["meta"]["config_source"] == str(tmp_path.resolve() / ".rule-doctor.toml")


def test_invalid_config_is_a_usage_error(tmp_path: Path) -> None:
    (tmp_path / ".rule-doctor.toml").write_text('[checks]\nenable = ["nope"]\n', encoding="utf-8")

    result = runner.invoke(app, ["lint", str(tmp_path)])
    assert result.exit_code == 2


def test_fix_reports_undecodable_rule_file(tmp_path: Path) -> None:
    broken = write_rule(tmp_path, "a.mdc", "")
    broken.write_bytes(b"\xff\xfe\xfa")

    result = runner.invoke(app, ["fix", str(tmp_path), "--format", "json"])
    assert result.exception is None
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert len(payload["errors"]) == 1
    assert payload["errors"][0].startswith("Cannot read rule file a.mdc")
