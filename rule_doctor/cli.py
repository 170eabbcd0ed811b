"""CLI entrypoint for rule-doctor."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer

from rule_doctor import __version__
from rule_doctor.audit import audit_project
from rule_doctor.autofix import DEFAULT_MAX_TOKENS, autofix_project
from rule_doctor.checks import Check, build_checks, list_check_info
from rule_doctor.config import OUTPUT_FORMATS, AppConfig, load_app_config
from rule_doctor.doctor import CoverageGap, score_project
from rule_doctor.lint import LintResult, lint_project
from rule_doctor.loader import RuleLoadError
from rule_doctor.output import (
    build_audit_payload,
    build_checks_payload,
    build_fix_payload,
    build_lint_payload,
    build_report_payload,
    render_audit_human,
    render_audit_markdown,
    render_fix_human,
    render_lint_human,
    render_lint_markdown,
    render_report_human,
    render_report_markdown,
    to_json,
)

T = TypeVar("T")

app = typer.Typer(
    name="rule-doctor",
    no_args_is_help=True,
    help="Lint, audit, and score agent rule documents.",
)

ProjectArg = Annotated[Path, typer.Argument(help="Project directory to scan.")]
FormatOption = Annotated[
    str | None, typer.Option(help="Output format: human|json|markdown.", show_default="human")
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config TOML file."),
]
GapOption = Annotated[
    list[str] | None,
    typer.Option("--coverage-gap", help="File extension with no matching rule (repeatable)."),
]


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log debug output to stderr.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command("lint")
def lint_command(
    project_dir: ProjectArg = Path("."),
    format: FormatOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Lint every rule document; exit 1 when the configured severity is hit."""
    app_config = _load_config_or_raise(project_dir, config_file)
    output_format = _resolve_format(format, app_config)
    checks = _build_configured_checks_or_raise(app_config)
    result = _run_or_exit(lambda: lint_project(project_dir, checks))

    if output_format == "json":
        typer.echo(to_json(build_lint_payload(result)))
    elif output_format == "markdown":
        typer.echo(render_lint_markdown(result))
    else:
        typer.echo(render_lint_human(result))

    if _should_fail(result, app_config.fail_on):
        raise typer.Exit(code=1)


@app.command("doctor")
def doctor_command(
    project_dir: ProjectArg = Path("."),
    format: FormatOption = None,
    config_file: ConfigOption = None,
    coverage_gap: GapOption = None,
    fail_below: Annotated[
        int | None, typer.Option(help="Exit nonzero if the health percentage is below this.")
    ] = None,
) -> None:
    """Score overall rule health and assign a letter grade."""
    app_config = _load_config_or_raise(project_dir, config_file)
    output_format = _resolve_format(format, app_config)
    _build_configured_checks_or_raise(app_config)
    report = _run_or_exit(
        lambda: score_project(
            project_dir, coverage_gaps=_coverage_gaps(coverage_gap), config=app_config
        )
    )

    if output_format == "json":
        typer.echo(to_json(build_report_payload(report)))
    elif output_format == "markdown":
        typer.echo(render_report_markdown(report))
    else:
        typer.echo(render_report_human(report))

    if fail_below is not None and report.percentage < fail_below:
        raise typer.Exit(code=1)


@app.command("audit")
def audit_command(
    project_dir: ProjectArg = Path("."),
    format: FormatOption = None,
    config_file: ConfigOption = None,
    coverage_gap: GapOption = None,
) -> None:
    """Run a full audit: budget, lint, conflicts, redundancy, coverage, fixes."""
    app_config = _load_config_or_raise(project_dir, config_file)
    output_format = _resolve_format(format, app_config)
    _build_configured_checks_or_raise(app_config)
    report = _run_or_exit(
        lambda: audit_project(
            project_dir, coverage_gaps=_coverage_gaps(coverage_gap), config=app_config
        )
    )

    if output_format == "json":
        typer.echo(to_json(build_audit_payload(report)))
    elif output_format == "markdown":
        typer.echo(render_audit_markdown(report))
    else:
        typer.echo(render_audit_human(report))


@app.command("fix")
def fix_command(
    project_dir: ProjectArg = Path("."),
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Report without writing.")] = False,
    split: Annotated[
        bool, typer.Option("--split/--no-split", help="Split oversized rule files.")
    ] = True,
    max_tokens: Annotated[
        int, typer.Option("--max-tokens", help="Token budget per file when splitting.")
    ] = DEFAULT_MAX_TOKENS,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Repair frontmatter and split oversized rule files."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    if max_tokens <= 0:
        raise typer.BadParameter("--max-tokens must be > 0", param_hint="--max-tokens")

    result = _run_or_exit(
        lambda: autofix_project(project_dir, dry_run=dry_run, split=split, max_tokens=max_tokens)
    )
    if output_format == "json":
        typer.echo(to_json(build_fix_payload(result, dry_run=dry_run)))
    else:
        typer.echo(render_fix_human(result, dry_run=dry_run))


@app.command("checks")
def checks_command(
    project_dir: ProjectArg = Path("."),
    config_file: ConfigOption = None,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """List available lint checks and whether they are enabled."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(project_dir, config_file)
    try:
        infos = list_check_info(
            enabled_check_ids=app_config.check_enable,
            disabled_check_ids=app_config.check_disable,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.checks") from exc

    if output_format == "json":
        typer.echo(to_json(build_checks_payload(infos, config_source=app_config.source)))
        return
    for info in infos:
        state = "enabled" if info.default_enabled else "disabled"
        typer.echo(f"{info.check_id} ({state}): {info.description}")


def main() -> None:
    """Console script entrypoint."""
    app()


def _load_config_or_raise(project_dir: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(project_dir, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_checks_or_raise(app_config: AppConfig) -> list[Check]:
    try:
        return build_checks(
            enabled_check_ids=app_config.check_enable,
            disabled_check_ids=app_config.check_disable,
            settings=app_config.lint,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.checks") from exc


def _resolve_format(value: str | None, app_config: AppConfig) -> str:
    resolved = (value or app_config.format).lower()
    if resolved not in OUTPUT_FORMATS:
        choices = ", ".join(sorted(OUTPUT_FORMATS))
        raise typer.BadParameter(f"format must be one of: {choices}", param_hint="--format")
    return resolved


def _coverage_gaps(extensions: list[str] | None) -> list[CoverageGap]:
    return [CoverageGap(extension=ext) for ext in extensions or []]


def _should_fail(result: LintResult, fail_on: str) -> bool:
    if fail_on == "never":
        return False
    if fail_on == "warning":
        return result.total_errors > 0 or result.total_warnings > 0
    return result.total_errors > 0


def _run_or_exit(action: Callable[[], T]) -> T:
    try:
        return action()
    except RuleLoadError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
