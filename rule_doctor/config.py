"""Configuration loading for rule-doctor."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".rule-doctor.toml", "rule-doctor.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("rule_doctor", "rule-doctor")

OUTPUT_FORMATS = {"human", "json", "markdown"}
FAIL_ON_CHOICES = {"error", "warning", "never"}


@dataclass(frozen=True, slots=True)
class LintSettings:
    """Thresholds for per-document checks."""

    max_lines_warning: int = 150
    max_lines_error: int = 300

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_lines_warning": self.max_lines_warning,
            "max_lines_error": self.max_lines_error,
        }


@dataclass(frozen=True, slots=True)
class RedundancySettings:
    """Tuning for line-overlap redundancy detection.

    ``threshold`` is compared against shared lines divided by the smaller
    document's line count, so a short file fully contained in a long one
    reports as fully redundant.
    """

    threshold: float = 0.6
    min_line_length: int = 10

    def to_dict(self) -> dict[str, Any]:
        return {"threshold": self.threshold, "min_line_length": self.min_line_length}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    fail_on: str = "error"
    check_enable: list[str] | None = None
    check_disable: list[str] = field(default_factory=list)
    lint: LintSettings = field(default_factory=LintSettings)
    redundancy: RedundancySettings = field(default_factory=RedundancySettings)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_on": self.fail_on,
            "checks": {
                "enable": list(self.check_enable) if self.check_enable is not None else None,
                "disable": list(self.check_disable),
            },
            "lint": self.lint.to_dict(),
            "redundancy": self.redundancy.to_dict(),
            "source": self.source,
        }


def load_app_config(project_dir: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or project-local files with precedence."""
    project_dir = project_dir.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (project_dir / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = project_dir / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = project_dir / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    checks_mapping = _as_table(mapping.get("checks"), "checks")
    lint_mapping = _as_table(mapping.get("lint"), "lint")
    redundancy_mapping = _as_table(mapping.get("redundancy"), "redundancy")

    return AppConfig(
        format=_as_choice(mapping.get("format", "human"), OUTPUT_FORMATS, "format"),
        fail_on=_as_choice(mapping.get("fail_on", "error"), FAIL_ON_CHOICES, "fail_on"),
        check_enable=_as_str_list_or_none(checks_mapping.get("enable")),
        check_disable=_as_str_list(checks_mapping.get("disable")),
        lint=_parse_lint_settings(lint_mapping),
        redundancy=_parse_redundancy_settings(redundancy_mapping),
        source=source,
    )


def _parse_lint_settings(value: dict[str, Any]) -> LintSettings:
    warning = _as_int(value.get("max_lines_warning", 150), "lint.max_lines_warning")
    error = _as_int(value.get("max_lines_error", 300), "lint.max_lines_error")
    if warning <= 0:
        raise ValueError("lint.max_lines_warning must be > 0")
    if error <= warning:
        raise ValueError("lint.max_lines_error must be greater than lint.max_lines_warning")
    return LintSettings(max_lines_warning=warning, max_lines_error=error)


def _parse_redundancy_settings(value: dict[str, Any]) -> RedundancySettings:
    threshold = _as_float(value.get("threshold", 0.6), "redundancy.threshold")
    if not 0.0 < threshold <= 1.0:
        raise ValueError("redundancy.threshold must be in (0, 1]")
    min_length = _as_int(value.get("min_line_length", 10), "redundancy.min_line_length")
    if min_length < 0:
        raise ValueError("redundancy.min_line_length must be >= 0")
    return RedundancySettings(threshold=threshold, min_line_length=min_length)


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Expected a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value)


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_float(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"{field_name} must be a number")
    return float(raw)
