"""Checks package."""

from collections.abc import Callable
from dataclasses import dataclass

from rule_doctor.checks.base import Check, Issue
from rule_doctor.checks.file_length import FileLengthCheck
from rule_doctor.checks.frontmatter import FrontmatterCheck
from rule_doctor.checks.legacy_format import LegacyFormatCheck
from rule_doctor.checks.vague_phrases import VaguePhrasesCheck
from rule_doctor.config import LintSettings

__all__ = [
    "Check",
    "CheckInfo",
    "Issue",
    "build_checks",
    "default_checks",
    "list_check_info",
]


@dataclass(frozen=True, slots=True)
class CheckInfo:
    """Check metadata for listing and selection."""

    check_id: str
    name: str
    description: str
    default_enabled: bool


@dataclass(frozen=True, slots=True)
class _CheckSpec:
    check_id: str
    factory: Callable[[], Check]
    name: str
    description: str


def default_checks() -> list[Check]:
    """Return the full battery in registration order."""
    return build_checks()


def build_checks(
    *,
    enabled_check_ids: list[str] | None = None,
    disabled_check_ids: list[str] | None = None,
    settings: LintSettings | None = None,
) -> list[Check]:
    """Build check instances applying enable/disable filters.

    Registration order is preserved regardless of the order ids are given in:
    structural checks first, then phrase heuristics, then length.
    """
    specs = _ordered_check_specs(settings or LintSettings())
    registry = {spec.check_id: spec for spec in specs}
    requested_ids = set(enabled_check_ids or []) | set(disabled_check_ids or [])

    unknown = [check_id for check_id in requested_ids if check_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown check ids: {joined}")

    enabled_set = set(enabled_check_ids) if enabled_check_ids is not None else set(registry)
    disabled_set = set(disabled_check_ids or [])
    return [
        spec.factory()
        for spec in specs
        if spec.check_id in enabled_set and spec.check_id not in disabled_set
    ]


def list_check_info(
    *,
    enabled_check_ids: list[str] | None = None,
    disabled_check_ids: list[str] | None = None,
) -> list[CheckInfo]:
    """Return metadata for all known checks with their effective enabled state."""
    active = {
        check.check_id
        for check in build_checks(
            enabled_check_ids=enabled_check_ids,
            disabled_check_ids=disabled_check_ids,
        )
    }
    return [
        CheckInfo(
            check_id=spec.check_id,
            name=spec.name,
            description=spec.description,
            default_enabled=spec.check_id in active,
        )
        for spec in _ordered_check_specs(LintSettings())
    ]


def _ordered_check_specs(settings: LintSettings) -> list[_CheckSpec]:
    return [
        _spec(FrontmatterCheck, FrontmatterCheck),
        _spec(LegacyFormatCheck, LegacyFormatCheck),
        _spec(VaguePhrasesCheck, VaguePhrasesCheck),
        _spec(
            FileLengthCheck,
            lambda: FileLengthCheck(
                max_lines_warning=settings.max_lines_warning,
                max_lines_error=settings.max_lines_error,
            ),
        ),
    ]


def _spec(check_cls: type, factory: Callable[[], Check]) -> _CheckSpec:
    return _CheckSpec(
        check_id=check_cls.check_id,
        factory=factory,
        name=check_cls.__name__,
        description=(check_cls.__doc__ or "").strip(),
    )
