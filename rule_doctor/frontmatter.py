"""Permissive frontmatter parsing for rule documents.

The decoder understands the small subset of YAML that rule headers use in
practice: flat ``key: value`` pairs, ``true``/``false`` literals, double-quoted
strings, and block lists of ``- item`` lines under an empty key. Anything more
elaborate is either passed through as raw text (bracketed flow lists) or
rejected with an error, never guessed at.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

HeaderValue = Union[bool, str, tuple[str, ...]]

FRONTMATTER_RE = re.compile(r"\A---\r?\n(?P<block>.*?)\r?\n---", re.DOTALL)
FRONTMATTER_STRIP_RE = re.compile(r"\A---\r?\n.*?\r?\n---(?:\r?\n)?", re.DOTALL)

INDENTATION_ERROR = "Invalid YAML indentation"


@dataclass(frozen=True, slots=True)
class FrontmatterResult:
    """Tri-state result of header detection and decoding."""

    found: bool
    data: Mapping[str, HeaderValue] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.found and self.error is None


def parse_frontmatter(text: str) -> FrontmatterResult:
    """Detect and decode the leading ``---`` block of ``text``.

    Returns ``found=False`` when there is no header, ``found=True`` with
    ``error`` set when the block uses indentation the decoder does not
    support, and ``found=True`` with read-only ``data`` otherwise. Never raises.
    """
    match = FRONTMATTER_RE.match(text)
    if match is None:
        return FrontmatterResult(found=False)

    data: dict[str, HeaderValue] = {}
    list_key: str | None = None
    previous = ""
    for raw_line in match.group("block").splitlines():
        if not raw_line.strip():
            continue
        stripped = raw_line.strip()
        indented = raw_line[:1] in (" ", "\t")

        if indented and not stripped.startswith("-") and not previous.rstrip().endswith(":"):
            return FrontmatterResult(found=True, error=INDENTATION_ERROR)
        previous = raw_line

        if stripped.startswith("- ") or stripped == "-":
            if list_key is not None:
                _append_list_item(data, list_key, stripped[1:].strip())
            continue

        key, sep, value = raw_line.partition(":")
        if not sep:
            list_key = None
            continue
        key = key.strip()
        value = value.strip()
        data[key] = _coerce_value(value)
        list_key = key if value == "" else None

    return FrontmatterResult(found=True, data=MappingProxyType(data))


def strip_frontmatter(text: str) -> str:
    """Return ``text`` without its leading header block, if any."""
    return FRONTMATTER_STRIP_RE.sub("", text, count=1)


def header_length(text: str) -> int:
    """Number of characters occupied by the leading header block."""
    match = FRONTMATTER_STRIP_RE.match(text)
    return match.end() if match else 0


def _coerce_value(value: str) -> HeaderValue:
    if value == "true":
        return True
    if value == "false":
        return False
    return _unquote(value)


def _append_list_item(data: dict[str, HeaderValue], key: str, item: str) -> None:
    current = data.get(key)
    items = current if isinstance(current, tuple) else ()
    data[key] = (*items, _unquote(item))


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value
