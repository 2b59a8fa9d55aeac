"""Extension glob patterns compiled into anchored file-name matchers.

A pattern describes the extension portion of a name: ``html`` selects
``*.html`` and ``?html`` selects ``*.xhtml`` or ``*.shtml``. Matching is
case-insensitive and is compiled once per configuration, not per file.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import ConfigError


def normalize_type_pattern(pattern: str) -> str:
    """Strip whitespace and one optional leading dot; reject empty patterns."""
    normalized = pattern.strip()
    if normalized.startswith("."):
        normalized = normalized[1:]
    if not normalized:
        raise ConfigError(f"invalid empty file type pattern: {pattern!r}")
    return normalized


def _translate(pattern: str) -> str:
    parts: list[str] = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


@dataclass(frozen=True)
class TypeMatcher:
    """Compiled alternation of ``*.<pattern>`` globs."""

    patterns: tuple[str, ...]
    regex: re.Pattern[str]

    def matches(self, name: str) -> bool:
        return self.regex.fullmatch(name) is not None


def compile_type_patterns(patterns: Iterable[str]) -> TypeMatcher | None:
    """Build one matcher for ``patterns``, or ``None`` when the set is empty.

    Duplicates (after normalization, compared case-insensitively) are dropped
    while keeping first-seen order.
    """
    unique: list[str] = []
    seen: set[str] = set()
    for raw in patterns:
        pattern = normalize_type_pattern(raw)
        key = pattern.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(pattern)
    if not unique:
        return None

    alternatives = "|".join(_translate(pattern) for pattern in unique)
    regex = re.compile(rf".*\.(?:{alternatives})", re.IGNORECASE | re.DOTALL)
    return TypeMatcher(patterns=tuple(unique), regex=regex)


__all__ = ["TypeMatcher", "compile_type_patterns", "normalize_type_pattern"]
