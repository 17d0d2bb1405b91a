"""Compiled, immutable rule sets consumed by the extraction engine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

# Regex fragments that pin a 4-digit year token
FULL_YEAR_TOKENS = (r"\d{4}", "[0-9]{4}")


class DateParser(Protocol):
    """Locale-bound strict parser: one template at a time, None on failure."""

    locale_id: str

    def try_parse(self, text: str, fmt: str) -> Optional[date]:
        ...


@dataclass(frozen=True)
class PatternEntry:
    regex: re.Pattern
    formats: tuple[str, ...]

    @property
    def requires_full_year(self) -> bool:
        return any(token in self.regex.pattern for token in FULL_YEAR_TOKENS)


@dataclass(frozen=True)
class LocaleRuleSet:
    locale_id: str
    delimiters: str                   # "" = raw-delimiter mode
    ordinals: tuple[str, ...]
    patterns: tuple[PatternEntry, ...]
    parser: DateParser


def order_patterns(entries: list[PatternEntry]) -> tuple[PatternEntry, ...]:
    """Stable sort putting patterns that require a 4-digit year first."""
    return tuple(sorted(entries, key=lambda entry: not entry.requires_full_year))
