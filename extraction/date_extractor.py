"""Multi-locale date extraction from free-form text.

Usage:
    extractor = DateExtractor.from_locales(["en-US", "nb-NO"])
    extractor = DateExtractor.from_definitions([fr_json, ar_json])
    dates = extractor.extract(pdf_text)

Precedence equals the order of locales / definitions supplied. Text
claimed by a successful match is never reused by a later one, so a
numeric date valid under several locales is reported once, under the
first. Duplicate dates at different positions are preserved.
"""

import logging
from datetime import date
from typing import Optional, Sequence

from config.settings import Settings
from extraction.errors import InvalidConfigurationError
from models.date_match import DateMatch, MatchedSpan
from models.rule_set import LocaleRuleSet
from parsers.text_cleaner import TextCleaner, build_cleaner
from rulesets.loader import Payload, load_builtin, parse_definition

logger = logging.getLogger(__name__)


class DateExtractor:
    """Extracts calendar dates from text with locale rule sets in precedence order.

    Immutable after construction; extract() keeps all working state
    local, so one instance can be shared across threads.
    """

    def __init__(self, rule_sets: Sequence[LocaleRuleSet]):
        if not rule_sets:
            raise InvalidConfigurationError("Rule-set list must not be empty.")

        self._rule_sets: tuple[LocaleRuleSet, ...] = tuple(rule_sets)  # caller order
        self._cleaner: TextCleaner = build_cleaner(self._rule_sets)

        summary = ", ".join(
            f"{rs.locale_id} ({len(rs.patterns)} patterns)" for rs in self._rule_sets
        )
        logger.info(f"Loaded {len(self._rule_sets)} rule sets: {summary}")

    @classmethod
    def from_locales(
        cls,
        locales: Optional[Sequence[str]],
        settings: Optional[Settings] = None,
    ) -> "DateExtractor":
        """Build from built-in rule files, e.g. ["en-US", "nb-NO"].

        Raises InvalidConfigurationError for an empty list and
        RuleSetNotFoundError for a locale without a rule file.
        """
        if not locales:
            raise InvalidConfigurationError("Locale list must not be empty.")
        settings = settings or Settings()
        return cls([load_builtin(locale_id, settings) for locale_id in locales])

    @classmethod
    def from_definitions(
        cls,
        payloads: Optional[Sequence[Payload]],
        settings: Optional[Settings] = None,
    ) -> "DateExtractor":
        """Build from caller-supplied JSON definitions; bypasses the built-in bundle.

        Raises InvalidConfigurationError for an empty list and
        MalformedRuleSetError for a definition that fails validation.
        """
        if not payloads:
            raise InvalidConfigurationError("Definition list must not be empty.")
        settings = settings or Settings()
        return cls([parse_definition(payload, settings) for payload in payloads])

    @property
    def locales(self) -> list[str]:
        return [rs.locale_id for rs in self._rule_sets]

    def clean(self, text: Optional[str]) -> str:
        """Canonical text all patterns are matched against."""
        return self._cleaner.clean(text or "")

    def extract(self, text: Optional[str]) -> list[date]:
        """Every recognised date, in discovery order. Duplicates remain duplicated."""
        return [m.value for m in self.extract_matches(text)]

    def extract_matches(self, text: Optional[str]) -> list[DateMatch]:
        """Like extract(), with the span, locale and template of every date."""
        cleaned = self.clean(text)
        matches: list[DateMatch] = []
        used_spans: list[MatchedSpan] = []

        if not cleaned:
            return matches

        for rule_set in self._rule_sets:            # locale precedence
            for entry in rule_set.patterns:         # 4-digit-year patterns first
                for m in entry.regex.finditer(cleaned):
                    span = MatchedSpan(m.start(), m.end() - m.start())

                    # Skip if an earlier match consumed any of this slice
                    if any(span.overlaps(used) for used in used_spans):
                        logger.debug(
                            f"[{rule_set.locale_id}] '{m.group(0)}' at {span.start} overlaps a claimed span"
                        )
                        continue

                    parsed = self._parse(rule_set, m.group(0), entry.formats)
                    if parsed is None:
                        # Not claimed: a later locale may still read this text
                        logger.debug(
                            f"[{rule_set.locale_id}] '{m.group(0)}' at {span.start} is not a valid date"
                        )
                        continue

                    value, fmt = parsed
                    matches.append(DateMatch(
                        value=value,
                        span=span,
                        text=m.group(0),
                        locale_id=rule_set.locale_id,
                        format=fmt,
                    ))
                    used_spans.append(span)

        logger.debug(f"Extracted {len(matches)} dates from {len(cleaned)} chars")
        return matches

    @staticmethod
    def _parse(
        rule_set: LocaleRuleSet,
        text: str,
        formats: Sequence[str],
    ) -> Optional[tuple[date, str]]:
        # First template that parses wins
        for fmt in formats:
            value = rule_set.parser.try_parse(text, fmt)
            if value is not None:
                return value, fmt
        return None
