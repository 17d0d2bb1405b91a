"""Text normalization for OCR / PDF-extracted text.

Produces the canonical text every rule set's patterns run against:
lowercase, delimiters turned into spaces, ordinal suffixes erased,
line breaks joined, whitespace collapsed, control characters removed.
"""

import re
import unicodedata
from typing import Iterable, Optional

TABS_AND_NEWLINES = re.compile(r"[\t\r\n]+")
MULTI_SPACES = re.compile(r"\s{2,}")


class TextCleaner:
    def __init__(
        self,
        delimiters: Optional[str] = None,
        ordinals: Optional[Iterable[str]] = None,
    ):
        """Build the cleaner.

        delimiters: characters replaced with a space (e.g. "/.-,"). None,
            empty or whitespace-only means raw-delimiter mode, so patterns
            can reference the punctuation directly.
        ordinals: suffixes erased after a digit (e.g. "st", "nd", "º").
        """
        self._delim_regex: Optional[re.Pattern] = None
        self._ordinal_regex: Optional[re.Pattern] = None

        if delimiters and not delimiters.isspace():
            self._delim_regex = re.compile(_delimiter_class(delimiters))

        suffixes = _distinct_ordinals(ordinals or ())
        if suffixes:
            alternation = "|".join(re.escape(s) for s in suffixes)
            self._ordinal_regex = re.compile(
                rf"(?<=\d)\s*(?:{alternation})(?!\w)", re.IGNORECASE
            )

    @property
    def raw_mode(self) -> bool:
        return self._delim_regex is None

    def clean(self, raw: Optional[str]) -> str:
        """Return the canonical copy of raw."""
        if not raw or raw.isspace():
            return ""

        text = raw.lower()

        if self._delim_regex is not None:
            text = self._delim_regex.sub(" ", text)

        # "1st" -> "1"
        if self._ordinal_regex is not None:
            text = self._ordinal_regex.sub("", text)

        # Joins dates broken across a line wrap
        text = TABS_AND_NEWLINES.sub(" ", text)
        text = MULTI_SPACES.sub(" ", text)
        text = "".join(c for c in text if unicodedata.category(c) != "Cc")

        return text.strip()


def build_cleaner(rule_sets) -> TextCleaner:
    """Build one cleaner from the union of every rule set's delimiters and ordinals."""
    delimiters = "".join(rs.delimiters for rs in rule_sets)
    ordinals = [o for rs in rule_sets for o in rs.ordinals]
    return TextCleaner(delimiters or None, ordinals)


def _delimiter_class(delimiters: str) -> str:
    chars = dict.fromkeys(delimiters)
    has_hyphen = chars.pop("-", None) is not None

    body = "".join(re.escape(c) for c in chars)
    # Hyphen as the last char of the class is always literal
    if has_hyphen:
        body += "-"
    return f"[{body}]"


def _distinct_ordinals(ordinals: Iterable[str]) -> list[str]:
    seen: dict[str, str] = {}
    for suffix in ordinals:
        if suffix and suffix.casefold() not in seen:
            seen[suffix.casefold()] = suffix
    # Longest first so "ºs" is tried before "º"
    return sorted(seen.values(), key=len, reverse=True)
