"""Exact parsing of date strings against custom format templates.

Supports templates like "MM/dd/yyyy", "d MMM yy", "MMMM d, yyyy" or
"d 'de' MMMM yyyy":

  - d / dd / ddd / dddd     day digits, day digits (2), day names
  - M / MM / MMM / MMMM     month digits, month digits (2), month names
  - y / yy                  two-digit year (century pivot from the calendar)
  - yyy / yyyy / yyyyy...   three-or-four, four, n-digit year
  - H, HH, h, hh, m, mm, s, ss, f..., t, tt   time of day (validated, dropped)
  - /  :                    locale date / time separator
  - 'text' "text" \\x       literals

The whole input must be consumed. Parsed time fields are checked and
then discarded; only the calendar date is returned.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Optional

from models.enums import TokenKind
from parsers.locale_calendar import LocaleCalendar

_FIELD_KINDS = {
    "d": TokenKind.DAY,
    "M": TokenKind.MONTH,
    "y": TokenKind.YEAR,
    "H": TokenKind.HOUR_24,
    "h": TokenKind.HOUR_12,
    "m": TokenKind.MINUTE,
    "s": TokenKind.SECOND,
    "f": TokenKind.FRACTION,
    "t": TokenKind.AM_PM,
}

_MAX_WIDTH = {
    TokenKind.DAY: 4,
    TokenKind.MONTH: 4,
    TokenKind.YEAR: 9,
    TokenKind.HOUR_24: 2,
    TokenKind.HOUR_12: 2,
    TokenKind.MINUTE: 2,
    TokenKind.SECOND: 2,
    TokenKind.FRACTION: 7,
    TokenKind.AM_PM: 2,
}

# Time zone / era specifiers
_UNSUPPORTED = set("zKg")


@dataclass(frozen=True)
class FormatToken:
    kind: TokenKind
    width: int = 0
    literal: str = ""


@lru_cache(maxsize=512)
def tokenize_format(fmt: str) -> tuple[FormatToken, ...]:
    """Split a template into tokens. Raises ValueError for invalid templates."""
    tokens: list[FormatToken] = []
    i = 0

    while i < len(fmt):
        ch = fmt[i]

        if ch in _FIELD_KINDS:
            j = i
            while j < len(fmt) and fmt[j] == ch:
                j += 1
            kind = _FIELD_KINDS[ch]
            if j - i > _MAX_WIDTH[kind]:
                raise ValueError(f"Specifier '{fmt[i:j]}' is too long in {fmt!r}")
            tokens.append(FormatToken(kind, width=j - i))
            i = j
        elif ch in _UNSUPPORTED:
            raise ValueError(f"Unsupported specifier '{ch}' in {fmt!r}")
        elif ch in ("'", '"'):
            end = fmt.find(ch, i + 1)
            if end == -1:
                raise ValueError(f"Unterminated quoted literal in {fmt!r}")
            if end > i + 1:
                tokens.append(FormatToken(TokenKind.LITERAL, literal=fmt[i + 1:end]))
            i = end + 1
        elif ch == "\\":
            if i + 1 >= len(fmt):
                raise ValueError(f"Dangling escape in {fmt!r}")
            tokens.append(FormatToken(TokenKind.LITERAL, literal=fmt[i + 1]))
            i += 2
        elif ch == "%":
            # Single-specifier prefix, e.g. "%d"
            i += 1
        elif ch == "/":
            tokens.append(FormatToken(TokenKind.DATE_SEPARATOR))
            i += 1
        elif ch == ":":
            tokens.append(FormatToken(TokenKind.TIME_SEPARATOR))
            i += 1
        elif ch.isspace():
            tokens.append(FormatToken(TokenKind.WHITESPACE))
            i += 1
        else:
            tokens.append(FormatToken(TokenKind.LITERAL, literal=ch))
            i += 1

    if not tokens:
        raise ValueError("Empty format template")
    return tuple(tokens)


def parse_exact(text: str, fmt: str, calendar: LocaleCalendar) -> Optional[date]:
    """Parse text against one template. None if it does not fit or is not a real date."""
    try:
        tokens = tokenize_format(fmt)
    except ValueError:
        return None

    fields: dict[str, int] = {}
    pos = 0

    for token in tokens:
        result = _consume(text, pos, token, calendar)
        if result is None:
            return None
        pos, name, value = result
        if name is None:
            continue
        if fields.setdefault(name, value) != value:
            return None  # same field given twice, differently

    if pos != len(text):
        return None

    return _build_date(fields)


class LocaleDateParser:
    """DateParser bound to one locale's calendar conventions."""

    def __init__(self, calendar: LocaleCalendar):
        self.calendar = calendar

    @property
    def locale_id(self) -> str:
        return self.calendar.locale_id

    def try_parse(self, text: str, fmt: str) -> Optional[date]:
        return parse_exact(text, fmt, self.calendar)


def _consume(text: str, pos: int, token: FormatToken, calendar: LocaleCalendar):
    """Match one token at pos. Returns (new_pos, field, value) or None."""
    kind, width = token.kind, token.width

    if kind == TokenKind.LITERAL:
        end = pos + len(token.literal)
        if text[pos:end].lower() != token.literal.lower():
            return None
        return end, None, 0

    if kind == TokenKind.WHITESPACE:
        if pos < len(text) and text[pos].isspace():
            return pos + 1, None, 0
        return None

    if kind in (TokenKind.DATE_SEPARATOR, TokenKind.TIME_SEPARATOR):
        sep = calendar.date_separator if kind == TokenKind.DATE_SEPARATOR else calendar.time_separator
        if text.startswith(sep, pos):
            return pos + len(sep), None, 0
        return None

    if kind == TokenKind.DAY and width >= 3:
        names = calendar.abbreviated_days() if width == 3 else calendar.full_days()
        return _read_name(text, pos, names, "weekday")

    if kind == TokenKind.MONTH and width >= 3:
        names = calendar.abbreviated_months() if width == 3 else calendar.full_months()
        return _read_name(text, pos, names, "month")

    if kind == TokenKind.AM_PM:
        designators = [(0, calendar.am_designator), (12, calendar.pm_designator)]
        if width == 1:
            designators = [(offset, name[:1]) for offset, name in designators]
        return _read_name(text, pos, designators, "am_pm")

    if kind == TokenKind.YEAR:
        if width <= 2:
            read = _read_digits(text, pos, width, 2)
            if read is None:
                return None
            end, value = read
            return end, "year", calendar.expand_two_digit_year(value)
        min_len = width
        max_len = 4 if width == 3 else width
        read = _read_digits(text, pos, min_len, max_len)
        return None if read is None else (read[0], "year", read[1])

    if kind == TokenKind.FRACTION:
        read = _read_digits(text, pos, width, width)
        return None if read is None else (read[0], None, 0)

    # d, M, H, h, m, s: one or two digits, exactly two when doubled
    read = _read_digits(text, pos, width, 2)
    if read is None:
        return None
    return read[0], kind.value, read[1]


def _read_digits(text: str, pos: int, min_len: int, max_len: int):
    end = pos
    while end < len(text) and end - pos < max_len and text[end].isdecimal():
        end += 1
    if end - pos < min_len:
        return None
    return end, int(text[pos:end])


def _read_name(text: str, pos: int, names: list[tuple[int, str]], field: str):
    # names arrive longest first, so "june" wins over "jun"
    for value, name in names:
        if name and text[pos:pos + len(name)].lower() == name:
            return pos + len(name), field, value
    return None


def _build_date(fields: dict[str, int]) -> Optional[date]:
    if not _valid_time(fields):
        return None

    year = fields.get("year", date.today().year)
    month = fields.get("month", 1)
    day = fields.get("day", 1)

    try:
        result = date(year, month, day)
    except ValueError:
        return None

    if "weekday" in fields and fields["weekday"] != result.weekday():
        return None
    return result


def _valid_time(fields: dict[str, int]) -> bool:
    hour_24 = fields.get(TokenKind.HOUR_24.value)
    hour_12 = fields.get(TokenKind.HOUR_12.value)
    am_pm = fields.get("am_pm")

    if hour_24 is not None:
        if hour_24 > 23:
            return False
        if am_pm is not None and (hour_24 >= 12) != (am_pm == 12):
            return False
    if hour_12 is not None and not 1 <= hour_12 <= 12:
        return False
    if hour_24 is not None and hour_12 is not None and hour_24 % 12 != hour_12 % 12:
        return False
    if fields.get(TokenKind.MINUTE.value, 0) > 59:
        return False
    if fields.get(TokenKind.SECOND.value, 0) > 59:
        return False
    return True
