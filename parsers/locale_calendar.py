"""Locale date conventions backed by Babel's CLDR data.

Month tables keep 13 entries; the 13th is a reserved "no month"
placeholder and is always empty. Names are stored lowercase with
trailing periods stripped, so "Nov." and "Nov" match the same text.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from babel import Locale, UnknownLocaleError

_SEPARATOR = re.compile(r"[^\w\s']")


@dataclass(frozen=True)
class LocaleCalendar:
    locale_id: str
    month_names: tuple[str, ...]
    month_genitive_names: tuple[str, ...]
    abbreviated_month_names: tuple[str, ...]
    abbreviated_month_genitive_names: tuple[str, ...]
    day_names: tuple[str, ...]              # Monday first, like date.weekday()
    abbreviated_day_names: tuple[str, ...]
    am_designator: str
    pm_designator: str
    date_separator: str
    time_separator: str
    two_digit_year_max: int = 2049

    def full_months(self) -> list[tuple[int, str]]:
        return _candidates(self.month_names, self.month_genitive_names)

    def abbreviated_months(self) -> list[tuple[int, str]]:
        """CLDR abbreviations plus their unambiguous three-letter forms.

        en-GB and es-ES abbreviate September as "sept", while scanned
        documents mostly print "Sep".
        """
        return _with_short_aliases(_candidates(
            self.abbreviated_month_names, self.abbreviated_month_genitive_names
        ))

    def full_days(self) -> list[tuple[int, str]]:
        return _candidates(self.day_names, start=0)

    def abbreviated_days(self) -> list[tuple[int, str]]:
        return _candidates(self.abbreviated_day_names, start=0)

    def expand_two_digit_year(self, year: int) -> int:
        """Map 0-99 into the century ending at two_digit_year_max."""
        century = self.two_digit_year_max // 100 * 100
        result = century + year
        if result > self.two_digit_year_max:
            result -= 100
        return result


@lru_cache(maxsize=64)
def load_calendar(locale_id: str, two_digit_year_max: int = 2049) -> LocaleCalendar:
    """Build the calendar for a BCP 47 / POSIX locale id ("en-US", "nb_NO").

    Raises ValueError for unknown or malformed identifiers.
    """
    try:
        locale = Locale.parse(locale_id.replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError) as e:
        raise ValueError(f"Unknown locale '{locale_id}': {e}") from e

    months = locale.months
    days = locale.days
    periods = locale.day_periods.get("format", {}).get("abbreviated", {})

    return LocaleCalendar(
        locale_id=locale_id,
        month_names=_month_table(months["stand-alone"]["wide"]),
        month_genitive_names=_month_table(months["format"]["wide"]),
        abbreviated_month_names=_month_table(months["stand-alone"]["abbreviated"]),
        abbreviated_month_genitive_names=_month_table(months["format"]["abbreviated"]),
        day_names=_day_table(days["format"]["wide"]),
        abbreviated_day_names=_day_table(days["format"]["abbreviated"]),
        am_designator=str(periods.get("am", "am")).lower(),
        pm_designator=str(periods.get("pm", "pm")).lower(),
        date_separator=_first_separator(locale.date_formats["short"].pattern, "/"),
        time_separator=_first_separator(locale.time_formats["short"].pattern, ":"),
        two_digit_year_max=two_digit_year_max,
    )


def _strip_name(name: str) -> str:
    return (name or "").rstrip(".").lower()


def _month_table(names) -> tuple[str, ...]:
    table = [_strip_name(names.get(i, "")) for i in range(1, 13)]
    # 13th placeholder stays empty
    table.append("")
    return tuple(table)


def _day_table(names) -> tuple[str, ...]:
    return tuple(_strip_name(names.get(i, "")) for i in range(7))


def _first_separator(pattern: str, default: str) -> str:
    match = _SEPARATOR.search(pattern)
    return match.group(0) if match else default


def _candidates(*tables: tuple[str, ...], start: int = 1) -> list[tuple[int, str]]:
    """(value, name) pairs, longest name first, empty names skipped."""
    pairs = {
        (index + start, name)
        for table in tables
        for index, name in enumerate(table)
        if name
    }
    return sorted(pairs, key=lambda pair: (-len(pair[1]), pair[0]))


def _with_short_aliases(pairs: list[tuple[int, str]], length: int = 3) -> list[tuple[int, str]]:
    # "juin"/"juil" share "jui", so neither gets an alias
    owners: dict[str, set[int]] = {}
    for value, name in pairs:
        owners.setdefault(name[:length], set()).add(value)

    aliases = {
        (value, name[:length])
        for value, name in pairs
        if len(name) > length and len(owners[name[:length]]) == 1
    }
    return sorted(set(pairs) | aliases, key=lambda pair: (-len(pair[1]), pair[0]))
