"""Tests for multi-locale date extraction."""

import json
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from extraction.date_extractor import DateExtractor
from extraction.errors import (
    InvalidConfigurationError,
    MalformedRuleSetError,
    RuleSetNotFoundError,
)
from models.rule_set import LocaleRuleSet, PatternEntry, order_patterns

FR_RAW_JSON = r"""
{
  "culture":"fr-FR",
  "delimiters":"",                 // raw-delimiter mode
  "patterns":[
    {
      "regex":"\\b\\d{2}/\\d{2}/\\d{4}\\b",
      "format":"dd/MM/yyyy"
    }
  ]
}
"""

FR_TRAILING_COMMA_JSON = r"""
{
  "culture": "fr-FR",
  "delimiters": "",
  "patterns": [
    {"regex": "\\b\\d{2}/\\d{2}/\\d{4}\\b", "format": "dd/MM/yyyy",},
  ],
}
"""

ES_ORDINAL_JSON = json.dumps({
    "culture": "es-ES",
    "delimiters": "/.-,",
    "ordinals": ["º", "ª"],
    "patterns": [
        {"regex": r"\b\d{1,2}\s+de\s+\w+\s+\d{4}\b", "format": "d 'de' MMMM yyyy"},
    ],
}, ensure_ascii=False)


def _extract(locales, text, settings):
    return DateExtractor.from_locales(locales, settings).extract(text)


class StubParser:
    """Parses only the texts it was given, whatever the template."""

    def __init__(self, locale_id: str, known: dict[str, date], accept_format: str | None = None):
        self.locale_id = locale_id
        self.known = known
        self.accept_format = accept_format
        self.calls: list[tuple[str, str]] = []

    def try_parse(self, text, fmt):
        self.calls.append((text, fmt))
        if self.accept_format is not None and fmt != self.accept_format:
            return None
        return self.known.get(text)


def _stub_rule_set(locale_id, regexes, known, formats=("x",), accept_format=None):
    entries = [PatternEntry(re.compile(r), tuple(formats)) for r in regexes]
    return LocaleRuleSet(
        locale_id=locale_id,
        delimiters="",
        ordinals=(),
        patterns=order_patterns(entries),
        parser=StubParser(locale_id, known, accept_format),
    )


class TestConstruction:
    def test_empty_locale_list(self, settings):
        with pytest.raises(InvalidConfigurationError):
            DateExtractor.from_locales([], settings)
        with pytest.raises(InvalidConfigurationError):
            DateExtractor.from_locales(None, settings)

    def test_empty_definition_list(self, settings):
        with pytest.raises(InvalidConfigurationError):
            DateExtractor.from_definitions([], settings)

    def test_empty_rule_sets(self):
        with pytest.raises(InvalidConfigurationError):
            DateExtractor([])

    def test_invalid_culture(self, settings):
        with pytest.raises(RuleSetNotFoundError):
            DateExtractor.from_locales(["zz-ZZ"], settings)

    def test_one_bad_locale_fails_whole_list(self, settings):
        with pytest.raises(RuleSetNotFoundError):
            DateExtractor.from_locales(["en-US", "zz-ZZ"], settings)

    def test_malformed_definition(self, settings):
        with pytest.raises(MalformedRuleSetError):
            DateExtractor.from_definitions([FR_RAW_JSON, '{"patterns": []}'], settings)

    def test_locales_keep_caller_order(self, settings):
        extractor = DateExtractor.from_locales(["nb-NO", "en-US"], settings)
        assert extractor.locales == ["nb-NO", "en-US"]


class TestExtractEnglish:
    def test_simple_us_date(self, settings):
        assert _extract(["en-US"], "Invoice 04/07/2025", settings) == [date(2025, 4, 7)]

    def test_long_us_date(self, settings):
        assert _extract(["en-US"], "Invoice date is November 1, 2019", settings) == [date(2019, 11, 1)]

    def test_ignores_impossible_date(self, settings):
        assert _extract(["en-US"], "12/34/5678", settings) == []

    def test_decimals_are_not_dates(self, settings):
        assert _extract(["en-US"], "pi = 3.1415", settings) == []

    def test_two_digit_year_century_rule(self, settings):
        assert _extract(["en-US"], "budget 7 4 25", settings) == [date(2025, 7, 4)]

    def test_month_abbreviation_with_period(self, settings):
        assert _extract(["en-US"], "Report dated Nov. 15, 2019", settings) == [date(2019, 11, 15)]

    def test_date_with_time_suffix(self, settings):
        assert _extract(["en-US"], "03/27/17 2:41", settings) == [date(2017, 3, 27)]

    def test_day_first_english(self, settings):
        assert _extract(["en-US"], "19 Jul 1942", settings) == [date(1942, 7, 19)]
        assert _extract(["en-US"], "19 August 1942", settings) == [date(1942, 8, 19)]

    def test_three_digit_year_rejected(self, settings):
        assert _extract(["en-US"], "14 Jul 123", settings) == []

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Event on August 1st, 2022", date(2022, 8, 1)),
            ("Event on August 2nd, 2022", date(2022, 8, 2)),
            ("Event on August 3rd, 2022", date(2022, 8, 3)),
            ("Event on August 22th, 2022", date(2022, 8, 22)),
        ],
    )
    def test_ordinals_stripped(self, settings, text, expected):
        assert _extract(["en-US"], text, settings) == [expected]

    def test_ordinal_without_year_not_matched(self, settings):
        assert _extract(["en-US"], "Event on August 22nd", settings) == []


class TestExtractOtherLocales:
    def test_norwegian_short_month_two_digit_year(self, settings):
        assert _extract(["nb-NO"], "Møtet er satt til 4 jul 25.", settings) == [date(2025, 7, 4)]

    def test_spanish_long_month(self, settings):
        assert _extract(["es-ES"], "El contrato es del 17 de abril 2025", settings) == [date(2025, 4, 17)]

    def test_spanish_long_month_with_two_de(self, settings):
        assert _extract(["es-ES"], "Madrid, 17 de abril de 2025", settings) == [date(2025, 4, 17)]

    def test_spanish_short_month(self, settings):
        assert _extract(["es-ES"], "El contrato es del 17 ene 2025", settings) == [date(2025, 1, 17)]

    def test_three_letter_september(self, settings):
        assert _extract(["en-GB"], "Issued 12 Sep 2024", settings) == [date(2024, 9, 12)]
        assert _extract(["es-ES"], "Emitido el 17 sep 2025", settings) == [date(2025, 9, 17)]
        assert _extract(["en-GB"], "Issued 12 Sept 2024", settings) == [date(2024, 9, 12)]

    def test_french_ordinals_keep_portuguese_conjunction(self, settings):
        extractor = DateExtractor.from_locales(["pt-BR", "fr-FR"], settings)
        assert extractor.clean("entre 1 e 5 de maio de 2025") == "entre 1 e 5 de maio de 2025"
        assert extractor.clean("le 1er mai, le 2ème") == "le 1 mai le 2"
        assert extractor.extract("entre 1 e 5 de maio de 2025") == [date(2025, 5, 5)]

    def test_spanish_ordinal(self, settings):
        assert _extract(["es-ES"], "Firmado el 1º de enero 2025", settings) == [date(2025, 1, 1)]

    def test_spanish_numeric(self, settings):
        assert _extract(["es-ES"], "La fecha límite es 17/4/25", settings) == [date(2025, 4, 17)]

    def test_spanish_ordinal_without_year_ignored(self, settings):
        assert _extract(["es-ES"], "Fiesta el 22º de agosto", settings) == []

    def test_portuguese_ordinal(self, settings):
        assert _extract(["pt-BR"], "Acordo celebrado em 1.º maio 2025", settings) == [date(2025, 5, 1)]

    def test_portuguese_short_month(self, settings):
        assert _extract(["pt-BR"], "Relatório gerado em 17 abr 2025", settings) == [date(2025, 4, 17)]

    def test_custom_json_spanish_ordinal(self, settings):
        extractor = DateExtractor.from_definitions([ES_ORDINAL_JSON], settings)
        assert extractor.extract("Firmado el 1º de enero 2025") == [date(2025, 1, 1)]


class TestProperties:
    def test_multiple_cultures(self, settings):
        dates = _extract(["en-US", "nb-NO"], "04.07.2025, 4 Januar, 2025", settings)
        assert dates == [date(2025, 4, 7), date(2025, 1, 4)]

    def test_duplicates_preserved(self, settings):
        dates = _extract(["en-US"], "Invoice dated 03-02-2024 (03-02-2024)", settings)
        assert dates == [date(2024, 3, 2), date(2024, 3, 2)]

    def test_iso_date_recognised_once_across_cultures(self, settings):
        dates = _extract(["nb-NO", "en-US"], "Timestamp 2025-07-04 13:00:00", settings)
        assert dates == [date(2025, 7, 4)]

    def test_multiline_iso_duplicates(self, settings):
        text = "page1: 2025-07-04\n\n--- page break ---\n\n2025-07-04 footer"
        assert len(_extract(["en-US"], text, settings)) == 2

    def test_multiline_join(self, settings):
        assert _extract(["nb-NO"], "Dato: 12.\n05.2025", settings) == [date(2025, 5, 12)]

    def test_leap_year_validation(self, settings):
        assert _extract(["en-US"], "Due 02/29/2024", settings) == [date(2024, 2, 29)]
        assert _extract(["en-US"], "02/29/2023", settings) == []

    def test_leap_year_day_first(self, settings):
        assert _extract(["en-GB"], "29/02/2024", settings) == [date(2024, 2, 29)]
        assert _extract(["en-GB"], "29/02/2023", settings) == []

    def test_raw_delimiters(self, settings):
        extractor = DateExtractor.from_definitions([FR_RAW_JSON], settings)
        assert extractor.extract("Contrat signé le 04/07/2025") == [date(2025, 7, 4)]

    def test_custom_json_with_trailing_commas(self, settings):
        extractor = DateExtractor.from_definitions([FR_TRAILING_COMMA_JSON], settings)
        assert extractor.extract("Contrat signé le 04/07/2025") == [date(2025, 7, 4)]

    def test_overlap_ignored_across_cultures(self, settings):
        assert _extract(["en-US", "nb-NO"], "04.07.2025", settings) == [date(2025, 4, 7)]

    def test_precedence_follows_caller_order(self, settings):
        assert _extract(["en-US", "es-ES"], "04/07/2025", settings) == [date(2025, 4, 7)]
        assert _extract(["en-GB", "en-US"], "04/07/2025", settings) == [date(2025, 7, 4)]

    def test_parse_failure_leaves_text_for_later_locale(self, settings):
        # month 25 is invalid for en-US, so en-GB reads it day-first
        assert _extract(["en-US", "en-GB"], "25/12/2024", settings) == [date(2024, 12, 25)]

    def test_result_order_is_precedence_then_position(self, settings):
        dates = _extract(["en-US", "nb-NO"], "4 januar 2025 and 04/07/2025", settings)
        assert dates == [date(2025, 4, 7), date(2025, 1, 4)]

    def test_no_double_counting(self, settings):
        extractor = DateExtractor.from_locales(
            ["en-US", "en-GB", "nb-NO", "es-ES", "pt-BR", "fr-FR", "de-DE"], settings
        )
        text = (
            "2025-07-04 04/07/2025 17 de abril de 2025 4 jul 25 "
            "Nov. 15, 2019 3.1415 12/12/12 1er janvier 2024 19 August 1942"
        )
        matches = extractor.extract_matches(text)
        assert matches
        for i, a in enumerate(matches):
            for b in matches[i + 1:]:
                assert not a.span.overlaps(b.span)

    def test_deterministic(self, settings):
        extractor = DateExtractor.from_locales(["en-US", "nb-NO"], settings)
        text = "04.07.2025, 4 Januar, 2025 and 2025-07-04"
        assert extractor.extract(text) == extractor.extract(text)

    def test_concurrent_calls(self, settings):
        extractor = DateExtractor.from_locales(["en-US", "nb-NO"], settings)
        text = "04.07.2025, 4 Januar, 2025"
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(extractor.extract, [text] * 16))
        assert all(r == [date(2025, 4, 7), date(2025, 1, 4)] for r in results)

    def test_none_and_empty_input(self, settings):
        extractor = DateExtractor.from_locales(["en-US"], settings)
        assert extractor.extract(None) == []
        assert extractor.extract("") == []
        assert extractor.extract(" \n\t ") == []


class TestExtractMatches:
    def test_match_details(self, settings):
        extractor = DateExtractor.from_locales(["en-US"], settings)
        [match] = extractor.extract_matches("Report dated Nov. 15, 2019")

        cleaned = extractor.clean("Report dated Nov. 15, 2019")
        assert cleaned == "report dated nov 15 2019"
        assert match.text == "nov 15 2019"
        assert cleaned[match.start:match.start + match.length] == match.text
        assert match.locale_id == "en-US"
        assert match.format == "MMM d yyyy"
        assert match.value == date(2019, 11, 15)

    def test_extract_matches_agrees_with_extract(self, settings):
        extractor = DateExtractor.from_locales(["en-US", "nb-NO"], settings)
        text = "04.07.2025, 4 Januar, 2025"
        assert [m.value for m in extractor.extract_matches(text)] == extractor.extract(text)


class TestEngineWithStubParsers:
    def test_precedence_then_position(self):
        a = _stub_rule_set("a", [r"zzz"], {"zzz": date(2001, 1, 1)})
        b = _stub_rule_set("b", [r"aaa"], {"aaa": date(2002, 2, 2)})
        extractor = DateExtractor([a, b])
        assert extractor.extract("aaa zzz") == [date(2001, 1, 1), date(2002, 2, 2)]

    def test_failed_parse_does_not_claim_span(self):
        a = _stub_rule_set("a", [r"\d+ \d+"], {})
        b = _stub_rule_set("b", [r"\d+ \d+"], {"12 34": date(2003, 3, 3)})
        extractor = DateExtractor([a, b])

        [match] = extractor.extract_matches("12 34")
        assert match.locale_id == "b"

    def test_successful_parse_claims_span(self):
        a = _stub_rule_set("a", [r"\d+ \d+"], {"12 34": date(2003, 3, 3)})
        b = _stub_rule_set("b", [r"34"], {"34": date(2004, 4, 4)})
        assert DateExtractor([a, b]).extract("12 34") == [date(2003, 3, 3)]
        # never offered to the second parser
        assert b.parser.calls == []

    def test_touching_spans_do_not_overlap(self):
        a = _stub_rule_set("a", [r"ab"], {"ab": date(2005, 5, 5)})
        b = _stub_rule_set("b", [r"cd"], {"cd": date(2006, 6, 6)})
        assert DateExtractor([a, b]).extract("abcd") == [date(2005, 5, 5), date(2006, 6, 6)]

    def test_full_year_pattern_runs_first(self):
        rule_set = _stub_rule_set(
            "a",
            [r"\d{2} \d{2}", r"\d{2} \d{2} \d{4}"],
            {"01 02": date(2001, 1, 2), "01 02 2025": date(2025, 1, 2)},
        )
        assert DateExtractor([rule_set]).extract("01 02 2025") == [date(2025, 1, 2)]

    def test_same_pattern_repeats_left_to_right(self):
        rule_set = _stub_rule_set("a", [r"x\d"], {"x1": date(2001, 1, 1), "x2": date(2002, 1, 1)})
        assert DateExtractor([rule_set]).extract("x2 x1 x2") == [
            date(2002, 1, 1), date(2001, 1, 1), date(2002, 1, 1),
        ]

    def test_first_template_that_parses_wins(self):
        rule_set = _stub_rule_set(
            "a", [r"\d+"], {"7": date(2007, 7, 7)}, formats=("one", "two", "three"), accept_format="two"
        )
        [match] = DateExtractor([rule_set]).extract_matches("7")
        assert match.format == "two"
        assert rule_set.parser.calls == [("7", "one"), ("7", "two")]

    def test_raw_rule_sets_share_raw_text(self):
        rule_set = _stub_rule_set("a", [r"\d{2}/\d{2}"], {"04/07": date(2025, 7, 4)})
        extractor = DateExtractor([rule_set])
        assert extractor.clean("On 04/07!") == "on 04/07!"
        assert extractor.extract("On 04/07!") == [date(2025, 7, 4)]
