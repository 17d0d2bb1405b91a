"""Rule-set loading: built-in JSON bundle or caller-supplied definitions.

Turns a RuleSetDefinition into an immutable LocaleRuleSet:
  1. Decode lenient JSON (comments, trailing commas) and validate it
     against the pydantic schema
  2. Compile every regex (case-insensitive) and check every template
  3. Build the locale calendar (month tables normalized once, here)
  4. Reorder patterns so 4-digit-year patterns are tried first
"""

import logging
import re
from pathlib import Path
from typing import Any, Mapping, Union

import json5
from pydantic import ValidationError

from config.settings import Settings
from extraction.errors import MalformedRuleSetError, RuleSetNotFoundError
from models.rule_definition import RuleSetDefinition
from models.rule_set import LocaleRuleSet, PatternEntry, order_patterns
from parsers.date_format import LocaleDateParser, tokenize_format
from parsers.locale_calendar import load_calendar

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).resolve().parent / "patterns"

Payload = Union[str, bytes, Mapping[str, Any]]


def available_locales(settings: Settings | None = None) -> list[str]:
    """Locale ids with a rule file in rules_dir or the built-in bundle."""
    settings = settings or Settings()
    found: dict[str, str] = {}
    for directory in _search_dirs(settings):
        for path in sorted(directory.glob("*.json")):
            found.setdefault(_canonical(path.stem), path.stem)
    return sorted(found.values())


def load_builtin(locale_id: str, settings: Settings | None = None) -> LocaleRuleSet:
    """Load the rule file registered for locale_id ("en-US", "nb_no", ...)."""
    settings = settings or Settings()
    key = _canonical(locale_id)
    dirs = _search_dirs(settings)

    for directory in dirs:
        for path in directory.glob("*.json"):
            if _canonical(path.stem) == key:
                logger.debug(f"Loading rule file {path} for '{locale_id}'")
                return parse_definition(path.read_text(encoding="utf-8"), settings)

    raise RuleSetNotFoundError(locale_id, [str(d) for d in dirs])


def parse_definition(payload: Payload, settings: Settings | None = None) -> LocaleRuleSet:
    """Validate and compile one definition (JSON text or decoded mapping)."""
    settings = settings or Settings()

    if isinstance(payload, (str, bytes, bytearray)):
        payload = _decode_json(payload)

    try:
        definition = RuleSetDefinition.model_validate(payload)
    except ValidationError as e:
        raise MalformedRuleSetError(f"Invalid rule-set definition: {e}") from e

    return compile_rule_set(definition, settings)


def compile_rule_set(definition: RuleSetDefinition, settings: Settings) -> LocaleRuleSet:
    culture = definition.culture

    try:
        calendar = load_calendar(culture, settings.two_digit_year_max)
    except ValueError as e:
        raise MalformedRuleSetError(f"Invalid culture in rule set: {e}") from e

    entries: list[PatternEntry] = []
    for index, pattern in enumerate(definition.patterns):
        try:
            regex = re.compile(pattern.regex, re.IGNORECASE)
        except re.error as e:
            raise MalformedRuleSetError(
                f"Invalid regex #{index} for {culture}: {pattern.regex!r} ({e})"
            ) from e

        for template in pattern.format:
            try:
                tokenize_format(template)
            except ValueError as e:
                raise MalformedRuleSetError(
                    f"Invalid format #{index} for {culture}: {e}"
                ) from e

        entries.append(PatternEntry(regex=regex, formats=tuple(pattern.format)))

    return LocaleRuleSet(
        locale_id=culture,
        delimiters=definition.delimiters or "",
        ordinals=tuple(definition.ordinals or ()),
        patterns=order_patterns(entries),
        parser=LocaleDateParser(calendar),
    )


def _decode_json(text: str | bytes | bytearray) -> Any:
    # Hand-edited rule files may carry // comments and trailing commas
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedRuleSetError(f"Rule-set definition is not UTF-8: {e}") from e
    try:
        return json5.loads(text)
    except ValueError as e:
        raise MalformedRuleSetError(f"Invalid JSON in rule-set definition: {e}") from e


def _search_dirs(settings: Settings) -> list[Path]:
    dirs = []
    if settings.rules_dir is not None and Path(settings.rules_dir).is_dir():
        dirs.append(Path(settings.rules_dir))
    dirs.append(BUILTIN_DIR)
    return dirs


def _canonical(locale_id: str) -> str:
    return locale_id.strip().replace("_", "-").casefold()
