"""Locale-aware date extractor — command-line host.

Usage:
    python main.py invoice.txt                      # Default locales from settings
    python main.py --locales en-US,nb-NO a.txt b.txt
    python main.py --rules custom_fr.json scan.txt  # Custom JSON rule files
    cat dump.txt | python main.py --show-spans      # Read stdin
"""

import argparse
import logging
import sys
from pathlib import Path

from config.settings import Settings
from extraction.date_extractor import DateExtractor
from extraction.errors import DateExtractionError

logger = logging.getLogger("date_extractor")


def build_extractor(
    settings: Settings,
    locales: list[str] | None = None,
    rule_files: list[str] | None = None,
) -> DateExtractor:
    """Custom rule files win over locale ids; locale ids default to settings."""
    if rule_files:
        payloads = [Path(p).read_text(encoding="utf-8") for p in rule_files]
        return DateExtractor.from_definitions(payloads, settings)
    return DateExtractor.from_locales(locales or settings.locales, settings)


def format_match(match, show_spans: bool = False) -> str:
    line = match.value.isoformat()
    if show_spans:
        line += f"\t{match.start}+{match.length}\t{match.locale_id}\t{match.text}"
    return line


def main(
    files: list[str] | None = None,
    locales: str | None = None,
    rule_files: list[str] | None = None,
    show_spans: bool = False,
) -> int:
    settings = Settings()

    # Set up logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Support comma-separated list of locales
    locale_list = [s.strip() for s in locales.split(",") if s.strip()] if locales else None

    try:
        extractor = build_extractor(settings, locale_list, rule_files)
    except (DateExtractionError, OSError) as e:
        logger.error(f"Could not build extractor: {type(e).__name__}: {e}")
        return 1

    if files:
        try:
            sources = [(f, Path(f).read_text(encoding="utf-8", errors="replace")) for f in files]
        except OSError as e:
            logger.error(f"Could not read input: {type(e).__name__}: {e}")
            return 1
    else:
        sources = [("<stdin>", sys.stdin.read())]

    total = 0
    for name, text in sources:
        matches = extractor.extract_matches(text)
        logger.info(f"{name}: {len(matches)} dates")
        for match in matches:
            print(format_match(match, show_spans))
        total += len(matches)

    logger.info(f"Extracted {total} dates from {len(sources)} input(s)")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Extract calendar dates from free-form text")
    parser.add_argument(
        "files",
        nargs="*",
        help="Text files to scan (default: stdin)",
    )
    parser.add_argument(
        "--locales",
        type=str,
        default=None,
        help="Comma-separated locale ids in precedence order (e.g., 'en-US,nb-NO')",
    )
    parser.add_argument(
        "--rules",
        action="append",
        default=None,
        help="Custom JSON rule file; repeat for several (overrides --locales)",
    )
    parser.add_argument(
        "--show-spans",
        action="store_true",
        help="Also print offset+length, locale and matched text",
    )
    args = parser.parse_args()
    sys.exit(main(
        files=args.files,
        locales=args.locales,
        rule_files=args.rules,
        show_spans=args.show_spans,
    ))
