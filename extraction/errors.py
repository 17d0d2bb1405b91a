"""Construction-time failures. Extraction itself never raises for bad matches."""


class DateExtractionError(Exception):
    """Base class for all extractor configuration errors."""


class InvalidConfigurationError(DateExtractionError, ValueError):
    """No locales / definitions were supplied."""


class RuleSetNotFoundError(DateExtractionError, LookupError):
    """A locale identifier has no built-in rule file."""

    def __init__(self, locale_id: str, searched: list[str] | None = None):
        self.locale_id = locale_id
        self.searched = searched or []
        where = f" (searched: {', '.join(self.searched)})" if self.searched else ""
        super().__init__(f"Locale '{locale_id}' is not supported. No rule file found{where}.")


class MalformedRuleSetError(DateExtractionError, ValueError):
    """A rule-set definition violates the schema or cannot be compiled."""
