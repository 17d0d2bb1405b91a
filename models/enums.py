from enum import Enum


class TokenKind(str, Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"
    HOUR_24 = "hour_24"
    HOUR_12 = "hour_12"
    MINUTE = "minute"
    SECOND = "second"
    FRACTION = "fraction"
    AM_PM = "am_pm"
    DATE_SEPARATOR = "date_separator"
    TIME_SEPARATOR = "time_separator"
    WHITESPACE = "whitespace"
    LITERAL = "literal"
