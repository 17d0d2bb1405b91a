from dataclasses import dataclass
from datetime import date


# Claimed slice of the canonical text
@dataclass(frozen=True)
class MatchedSpan:
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    # Two spans overlap iff they share at least one character position
    def overlaps(self, other: "MatchedSpan") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class DateMatch:
    value: date
    span: MatchedSpan
    text: str           # matched slice of the canonical text
    locale_id: str
    format: str         # template that parsed it

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def length(self) -> int:
        return self.span.length
