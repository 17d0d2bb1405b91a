"""Schema of a rule-set definition as it appears in a JSON rule file.

    {
      "culture": "en-US",
      "delimiters": "/.-,",
      "ordinals": ["st", "nd", "rd", "th"],
      "patterns": [
        {"regex": "\\b\\d{1,2} \\d{1,2} \\d{4}\\b", "format": "M d yyyy"},
        {"regex": "...", "format": ["MMMM d yyyy", "MMM d yyyy"]}
      ]
    }
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PatternDefinition(BaseModel):
    regex: str
    format: list[str]

    @field_validator("format", mode="before")
    @classmethod
    def _wrap_single_format(cls, value):
        # "format" can be a string or a list of strings
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("format")
    @classmethod
    def _require_templates(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one format template is required")
        if any(not template for template in value):
            raise ValueError("format templates must not be empty")
        return value


class RuleSetDefinition(BaseModel):
    culture: str
    delimiters: Optional[str] = None  # None / "" = raw-delimiter mode
    ordinals: Optional[list[str]] = None
    patterns: list[PatternDefinition] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("culture")
    @classmethod
    def _require_culture(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("culture must not be blank")
        return value
