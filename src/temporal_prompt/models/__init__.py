"""Data models for Temporal Prompt.

This module contains Pydantic models for the caller-facing results of
extraction and enhancement.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Grain(str, Enum):
    """Finest time unit an expression states with certainty."""

    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"


class ExtractionType(str, Enum):
    """Whether an expression names a fixed date or one relative to now."""

    ABSOLUTE = "absolute"
    RELATIVE = "relative"


class Strategy(str, Enum):
    """Text rewriting policy applied to detected expressions."""

    PRESERVE = "preserve"
    NORMALIZE = "normalize"
    HYBRID = "hybrid"


class FormatStyle(str, Enum):
    """Output styles supported by the date formatter."""

    CONTEXT = "context"  # "Today is September 15, 2025"
    HYBRID = "hybrid"  # "this Friday (2025-09-19)"
    COMPACT = "compact"  # "2025-09-15"
    HUMAN = "human"  # "Monday, September 15, 2025"
    ISO = "iso"  # "2025-09-15T00:00:00.000Z"
    RELATIVE = "relative"  # "in 3 days"


class FormatOptions(BaseModel):
    """Optional knobs for the human and context styles."""

    include_weekday: bool = Field(default=False, description="Prefix the weekday name")
    include_timezone: bool = Field(default=False, description="Append the timezone name")
    include_time: bool = Field(default=False, description="Append the 12-hour time")


class ParsingOptions(BaseModel):
    """Per-call overrides for extraction."""

    timezone: str | None = Field(default=None, description="IANA timezone override")
    locale: str | None = Field(default=None, description="Locale override")
    reference_date: datetime | None = Field(
        default=None,
        description="Instant relative expressions resolve against",
    )


class TimeContext(BaseModel):
    """Immutable snapshot of a calendar context."""

    model_config = ConfigDict(frozen=True)

    now: datetime
    timezone: str
    locale: str


class DateExtraction(BaseModel):
    """A temporal expression found in text and resolved to an instant."""

    model_config = ConfigDict(frozen=True)

    original_text: str = Field(description="Matched substring of the source text")
    resolved_date: datetime = Field(description="Resolved instant, stored in UTC")
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence score")
    type: ExtractionType = Field(description="Absolute or relative expression")
    start: int = Field(ge=0, description="Start offset in the source text")
    end: int = Field(ge=0, description="End offset (exclusive) in the source text")
    grain: Grain = Field(default=Grain.DAY, description="Most specific certain unit")

    @field_validator("resolved_date")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("resolved_date must be timezone-aware")
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_span(self) -> DateExtraction:
        if self.end - self.start != len(self.original_text):
            raise ValueError(
                f"span [{self.start}, {self.end}) does not fit {self.original_text!r}"
            )
        return self


class EnhancedPrompt(BaseModel):
    """Result of a single enhance() pass."""

    model_config = ConfigDict(frozen=True)

    original_text: str = Field(description="Text as supplied by the caller")
    enhanced_text: str = Field(description="Text after applying the strategy")
    context: str = Field(default="", description="Current-date header, possibly empty")
    extractions: list[DateExtraction] = Field(
        default_factory=list,
        description="Extractions in left-to-right order",
    )
    tokens_added: int = Field(
        default=0,
        description="Estimated token delta; negative when substitution shortens text",
    )


__all__ = [
    "DateExtraction",
    "EnhancedPrompt",
    "ExtractionType",
    "FormatOptions",
    "FormatStyle",
    "Grain",
    "ParsingOptions",
    "Strategy",
    "TimeContext",
]
