"""Date rendering for prompts.

The ``compact`` and ``iso`` styles always render in UTC; every other style
renders in the calendar context's timezone. Names are English only.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from temporal_prompt.context import CalendarContext
from temporal_prompt.exceptions import InvalidInstantError
from temporal_prompt.models import FormatOptions, FormatStyle, Grain

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Words that already pin a day; hybrid style adds nothing to them.
_SELF_DESCRIBING = ("today", "tomorrow", "yesterday")

TOKENS_PER_WORD = 0.75


def _ensure_instant(value: object) -> datetime:
    if not isinstance(value, datetime):
        raise InvalidInstantError(f"expected a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidInstantError(f"instant {value.isoformat()} has no timezone")
    return value


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


class DateFormatter:
    """Renders instants in the styles used by prompt pipelines."""

    def __init__(self, context: CalendarContext) -> None:
        self.context = context

    def format(
        self,
        instant: datetime,
        style: FormatStyle | str = FormatStyle.HUMAN,
        options: FormatOptions | None = None,
    ) -> str:
        """Render ``instant`` in ``style``.

        Args:
            instant: Timezone-aware datetime.
            style: One of the ``FormatStyle`` values.
            options: Extra switches for the human and context styles.

        Returns:
            The rendered string.

        Raises:
            InvalidInstantError: If ``instant`` is not a timezone-aware datetime.
            ValueError: If ``style`` is unknown.
        """

        instant = _ensure_instant(instant)
        options = options or FormatOptions()
        style = FormatStyle(style)

        if style is FormatStyle.CONTEXT:
            return self.format_context(instant, options)
        if style is FormatStyle.HYBRID:
            return self.format_hybrid(instant)
        if style is FormatStyle.COMPACT:
            return self.format_compact(instant)
        if style is FormatStyle.ISO:
            return self.format_iso(instant)
        if style is FormatStyle.RELATIVE:
            return self.format_relative(instant)
        return self.format_human(instant, options)

    def format_compact(self, instant: datetime) -> str:
        """``YYYY-MM-DD`` of the UTC calendar date."""

        return _ensure_instant(instant).astimezone(timezone.utc).strftime("%Y-%m-%d")

    def format_iso(self, instant: datetime) -> str:
        utc = _ensure_instant(instant).astimezone(timezone.utc)
        return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"

    def format_time(self, instant: datetime) -> str:
        """12-hour clock time in the context timezone, e.g. ``3:05 PM``."""

        local = self.context.to_local(_ensure_instant(instant))
        hour = local.hour % 12 or 12
        meridiem = "AM" if local.hour < 12 else "PM"
        return f"{hour}:{local.minute:02d} {meridiem}"

    def weekday_name(self, instant: datetime) -> str:
        return WEEKDAY_NAMES[self.context.to_local(instant).weekday()]

    def full_date(self, instant: datetime) -> str:
        local = self.context.to_local(instant)
        return f"{MONTH_NAMES[local.month - 1]} {local.day}, {local.year}"

    def format_human(self, instant: datetime, options: FormatOptions | None = None) -> str:
        options = options or FormatOptions()
        instant = _ensure_instant(instant)
        text = self.full_date(instant)
        if options.include_weekday:
            text = f"{self.weekday_name(instant)}, {text}"
        if options.include_time:
            text = f"{text} at {self.format_time(instant)}"
        return text

    def format_context(self, instant: datetime, options: FormatOptions | None = None) -> str:
        """Day reference plus full date, e.g. ``Tomorrow is September 16, 2025``."""

        options = options or FormatOptions()
        instant = _ensure_instant(instant)
        if self.context.is_today(instant):
            day = "Today"
        elif self.context.is_tomorrow(instant):
            day = "Tomorrow"
        else:
            day = self.weekday_name(instant)

        parts = [day, f"is {self.full_date(instant)}"]
        if options.include_timezone:
            parts.append(f"({self.context.timezone})")
        return " ".join(parts)

    def format_relative(self, instant: datetime) -> str:
        """Approximate relative wording; months are 30 days and years 365."""

        instant = _ensure_instant(instant)
        if self.context.is_today(instant):
            return "today"
        if self.context.is_tomorrow(instant):
            return "tomorrow"

        days = self.context.local_day_difference(instant)
        if days == -1:
            return "yesterday"
        if 0 < days <= 7:
            prefix = "this" if days <= 6 else "next"
            return f"{prefix} {self.weekday_name(instant)}"
        if 7 < days <= 14:
            return f"next {self.weekday_name(instant)}"
        if days > 0:
            if days < 30:
                return f"in {days} days"
            if days < 365:
                return f"in {_plural(_round_half_up(days / 30), 'month')}"
            return f"in {_plural(_round_half_up(days / 365), 'year')}"
        if days < 0:
            elapsed = abs(days)
            if elapsed < 30:
                return f"{elapsed} days ago"
            if elapsed < 365:
                return f"{_plural(_round_half_up(elapsed / 30), 'month')} ago"
            return f"{_plural(_round_half_up(elapsed / 365), 'year')} ago"

        return self.format_compact(instant)

    def format_hybrid(self, instant: datetime) -> str:
        """Relative wording with the compact date in parentheses.

        The date is left out when the relative text already pins the day
        (today/tomorrow/yesterday) or already contains it.
        """

        relative = self.format_relative(instant)
        absolute = self.format_compact(instant)
        if relative.lower() in _SELF_DESCRIBING or absolute in relative:
            return relative
        return f"{relative} ({absolute})"

    def format_with_original(self, instant: datetime, original_text: str, grain: Grain | str = Grain.DAY) -> str:
        """Original wording followed by the absolute form, never suppressed."""

        return f"{original_text} ({self.format_absolute(instant, grain)})"

    def format_absolute(self, instant: datetime, grain: Grain | str = Grain.DAY) -> str:
        """Compact date, plus 12-hour time and timezone for sub-day grains."""

        compact = self.format_compact(instant)
        if Grain(grain) is Grain.DAY:
            return compact
        return f"{compact} {self.format_time(instant)} {self.context.timezone}"

    def context_header(self, instant: datetime | None = None) -> str:
        """Current-date header placed in front of prompts."""

        instant = _ensure_instant(instant) if instant is not None else self.context.reference_instant()
        local = self.context.to_local(instant)
        return (
            f"Current date: {self.format_compact(instant)} ({self.weekday_name(instant)}, {local.year})\n"
            f"Timezone: {self.context.timezone}"
        )

    @staticmethod
    def token_count(text: str | None) -> int:
        """Rough LLM token estimate: three tokens for every four words."""

        if not text or not isinstance(text, str) or not text.strip():
            return 0
        return math.ceil(len(text.split()) * TOKENS_PER_WORD)
