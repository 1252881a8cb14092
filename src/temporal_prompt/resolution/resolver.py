"""Resolution of grammar matches into caller-facing extractions.

The resolved instant is always built from the reference instant rendered in
the target timezone, so "tomorrow at 3pm" means 3pm on the wall clock of that
zone regardless of the machine's local timezone.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

import structlog

from temporal_prompt.context import CalendarContext, load_zone
from temporal_prompt.grammar import Component, DateGrammar, RawMatch
from temporal_prompt.grammar.components import DATE_COMPONENTS, TIME_COMPONENTS
from temporal_prompt.models import DateExtraction, ParsingOptions
from temporal_prompt.resolution.scoring import classify_grain, classify_type, compute_confidence

logger = structlog.get_logger()

# Checked in order; "the day after tomorrow" still carries its own certain date.
_RELATIVE_DAY_WORDS: tuple[tuple[str, int], ...] = (
    ("tomorrow", 1),
    ("yesterday", -1),
    ("today", 0),
)


def relative_day_shift(matched_text: str) -> int | None:
    """Day shift named by today/tomorrow/yesterday, or None."""

    text = matched_text.lower()
    for word, shift in _RELATIVE_DAY_WORDS:
        if word in text:
            return shift
    return None


def wall_clock_to_utc(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    zone: tzinfo,
    microsecond: int = 0,
) -> datetime:
    """Build a UTC instant from local wall-clock fields in ``zone``.

    Out-of-range months and days roll over (day 32 of a 31-day month is the
    1st of the next month) instead of raising.
    """

    carry_years, month_index = divmod(month - 1, 12)
    local = datetime(year + carry_years, month_index + 1, 1) + timedelta(
        days=day - 1,
        hours=hour,
        minutes=minute,
        seconds=second,
        microseconds=microsecond,
    )
    return local.replace(tzinfo=zone).astimezone(timezone.utc)


def build_instant(match: RawMatch, reference: datetime, zone: tzinfo) -> datetime:
    """Resolve ``match`` to a UTC instant.

    Args:
        match: Grammar match.
        reference: Reference instant (any timezone).
        zone: Target timezone. A UTC offset stated in the matched text wins.
    """

    components = match.components
    if components.offset_minutes is not None:
        zone = timezone(timedelta(minutes=components.offset_minutes))
    local_ref = reference.astimezone(zone)

    shift = relative_day_shift(match.text)
    if shift is not None:
        base = local_ref + timedelta(days=shift)
        fields = {
            Component.YEAR: base.year,
            Component.MONTH: base.month,
            Component.DAY: base.day,
            Component.HOUR: base.hour,
            Component.MINUTE: base.minute,
            Component.SECOND: base.second,
        }
        microsecond = base.microsecond
        for component in DATE_COMPONENTS:
            if components.is_certain(component):
                fields[component] = components.get(component)
    else:
        fields = {
            Component.YEAR: local_ref.year,
            Component.MONTH: local_ref.month,
            Component.DAY: local_ref.day,
            Component.HOUR: 0,
            Component.MINUTE: 0,
            Component.SECOND: 0,
        }
        microsecond = 0
        for component in DATE_COMPONENTS:
            value = components.get(component)
            if value is not None:
                fields[component] = value

    if components.has_certain_time():
        # A stated time replaces the whole time of day; unstated finer fields
        # take the grammar's implied value (normally zero).
        for component in TIME_COMPONENTS:
            value = components.get(component) if components.has(component) else 0
            fields[component] = value
        microsecond = 0

    return wall_clock_to_utc(
        fields[Component.YEAR],
        fields[Component.MONTH],
        fields[Component.DAY],
        fields[Component.HOUR],
        fields[Component.MINUTE],
        fields[Component.SECOND],
        zone,
        microsecond=microsecond,
    )


class DateResolver:
    """Turns text into ``DateExtraction`` objects.

    Holds no per-call state: every call returns a new list.
    """

    def __init__(self, context: CalendarContext, grammar: DateGrammar | None = None) -> None:
        """Initialize the resolver.

        Args:
            context: Calendar context supplying timezone and reference instant.
            grammar: Date grammar. If None, uses the default English grammar.
        """

        self.context = context
        self.grammar = grammar or DateGrammar()

    def resolve(self, text: str, options: ParsingOptions | None = None) -> list[DateExtraction]:
        """Extract and resolve every temporal expression in ``text``.

        Args:
            text: Source text. Empty or non-string input yields no extractions.
            options: Per-call timezone/reference overrides.

        Returns:
            Extractions ordered by start offset.
        """

        if not text or not isinstance(text, str):
            return []

        options = options or ParsingOptions()
        zone = load_zone(options.timezone) or self.context.zone
        reference = options.reference_date or self.context.reference_instant()
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        local_reference = reference.astimezone(zone)

        extractions = [
            self._to_extraction(match, local_reference, zone)
            for match in self.grammar.extract_raw(text, local_reference)
        ]
        logger.debug(
            "dates_extracted",
            count=len(extractions),
            timezone=str(zone),
            reference=local_reference.isoformat(),
        )
        return extractions

    def resolve_first(self, text: str, options: ParsingOptions | None = None) -> DateExtraction | None:
        """First extraction in ``text`` or None."""

        extractions = self.resolve(text, options)
        return extractions[0] if extractions else None

    def _to_extraction(self, match: RawMatch, reference: datetime, zone: tzinfo) -> DateExtraction:
        return DateExtraction(
            original_text=match.text,
            resolved_date=build_instant(match, reference, zone),
            confidence=compute_confidence(match),
            type=classify_type(match.text),
            start=match.index,
            end=match.end,
            grain=classify_grain(match.components),
        )
