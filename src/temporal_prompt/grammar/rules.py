"""English date grammar rule table.

Each rule pairs a compiled pattern with an extractor. An extractor receives the
regex match and the reference instant rendered in the target timezone, and
returns the parsed components, or None to reject the match (e.g. hour 25).
Business-day and end-of-period resolution are ordinary entries of the table.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

from temporal_prompt.grammar import periods
from temporal_prompt.grammar.components import Component, MatchKind, ParsedComponents

Extractor = Callable[[re.Match[str], datetime], "ParsedComponents | None"]


@dataclass(frozen=True)
class GrammarRule:
    """A single regex-triggered grammar rule."""

    name: str
    pattern: re.Pattern[str]
    extract: Extractor
    kind: MatchKind = MatchKind.DATE
    # Non-standalone matches only survive when merged with a date.
    standalone: bool = True


def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

WEEKDAYS: dict[str, int] = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tues": 1, "tue": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thurs": 3, "thur": 3, "thu": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}

_FULL_WEEKDAYS = frozenset(name for name in WEEKDAYS if name.endswith("day"))
_WORDLIKE_WEEKDAYS = frozenset({"sun", "sat", "wed"})

_TIME_FOLLOWS = re.compile(
    r"\s*,?\s+(?:at\s+)?(?:\d{1,2}(?::\d{2})?\s*[ap]\.?m\b|\d{1,2}:\d{2}|noon\b|midnight\b|midday\b)",
    re.IGNORECASE,
)

NUMBER_WORDS: dict[str, int] = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12,
}

DAY_PART_HOURS: dict[str, int] = {
    "morning": 6,
    "afternoon": 15,
    "evening": 20,
    "night": 22,
}


def _alternation(words: dict[str, int]) -> str:
    # Longest first so "sept" wins over "sep".
    return "|".join(sorted(words, key=len, reverse=True))


_MONTH = rf"({_alternation(MONTHS)})\.?"
_WEEKDAY = rf"({_alternation(WEEKDAYS)})"
_NUMBER = rf"(\d+|{_alternation(NUMBER_WORDS)})"
_UNIT = r"(seconds?|secs?|minutes?|mins?|hours?|hrs?|days?|weeks?|months?|years?)"
_ORDINAL = r"(?:st|nd|rd|th)?"


def _number(token: str) -> int:
    token = token.lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS[token]


def _unit(token: str) -> str:
    token = token.lower()
    for unit in ("sec", "min", "hour", "hr", "day", "week", "month", "year"):
        if token.startswith(unit):
            return {"sec": "second", "min": "minute", "hr": "hour"}.get(unit, unit)
    raise ValueError(f"unknown unit {token!r}")


def _valid_day(day: int) -> bool:
    return 1 <= day <= 31


# ---------------------------------------------------------------------------
# Absolute dates
# ---------------------------------------------------------------------------


def _extract_iso(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    year, month, day = (int(match.group(i)) for i in (1, 2, 3))
    if not 1 <= month <= 12 or not _valid_day(day):
        return None
    components = ParsedComponents()
    components.assign(Component.YEAR, year).assign(Component.MONTH, month).assign(Component.DAY, day)

    if match.group(4) is None:
        return components

    hour, minute = int(match.group(4)), int(match.group(5))
    if hour > 23 or minute > 59:
        return None
    components.assign(Component.HOUR, hour).assign(Component.MINUTE, minute)
    if match.group(6) is not None:
        second = int(match.group(6))
        if second > 59:
            return None
        components.assign(Component.SECOND, second)
    else:
        components.imply(Component.SECOND, 0)

    offset = match.group(7)
    if offset:
        if offset.upper() == "Z":
            components.offset_minutes = 0
        else:
            sign = -1 if offset[0] == "-" else 1
            digits = offset[1:].replace(":", "")
            components.offset_minutes = sign * (int(digits[:2]) * 60 + int(digits[2:]))
    return components


def _extract_numeric(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    month, day, year = (int(match.group(i)) for i in (1, 2, 3))
    if not 1 <= month <= 12 or not _valid_day(day):
        return None
    components = ParsedComponents()
    return components.assign(Component.YEAR, year).assign(Component.MONTH, month).assign(Component.DAY, day)


def _month_day(month_token: str, day: int, year_token: str | None, reference: datetime) -> ParsedComponents | None:
    if not _valid_day(day):
        return None
    month = MONTHS[month_token.lower()]
    components = ParsedComponents()
    components.assign(Component.MONTH, month).assign(Component.DAY, day)
    if year_token:
        components.assign(Component.YEAR, int(year_token))
    else:
        components.imply(Component.YEAR, periods.closest_year(reference.date(), month, day))
    return components


def _extract_month_first(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    return _month_day(match.group(2), int(match.group(3)), match.group(4), reference)


def _extract_day_first(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    return _month_day(match.group(2), int(match.group(1)), match.group(3), reference)


def _extract_month_year(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    components = ParsedComponents()
    components.assign(Component.MONTH, MONTHS[match.group(1).lower()])
    components.assign(Component.YEAR, int(match.group(2)))
    return components.imply(Component.DAY, 1)


# ---------------------------------------------------------------------------
# Relative dates
# ---------------------------------------------------------------------------


def _extract_weekday(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    modifier = (match.group(1) or "").lower() or None
    token = match.group(2)
    if modifier is None and token.lower() not in _FULL_WEEKDAYS:
        # Lowercase abbreviations need a modifier. "Sun", "Sat" and "Wed" are
        # also ordinary words, so even capitalized they need one or a time.
        if token.islower():
            return None
        if token.lower() in _WORDLIKE_WEEKDAYS and not _TIME_FOLLOWS.match(match.string, match.end()):
            return None
    today = reference.date()
    offset = periods.weekday_offset(today, WEEKDAYS[token.lower()], modifier)
    return ParsedComponents().assign_date(today + timedelta(days=offset))


_CASUAL_DAY_SHIFT: dict[str, int] = {
    "today": 0,
    "tonight": 0,
    "tomorrow": 1,
    "tmr": 1,
    "yesterday": -1,
    "last night": -1,
    "the day after tomorrow": 2,
    "the day before yesterday": -2,
}


def _extract_casual(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    word = re.sub(r"\s+", " ", match.group(1).lower())
    if word == "now":
        components = ParsedComponents().assign_date(reference.date())
        return components.assign_clock(reference)

    components = ParsedComponents().assign_date(reference.date() + timedelta(days=_CASUAL_DAY_SHIFT[word]))
    if word in ("tonight", "last night"):
        components.imply(Component.HOUR, DAY_PART_HOURS["night"])
    return components


def _extract_relative_period(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    direction = {"this": 0, "next": 1, "last": -1, "past": -1}[match.group(1).lower()]
    unit = match.group(2).lower()
    today = reference.date()
    components = ParsedComponents()

    if unit == "week":
        return components.assign_date(today + timedelta(weeks=direction))

    months = {"month": 1, "quarter": 3, "year": 12}[unit] * direction
    target = today + relativedelta(months=months)
    components.assign(Component.YEAR, target.year)
    if unit == "year":
        components.imply(Component.MONTH, target.month).imply(Component.DAY, target.day)
    else:
        components.assign(Component.MONTH, target.month).imply(Component.DAY, target.day)
    return components


def _offset_components(amount: int, unit: str, reference: datetime) -> ParsedComponents:
    if unit in ("second", "minute", "hour"):
        # Elapsed time, so step in UTC and render back across DST changes.
        elapsed = reference.astimezone(timezone.utc) + timedelta(**{f"{unit}s": amount})
        target = elapsed.astimezone(reference.tzinfo)
        components = ParsedComponents().assign_date(target.date())
        through = Component.SECOND if unit == "second" else Component.MINUTE
        return components.assign_clock(target, through=through)

    if unit in ("day", "week"):
        target_date = reference.date() + timedelta(**{f"{unit}s": amount})
    else:
        target_date = reference.date() + relativedelta(**{f"{unit}s": amount})
    return ParsedComponents().assign_date(target_date)


def _extract_offset_future(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    return _offset_components(_number(match.group(1)), _unit(match.group(2)), reference)


def _extract_offset_suffix(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    amount = _number(match.group(1))
    if match.group(3).lower() == "ago":
        amount = -amount
    return _offset_components(amount, _unit(match.group(2)), reference)


def _extract_business_day(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    include_today = match.group(1).lower() == "this"
    target = periods.next_business_day(reference.date(), include_today=include_today)
    return ParsedComponents().assign_date(target)


_PERIOD_ENDS: dict[str, Callable[[date], date]] = {
    "week": periods.end_of_week,
    "month": periods.end_of_month,
    "quarter": periods.end_of_quarter,
    "year": periods.end_of_year,
}


def _extract_end_of_period(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    target = _PERIOD_ENDS[match.group(1).lower()](reference.date())
    return ParsedComponents().assign_date(target)


# ---------------------------------------------------------------------------
# Times of day
# ---------------------------------------------------------------------------


def _clock(hour: int, minute: int, second: int | None) -> ParsedComponents | None:
    if hour > 23 or minute > 59 or (second is not None and second > 59):
        return None
    components = ParsedComponents()
    components.assign(Component.HOUR, hour).assign(Component.MINUTE, minute)
    if second is None:
        components.imply(Component.SECOND, 0)
    else:
        components.assign(Component.SECOND, second)
    return components


def _extract_meridiem(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    hour = int(match.group(1))
    if not 1 <= hour <= 12:
        return None
    if match.group(4).lower().startswith("p"):
        hour = 12 if hour == 12 else hour + 12
    elif hour == 12:
        hour = 0
    minute = int(match.group(2)) if match.group(2) else 0
    second = int(match.group(3)) if match.group(3) else None
    return _clock(hour, minute, second)


def _extract_clock(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    second = int(match.group(3)) if match.group(3) else None
    return _clock(int(match.group(1)), int(match.group(2)), second)


def _extract_oclock(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    return _clock(int(match.group(1)), 0, None)


def _extract_noon(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    hour = 0 if match.group(1).lower() == "midnight" else 12
    return _clock(hour, 0, None)


def _extract_day_part(match: re.Match[str], reference: datetime) -> ParsedComponents | None:
    return ParsedComponents().imply(Component.HOUR, DAY_PART_HOURS[match.group(1).lower()])


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

DEFAULT_RULES: tuple[GrammarRule, ...] = (
    GrammarRule(
        "iso",
        _compile(
            r"\b(\d{4})-(\d{2})-(\d{2})"
            # A trailing am/pm belongs to the meridiem rule, which merges with the date.
            r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?(?!\s*[ap]\.?m\b))?(?![\w:])"
        ),
        _extract_iso,
        kind=MatchKind.DATE,
    ),
    GrammarRule(
        "numeric_date",
        _compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b"),
        _extract_numeric,
    ),
    GrammarRule(
        "month_day",
        _compile(rf"\b(?:{_WEEKDAY}\s*,?\s+)?{_MONTH}\s+(\d{{1,2}}){_ORDINAL}(?:\s*,?\s*(\d{{4}}))?(?!\w)"),
        _extract_month_first,
    ),
    GrammarRule(
        "day_month",
        _compile(rf"\b(?:the\s+)?(\d{{1,2}}){_ORDINAL}\s+(?:of\s+)?{_MONTH}(?:\s*,?\s*(\d{{4}}))?(?!\w)"),
        _extract_day_first,
    ),
    GrammarRule(
        "month_year",
        _compile(rf"\b{_MONTH}\s+(\d{{4}})(?!\w)"),
        _extract_month_year,
    ),
    GrammarRule(
        "business_day",
        _compile(r"\b(next|this)\s+(?:business\s+day|workday|weekday)\b"),
        _extract_business_day,
    ),
    GrammarRule(
        "end_of_period",
        _compile(r"\bend\s+of\s+(?:this\s+)?(week|month|quarter|year)\b"),
        _extract_end_of_period,
    ),
    GrammarRule(
        "weekday",
        _compile(rf"\b(?:(this|next|last)\s+)?{_WEEKDAY}\b"),
        _extract_weekday,
    ),
    GrammarRule(
        "casual_day",
        _compile(
            r"\b(now|today|tonight|tomorrow|tmr|yesterday|last\s+night"
            r"|the\s+day\s+after\s+tomorrow|the\s+day\s+before\s+yesterday)\b"
        ),
        _extract_casual,
    ),
    GrammarRule(
        "relative_period",
        _compile(r"\b(this|next|last|past)\s+(week|month|quarter|year)\b"),
        _extract_relative_period,
    ),
    GrammarRule(
        "offset_future",
        _compile(rf"\bin\s+{_NUMBER}\s+{_UNIT}\b"),
        _extract_offset_future,
        kind=MatchKind.DATETIME,
    ),
    GrammarRule(
        "offset_suffix",
        _compile(rf"\b{_NUMBER}\s+{_UNIT}\s+(ago|from\s+now|later)\b"),
        _extract_offset_suffix,
        kind=MatchKind.DATETIME,
    ),
    GrammarRule(
        "meridiem_time",
        _compile(r"\b(?:at\s+)?(\d{1,2})(?::(\d{2})(?::(\d{2}))?)?\s*([ap])(?:\.m\.?|m)(?![a-z])"),
        _extract_meridiem,
        kind=MatchKind.TIME,
    ),
    GrammarRule(
        "clock_time",
        _compile(r"\b(?:at\s+)?(\d{1,2}):(\d{2})(?::(\d{2}))?(?![\d:])"),
        _extract_clock,
        kind=MatchKind.TIME,
    ),
    GrammarRule(
        "oclock_time",
        _compile(r"\b(?:at\s+)?(\d{1,2})\s*o'?\s?clock\b"),
        _extract_oclock,
        kind=MatchKind.TIME,
    ),
    GrammarRule(
        "noon",
        _compile(r"\b(?:at\s+)?(noon|midday|midnight)\b"),
        _extract_noon,
        kind=MatchKind.TIME,
    ),
    GrammarRule(
        "day_part",
        _compile(r"\b(?:(?:this|in\s+the)\s+)(morning|afternoon|evening|night)\b"),
        _extract_day_part,
        kind=MatchKind.TIME,
    ),
    GrammarRule(
        "bare_day_part",
        _compile(r"\b(morning|afternoon|evening|night)\b"),
        _extract_day_part,
        kind=MatchKind.TIME,
        standalone=False,
    ),
)
