"""Grammar output types.

A rule reports each date/time field either as *certain* (read from the text)
or *implied* (a default the rule filled in). Grain classification depends on
that distinction, so the two are kept in separate maps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class Component(str, Enum):
    """Date/time fields a match can carry."""

    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"


DATE_COMPONENTS: tuple[Component, ...] = (Component.YEAR, Component.MONTH, Component.DAY)
TIME_COMPONENTS: tuple[Component, ...] = (Component.HOUR, Component.MINUTE, Component.SECOND)


class MatchKind(str, Enum):
    """What part of a datetime a rule describes; drives date/time merging."""

    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"


@dataclass
class ParsedComponents:
    """Component values with certainty flags."""

    known: dict[Component, int] = field(default_factory=dict)
    implied: dict[Component, int] = field(default_factory=dict)
    offset_minutes: int | None = None

    def assign(self, component: Component, value: int) -> ParsedComponents:
        self.known[component] = int(value)
        self.implied.pop(component, None)
        return self

    def imply(self, component: Component, value: int) -> ParsedComponents:
        if component not in self.known:
            self.implied[component] = int(value)
        return self

    def get(self, component: Component) -> int | None:
        if component in self.known:
            return self.known[component]
        return self.implied.get(component)

    def has(self, component: Component) -> bool:
        return component in self.known or component in self.implied

    def is_certain(self, component: Component) -> bool:
        return component in self.known

    def has_certain_time(self) -> bool:
        return any(c in self.known for c in TIME_COMPONENTS)

    def assign_date(self, value: date) -> ParsedComponents:
        self.assign(Component.YEAR, value.year)
        self.assign(Component.MONTH, value.month)
        self.assign(Component.DAY, value.day)
        return self

    def imply_date(self, value: date) -> ParsedComponents:
        self.imply(Component.YEAR, value.year)
        self.imply(Component.MONTH, value.month)
        self.imply(Component.DAY, value.day)
        return self

    def assign_clock(self, value: datetime, *, through: Component = Component.SECOND) -> ParsedComponents:
        """Assign time fields from ``value`` down to ``through``; imply the rest as zero."""

        for component in TIME_COMPONENTS:
            if TIME_COMPONENTS.index(component) <= TIME_COMPONENTS.index(through):
                self.assign(component, getattr(value, component.value))
            else:
                self.imply(component, 0)
        return self

    def combine(self, time_part: ParsedComponents) -> ParsedComponents:
        """Date fields from ``self`` with time fields from ``time_part``."""

        merged = ParsedComponents(offset_minutes=self.offset_minutes)
        for component in DATE_COMPONENTS:
            if component in self.known:
                merged.assign(component, self.known[component])
            elif component in self.implied:
                merged.imply(component, self.implied[component])
        for component in TIME_COMPONENTS:
            if component in time_part.known:
                merged.assign(component, time_part.known[component])
            elif component in time_part.implied:
                merged.imply(component, time_part.implied[component])
        if time_part.offset_minutes is not None:
            merged.offset_minutes = time_part.offset_minutes
        return merged


@dataclass(frozen=True)
class RawMatch:
    """One grammar match: the matched substring, its offset and components."""

    text: str
    index: int
    components: ParsedComponents
    kind: MatchKind = MatchKind.DATE
    rule: str = ""
    # Hedge words next to the match ("around", "-ish"); they lower confidence
    # but stay outside the span.
    hedge: str = ""

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def end(self) -> int:
        return self.index + len(self.text)
