"""Timezone-aware calendar context.

Holds the configured timezone, locale and reference instant. Every "today",
"tomorrow" and "N days" question is answered by comparing (year, month, day)
triples rendered in the configured timezone, never by subtracting raw UTC
timestamps.
"""

from __future__ import annotations

import os
import re
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from temporal_prompt.models import TimeContext

logger = structlog.get_logger()

DEFAULT_TIMEZONE = "UTC"
DEFAULT_LOCALE = "en-US"

# language[-script][-region][-variant...]
_LOCALE_RE = re.compile(
    r"^[A-Za-z]{2,3}(?:[-_][A-Za-z]{4})?(?:[-_](?:[A-Za-z]{2}|\d{3}))?(?:[-_][A-Za-z0-9]{5,8})*$"
)


def load_zone(name: str | None) -> ZoneInfo | None:
    """Return the ZoneInfo for ``name`` or None if it is not a known zone."""

    if not name or not isinstance(name, str):
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def is_valid_locale(tag: str | None) -> bool:
    """Check that ``tag`` is shaped like a BCP 47 locale tag."""

    return isinstance(tag, str) and bool(_LOCALE_RE.match(tag))


def system_timezone() -> str:
    """Best-effort IANA name of the host timezone."""

    env_tz = os.environ.get("TZ", "").lstrip(":")
    if load_zone(env_tz) is not None:
        return env_tz

    localtime = Path("/etc/localtime")
    try:
        resolved = str(localtime.resolve())
    except OSError:
        resolved = ""
    if "zoneinfo/" in resolved:
        candidate = resolved.split("zoneinfo/", 1)[1]
        if load_zone(candidate) is not None:
            return candidate

    return DEFAULT_TIMEZONE


def _as_aware(instant: datetime) -> datetime:
    # Naive datetimes are read as UTC.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


class CalendarContext:
    """Timezone, locale and reference instant for one engine instance.

    Invalid timezone or locale values are ignored and the previous value is
    kept. The instance does no locking; callers that mutate it from several
    threads must serialize access themselves.
    """

    def __init__(
        self,
        timezone_name: str | None = None,
        locale: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Create a calendar context.

        Args:
            timezone_name: IANA timezone. Invalid or missing values fall back
                to the system timezone.
            locale: BCP 47 locale tag. Invalid or missing values fall back to
                ``en-US``.
            now: Pin the reference instant. If None, the reference instant
                follows the clock until ``update_now`` is called.
        """

        zone = load_zone(timezone_name)
        if zone is None:
            if timezone_name:
                logger.warning("timezone_rejected", timezone=timezone_name)
            timezone_name = system_timezone()
            zone = load_zone(timezone_name) or ZoneInfo(DEFAULT_TIMEZONE)

        self._timezone_name: str = timezone_name
        self._zone: ZoneInfo = zone
        self._locale: str = locale if is_valid_locale(locale) else DEFAULT_LOCALE

        self._pinned: datetime = _as_aware(now) if now is not None else datetime.now(timezone.utc)
        self._is_pinned: bool = now is not None

    @property
    def timezone(self) -> str:
        return self._timezone_name

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    @property
    def locale(self) -> str:
        return self._locale

    def current_instant(self) -> datetime:
        """Sample the clock, tagged with the configured timezone."""

        return datetime.now(self._zone)

    def pinned_now(self) -> datetime:
        """Held reference instant; defaults to the creation time."""

        return self._pinned.astimezone(self._zone)

    def reference_instant(self) -> datetime:
        """Instant that relative expressions resolve against.

        This is the pinned instant once ``update_now`` was called (or one was
        given at construction), otherwise the current time.
        """

        if self._is_pinned:
            return self.pinned_now()
        return self.current_instant()

    def update_now(self, instant: datetime | None = None) -> None:
        """Pin the reference instant (the current time when ``instant`` is None)."""

        self._pinned = _as_aware(instant) if instant is not None else datetime.now(timezone.utc)
        self._is_pinned = True
        logger.debug("reference_instant_pinned", reference=self._pinned.isoformat())

    def set_timezone(self, name: str) -> None:
        """Switch timezone; unknown names are ignored."""

        zone = load_zone(name)
        if zone is None:
            logger.warning("timezone_rejected", timezone=name, kept=self._timezone_name)
            return
        self._timezone_name = name
        self._zone = zone

    def set_locale(self, tag: str) -> None:
        """Switch locale; malformed tags are ignored."""

        if not is_valid_locale(tag):
            logger.warning("locale_rejected", locale=tag, kept=self._locale)
            return
        self._locale = tag

    def snapshot(self) -> TimeContext:
        """Immutable view of the context using the current reference instant."""

        return TimeContext(
            now=self.reference_instant(),
            timezone=self._timezone_name,
            locale=self._locale,
        )

    def to_local(self, instant: datetime) -> datetime:
        """Render ``instant`` in the configured timezone."""

        return _as_aware(instant).astimezone(self._zone)

    def local_date(self, instant: datetime) -> date:
        return self.to_local(instant).date()

    def is_same_local_day(self, a: datetime, b: datetime) -> bool:
        """Compare two instants' calendar dates in the configured timezone."""

        return self.local_date(a) == self.local_date(b)

    def is_today(self, instant: datetime) -> bool:
        return self.is_same_local_day(instant, self.reference_instant())

    def is_tomorrow(self, instant: datetime) -> bool:
        tomorrow = self.local_date(self.reference_instant()) + timedelta(days=1)
        return self.local_date(instant) == tomorrow

    def local_day_difference(self, instant: datetime) -> int:
        """Signed calendar days from the pinned instant to ``instant``.

        Both ends are reduced to their local calendar date first, so a target
        half an hour past midnight tomorrow counts as +1 whatever the time of
        day of the pinned instant.
        """

        return (self.local_date(instant) - self.local_date(self._pinned)).days
