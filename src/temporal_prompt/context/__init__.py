"""Calendar context: timezone, locale and the reference instant."""

from .manager import CalendarContext, is_valid_locale, load_zone, system_timezone

__all__ = ["CalendarContext", "is_valid_locale", "load_zone", "system_timezone"]
