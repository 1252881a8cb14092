"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

# Monday, September 15, 2025 at midnight UTC.
REFERENCE = datetime(2025, 9, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def reference() -> datetime:
    """Provide the pinned reference instant used across the suite."""
    return REFERENCE


@pytest.fixture
def mock_settings():
    """Provide settings that do not depend on the host environment."""
    from temporal_prompt.config import Settings

    return Settings(
        timezone="UTC",
        locale="en-US",
        include_context=False,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def context(reference: datetime):
    """Provide a UTC calendar context pinned to the reference instant."""
    from temporal_prompt.context import CalendarContext

    return CalendarContext("UTC", "en-US", now=reference)


@pytest.fixture
def formatter(context):
    """Provide a formatter bound to the pinned UTC context."""
    from temporal_prompt.formatting import DateFormatter

    return DateFormatter(context)


@pytest.fixture
def enhancer(mock_settings, reference: datetime):
    """Provide a UTC enhancer pinned to the reference instant."""
    from temporal_prompt.enhancer import PromptEnhancer

    return PromptEnhancer(mock_settings, reference_instant=reference)


@pytest.fixture
def local_reference(reference: datetime) -> datetime:
    """Provide the reference instant rendered in UTC as a ZoneInfo datetime."""
    return reference.astimezone(ZoneInfo("UTC"))
