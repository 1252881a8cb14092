"""Integration tests for the full enhancement pipeline.

These tests run text through grammar, resolution, formatting and
substitution together, across several timezones.
"""

import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from temporal_prompt import PromptEnhancer, Settings, Strategy
from temporal_prompt.models import Grain

pytestmark = pytest.mark.integration

REFERENCE = datetime(2025, 9, 15, 12, 0, tzinfo=timezone.utc)
ZONES = ["UTC", "America/New_York", "Europe/London", "Asia/Tokyo", "Australia/Sydney"]

DAY_EXPRESSIONS = [
    "tomorrow",
    "today",
    "yesterday",
    "next Monday",
    "this Friday",
    "last Friday",
    "next week",
    "next month",
    "end of this week",
    "end of month",
    "tomorrow morning",
    "next Friday afternoon",
    "this evening",
    "yesterday night",
    "in 3 days",
    "March 5",
    "2025-12-01",
]

TIMED_EXPRESSIONS = [
    "tomorrow at 3pm",
    "today at noon",
    "next Monday at 9am",
    "this Friday at 5pm",
    "tomorrow at 10 o'clock",
    "next week at 2pm",
    "tomorrow at 14:30",
]


@pytest.fixture
def settings() -> Settings:
    """Provide environment-independent settings."""
    return Settings(timezone="UTC", include_context=False)


def _enhancer(settings: Settings, zone: str = "UTC") -> PromptEnhancer:
    return PromptEnhancer(settings, timezone=zone, reference_instant=REFERENCE)


class TestDayGrainExpressions:
    """Day-level expressions get a bare date."""

    @pytest.mark.parametrize("expression", DAY_EXPRESSIONS)
    def test_hybrid_appends_date(self, settings: Settings, expression: str) -> None:
        """Test that the hybrid annotation is a bare date."""
        result = _enhancer(settings).enhance(f"Meet {expression}", strategy=Strategy.HYBRID)

        assert len(result.extractions) == 1
        assert result.extractions[0].grain == Grain.DAY
        assert re.fullmatch(r"Meet .+ \(\d{4}-\d{2}-\d{2}\)", result.enhanced_text)

    @pytest.mark.parametrize("expression", DAY_EXPRESSIONS)
    def test_normalize_replaces_with_date(self, settings: Settings, expression: str) -> None:
        """Test that normalize leaves only the date."""
        result = _enhancer(settings).enhance(f"Meet {expression}", strategy=Strategy.NORMALIZE)

        assert re.fullmatch(r"Meet \d{4}-\d{2}-\d{2}", result.enhanced_text)


class TestTimedExpressions:
    """Sub-day expressions carry time and timezone."""

    @pytest.mark.parametrize("expression", TIMED_EXPRESSIONS)
    def test_hybrid_appends_date_and_time(self, settings: Settings, expression: str) -> None:
        """Test the timed hybrid annotation."""
        result = _enhancer(settings).enhance(f"Meet {expression}", strategy=Strategy.HYBRID)

        assert len(result.extractions) == 1
        assert result.extractions[0].grain in (Grain.HOUR, Grain.MINUTE, Grain.SECOND)
        assert re.search(r"\(\d{4}-\d{2}-\d{2} \d{1,2}:\d{2} [AP]M UTC\)$", result.enhanced_text)

    @pytest.mark.parametrize("zone", ZONES)
    def test_normalize_names_the_zone(self, settings: Settings, zone: str) -> None:
        """Test that normalized times name the configured timezone."""
        result = _enhancer(settings, zone).enhance("Meet tomorrow at 3pm", strategy="normalize")

        assert result.enhanced_text.endswith(f" 3:00 PM {zone}")


class TestTimezoneAwareParsing:
    """Wall-clock times are read in the configured timezone."""

    @pytest.mark.parametrize("zone", ZONES)
    @pytest.mark.parametrize(
        ("expression", "hour", "minute"),
        [
            ("tomorrow at 3pm", 15, 0),
            ("tomorrow at noon", 12, 0),
            ("tomorrow at midnight", 0, 0),
            ("next Tuesday at 9:30am", 9, 30),
        ],
    )
    def test_local_wall_clock(
        self, settings: Settings, zone: str, expression: str, hour: int, minute: int
    ) -> None:
        """Test that the resolved instant shows the stated local time."""
        extraction = _enhancer(settings, zone).extract_first(f"Meet {expression}")

        local = extraction.resolved_date.astimezone(ZoneInfo(zone))
        assert (local.hour, local.minute) == (hour, minute)

    @pytest.mark.parametrize("zone", ZONES)
    def test_tomorrow_is_next_local_date(self, settings: Settings, zone: str) -> None:
        """Test that "tomorrow" is one local calendar day after the reference."""
        enhancer = _enhancer(settings, zone)

        extraction = enhancer.extract_first("Meet tomorrow at 3pm")

        assert enhancer.day_difference(extraction.resolved_date) == 1
        assert enhancer.is_tomorrow(extraction.resolved_date)


class TestScenarios:
    """Realistic prompts end to end."""

    def test_meeting_prompt(self, settings: Settings) -> None:
        """Test a prompt with two expressions and a context header."""
        enhancer = PromptEnhancer(
            settings,
            timezone="UTC",
            include_context=True,
            reference_instant=datetime(2025, 9, 15, tzinfo=timezone.utc),
        )

        result = enhancer.enhance("Submit report tomorrow and schedule meeting next Friday at 2pm")

        assert result.context.startswith("Current date: 2025-09-15 (Monday, 2025)")
        assert result.enhanced_text == (
            "Submit report tomorrow (2025-09-16) and schedule meeting "
            "next Friday at 2pm (2025-09-26 2:00 PM UTC)"
        )
        assert result.tokens_added > 0

    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            (datetime(2025, 2, 10, tzinfo=timezone.utc), "Pay rent 2025-02-28"),
            (datetime(2024, 2, 10, tzinfo=timezone.utc), "Pay rent 2024-02-29"),
        ],
    )
    def test_end_of_month(self, settings: Settings, reference: datetime, expected: str) -> None:
        """Test month ends across leap years."""
        enhancer = PromptEnhancer(settings, reference_instant=reference)

        assert enhancer.enhance("Pay rent end of month", strategy="normalize").enhanced_text == expected

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_text_without_dates_is_untouched(self, settings: Settings, strategy: Strategy) -> None:
        """Test identity on text with no temporal expressions."""
        result = _enhancer(settings).enhance("Hello world", strategy=strategy)

        assert result.enhanced_text == "Hello world"
        assert result.extractions == []
