"""Unit tests for the prompt enhancer facade."""

from datetime import datetime, timezone

import pytest

from temporal_prompt.config import Settings
from temporal_prompt.enhancer import PromptEnhancer, create_enhancer
from temporal_prompt.exceptions import InvalidInstantError
from temporal_prompt.models import EnhancedPrompt, FormatStyle, Grain, Strategy, TimeContext


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestPromptEnhancer:
    """Test suite for PromptEnhancer."""

    def test_initialization(self, enhancer: PromptEnhancer) -> None:
        """Test that settings and overrides are applied."""
        assert enhancer.strategy == Strategy.HYBRID
        assert enhancer.include_context is False
        assert enhancer.context.timezone == "UTC"

    def test_overrides_beat_settings(self, mock_settings: Settings, reference: datetime) -> None:
        """Test that constructor arguments win over settings."""
        enhancer = PromptEnhancer(
            mock_settings,
            timezone="Asia/Tokyo",
            locale="ja-JP",
            strategy="normalize",
            include_context=True,
            reference_instant=reference,
        )

        assert enhancer.strategy == Strategy.NORMALIZE
        assert enhancer.include_context is True
        assert enhancer.get_context().timezone == "Asia/Tokyo"
        assert enhancer.get_context().locale == "ja-JP"

    def test_enhance_hybrid(self, enhancer: PromptEnhancer) -> None:
        """Test the default hybrid enhancement."""
        result = enhancer.enhance("Deadline next Friday")

        assert isinstance(result, EnhancedPrompt)
        assert result.original_text == "Deadline next Friday"
        assert result.enhanced_text == "Deadline next Friday (2025-09-26)"
        assert result.context == ""
        assert len(result.extractions) == 1

    def test_enhance_without_dates(self, enhancer: PromptEnhancer) -> None:
        """Test that text without dates is returned unchanged."""
        result = enhancer.enhance("Hello world")

        assert result.enhanced_text == "Hello world"
        assert result.extractions == []
        assert result.tokens_added == 0

    def test_enhance_none(self, enhancer: PromptEnhancer) -> None:
        """Test that None is treated as empty text."""
        result = enhancer.enhance(None)

        assert result.original_text == ""
        assert result.enhanced_text == ""

    def test_enhance_with_context(self, mock_settings: Settings, reference: datetime) -> None:
        """Test the context header and token delta."""
        enhancer = PromptEnhancer(mock_settings, include_context=True, reference_instant=reference)

        result = enhancer.enhance("Meet tomorrow")

        assert result.context == "Current date: 2025-09-15 (Monday, 2025)\nTimezone: UTC"
        assert result.enhanced_text == "Meet tomorrow (2025-09-16)"
        # header 6 + enhanced 3 - original 2
        assert result.tokens_added == 7

    def test_normalize_can_shorten(self, enhancer: PromptEnhancer) -> None:
        """Test that a shortening substitution reports a negative delta."""
        result = enhancer.enhance("Meet the day after tomorrow", strategy=Strategy.NORMALIZE)

        assert result.enhanced_text == "Meet 2025-09-17"
        assert result.tokens_added == -2

    def test_preserve_is_identity(self, enhancer: PromptEnhancer) -> None:
        """Test that preserve keeps the text and still reports extractions."""
        text = "Submit report tomorrow and schedule meeting next Friday at 2pm"

        result = enhancer.enhance(text, strategy="preserve")

        assert result.enhanced_text == text
        assert len(result.extractions) == 2

    def test_unknown_strategy(self, enhancer: PromptEnhancer) -> None:
        """Test that an unknown strategy raises ValueError."""
        with pytest.raises(ValueError):
            enhancer.enhance("Meet tomorrow", strategy="shout")

    def test_normalized_text_is_stable(self, enhancer: PromptEnhancer) -> None:
        """Test that normalized output does not produce new, stronger matches."""
        first = enhancer.enhance("Meet tomorrow at 3pm", strategy="normalize")
        again = enhancer.extract_all(first.enhanced_text)

        assert first.enhanced_text == "Meet 2025-09-16 3:00 PM UTC"
        assert len(again) <= len(first.extractions)
        assert max(e.confidence for e in again) <= max(e.confidence for e in first.extractions)
        assert again[0].resolved_date == first.extractions[0].resolved_date

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Let's talk about tomorrow's plan", "Let's talk about 2025-09-16's plan"),
            ("Call me around 3pm", "Call me around 2025-09-15 3:00 PM UTC"),
            ("Maybe next Friday works", "Maybe 2025-09-26 works"),
            ("Dinner tomorrow-ish", "Dinner 2025-09-16-ish"),
        ],
    )
    def test_normalize_keeps_surrounding_words(self, enhancer: PromptEnhancer, text: str, expected: str) -> None:
        """Test that only the date expression itself is replaced."""
        result = enhancer.enhance(text, strategy=Strategy.NORMALIZE)

        assert result.enhanced_text == expected

    def test_hedged_expression_has_lower_confidence(self, enhancer: PromptEnhancer) -> None:
        """Test that a hedge word lowers confidence without joining the span."""
        hedged = enhancer.extract_first("Let's talk about tomorrow")
        plain = enhancer.extract_first("Let's talk tomorrow")

        assert hedged.original_text == "tomorrow"
        assert hedged.confidence < plain.confidence

    def test_capitalized_word_is_not_a_weekday(self, enhancer: PromptEnhancer) -> None:
        """Test that "Sun" at the start of a sentence is not a date."""
        assert enhancer.extract_all("Sun is shining") == []
        assert enhancer.enhance("Sun is shining", strategy="normalize").enhanced_text == "Sun is shining"


class TestExtraction:
    """Test suite for the extraction helpers."""

    def test_extract_first(self, enhancer: PromptEnhancer) -> None:
        """Test that the leftmost extraction is returned."""
        extraction = enhancer.extract_first("Submit report tomorrow and schedule meeting next Friday at 2pm")

        assert extraction.original_text == "tomorrow"
        assert extraction.grain == Grain.DAY

    def test_extract_non_string(self, enhancer: PromptEnhancer) -> None:
        """Test that non-string input yields nothing."""
        assert enhancer.extract_all(None) == []
        assert enhancer.extract_first(None) is None


class TestContextOperations:
    """Test suite for context-related operations."""

    def test_set_timezone(self, enhancer: PromptEnhancer) -> None:
        """Test switching and rejecting timezones."""
        enhancer.set_timezone("Invalid/Zone")
        assert enhancer.get_context().timezone == "UTC"

        enhancer.set_timezone("America/New_York")
        assert enhancer.get_context().timezone == "America/New_York"
        # Midnight UTC on September 15 is still September 14 in New York.
        assert enhancer.add_context("Hi").startswith("Current date: 2025-09-15 (Sunday, 2025)")

    def test_set_locale(self, enhancer: PromptEnhancer) -> None:
        """Test switching and rejecting locales."""
        enhancer.set_locale("not a locale!")
        assert enhancer.get_context().locale == "en-US"

        enhancer.set_locale("de-DE")
        assert enhancer.get_context().locale == "de-DE"

    def test_update_reference_instant(self, enhancer: PromptEnhancer) -> None:
        """Test that a new pin moves relative resolution."""
        enhancer.update_reference_instant(_utc(2025, 12, 31, 9, 0))

        assert enhancer.extract_first("tomorrow").resolved_date == _utc(2026, 1, 1, 9, 0)
        assert enhancer.is_today(_utc(2025, 12, 31, 23, 0))
        assert enhancer.is_tomorrow(_utc(2026, 1, 1, 0, 0))

    def test_get_context(self, enhancer: PromptEnhancer, reference: datetime) -> None:
        """Test the context snapshot."""
        snapshot = enhancer.get_context()

        assert isinstance(snapshot, TimeContext)
        assert snapshot.now == reference

    def test_add_context(self, enhancer: PromptEnhancer) -> None:
        """Test that the header and prompt are separated by a blank line."""
        assert enhancer.add_context("Plan the week") == (
            "Current date: 2025-09-15 (Monday, 2025)\nTimezone: UTC\n\nPlan the week"
        )

    def test_day_difference(self, enhancer: PromptEnhancer) -> None:
        """Test signed calendar-day differences."""
        assert enhancer.day_difference(_utc(2025, 9, 26)) == 11
        assert enhancer.day_difference(_utc(2025, 9, 14, 23, 59)) == -1

    def test_render(self, enhancer: PromptEnhancer) -> None:
        """Test rendering through the facade."""
        assert enhancer.render(_utc(2025, 9, 19), FormatStyle.HYBRID) == "this Friday (2025-09-19)"

        with pytest.raises(InvalidInstantError):
            enhancer.render(datetime(2025, 9, 19))


class TestCreateEnhancer:
    """Test suite for the create_enhancer factory."""

    def test_create_enhancer_returns_independent_instances(self, mock_settings: Settings) -> None:
        """Test that each call builds a separate enhancer."""
        first = create_enhancer(mock_settings, timezone="Asia/Tokyo")
        second = create_enhancer(mock_settings)

        assert first is not second
        assert first.get_context().timezone == "Asia/Tokyo"
        assert second.get_context().timezone == "UTC"
