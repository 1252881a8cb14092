"""Prompt enhancer implementation.

This module provides the facade that wires the calendar context, grammar,
resolver, formatter and substitution engine together.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog

from temporal_prompt.config import Settings
from temporal_prompt.context import CalendarContext
from temporal_prompt.formatting import DateFormatter
from temporal_prompt.grammar import DateGrammar
from temporal_prompt.models import (
    DateExtraction,
    EnhancedPrompt,
    FormatOptions,
    FormatStyle,
    ParsingOptions,
    Strategy,
    TimeContext,
)
from temporal_prompt.resolution import DateResolver
from temporal_prompt.substitution import SubstitutionEngine

logger = structlog.get_logger()


class PromptEnhancer:
    """Date-aware prompt rewriting.

    Each instance owns its own timezone, locale and reference instant. There
    is no shared default instance; build one per configuration (or per
    concurrent task) and keep it as long as the application needs it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        timezone: str | None = None,
        locale: str | None = None,
        strategy: Strategy | str | None = None,
        include_context: bool | None = None,
        reference_instant: datetime | None = None,
        grammar: DateGrammar | None = None,
    ) -> None:
        """Initialize the prompt enhancer.

        Args:
            settings: Library settings. If None, uses default settings.
            timezone: IANA timezone overriding ``settings.timezone``.
            locale: Locale overriding ``settings.locale``.
            strategy: Default strategy overriding ``settings.strategy``.
            include_context: Overrides ``settings.include_context``.
            reference_instant: Pin "now" (useful for deterministic output).
            grammar: Custom date grammar. If None, uses the default rules.
        """
        from temporal_prompt.config import get_settings

        self.settings = settings or get_settings()
        self.strategy = Strategy(strategy or self.settings.strategy)
        self.include_context = (
            self.settings.include_context if include_context is None else include_context
        )

        self.context = CalendarContext(
            timezone_name=timezone or self.settings.timezone,
            locale=locale or self.settings.locale,
            now=reference_instant,
        )
        self.resolver = DateResolver(self.context, grammar)
        self.formatter = DateFormatter(self.context)
        self.substitution = SubstitutionEngine(self.formatter)
        logger.info(
            "prompt_enhancer_initialized",
            timezone=self.context.timezone,
            locale=self.context.locale,
            strategy=self.strategy.value,
        )

    def enhance(self, text: str | None, strategy: Strategy | str | None = None) -> EnhancedPrompt:
        """Detect dates in ``text`` and rewrite it.

        Args:
            text: Prompt text. None is treated as an empty string.
            strategy: Rewriting strategy. If None, uses the instance default.

        Returns:
            The enhanced prompt with extractions and token estimate.
        """
        if not isinstance(text, str):
            text = ""
        chosen = Strategy(strategy or self.strategy)

        extractions = self.resolver.resolve(text)
        enhanced_text = (
            self.substitution.apply_strategy(text, extractions, chosen) if extractions else text
        )

        context = ""
        tokens_added = 0
        if self.include_context:
            context = self.formatter.context_header()
            tokens_added += self.formatter.token_count(context)
        tokens_added += self.formatter.token_count(enhanced_text) - self.formatter.token_count(text)

        logger.debug(
            "prompt_enhanced",
            strategy=chosen.value,
            extractions=len(extractions),
            tokens_added=tokens_added,
        )
        return EnhancedPrompt(
            original_text=text,
            enhanced_text=enhanced_text,
            context=context,
            extractions=extractions,
            tokens_added=tokens_added,
        )

    def extract_all(self, text: str | None, options: ParsingOptions | None = None) -> list[DateExtraction]:
        """All date expressions in ``text``, left to right."""

        if not isinstance(text, str):
            return []
        return self.resolver.resolve(text, options)

    def extract_first(self, text: str | None, options: ParsingOptions | None = None) -> DateExtraction | None:
        """First date expression in ``text``, or None."""

        if not isinstance(text, str):
            return None
        return self.resolver.resolve_first(text, options)

    def render(
        self,
        instant: datetime,
        style: FormatStyle | str = FormatStyle.HUMAN,
        options: FormatOptions | None = None,
    ) -> str:
        """Render ``instant``; raises ``InvalidInstantError`` for invalid input."""

        return self.formatter.format(instant, style, options)

    def apply_strategy(
        self,
        text: str,
        extractions: Sequence[DateExtraction],
        strategy: Strategy | str,
    ) -> str:
        return self.substitution.apply_strategy(text, extractions, strategy)

    def add_context(self, prompt: str) -> str:
        """Prefix ``prompt`` with the current-date header."""

        return f"{self.formatter.context_header()}\n\n{prompt}"

    def set_timezone(self, timezone: str) -> None:
        self.context.set_timezone(timezone)

    def set_locale(self, locale: str) -> None:
        self.context.set_locale(locale)

    def update_reference_instant(self, instant: datetime | None = None) -> None:
        """Pin "now"; the current time when ``instant`` is None."""

        self.context.update_now(instant)

    def get_context(self) -> TimeContext:
        return self.context.snapshot()

    def is_today(self, instant: datetime) -> bool:
        return self.context.is_today(instant)

    def is_tomorrow(self, instant: datetime) -> bool:
        return self.context.is_tomorrow(instant)

    def day_difference(self, instant: datetime) -> int:
        return self.context.local_day_difference(instant)


def create_enhancer(settings: Settings | None = None, **overrides) -> PromptEnhancer:
    """Build a ``PromptEnhancer``; keyword overrides match its constructor."""

    return PromptEnhancer(settings, **overrides)
