"""Strategy-driven rewriting of detected date expressions.

Replacements are applied right to left (descending start offset). A
replacement rarely has the length of the span it replaces, and only offsets to
the left of an edit stay valid after it, so the order is what keeps every
extraction's ``start``/``end`` usable against the original text.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from temporal_prompt.formatting import DateFormatter
from temporal_prompt.models import DateExtraction, Grain, Strategy

logger = structlog.get_logger()


class SubstitutionEngine:
    """Rewrites text by replacing or annotating each extraction."""

    def __init__(self, formatter: DateFormatter) -> None:
        self.formatter = formatter

    def replacement_for(self, extraction: DateExtraction, strategy: Strategy | str) -> str:
        """Text that takes the place of ``extraction`` under ``strategy``.

        Unlike ``DateFormatter.format_hybrid``, the hybrid strategy always
        appends the absolute form, even for "today" or "tomorrow".
        """

        strategy = Strategy(strategy)
        if strategy is Strategy.PRESERVE:
            return extraction.original_text
        if strategy is Strategy.NORMALIZE:
            return self.formatter.format_absolute(extraction.resolved_date, extraction.grain)
        return self.formatter.format_with_original(
            extraction.resolved_date,
            extraction.original_text,
            extraction.grain or Grain.DAY,
        )

    def apply_strategy(
        self,
        text: str,
        extractions: Sequence[DateExtraction],
        strategy: Strategy | str,
    ) -> str:
        """Rewrite ``text`` for all ``extractions`` in one pass.

        Args:
            text: Text the extractions were found in.
            extractions: Extractions with offsets into ``text``, any order.
            strategy: preserve, normalize or hybrid.

        Returns:
            The rewritten text.

        Raises:
            ValueError: If ``strategy`` is unknown.
        """

        strategy = Strategy(strategy)
        if not extractions or strategy is Strategy.PRESERVE:
            return text

        result = text
        for extraction in sorted(extractions, key=lambda e: e.start, reverse=True):
            replacement = self.replacement_for(extraction, strategy)
            result = result[: extraction.start] + replacement + result[extraction.end :]

        logger.debug(
            "strategy_applied",
            strategy=strategy.value,
            replacements=len(extractions),
            length_delta=len(result) - len(text),
        )
        return result
