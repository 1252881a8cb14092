"""Confidence, type and grain classification for grammar matches.

These are pure functions of a ``RawMatch``; phrase checks are plain substring
tests on the lowercased matched text. The ambiguity check also looks at the
hedge words the grammar found next to the match.
"""

from __future__ import annotations

import re

from temporal_prompt.grammar.components import Component, ParsedComponents, RawMatch
from temporal_prompt.models import ExtractionType, Grain

BASE_CONFIDENCE = 0.7

AMBIGUITY_MARKERS: tuple[str, ...] = (
    "sometime", "maybe", "perhaps", "possibly", "around", "about", "ish", "kinda", "sorta",
)
CLEAR_INDICATORS: tuple[str, ...] = ("tomorrow", "yesterday", "today", "next week", "last month")

STRONG_RELATIVE_MARKERS: tuple[str, ...] = (
    "end of", "beginning of", "start of",
    "next", "last", "this",
    "today", "tomorrow", "yesterday",
)
RELATIVE_KEYWORDS: tuple[str, ...] = (
    "today", "tomorrow", "yesterday",
    "next", "last", "this",
    "in", "ago", "later",
    "now", "soon", "recently",
    "week", "month", "year", "day",
    "morning", "afternoon", "evening", "night",
    "end of", "beginning of", "start of",
)
ABSOLUTE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d{4}"),
    re.compile(r"\d{1,2}/\d{1,2}/\d{4}"),
    re.compile(r"\d{1,2}-\d{1,2}-\d{4}"),
    re.compile(r"january|february|march|april|may|june|july|august|september|october|november|december"),
    re.compile(r"jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec"),
)


def _contains_any(text: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in text for phrase in phrases)


def compute_confidence(match: RawMatch) -> float:
    """Heuristic confidence in [0, 1] for a grammar match."""

    text = match.text.lower()
    components = match.components
    confidence = BASE_CONFIDENCE

    if components.has(Component.HOUR):
        confidence += 0.15
    if components.has(Component.MINUTE):
        confidence += 0.10
    if components.has(Component.YEAR):
        confidence += 0.10

    if _contains_any(f"{match.hedge} {text}".lower(), AMBIGUITY_MARKERS):
        confidence -= 0.4
    # Very short matches are often false positives.
    if len(match.text) <= 3:
        confidence -= 0.3
    if _contains_any(text, CLEAR_INDICATORS):
        confidence += 0.2

    return min(max(confidence, 0.0), 1.0)


def classify_type(matched_text: str) -> ExtractionType:
    """Absolute vs. relative, by marker precedence."""

    text = matched_text.lower()

    if _contains_any(text, STRONG_RELATIVE_MARKERS):
        return ExtractionType.RELATIVE

    has_relative_keyword = _contains_any(text, RELATIVE_KEYWORDS)
    if any(pattern.search(text) for pattern in ABSOLUTE_PATTERNS) and not has_relative_keyword:
        return ExtractionType.ABSOLUTE

    return ExtractionType.RELATIVE if has_relative_keyword else ExtractionType.ABSOLUTE


def classify_grain(components: ParsedComponents) -> Grain:
    """Most precise *certain* time component; day when there is none."""

    if components.is_certain(Component.SECOND):
        return Grain.SECOND
    if components.is_certain(Component.MINUTE):
        return Grain.MINUTE
    if components.is_certain(Component.HOUR):
        return Grain.HOUR
    return Grain.DAY
