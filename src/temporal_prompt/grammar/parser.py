"""Regex-driven date grammar.

``DateGrammar.extract_raw`` runs every rule of the table over the text and then
refines the candidates the way a casual date parser does:

1. overlapping candidates are resolved in favour of the longer one;
2. a date followed by a time (or a time followed by a date) becomes one match;
3. time-only matches are placed on the reference date;
4. hedging words right before a match ("around", "maybe"...) and an "ish"
   suffix are recorded on the match without changing its span.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime

import structlog

from temporal_prompt.exceptions import GrammarError
from temporal_prompt.grammar.components import MatchKind, ParsedComponents, RawMatch
from temporal_prompt.grammar.rules import DEFAULT_RULES, GrammarRule

logger = structlog.get_logger()

_DATE_THEN_TIME = re.compile(r"(?:\s*,\s*|\s+)(?:at\s+)?", re.IGNORECASE)
_TIME_THEN_DATE = re.compile(r"\s*,?\s+(?:on\s+)?", re.IGNORECASE)

_QUALIFIER_BEFORE = re.compile(
    r"\b(?:sometime|around|about|maybe|perhaps|possibly|kinda|sorta)\s+$",
    re.IGNORECASE,
)
_ISH_AFTER = re.compile(r"-?ish\b", re.IGNORECASE)


class DateGrammar:
    """Ordered rule table plus the refinement passes."""

    def __init__(self, rules: Iterable[GrammarRule] | None = None) -> None:
        """Create a grammar.

        Args:
            rules: Rule table to use. If None, uses the default English rules.

        Raises:
            GrammarError: If a rule has no usable pattern or extractor.
        """

        self._rules: tuple[GrammarRule, ...] = tuple(DEFAULT_RULES if rules is None else rules)
        for rule in self._rules:
            if not isinstance(rule.pattern, re.Pattern) or not callable(rule.extract):
                raise GrammarError(f"rule {rule.name!r} needs a compiled pattern and a callable extractor")

    @property
    def rules(self) -> tuple[GrammarRule, ...]:
        return self._rules

    def with_rule(self, rule: GrammarRule) -> DateGrammar:
        """Return a new grammar with ``rule`` appended to the table."""

        return DateGrammar((*self._rules, rule))

    def extract_raw(self, text: str, reference: datetime) -> list[RawMatch]:
        """Find temporal expressions in ``text``.

        Args:
            text: Source text.
            reference: Reference instant, already rendered in the target
                timezone. Rule arithmetic uses its local wall clock.

        Returns:
            Non-overlapping matches ordered by start offset.
        """

        if not text:
            return []

        candidates = self._candidates(text, reference)
        kept = _remove_overlaps(candidates)
        merged = _merge_date_time(text, kept)
        results = [
            _note_hedges(text, _place_on_reference_date(m, reference), previous_end)
            for m, previous_end in _with_previous_end(m for m in merged if _survives(m))
        ]
        logger.debug("grammar_matches", count=len(results), candidates=len(candidates))
        return results

    def _candidates(self, text: str, reference: datetime) -> list[tuple[RawMatch, bool]]:
        found: list[tuple[RawMatch, bool]] = []
        for rule in self._rules:
            for match in rule.pattern.finditer(text):
                components = rule.extract(match, reference)
                if components is None:
                    continue
                raw = RawMatch(
                    text=match.group(0),
                    index=match.start(),
                    components=components,
                    kind=rule.kind,
                    rule=rule.name,
                )
                found.append((raw, rule.standalone))
        found.sort(key=lambda item: (item[0].index, -item[0].length))
        return found


def _remove_overlaps(candidates: Sequence[tuple[RawMatch, bool]]) -> list[tuple[RawMatch, bool]]:
    kept: list[tuple[RawMatch, bool]] = []
    for candidate in candidates:
        if kept and candidate[0].index < kept[-1][0].end:
            if candidate[0].length > kept[-1][0].length:
                kept[-1] = candidate
            continue
        kept.append(candidate)
    return kept


def _is_date_part(match: RawMatch) -> bool:
    return match.kind is not MatchKind.TIME and not match.components.has_certain_time()


def _merge_date_time(text: str, matches: list[tuple[RawMatch, bool]]) -> list[tuple[RawMatch, bool]]:
    merged: list[tuple[RawMatch, bool]] = []
    i = 0
    while i < len(matches):
        current, standalone = matches[i]
        if i + 1 < len(matches):
            following = matches[i + 1][0]
            gap = text[current.end : following.index]
            if _is_date_part(current) and following.kind is MatchKind.TIME and _DATE_THEN_TIME.fullmatch(gap):
                components = current.components.combine(following.components)
                merged.append((_joined(text, current, following, components, current.rule), True))
                i += 2
                continue
            if current.kind is MatchKind.TIME and _is_date_part(following) and _TIME_THEN_DATE.fullmatch(gap):
                components = following.components.combine(current.components)
                merged.append((_joined(text, current, following, components, following.rule), True))
                i += 2
                continue
        merged.append((current, standalone))
        i += 1
    return merged


def _joined(
    text: str, left: RawMatch, right: RawMatch, components: ParsedComponents, rule: str
) -> RawMatch:
    return RawMatch(
        text=text[left.index : right.end],
        index=left.index,
        components=components,
        kind=MatchKind.DATETIME,
        rule=rule,
    )


def _survives(item: tuple[RawMatch, bool]) -> bool:
    return item[1]


def _with_previous_end(items: Iterable[tuple[RawMatch, bool]]) -> Iterable[tuple[RawMatch, int]]:
    previous_end = 0
    for match, _ in items:
        yield match, previous_end
        previous_end = match.end


def _place_on_reference_date(match: RawMatch, reference: datetime) -> RawMatch:
    if match.kind is not MatchKind.TIME:
        return match
    match.components.imply_date(reference.date())
    return match


def _note_hedges(text: str, match: RawMatch, previous_end: int) -> RawMatch:
    hedges = []

    before = _QUALIFIER_BEFORE.search(text, previous_end, match.index)
    if before is not None and before.end() == match.index:
        hedges.append(before.group(0).strip())

    after = _ISH_AFTER.match(text, match.end)
    if after is not None:
        hedges.append(after.group(0))

    if not hedges:
        return match
    return replace(match, hedge=" ".join(hedges))
