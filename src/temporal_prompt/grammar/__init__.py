"""Natural-language date grammar.

This package contains the regex rule table and the matcher that turns free
text into ``RawMatch`` objects with per-component certainty.
"""

from .components import Component, MatchKind, ParsedComponents, RawMatch
from .parser import DateGrammar
from .rules import DEFAULT_RULES, GrammarRule

__all__ = [
    "DEFAULT_RULES",
    "Component",
    "DateGrammar",
    "GrammarRule",
    "MatchKind",
    "ParsedComponents",
    "RawMatch",
]
