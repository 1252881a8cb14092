"""Custom exceptions for Temporal Prompt."""


class TemporalPromptError(Exception):
    """Base exception for all Temporal Prompt errors."""


class InvalidInstantError(TemporalPromptError, ValueError):
    """Exception raised when an instant cannot be rendered.

    Rendering only accepts timezone-aware ``datetime`` values; anything else
    would leak a meaningless date into prompt text.
    """


class GrammarError(TemporalPromptError):
    """Exception raised when the date grammar rule table is misconfigured."""
