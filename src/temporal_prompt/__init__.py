"""Temporal Prompt - date disambiguation for LLM prompts.

This package finds natural-language date and time expressions in text,
resolves them against a reference instant and timezone, and rewrites the
text so language models see unambiguous dates.
"""

__version__ = "0.1.0"

from temporal_prompt.config import Settings, get_settings
from temporal_prompt.enhancer import PromptEnhancer, create_enhancer
from temporal_prompt.models import (
    DateExtraction,
    EnhancedPrompt,
    ExtractionType,
    FormatOptions,
    FormatStyle,
    Grain,
    ParsingOptions,
    Strategy,
)

__all__ = [
    "DateExtraction",
    "EnhancedPrompt",
    "ExtractionType",
    "FormatOptions",
    "FormatStyle",
    "Grain",
    "ParsingOptions",
    "PromptEnhancer",
    "Settings",
    "Strategy",
    "__version__",
    "create_enhancer",
    "get_settings",
]
