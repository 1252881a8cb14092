"""Prompt enhancement facade."""

from .prompt_enhancer import PromptEnhancer, create_enhancer

__all__ = ["PromptEnhancer", "create_enhancer"]
