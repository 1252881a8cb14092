"""Text substitution for detected date expressions."""

from .engine import SubstitutionEngine

__all__ = ["SubstitutionEngine"]
