"""Date rendering and token estimation."""

from .formatter import DateFormatter

__all__ = ["DateFormatter"]
