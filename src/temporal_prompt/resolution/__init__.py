"""Resolution and classification of grammar matches."""

from .resolver import DateResolver, build_instant, relative_day_shift, wall_clock_to_utc
from .scoring import classify_grain, classify_type, compute_confidence

__all__ = [
    "DateResolver",
    "build_instant",
    "classify_grain",
    "classify_type",
    "compute_confidence",
    "relative_day_shift",
    "wall_clock_to_utc",
]
