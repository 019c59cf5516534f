"""
kpi/rates.py

Division-safe rate and ratio primitives.

Every percentage-like metric in the pipeline is expressed on the 0-100
scale. Conversion to a 0-1 fraction happens only in the presentation
adapter, for renderers that ask for it.
"""

from __future__ import annotations

import math

PERCENT_MIN: float = 0.0
PERCENT_MAX: float = 100.0


def safe_divide(numerator: float, denominator: float) -> float:
    """
    numerator / denominator, or ``0.0`` when the result would not be finite.
    """
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    if not math.isfinite(result):
        return 0.0
    return result


def compute_rate(numerator: float, denominator: float) -> float:
    """
    Percentage of *numerator* over *denominator*, clamped to [0, 100].

    A zero denominator gives ``0.0``; never NaN or Infinity.
    """
    return clamp_percent(safe_divide(numerator, denominator) * 100.0)


def clamp_percent(value: float) -> float:
    """Clamp *value* into [0, 100]; NaN becomes 0."""
    if math.isnan(value):
        return PERCENT_MIN
    return max(PERCENT_MIN, min(value, PERCENT_MAX))
