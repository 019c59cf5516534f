"""
scoring/normalizer.py

Helpers that put raw campaign figures on the 0-100 score scale.
"""

import math


class ScoreNormalizer:
    """Stateless scaling and clamping for score components."""

    def normalize_positive(self, value: float, max_expected: float) -> float:
        """Express *value* as a percentage of *max_expected*, capped at 100.

        Args:
            value: Observed figure, e.g. social reach or countries reached.
            max_expected: The figure that earns a full 100.

        Returns:
            A float in [0, 100]; ``0.0`` when *max_expected* is not positive.
        """
        if max_expected <= 0:
            return 0.0
        return self.clamp(100.0 * value / max_expected, 0.0, 100.0)

    def clamp(self, value: float, min_value: float, max_value: float) -> float:
        """Bound *value* to [min_value, max_value]; NaN becomes min_value."""
        if math.isnan(value):
            return min_value
        return min(max_value, max(min_value, value))
