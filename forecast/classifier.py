"""
forecast/classifier.py

Trend label for a fitted daily-amount slope.
"""

from __future__ import annotations

STABLE = "stable"


class TrendClassifier:
    """
    Labels a slope by its size relative to the mean daily amount.

    A rise of 10 per day is a strong trend for a campaign raising 100 a
    day and noise for one raising 10 000. ``BANDS`` is checked top to
    bottom; the first band whose predicate holds wins:

        ratio > +0.05   strong_uptrend
        ratio > +0.01   uptrend
        ratio < -0.05   strong_downtrend
        ratio < -0.01   downtrend
        otherwise       stable
    """

    BANDS: tuple[tuple[str, float, str], ...] = (
        (">", 0.05, "strong_uptrend"),
        (">", 0.01, "uptrend"),
        ("<", -0.05, "strong_downtrend"),
        ("<", -0.01, "downtrend"),
    )

    def classify(self, slope: float | None, average_value: float | None) -> str:
        """
        ``stable`` when either input is missing. A zero average compares
        the raw slope against the bands.
        """
        if slope is None or average_value is None:
            return STABLE

        ratio = slope / abs(average_value) if average_value else slope
        for op, threshold, label in self.BANDS:
            if (op == ">" and ratio > threshold) or (op == "<" and ratio < threshold):
                return label
        return STABLE
