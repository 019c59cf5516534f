"""
forecast/regression.py

Ordinary least squares over a daily amount series, in plain Python.
"""

from __future__ import annotations

from typing import Any

from forecast.base import BaseForecastModel

_FIT_KEYS = ("slope", "intercept", "mean", "next_day")


class LinearRegressionForecast(BaseForecastModel):
    """
    Straight-line fit of amount against day index ``0..n-1``.

        slope     = Σ (x - x̄)(y - ȳ) / Σ (x - x̄)²
        intercept = ȳ - slope · x̄

    ``daily_rate`` is the mean amount per day, which is what the goal
    projection extends. ``slope`` only feeds the trend label; ``next_day``
    is the fitted value one day past the series, floored at zero.
    """

    MODEL_NAME = "linear_regression"
    MIN_POINTS = 2

    def forecast(self, values: list[float]) -> dict[str, Any]:
        if len(values) < self.MIN_POINTS:
            return self._too_short(values, _FIT_KEYS)

        amounts = [float(v) for v in values]
        n = len(amounts)
        x_bar = (n - 1) / 2.0
        y_bar = sum(amounts) / n

        spread = sum((x - x_bar) ** 2 for x in range(n))
        co_spread = sum((x - x_bar) * (y - y_bar) for x, y in enumerate(amounts))
        slope = co_spread / spread
        intercept = y_bar - slope * x_bar

        return {
            "model": self.MODEL_NAME,
            "daily_rate": round(max(0.0, y_bar), 6),
            "slope": round(slope, 6),
            "intercept": round(intercept, 6),
            "mean": round(y_bar, 6),
            "next_day": round(max(0.0, intercept + slope * n), 6),
        }
