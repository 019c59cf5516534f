"""
forecast/projection.py

Goal projection: linear extrapolation of a campaign's amount raised.

For each day d in 1..days_remaining:

    projected   = min(current + daily_rate * d, goal)
    optimistic  = min(projected * 1.2, goal * 1.1)
    pessimistic = min(projected * 0.8, goal)

The multipliers, the 1.1 goal ceiling and the 1500/day fallback rate come
from :class:`app.config.PipelineSettings`.  They are placeholder policy:
no seasonality, no variance-derived bands.  Swap in a fitted rate via
:func:`estimate_daily_rate` when history exists.

With non-negative inputs, ``pessimistic <= projected <= optimistic`` holds
for every point and ``projected`` never exceeds the goal.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from aggregation.bucketing import Bucket
from app.config import PipelineSettings, get_pipeline_settings
from forecast.classifier import TrendClassifier
from forecast.regression import LinearRegressionForecast

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastPoint:
    day: int
    projected: float
    optimistic: float
    pessimistic: float
    goal: float


@dataclass(frozen=True)
class DailyRateEstimate:
    """
    Daily rate used for a projection and where it came from.
    """

    daily_rate: float
    source: str  # "history" or "fallback"
    trend: str
    slope: float | None = None


def forecast(
    current_amount: float,
    daily_rate: float | None,
    days_remaining: int,
    goal_amount: float,
    *,
    settings: PipelineSettings | None = None,
) -> list[ForecastPoint]:
    """
    Project *current_amount* forward for *days_remaining* days.

    ``daily_rate=None`` uses the configured fallback rate.  Zero or negative
    *days_remaining* gives an empty series.  Negative or non-finite amounts
    are treated as zero.
    """
    settings = settings or get_pipeline_settings()
    if daily_rate is None:
        daily_rate = settings.default_daily_rate

    current = _non_negative(current_amount)
    rate = _non_negative(daily_rate)
    goal = _non_negative(goal_amount)
    optimistic_cap = goal * settings.optimistic_goal_ceiling

    series: list[ForecastPoint] = []
    for day in range(1, max(0, int(days_remaining)) + 1):
        projected = min(current + rate * day, goal)
        series.append(
            ForecastPoint(
                day=day,
                projected=projected,
                optimistic=min(projected * settings.optimistic_multiplier, optimistic_cap),
                pessimistic=min(projected * settings.pessimistic_multiplier, goal),
                goal=goal,
            )
        )
    return series


def estimate_daily_rate(
    daily_buckets: Iterable[Bucket],
    *,
    settings: PipelineSettings | None = None,
) -> DailyRateEstimate:
    """
    Estimate the daily rate from a gap-free chronological daily series.

    Falls back to the configured default rate when fewer than two days of
    history exist.
    """
    settings = settings or get_pipeline_settings()
    values = [b.amount for b in daily_buckets]
    fit = LinearRegressionForecast().forecast(values)

    if fit["daily_rate"] is None:
        logger.debug("estimate_daily_rate fallback days=%d", len(values))
        return DailyRateEstimate(
            daily_rate=settings.default_daily_rate,
            source="fallback",
            trend="stable",
        )

    return DailyRateEstimate(
        daily_rate=fit["daily_rate"],
        source="history",
        trend=TrendClassifier().classify(fit["slope"], fit["mean"]),
        slope=fit["slope"],
    )


def _non_negative(value: float) -> float:
    number = float(value)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number
