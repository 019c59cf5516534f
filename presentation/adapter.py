"""
presentation/adapter.py

Reshapes pipeline outputs into the exact structures chart renderers read.

The field names produced here are a contract with the rendering layer.
Renaming any of them is a breaking change on both sides.

    time series     [{"date", "amount", "supporters"}]
    category slices [{"name", "value", "color"}]
    top countries   [{"name", "count", "amount"}]
    social metrics  [{"platform", "shares", "likes", "comments", "reach"}]
    engagement      [{"actionType", "count"}]
    forecast rows   [{"day", "projected", "optimistic", "pessimistic", "goal"}]
    metric cards    {"conversionRate", "bounceRate", ...}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Literal

from aggregation.bucketing import Bucket
from forecast.projection import ForecastPoint
from scoring.performance import score_band

CHART_COLORS: tuple[str, ...] = (
    "#0ce4af",
    "#18a5fe",
    "#4c3dfb",
    "#ff6b6b",
    "#ffd93d",
    "#6bcf7f",
)

METRIC_FIELDS: dict[str, str] = {
    "conversion_rate": "conversionRate",
    "bounce_rate": "bounceRate",
    "average_donation": "averageDonation",
    "goal_progress": "goalProgress",
    "anonymous_share": "anonymousShare",
    "time_progress": "timeProgress",
    "daily_average": "dailyAverage",
    "projected_total": "projectedTotal",
    "remaining_amount": "remainingAmount",
    "daily_needed": "dailyNeeded",
    "pace_index": "paceIndex",
}

SOCIAL_METRIC_FIELDS: dict[str, str] = {
    "share": "shares",
    "like": "likes",
    "comment": "comments",
    "reach": "reach",
}


def to_fraction(percent: float) -> float:
    """0-100 percentage to a 0-1 fraction, for renderers that want one."""
    return percent / 100.0


def to_time_series(buckets: Iterable[Bucket]) -> list[dict[str, Any]]:
    return [{"date": b.key, "amount": b.amount, "supporters": b.count} for b in buckets]


def to_category_slices(
    buckets: Iterable[Bucket],
    value: Literal["count", "amount"] = "count",
) -> list[dict[str, Any]]:
    """Pie slices; colors cycle through the palette in bucket order."""
    return [
        {
            "name": b.key,
            "value": b.count if value == "count" else b.amount,
            "color": CHART_COLORS[i % len(CHART_COLORS)],
        }
        for i, b in enumerate(buckets)
    ]


def to_top_countries(buckets: Iterable[Bucket]) -> list[dict[str, Any]]:
    return [{"name": b.key, "count": b.count, "amount": b.amount} for b in buckets]


def to_social_platforms(by_metric: Mapping[str, Iterable[Bucket]]) -> list[dict[str, Any]]:
    """
    One row per platform from per-metric platform buckets, widest reach
    first. A platform missing a metric shows ``0.0`` for it.
    """
    rows: dict[str, dict[str, Any]] = {}
    for metric, field in SOCIAL_METRIC_FIELDS.items():
        for b in by_metric.get(metric, ()):
            row = rows.setdefault(
                b.key, {"platform": b.key, **{name: 0.0 for name in SOCIAL_METRIC_FIELDS.values()}}
            )
            row[field] = b.amount
    return sorted(rows.values(), key=lambda row: -row["reach"])


def to_engagement_counts(buckets: Iterable[Bucket]) -> list[dict[str, Any]]:
    return [{"actionType": b.key, "count": b.count} for b in buckets]


def to_forecast_rows(series: Iterable[ForecastPoint]) -> list[dict[str, Any]]:
    return [
        {
            "day": f"Day {p.day}",
            "projected": p.projected,
            "optimistic": p.optimistic,
            "pessimistic": p.pessimistic,
            "goal": p.goal,
        }
        for p in series
    ]


def to_metric_cards(
    metrics: Mapping[str, float],
    performance_score: float | None = None,
) -> dict[str, Any]:
    """
    Rename derived metrics to renderer field names.

    Unknown metric names are dropped. When *performance_score* is given the
    card also carries ``performanceScore`` and its ``scoreBand``.
    """
    cards: dict[str, Any] = {
        field: metrics[name] for name, field in METRIC_FIELDS.items() if name in metrics
    }
    if performance_score is not None:
        cards["performanceScore"] = performance_score
        cards["scoreBand"] = score_band(performance_score)
    return cards
