"""
tests/test_presentation.py

Pytest unit tests for the presentation adapter field contract.
"""

from __future__ import annotations

import pytest

from aggregation.bucketing import Bucket
from forecast.projection import ForecastPoint
from presentation.adapter import (
    CHART_COLORS,
    to_category_slices,
    to_engagement_counts,
    to_forecast_rows,
    to_fraction,
    to_metric_cards,
    to_social_platforms,
    to_time_series,
    to_top_countries,
)


@pytest.fixture()
def buckets() -> list[Bucket]:
    return [Bucket("2024-01-01", 2, 150.0), Bucket("2024-01-02", 1, 25.0)]


class TestSeries:
    def test_time_series_fields(self, buckets: list[Bucket]) -> None:
        assert to_time_series(buckets) == [
            {"date": "2024-01-01", "amount": 150.0, "supporters": 2},
            {"date": "2024-01-02", "amount": 25.0, "supporters": 1},
        ]

    def test_top_countries_fields(self) -> None:
        assert to_top_countries([Bucket("Kenya", 3, 90.0)]) == [{"name": "Kenya", "count": 3, "amount": 90.0}]

    def test_social_platforms_merge_metrics(self) -> None:
        rows = to_social_platforms(
            {
                "share": [Bucket("twitter", 1, 5.0)],
                "reach": [Bucket("facebook", 2, 800.0), Bucket("twitter", 1, 1200.0)],
                "impressions": [Bucket("facebook", 1, 99.0)],
            }
        )
        assert rows == [
            {"platform": "twitter", "shares": 5.0, "likes": 0.0, "comments": 0.0, "reach": 1200.0},
            {"platform": "facebook", "shares": 0.0, "likes": 0.0, "comments": 0.0, "reach": 800.0},
        ]

    def test_engagement_counts(self) -> None:
        assert to_engagement_counts([Bucket("view", 4, 0.0)]) == [{"actionType": "view", "count": 4}]

    def test_forecast_rows(self) -> None:
        rows = to_forecast_rows([ForecastPoint(day=1, projected=10.0, optimistic=12.0, pessimistic=8.0, goal=100.0)])
        assert rows == [{"day": "Day 1", "projected": 10.0, "optimistic": 12.0, "pessimistic": 8.0, "goal": 100.0}]

    def test_empty_inputs(self) -> None:
        assert to_time_series([]) == []
        assert to_category_slices([]) == []
        assert to_forecast_rows([]) == []


class TestCategorySlices:
    def test_count_is_the_default_value(self, buckets: list[Bucket]) -> None:
        assert [s["value"] for s in to_category_slices(buckets)] == [2, 1]

    def test_amount_value(self, buckets: list[Bucket]) -> None:
        assert [s["value"] for s in to_category_slices(buckets, value="amount")] == [150.0, 25.0]

    def test_colors_cycle_through_palette(self) -> None:
        slices = to_category_slices([Bucket(f"k{i}", 1, 1.0) for i in range(len(CHART_COLORS) + 1)])
        assert [s["color"] for s in slices[: len(CHART_COLORS)]] == list(CHART_COLORS)
        assert slices[-1]["color"] == CHART_COLORS[0]


class TestMetricCards:
    def test_fields_are_renamed_and_unknown_dropped(self) -> None:
        cards = to_metric_cards({"conversion_rate": 5.0, "bounce_rate": 35.0, "mystery": 1.0})
        assert cards == {"conversionRate": 5.0, "bounceRate": 35.0}

    def test_performance_score_adds_band(self) -> None:
        cards = to_metric_cards({"goal_progress": 25.0}, performance_score=82.5)
        assert cards["performanceScore"] == 82.5
        assert cards["scoreBand"] == "excellent"

    def test_mid_score_is_fair(self) -> None:
        assert to_metric_cards({}, performance_score=50.0)["scoreBand"] == "fair"

    def test_to_fraction(self) -> None:
        assert to_fraction(25.0) == pytest.approx(0.25)
