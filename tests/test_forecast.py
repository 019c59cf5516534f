"""
tests/test_forecast.py

Pytest unit tests for the goal projection, daily rate estimation, the
regression model and the trend classifier.
"""

from __future__ import annotations

import pytest

from aggregation.bucketing import Bucket
from app.config import PipelineSettings
from forecast.classifier import TrendClassifier
from forecast.projection import ForecastPoint, estimate_daily_rate, forecast
from forecast.regression import LinearRegressionForecast


@pytest.fixture()
def settings() -> PipelineSettings:
    return PipelineSettings()


def _daily(*amounts: float) -> list[Bucket]:
    return [Bucket(key=f"2024-01-{i + 1:02d}", count=1, amount=a) for i, a in enumerate(amounts)]


# ---------------------------------------------------------------------------
# forecast
# ---------------------------------------------------------------------------


class TestForecast:
    def test_zero_days_remaining_is_empty(self, settings: PipelineSettings) -> None:
        assert forecast(0, 1500, 0, 100000, settings=settings) == []

    def test_negative_days_remaining_is_empty(self, settings: PipelineSettings) -> None:
        assert forecast(1000, 1500, -3, 100000, settings=settings) == []

    def test_length_and_day_numbering(self, settings: PipelineSettings) -> None:
        series = forecast(10000, 1500, 5, 100000, settings=settings)
        assert [p.day for p in series] == [1, 2, 3, 4, 5]

    def test_first_point(self, settings: PipelineSettings) -> None:
        [first, *_] = forecast(10000, 1500, 5, 100000, settings=settings)
        assert first.projected == pytest.approx(11500.0)
        assert first.optimistic == pytest.approx(13800.0)
        assert first.pessimistic == pytest.approx(9200.0)
        assert first.goal == 100000.0

    def test_values_are_capped_near_goal(self, settings: PipelineSettings) -> None:
        series = forecast(95000, 2000, 5, 100000, settings=settings)
        last = series[-1]
        assert isinstance(last, ForecastPoint)
        assert last.day == 5
        assert last.projected == 100000.0
        assert last.optimistic == pytest.approx(110000.0)
        assert last.pessimistic == pytest.approx(80000.0)

    @pytest.mark.parametrize(
        "current, rate, days, goal",
        [
            (0, 1500, 30, 100000),
            (50000, 500, 60, 60000),
            (120000, 1000, 10, 100000),
            (0, 0, 5, 0),
            (10, 3.5, 7, 25),
        ],
    )
    def test_band_ordering_and_goal_cap(self, settings: PipelineSettings, current, rate, days, goal) -> None:
        series = forecast(current, rate, days, goal, settings=settings)
        assert len(series) == days
        for point in series:
            assert point.pessimistic <= point.projected <= point.optimistic
            assert point.projected <= point.goal
            assert point.optimistic <= point.goal * settings.optimistic_goal_ceiling

    def test_none_rate_uses_configured_fallback(self) -> None:
        custom = PipelineSettings(default_daily_rate=100.0)
        assert [p.projected for p in forecast(0, None, 2, 1000, settings=custom)] == [100.0, 200.0]

    def test_negative_inputs_are_treated_as_zero(self, settings: PipelineSettings) -> None:
        [point] = forecast(-500, -10, 1, 1000, settings=settings)
        assert point.projected == 0.0

    def test_custom_multipliers(self) -> None:
        custom = PipelineSettings(optimistic_multiplier=1.5, pessimistic_multiplier=0.5, optimistic_goal_ceiling=2.0)
        [point] = forecast(100, 0, 1, 1000, settings=custom)
        assert (point.optimistic, point.pessimistic) == (150.0, 50.0)


# ---------------------------------------------------------------------------
# estimate_daily_rate
# ---------------------------------------------------------------------------


class TestEstimateDailyRate:
    def test_no_history_falls_back(self, settings: PipelineSettings) -> None:
        estimate = estimate_daily_rate([], settings=settings)
        assert estimate.daily_rate == 1500.0
        assert estimate.source == "fallback"
        assert estimate.trend == "stable"

    def test_single_day_falls_back(self, settings: PipelineSettings) -> None:
        assert estimate_daily_rate(_daily(400.0), settings=settings).source == "fallback"

    def test_flat_history(self, settings: PipelineSettings) -> None:
        estimate = estimate_daily_rate(_daily(100, 100, 100, 100), settings=settings)
        assert estimate.source == "history"
        assert estimate.daily_rate == pytest.approx(100.0)
        assert estimate.slope == pytest.approx(0.0)
        assert estimate.trend == "stable"

    def test_rising_history(self, settings: PipelineSettings) -> None:
        estimate = estimate_daily_rate(_daily(100, 200, 300, 400), settings=settings)
        assert estimate.daily_rate == pytest.approx(250.0)
        assert estimate.trend == "strong_uptrend"


# ---------------------------------------------------------------------------
# LinearRegressionForecast / TrendClassifier
# ---------------------------------------------------------------------------


class TestLinearRegressionForecast:
    def test_perfect_line(self) -> None:
        result = LinearRegressionForecast().forecast([1.0, 2.0, 3.0])
        assert result["model"] == "linear_regression"
        assert result["slope"] == pytest.approx(1.0)
        assert result["intercept"] == pytest.approx(1.0)
        assert result["mean"] == pytest.approx(2.0)
        assert result["daily_rate"] == pytest.approx(2.0)
        assert result["next_day"] == pytest.approx(4.0)

    def test_next_day_is_floored_at_zero(self) -> None:
        result = LinearRegressionForecast().forecast([300.0, 100.0, 0.0])
        assert result["next_day"] == 0.0

    def test_insufficient_data(self) -> None:
        result = LinearRegressionForecast().forecast([5.0])
        assert result["daily_rate"] is None
        assert result["slope"] is None
        assert "error" in result


class TestTrendClassifier:
    @pytest.mark.parametrize(
        "slope, average, label",
        [
            (None, 10.0, "stable"),
            (1.0, None, "stable"),
            (1.0, 100.0, "stable"),
            (2.0, 100.0, "uptrend"),
            (10.0, 100.0, "strong_uptrend"),
            (-2.0, 100.0, "downtrend"),
            (-10.0, 100.0, "strong_downtrend"),
            (0.5, 0.0, "strong_uptrend"),
        ],
    )
    def test_classify(self, slope, average, label: str) -> None:
        assert TrendClassifier().classify(slope, average) == label
