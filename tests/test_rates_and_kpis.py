"""
tests/test_rates_and_kpis.py

Pytest unit tests for rate primitives and CampaignKPIFormula.

All percentages are on the 0-100 scale.
"""

from __future__ import annotations

import math

import pytest

from kpi.campaign import CampaignKPIFormula
from kpi.rates import clamp_percent, compute_rate, safe_divide


class TestRates:
    def test_zero_views_gives_zero_rate(self) -> None:
        assert compute_rate(5, 0) == 0

    def test_simple_rate(self) -> None:
        assert compute_rate(1, 4) == pytest.approx(25.0)

    def test_rate_is_capped_at_one_hundred(self) -> None:
        assert compute_rate(150, 100) == 100.0

    def test_negative_rate_is_floored(self) -> None:
        assert compute_rate(-5, 10) == 0.0

    def test_safe_divide_non_finite(self) -> None:
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(float("inf"), 1) == 0.0
        assert safe_divide(float("nan"), 1) == 0.0

    @pytest.mark.parametrize("value, expected", [(-1.0, 0.0), (50.0, 50.0), (101.0, 100.0), (float("nan"), 0.0)])
    def test_clamp_percent(self, value: float, expected: float) -> None:
        assert clamp_percent(value) == expected


@pytest.fixture()
def formula() -> CampaignKPIFormula:
    return CampaignKPIFormula()


class TestCampaignKPIs:
    def test_normal_campaign(self, formula: CampaignKPIFormula) -> None:
        result = formula.calculate(
            {
                "total_views": 1000,
                "total_donations": 50,
                "donation_amount": 25000.0,
                "bounce_rate": 35.0,
                "goal_amount": 100000.0,
                "anonymous_donations": 5,
                "total_days": 30,
                "days_remaining": 10,
            }
        )
        assert result["conversion_rate"] == pytest.approx(5.0)
        assert result["bounce_rate"] == pytest.approx(35.0)
        assert result["average_donation"] == pytest.approx(500.0)
        assert result["goal_progress"] == pytest.approx(25.0)
        assert result["anonymous_share"] == pytest.approx(10.0)
        assert result["time_progress"] == pytest.approx(200.0 / 3.0)
        assert result["daily_average"] == pytest.approx(1250.0)
        assert result["projected_total"] == pytest.approx(37500.0)
        assert result["remaining_amount"] == pytest.approx(75000.0)
        assert result["daily_needed"] == pytest.approx(7500.0)
        assert result["pace_index"] == pytest.approx(0.375)

    def test_empty_inputs_are_all_zero(self, formula: CampaignKPIFormula) -> None:
        assert formula.calculate({}) == formula.empty()

    def test_result_keys_match_declared_metrics(self, formula: CampaignKPIFormula) -> None:
        assert tuple(formula.calculate({"total_views": 10})) == CampaignKPIFormula.METRICS

    def test_every_value_is_finite(self, formula: CampaignKPIFormula) -> None:
        result = formula.calculate({"total_views": 0, "total_donations": 3, "donation_amount": 10})
        assert all(math.isfinite(value) for value in result.values())

    def test_goal_exceeded(self, formula: CampaignKPIFormula) -> None:
        result = formula.calculate({"donation_amount": 150.0, "goal_amount": 100.0, "total_days": 10})
        assert result["goal_progress"] == 100.0
        assert result["remaining_amount"] == 0.0
        assert result["daily_needed"] == 0.0

    def test_days_remaining_is_bounded_by_total_days(self, formula: CampaignKPIFormula) -> None:
        result = formula.calculate({"total_days": 10, "days_remaining": 50})
        assert result["time_progress"] == 0.0

    def test_bounce_rate_is_clamped(self, formula: CampaignKPIFormula) -> None:
        assert formula.calculate({"bounce_rate": 150})["bounce_rate"] == 100.0

    def test_is_stateless(self, formula: CampaignKPIFormula) -> None:
        inputs = {"total_views": 200, "total_donations": 4}
        assert formula.calculate(inputs) == formula.calculate(inputs)
