"""
kpi/campaign.py

Campaign KPI formula implementation.

Expected inputs
---------------
total_views : int
    Page views of the campaign in the period.
total_donations : int
    Number of donations received.
donation_amount : float
    Total amount raised so far.
bounce_rate : float
    Bounce rate as reported by the backend, 0-100.
goal_amount : float
    Fundraising target.
anonymous_donations : int
    Number of donations made anonymously.
total_days : int
    Campaign length in days.
days_remaining : int
    Days left until the campaign closes.

Formulas
--------
Conversion Rate  = total_donations / total_views            (0-100)
Average Donation = donation_amount / total_donations
Goal Progress    = donation_amount / goal_amount            (0-100)
Anonymous Share  = anonymous_donations / total_donations    (0-100)
Time Progress    = (total_days - days_remaining) / total_days (0-100)
Daily Average    = donation_amount / max(elapsed_days, 1)
Projected Total  = daily_average * total_days
Remaining Amount = max(goal_amount - donation_amount, 0)
Daily Needed     = remaining_amount / max(days_remaining, 1)
Pace Index       = goal_progress / time_progress            (1.0 = on pace)

Missing keys default to zero. Division-by-zero cases return 0.0.
"""

from __future__ import annotations

from typing import Any

from kpi.base import BaseKPIFormula
from kpi.rates import clamp_percent, compute_rate, safe_divide


class CampaignKPIFormula(BaseKPIFormula):
    """
    Deterministic campaign dashboard KPIs with safe division-by-zero handling.

    All arithmetic is self-contained.  No I/O, no logging, no side effects.
    """

    METRICS = (
        "conversion_rate",
        "bounce_rate",
        "average_donation",
        "goal_progress",
        "anonymous_share",
        "time_progress",
        "daily_average",
        "projected_total",
        "remaining_amount",
        "daily_needed",
        "pace_index",
    )

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float]:
        total_views = max(0.0, float(inputs.get("total_views", 0) or 0))
        total_donations = max(0.0, float(inputs.get("total_donations", 0) or 0))
        donation_amount = max(0.0, float(inputs.get("donation_amount", 0.0) or 0.0))
        bounce_rate = float(inputs.get("bounce_rate", 0.0) or 0.0)
        goal_amount = max(0.0, float(inputs.get("goal_amount", 0.0) or 0.0))
        anonymous_donations = max(0.0, float(inputs.get("anonymous_donations", 0) or 0))
        total_days = max(0, int(inputs.get("total_days", 0) or 0))
        days_remaining = min(total_days, max(0, int(inputs.get("days_remaining", 0) or 0)))

        goal_progress = compute_rate(donation_amount, goal_amount)
        time_progress = compute_rate(total_days - days_remaining, total_days)
        daily_average = _daily_average(donation_amount, total_days, days_remaining)
        remaining_amount = _remaining_amount(goal_amount, donation_amount)

        return {
            "conversion_rate": compute_rate(total_donations, total_views),
            "bounce_rate": clamp_percent(bounce_rate),
            "average_donation": safe_divide(donation_amount, total_donations),
            "goal_progress": goal_progress,
            "anonymous_share": compute_rate(anonymous_donations, total_donations),
            "time_progress": time_progress,
            "daily_average": daily_average,
            "projected_total": daily_average * total_days,
            "remaining_amount": remaining_amount,
            "daily_needed": remaining_amount / max(days_remaining, 1),
            "pace_index": safe_divide(goal_progress, time_progress),
        }


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _daily_average(donation_amount: float, total_days: int, days_remaining: int) -> float:
    """Amount raised per elapsed day; at least one day is assumed elapsed."""
    elapsed_days = max(total_days - days_remaining, 1)
    return donation_amount / elapsed_days


def _remaining_amount(goal_amount: float, donation_amount: float) -> float:
    """Amount still needed to reach the goal, never negative."""
    return max(goal_amount - donation_amount, 0.0)
