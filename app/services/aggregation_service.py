"""
app/services/aggregation_service.py

Dashboard aggregation layer.

Runs the full pipeline for one dashboard view:

    raw records -> normalize -> bucket -> derived metrics / scores
                -> (goal projection) -> presentation payload

Every call re-runs the pipeline from raw input; nothing is cached or
updated incrementally. Services hold only immutable settings, so one
instance can serve any number of concurrent dashboards.

Data access is delegated to a :class:`app.connectors.base.RecordSource`.
A failed fetch raises before any aggregation happens.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from aggregation.bucketing import (
    Bucket,
    BucketOrder,
    bucket,
    by_category,
    by_country,
    by_day,
    by_device,
    by_source,
    fill_daily_gaps,
    top_n,
)
from aggregation.normalizer import RawInput, normalize
from aggregation.windows import filter_records
from app.config import PipelineSettings, get_pipeline_settings
from app.connectors.base import RecordSource
from app.logging_utils import log_event
from forecast.projection import DailyRateEstimate, ForecastPoint, estimate_daily_rate, forecast
from kpi.campaign import CampaignKPIFormula
from kpi.rates import compute_rate
from presentation import adapter
from scoring.performance import PerformanceScoreModel, performance_components

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CampaignDashboard:
    """
    Everything the campaign analytics view renders, before reshaping.
    """

    daily: list[Bucket]
    donation_types: list[Bucket]
    devices: list[Bucket]
    sources: list[Bucket]
    top_countries: list[Bucket]
    metrics: dict[str, float]
    performance_score: float
    daily_rate: DailyRateEstimate
    forecast: list[ForecastPoint] = field(default_factory=list)
    social_by_metric: dict[str, list[Bucket]] = field(default_factory=dict)
    engagement: list[Bucket] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "donationsOverTime": adapter.to_time_series(self.daily),
            "donationTypes": adapter.to_category_slices(self.donation_types),
            "deviceTypes": adapter.to_category_slices(self.devices),
            "trafficSources": adapter.to_category_slices(self.sources, value="amount"),
            "topCountries": adapter.to_top_countries(self.top_countries),
            "socialMetrics": adapter.to_social_platforms(self.social_by_metric),
            "engagement": adapter.to_engagement_counts(self.engagement),
            "metrics": adapter.to_metric_cards(self.metrics, self.performance_score),
            "trend": self.daily_rate.trend,
            "forecast": adapter.to_forecast_rows(self.forecast),
        }


@dataclass(frozen=True)
class ImpactSummary:
    """
    A user's impact activity, aggregated for the impact dashboard.
    """

    points_over_time: list[Bucket]
    points_by_activity: list[Bucket]
    total_points: float
    activity_count: int
    verified_share: float

    def to_payload(self) -> dict[str, Any]:
        return {
            "pointsOverTime": adapter.to_time_series(self.points_over_time),
            "activityTypes": adapter.to_category_slices(self.points_by_activity, value="amount"),
            "totalPoints": self.total_points,
            "activityCount": self.activity_count,
            "verifiedShare": self.verified_share,
        }


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class CampaignAnalyticsService:
    """
    Builds the campaign analytics dashboard from donation, social metric
    and engagement records.

    Parameters
    ----------
    settings:
        Pipeline constants; defaults to the environment-driven settings.
    performance_model:
        Score model to use; defaults to the standard 40/25/20/15 weighting.
    """

    def __init__(
        self,
        *,
        settings: PipelineSettings | None = None,
        performance_model: PerformanceScoreModel | None = None,
    ) -> None:
        self._settings = settings or get_pipeline_settings()
        self._performance_model = performance_model or PerformanceScoreModel()
        self._kpis = CampaignKPIFormula()

    def load_dashboard(
        self,
        source: RecordSource,
        campaign_id: str,
        *,
        goal_amount: float,
        total_days: int,
        days_remaining: int,
        date_from: date | None = None,
        date_to: date | None = None,
        social_reach: float | None = None,
    ) -> CampaignDashboard:
        """
        Fetch the campaign's records from *source* and build its dashboard.
        """
        analytics = source.fetch_campaign_analytics(campaign_id)
        fetched = source.fetch_donations(campaign_id)
        social = source.fetch_social_metrics(campaign_id)
        engagement = source.fetch_engagement(campaign_id)
        return self.build_dashboard(
            fetched.records,
            analytics=analytics,
            social_metrics=social.records,
            engagement=engagement.records,
            goal_amount=goal_amount,
            total_days=total_days,
            days_remaining=days_remaining,
            date_from=date_from,
            date_to=date_to,
            social_reach=social_reach,
        )

    def build_dashboard(
        self,
        donations: Iterable[RawInput],
        *,
        analytics: Mapping[str, Any] | None = None,
        social_metrics: Iterable[RawInput] = (),
        engagement: Iterable[RawInput] = (),
        goal_amount: float,
        total_days: int,
        days_remaining: int,
        date_from: date | None = None,
        date_to: date | None = None,
        social_reach: float | None = None,
    ) -> CampaignDashboard:
        """
        Aggregate *donations* into a :class:`CampaignDashboard`.

        Totals, KPIs, the score and the projection use every donation.
        The window (*date_from*, *date_to*) narrows the chart series only.
        ``analytics`` is the campaign's latest analytics row, if any.

        *social_metrics* rows are summed per platform and metric type; the
        summed ``reach`` feeds the score unless *social_reach* overrides it.
        *engagement* rows are counted per action type.
        """
        analytics = analytics or {}
        records = [r for r in normalize(donations) if r.kind == "donation"]
        windowed = filter_records(records, date_from=date_from, date_to=date_to)
        social_by_metric = self.social_by_metric(social_metrics)
        actions = self.engagement_counts(engagement)

        if social_reach is None:
            social_reach = sum(b.amount for b in social_by_metric.get("reach", []))

        donation_amount = sum(r.amount for r in records)
        total_views = float(analytics.get("total_views") or 0)
        engagement_actions = float(analytics.get("social_shares") or 0) + float(
            analytics.get("comment_count") or 0
        )

        metrics = self._kpis.calculate(
            {
                "total_views": total_views,
                "total_donations": len(records),
                "donation_amount": donation_amount,
                "bounce_rate": analytics.get("bounce_rate") or 0.0,
                "goal_amount": goal_amount,
                "anonymous_donations": sum(1 for r in records if r.is_anonymous),
                "total_days": total_days,
                "days_remaining": days_remaining,
            }
        )

        daily = bucket(windowed, by_day, BucketOrder.CHRONOLOGICAL)
        countries = top_n(records, by_country, self._settings.top_n)
        score = self._performance_model.compute(
            performance_components(
                current_amount=donation_amount,
                goal_amount=goal_amount,
                engagement_actions=engagement_actions,
                total_views=total_views,
                social_reach=social_reach,
                countries_reached=len(countries),
                settings=self._settings,
            )
        )

        rate = estimate_daily_rate(
            fill_daily_gaps(bucket(records, by_day, BucketOrder.CHRONOLOGICAL)),
            settings=self._settings,
        )
        projection = forecast(
            donation_amount,
            rate.daily_rate,
            days_remaining,
            goal_amount,
            settings=self._settings,
        )

        log_event(
            logger,
            logging.INFO,
            "campaign_dashboard_built",
            donations=len(records),
            windowed=len(windowed),
            social_reach=social_reach,
            engagement_actions=sum(b.count for b in actions),
            performance_score=score,
            rate_source=rate.source,
        )

        return CampaignDashboard(
            daily=daily,
            donation_types=bucket(windowed, by_category),
            devices=bucket(windowed, by_device),
            sources=bucket(windowed, by_source, BucketOrder.BY_AMOUNT_DESC),
            top_countries=countries,
            metrics=metrics,
            performance_score=score,
            daily_rate=rate,
            forecast=projection,
            social_by_metric=social_by_metric,
            engagement=actions,
        )

    @staticmethod
    def social_by_metric(rows: Iterable[RawInput]) -> dict[str, list[Bucket]]:
        """Per metric type, the platforms' summed values, largest first."""
        records = [r for r in normalize(rows) if r.kind == "social_metric"]
        metrics = dict.fromkeys(r.metric or "" for r in records)
        return {
            metric: bucket(
                (r for r in records if (r.metric or "") == metric),
                by_category,
                BucketOrder.BY_AMOUNT_DESC,
            )
            for metric in metrics
        }

    @staticmethod
    def engagement_counts(rows: Iterable[RawInput]) -> list[Bucket]:
        """Actions per type, most frequent first."""
        records = [r for r in normalize(rows) if r.kind == "engagement"]
        return sorted(bucket(records, by_category), key=lambda b: -b.count)


class ImpactAnalyticsService:
    """
    Builds a user's impact summary from activity records.
    """

    def load_summary(self, source: RecordSource, user_id: str) -> ImpactSummary:
        return self.build_summary(source.fetch_activities(user_id).records)

    def build_summary(self, activities: Iterable[RawInput]) -> ImpactSummary:
        records = [r for r in normalize(activities) if r.kind == "activity"]
        return ImpactSummary(
            points_over_time=bucket(records, by_day, BucketOrder.CHRONOLOGICAL),
            points_by_activity=bucket(records, by_category, BucketOrder.BY_AMOUNT_DESC),
            total_points=sum(r.amount for r in records),
            activity_count=len(records),
            verified_share=compute_rate(sum(1 for r in records if r.is_verified), len(records)),
        )
