"""
scoring/performance.py

Campaign Performance Score model implementing BaseScoreModel.
Computes a weighted composite of four pre-normalized components.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields

from app.config import PipelineSettings, get_pipeline_settings
from kpi.rates import compute_rate
from scoring.base import BaseScoreModel, InvalidWeightsError
from scoring.normalizer import ScoreNormalizer

_WEIGHT_TOLERANCE: float = 1e-6

BAND_EXCELLENT: str = "excellent"
BAND_GOOD: str = "good"
BAND_FAIR: str = "fair"
BAND_NEEDS_ATTENTION: str = "needs_attention"


@dataclass(frozen=True)
class PerformanceWeights:
    """Component weights of the performance score. Must sum to 1.0."""

    goal_progress: float = 0.40
    engagement: float = 0.25
    social_reach: float = 0.20
    geographic: float = 0.15

    def __post_init__(self) -> None:
        values = [getattr(self, f.name) for f in fields(self)]
        if any(not math.isfinite(v) or v < 0 for v in values):
            raise InvalidWeightsError(f"Weights must be finite and non-negative, got {values}.")
        total = sum(values)
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            raise InvalidWeightsError(f"Weights must sum to 1.0, got {total:.6f}.")

    @classmethod
    def from_mapping(cls, weights: Mapping[str, float]) -> "PerformanceWeights":
        """Build weights from a mapping; absent components weigh 0."""
        return cls(**{f.name: float(weights.get(f.name, 0.0)) for f in fields(cls)})


class PerformanceScoreModel(BaseScoreModel):
    """Weighted performance score for a fundraising campaign.

    Combines goal progress, engagement, social reach and geographic spread
    into a single score on a 0–100 scale. Each component must already be on
    the 0–100 scale; out-of-range components are clamped before weighting.

    Invalid weights are rejected when the model is built, not when it is
    used.
    """

    def __init__(self, weights: PerformanceWeights | None = None) -> None:
        """Initialize the model with its weights and a shared ScoreNormalizer."""
        self._weights = weights or PerformanceWeights()
        self._normalizer = ScoreNormalizer()

    @property
    def weights(self) -> PerformanceWeights:
        return self._weights

    def compute(self, inputs: dict) -> float:
        """Compute the performance score from pre-normalized components.

        Missing keys default to 0.0 (no contribution from that component).

        Args:
            inputs: Dictionary with any of the following optional keys,
                each in [0, 100]:
                - goal_progress (float)
                - engagement (float)
                - social_reach (float)
                - geographic (float)

        Returns:
            A float in [0.0, 100.0], rounded to one decimal place.
        """
        n = self._normalizer
        w = self._weights

        weighted_sum: float = (
            n.clamp(float(inputs.get("goal_progress") or 0.0), 0.0, 100.0) * w.goal_progress
            + n.clamp(float(inputs.get("engagement") or 0.0), 0.0, 100.0) * w.engagement
            + n.clamp(float(inputs.get("social_reach") or 0.0), 0.0, 100.0) * w.social_reach
            + n.clamp(float(inputs.get("geographic") or 0.0), 0.0, 100.0) * w.geographic
        )

        return round(n.clamp(weighted_sum, self.SCORE_MIN, self.SCORE_MAX), 1)


def compute_performance_score(
    weights: PerformanceWeights | Mapping[str, float] | None,
    values: Mapping[str, float],
) -> float:
    """Functional entry point over :class:`PerformanceScoreModel`."""
    if weights is not None and not isinstance(weights, PerformanceWeights):
        weights = PerformanceWeights.from_mapping(weights)
    return PerformanceScoreModel(weights).compute(dict(values))


def performance_components(
    *,
    current_amount: float,
    goal_amount: float,
    engagement_actions: float,
    total_views: float,
    social_reach: float,
    countries_reached: int,
    settings: PipelineSettings | None = None,
) -> dict[str, float]:
    """Derive the four 0–100 score components from campaign aggregates.

    Social reach is measured against the configured reach ceiling and
    geographic spread against the top-N country count.
    """
    settings = settings or get_pipeline_settings()
    n = ScoreNormalizer()
    return {
        "goal_progress": compute_rate(current_amount, goal_amount),
        "engagement": compute_rate(engagement_actions, total_views),
        "social_reach": n.normalize_positive(social_reach, settings.social_reach_ceiling),
        "geographic": n.normalize_positive(countries_reached, settings.top_n),
    }


def score_band(score: float) -> str:
    """Label a 0–100 score for display."""
    if score >= 80:
        return BAND_EXCELLENT
    if score >= 60:
        return BAND_GOOD
    if score >= 40:
        return BAND_FAIR
    return BAND_NEEDS_ATTENTION
