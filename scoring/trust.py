"""
scoring/trust.py

Trust score model implementing BaseScoreModel, plus the trust-level ladder
used to explain a score to its owner.

Score = BASE_SCORE
        + Σ points of each approved verification type
        + CONSISTENCY_BONUS   when >= 3 verifications are approved
        + COMMITMENT_BONUS    when >= 5 verifications are approved
clamped to [0, 100].
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from scoring.base import BaseScoreModel
from scoring.normalizer import ScoreNormalizer

BASE_SCORE: float = 50.0

VERIFICATION_POINTS: dict[str, float] = {
    "email": 5.0,
    "phone": 10.0,
    "government_id": 25.0,
    "organization": 15.0,
    "expert": 15.0,
    "community_leader": 20.0,
    "background_check": 30.0,
}

CONSISTENCY_THRESHOLD: int = 3
CONSISTENCY_BONUS: float = 10.0
COMMITMENT_THRESHOLD: int = 5
COMMITMENT_BONUS: float = 15.0

_RECOMMENDATION_ORDER: tuple[tuple[str, str], ...] = (
    ("email", "Email verification - Quick and essential"),
    ("phone", "Phone verification - Adds security"),
    ("government_id", "Government ID - High trust boost"),
    ("organization", "Organization verification - Professional credibility"),
)


@dataclass(frozen=True)
class TrustLevel:
    level: str
    name: str
    min_score: float
    max_score: float


@dataclass(frozen=True)
class TrustMilestone:
    next_level: str
    points_needed: float
    suggestions: list[str]


TRUST_LEVELS: tuple[TrustLevel, ...] = (
    TrustLevel("new_user", "New User", 0, 29),
    TrustLevel("verified_helper", "Verified Helper", 30, 59),
    TrustLevel("trusted_helper", "Trusted Helper", 60, 79),
    TrustLevel("community_leader", "Community Leader", 80, 94),
    TrustLevel("impact_champion", "Impact Champion", 95, 100),
)


def compute_trust_score(
    verified_count: int,
    total_possible: int,
    bonuses: Iterable[float],
) -> float:
    """Trust score from a verification count and per-verification bonuses.

    *verified_count* is bounded by *total_possible*; negative bonuses are
    ignored. The result is always within [0, 100].
    """
    n = ScoreNormalizer()
    counted = max(0, min(verified_count, max(total_possible, 0)))

    score = BASE_SCORE + sum(max(0.0, float(b)) for b in bonuses)
    if counted >= CONSISTENCY_THRESHOLD:
        score += CONSISTENCY_BONUS
    if counted >= COMMITMENT_THRESHOLD:
        score += COMMITMENT_BONUS
    return n.clamp(score, BaseScoreModel.SCORE_MIN, BaseScoreModel.SCORE_MAX)


class TrustScoreModel(BaseScoreModel):
    """Trust score computed from a user's approved verification types.

    Unknown verification types contribute no points but still count
    towards the consistency and commitment bonuses. Duplicate types are
    counted once.
    """

    def compute(self, inputs: dict) -> float:
        """Compute a trust score.

        Args:
            inputs: Dictionary with key ``approved_verifications``, an
                iterable of verification type names.

        Returns:
            A float in [0.0, 100.0].
        """
        approved = _unique(inputs.get("approved_verifications") or ())
        return compute_trust_score(
            verified_count=len(approved),
            total_possible=len(approved),
            bonuses=[VERIFICATION_POINTS.get(v, 0.0) for v in approved],
        )


def get_trust_level(score: float) -> TrustLevel:
    """Return the level whose range contains *score*; out-of-range scores map to the nearest end."""
    for level in reversed(TRUST_LEVELS):
        if score >= level.min_score:
            return level
    return TRUST_LEVELS[0]


def get_next_milestone(score: float) -> TrustMilestone | None:
    """Points needed for the next level, or None at the top level."""
    current = get_trust_level(score)
    index = TRUST_LEVELS.index(current)
    if index == len(TRUST_LEVELS) - 1:
        return None

    target = TRUST_LEVELS[index + 1]
    points_needed = target.min_score - score
    return TrustMilestone(
        next_level=target.level,
        points_needed=points_needed,
        suggestions=_suggestions(points_needed),
    )


def recommend_verifications(approved: Iterable[str], limit: int = 4) -> list[str]:
    """Suggest verifications not yet completed, most accessible first."""
    completed = set(approved)
    return [
        f"{label} (+{VERIFICATION_POINTS[kind]:.0f} points)"
        for kind, label in _RECOMMENDATION_ORDER
        if kind not in completed
    ][:limit]


def _suggestions(gap: float) -> list[str]:
    if gap <= 10:
        kinds = ("email",)
    elif gap <= 20:
        kinds = ("phone", "email")
    else:
        kinds = ("background_check", "government_id", "community_leader")
    return [f"Complete {k.replace('_', ' ')} verification (+{VERIFICATION_POINTS[k]:.0f} points)" for k in kinds][:3]


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)
