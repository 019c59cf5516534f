"""
scoring/base.py

Common ground for the bounded 0-100 scores shown on dashboards.
"""

from abc import ABC, abstractmethod


class InvalidWeightsError(ValueError):
    """Score weights are negative, non-finite, or do not sum to 1.0."""


class BaseScoreModel(ABC):
    """Base class for composite dashboard scores.

    A model turns a dictionary of named inputs into one score. Whatever
    the inputs, the score lies in [SCORE_MIN, SCORE_MAX].
    """

    SCORE_MIN: float = 0.0
    SCORE_MAX: float = 100.0

    @abstractmethod
    def compute(self, inputs: dict) -> float:
        """Score *inputs*.

        Args:
            inputs: Model-specific named values. Missing keys count as
                contributing nothing.

        Returns:
            The score, within [SCORE_MIN, SCORE_MAX].
        """
