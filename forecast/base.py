"""
forecast/base.py

Shared contract for daily-rate models fitted on a campaign's history.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BaseForecastModel(ABC):
    """
    Fits a gap-free series of daily amounts (oldest first, missing days as
    ``0.0``) and describes it as a plain dictionary.

    Every result carries ``model`` and ``daily_rate``; ``daily_rate`` is
    ``None`` when the series is shorter than ``MIN_POINTS`` and an ``error``
    key explains why. Models are pure and never log.
    """

    MODEL_NAME: ClassVar[str] = "base"
    MIN_POINTS: ClassVar[int] = 1

    @abstractmethod
    def forecast(self, values: list[float]) -> dict[str, Any]:
        """Fit *values* and return the model description."""

    def _too_short(self, values: list[float], keys: tuple[str, ...]) -> dict[str, Any]:
        result: dict[str, Any] = {"model": self.MODEL_NAME, "daily_rate": None}
        result.update({key: None for key in keys})
        result["error"] = f"Need at least {self.MIN_POINTS} days of history, got {len(values)}."
        return result
