"""
kpi/base.py

Shared contract for derived-metric formulas.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BaseKPIFormula(ABC):
    """
    A formula maps pre-aggregated scalars to a flat set of named metrics.

    ``METRICS`` lists every key :meth:`calculate` returns, in display order.
    Formulas are pure: a zero denominator or an empty dataset produces
    ``0.0`` for the affected metrics and never an exception.
    """

    METRICS: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, float]:
        """Return one finite value per name in ``METRICS``."""

    def empty(self) -> dict[str, float]:
        """The all-zero result for a campaign with no data."""
        return {name: 0.0 for name in self.METRICS}
