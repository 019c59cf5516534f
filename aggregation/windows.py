"""
aggregation/windows.py

Date-window and category filters applied before bucketing or export.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import date, timedelta

from app.domain.records import NormalizedRecord

TIME_RANGE_DAYS: dict[str, int] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
}


def resolve_time_range(code: str, today: date) -> tuple[date, date]:
    """
    Map a dashboard range code (``"7d"``, ``"30d"``, ``"90d"``, ``"1y"``) to
    an inclusive ``(start, end)`` window ending on *today*.
    """
    try:
        days = TIME_RANGE_DAYS[code]
    except KeyError:
        raise ValueError(f"Unknown time range {code!r}. Valid: {sorted(TIME_RANGE_DAYS)}") from None
    return today - timedelta(days=days - 1), today


def filter_records(
    records: Iterable[NormalizedRecord],
    *,
    date_from: date | None = None,
    date_to: date | None = None,
    categories: Collection[str] | None = None,
) -> list[NormalizedRecord]:
    """
    Keep records inside the inclusive date window whose category is allowed.

    ``categories=None`` or an empty allow-list means every category.
    """
    allowed = set(categories) if categories else None
    return [
        record
        for record in records
        if (date_from is None or record.day >= date_from)
        and (date_to is None or record.day <= date_to)
        and (allowed is None or record.category in allowed)
    ]
