"""
aggregation/bucketing.py

Grouping/Bucketing Engine.

One reusable group-and-sum over NormalizedRecord, parameterised by a key
function and an ordering policy:

    chronological   keys parsed as ISO dates (or YYYY-MM months), ascending
    insertion       first-seen order
    by-amount-desc  amount descending; ties by count descending, then first-seen

Top-N truncation is applied only after sorting, so the highest-amount keys
are always kept regardless of where they appear in the input.

Conservation: for any key function, the bucket amounts of one call sum to
the amounts of the records passed in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from app.config import get_pipeline_settings
from app.domain.records import NormalizedRecord

logger = logging.getLogger(__name__)

KeyFn = Callable[[NormalizedRecord], str]


class BucketOrder(str, Enum):
    CHRONOLOGICAL = "chronological"
    INSERTION = "insertion"
    BY_AMOUNT_DESC = "by-amount-desc"


@dataclass(frozen=True)
class Bucket:
    """
    Aggregate accumulator for one grouping key.
    """

    key: str
    count: int = 0
    amount: float = 0.0


# ---------------------------------------------------------------------------
# Key functions
# ---------------------------------------------------------------------------


def by_day(record: NormalizedRecord) -> str:
    return record.day.isoformat()


def by_month(record: NormalizedRecord) -> str:
    return record.day.strftime("%Y-%m")


def by_category(record: NormalizedRecord) -> str:
    return record.category or "Unknown"


def by_country(record: NormalizedRecord) -> str:
    return record.country or "Unknown"


def by_device(record: NormalizedRecord) -> str:
    return record.device_type or "unknown"


def by_source(record: NormalizedRecord) -> str:
    return record.source or "direct"


def by_kind(record: NormalizedRecord) -> str:
    return record.kind


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def bucket(
    records: Iterable[NormalizedRecord],
    key_fn: KeyFn,
    order: BucketOrder | str = BucketOrder.INSERTION,
    limit: int | None = None,
) -> list[Bucket]:
    """
    Group *records* by ``key_fn(record)`` and return ordered buckets.

    Raises
    ------
    ValueError
        When *order* is not one of the supported policies.
    """
    policy = BucketOrder(order)

    totals: dict[str, list[float]] = {}
    for record in records:
        acc = totals.setdefault(key_fn(record), [0, 0.0])
        acc[0] += 1
        acc[1] += record.amount

    buckets = [Bucket(key=key, count=int(count), amount=amount) for key, (count, amount) in totals.items()]

    if policy is BucketOrder.CHRONOLOGICAL:
        buckets = _sort_chronological(buckets)
    elif policy is BucketOrder.BY_AMOUNT_DESC:
        buckets = sorted(buckets, key=lambda b: (-b.amount, -b.count))

    if limit is not None:
        buckets = buckets[: max(0, limit)]

    logger.debug("bucket order=%s keys=%d limit=%s", policy.value, len(totals), limit)
    return buckets


def top_n(
    records: Iterable[NormalizedRecord],
    key_fn: KeyFn,
    n: int | None = None,
) -> list[Bucket]:
    """
    Return the *n* highest-amount buckets (configured top-N when omitted).
    """
    limit = get_pipeline_settings().top_n if n is None else n
    return bucket(records, key_fn, BucketOrder.BY_AMOUNT_DESC, limit=limit)


def fill_daily_gaps(
    buckets: Iterable[Bucket],
    start: date | None = None,
    end: date | None = None,
) -> list[Bucket]:
    """
    Expand daily buckets into a gap-free chronological series.

    Missing days get a zero bucket. Keys that are not ISO dates are dropped;
    when *start*/*end* are given, days outside the window are dropped too.
    """
    by_date: dict[date, Bucket] = {}
    for item in buckets:
        parsed = _parse_key_date(item.key)
        if parsed is not None:
            by_date[parsed] = item

    if not by_date and (start is None or end is None):
        return []

    first = start if start is not None else min(by_date)
    last = end if end is not None else max(by_date)

    series: list[Bucket] = []
    current = first
    while current <= last:
        series.append(by_date.get(current, Bucket(key=current.isoformat())))
        current += timedelta(days=1)
    return series


def _sort_chronological(buckets: list[Bucket]) -> list[Bucket]:
    dated: list[tuple[date, Bucket]] = []
    undated: list[Bucket] = []
    for item in buckets:
        parsed = _parse_key_date(item.key)
        if parsed is None:
            undated.append(item)
        else:
            dated.append((parsed, item))
    dated.sort(key=lambda pair: pair[0])
    return [item for _, item in dated] + undated


def _parse_key_date(key: str) -> date | None:
    text = key.strip()
    if len(text) == 7:
        text = f"{text}-01"
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None
