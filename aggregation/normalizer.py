"""
aggregation/normalizer.py

Record Normalizer: raw backend records -> NormalizedRecord.

Every record leaving this module has a calendar ``day`` and a finite,
non-negative ``amount``. Records whose timestamp cannot be parsed, and
mappings that fail schema validation, are dropped and logged as
data-quality skips. Nothing here raises for data-shape reasons.

Timestamps carrying an offset are converted to UTC before the calendar day
is taken, so day keys agree across clients in different time zones.
Naive timestamps are taken as-is. The parsed instant itself rides along
as ``NormalizedRecord.timestamp`` for ordering within a day.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from app.domain.records import (
    RAW_RECORD_ADAPTER,
    RAW_RECORD_TYPES,
    DonationRecord,
    EngagementRecord,
    NormalizedRecord,
    NotificationRecord,
    RawRecordModel,
    SocialMetricRecord,
)
from app.logging_utils import log_data_quality_skip

logger = logging.getLogger(__name__)

RawInput = RawRecordModel | NormalizedRecord | Mapping[str, Any]


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse *value* into a naive UTC datetime, or return ``None`` when it
    cannot be.

    Accepts ``datetime``, ``date`` and ISO-8601 strings (date only, full
    datetime, trailing ``Z`` or explicit offsets). A bare date becomes
    midnight of that day.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_timestamp(value: Any) -> date | None:
    """Calendar day of *value* (UTC for offset-aware input), or ``None``."""
    moment = parse_datetime(value)
    return moment.date() if moment is not None else None


def coerce_amount(value: Any) -> float:
    """
    Coerce *value* to a finite float >= 0.

    Negative, non-numeric, NaN and infinite inputs become ``0.0`` so a
    malformed amount can never corrupt an aggregate.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def normalize(raw: Iterable[RawInput]) -> list[NormalizedRecord]:
    """
    Normalize *raw* records, preserving input order minus skipped entries.

    Already-normalized records pass through unchanged, which makes the
    function idempotent.
    """
    normalized: list[NormalizedRecord] = []
    skipped = 0

    for item in raw:
        if isinstance(item, NormalizedRecord):
            normalized.append(item)
            continue

        record = _validate(item)
        if record is None:
            skipped += 1
            continue

        moment = parse_datetime(record.created_at)
        if moment is None:
            log_data_quality_skip(
                logger,
                record_id=record.id,
                kind=record.kind,
                reason="unparsable_timestamp",
            )
            skipped += 1
            continue

        normalized.append(_to_normalized(record, moment))

    logger.debug("normalize kept=%d skipped=%d", len(normalized), skipped)
    return normalized


def parse_raw_records(rows: Iterable[Mapping[str, Any]], kind: str) -> list[RawRecordModel]:
    """
    Turn backend rows of one table into typed raw records tagged with *kind*.

    Rows that fail validation are skipped and logged.
    """
    records: list[RawRecordModel] = []
    for row in rows:
        record = _validate({**row, "kind": kind})
        if record is not None:
            records.append(record)
    return records


def _validate(item: Any) -> RawRecordModel | None:
    if isinstance(item, RAW_RECORD_TYPES):
        return item
    if not isinstance(item, Mapping):
        log_data_quality_skip(logger, record_id=None, kind=None, reason="not_a_record")
        return None
    try:
        return RAW_RECORD_ADAPTER.validate_python(dict(item))
    except ValidationError as exc:
        log_data_quality_skip(
            logger,
            record_id=item.get("id"),
            kind=item.get("kind"),
            reason=f"invalid_shape: {exc.error_count()} error(s)",
        )
        return None


def _to_normalized(record: RawRecordModel, moment: datetime) -> NormalizedRecord:
    common = {"id": record.id, "kind": record.kind, "day": moment.date(), "timestamp": moment}
    if isinstance(record, DonationRecord):
        return NormalizedRecord(
            **common,
            amount=coerce_amount(record.amount),
            category=record.category,
            country=record.country,
            device_type=record.device_type,
            source=record.source,
            is_anonymous=record.is_anonymous,
        )
    if isinstance(record, NotificationRecord):
        return NormalizedRecord(
            **common,
            amount=0.0,
            category=record.category,
            is_read=record.is_read,
            text=f"{record.title} {record.message}".strip(),
        )
    if isinstance(record, SocialMetricRecord):
        return NormalizedRecord(
            **common,
            amount=coerce_amount(record.amount),
            category=record.category,
            metric=record.metric_type.lower(),
        )
    if isinstance(record, EngagementRecord):
        return NormalizedRecord(**common, amount=0.0, category=record.category)
    return NormalizedRecord(
        **common,
        amount=coerce_amount(record.amount),
        category=record.category,
        is_verified=record.verified,
        text=record.description or None,
    )
