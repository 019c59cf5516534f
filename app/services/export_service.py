"""
app/services/export_service.py

Flat export of normalized records and aggregated buckets.

Rows are plain dicts with JSON-safe values so the same result can be
written as CSV (spreadsheet import) or JSON (downstream tooling). The date
window and category allow-list are explicit arguments on every call.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Collection, Iterable
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Literal

from aggregation.bucketing import Bucket
from aggregation.windows import filter_records
from app.domain.records import NormalizedRecord
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

ExportFormat = Literal["csv", "json"]
SUPPORTED_FORMATS: tuple[str, ...] = ("csv", "json")


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)

    def to_csv(self) -> str:
        """Render as CSV with a header row; ``None`` becomes an empty cell."""
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=self.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        for row in self.rows:
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
        return buf.getvalue()

    def to_json(self) -> str:
        return json.dumps(
            {"rows": len(self.rows), "fields": self.fields, "data": self.rows},
            ensure_ascii=False,
        )

    def render(self, fmt: str) -> str:
        if fmt == "csv":
            return self.to_csv()
        if fmt == "json":
            return self.to_json()
        raise ValueError(f"Unsupported export format {fmt!r}; expected one of {SUPPORTED_FORMATS}")


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ExportService:
    """
    Collects export rows and serialises them.

    ``export_*`` methods return the rendered text; ``collect_*`` methods
    return the :class:`ExportResult` for callers that stream rows
    themselves.
    """

    def export(
        self,
        items: Iterable[NormalizedRecord | Bucket],
        *,
        fmt: ExportFormat = "csv",
        date_from: date | None = None,
        date_to: date | None = None,
        categories: Collection[str] | None = None,
    ) -> str:
        """
        Export either normalized records or buckets, chosen by item type.

        Raises
        ------
        ValueError
            For an unknown format or a mix of records and buckets.
        """
        items = list(items)
        if items and all(isinstance(i, Bucket) for i in items):
            return self.export_buckets(items, fmt=fmt, date_from=date_from, date_to=date_to, categories=categories)
        if all(isinstance(i, NormalizedRecord) for i in items):
            return self.export_records(items, fmt=fmt, date_from=date_from, date_to=date_to, categories=categories)
        raise ValueError("Export dataset must be all NormalizedRecord or all Bucket items.")

    def export_records(
        self,
        records: Iterable[NormalizedRecord],
        *,
        fmt: ExportFormat = "csv",
        date_from: date | None = None,
        date_to: date | None = None,
        categories: Collection[str] | None = None,
    ) -> str:
        _check_format(fmt)
        result = self.collect_records(
            records,
            date_from=date_from,
            date_to=date_to,
            categories=categories,
        )
        log_event(logger, logging.INFO, "export_rendered", dataset="records", format=fmt, rows=len(result.rows))
        return result.render(fmt)

    def export_buckets(
        self,
        buckets: Iterable[Bucket],
        *,
        fmt: ExportFormat = "csv",
        date_from: date | None = None,
        date_to: date | None = None,
        categories: Collection[str] | None = None,
    ) -> str:
        _check_format(fmt)
        result = self.collect_buckets(
            buckets,
            date_from=date_from,
            date_to=date_to,
            categories=categories,
        )
        log_event(logger, logging.INFO, "export_rendered", dataset="buckets", format=fmt, rows=len(result.rows))
        return result.render(fmt)

    def collect_records(
        self,
        records: Iterable[NormalizedRecord],
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        categories: Collection[str] | None = None,
    ) -> ExportResult:
        selected = filter_records(records, date_from=date_from, date_to=date_to, categories=categories)
        rows = [_flatten_record(r) for r in selected]
        return ExportResult(rows=rows, fields=_collect_fields(rows))

    def collect_buckets(
        self,
        buckets: Iterable[Bucket],
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        categories: Collection[str] | None = None,
    ) -> ExportResult:
        """
        Bucket rows, filtered on the bucket key.

        The window applies to buckets whose key is an ISO date; other keys
        are never excluded by it. The allow-list matches keys exactly.
        """
        allowed = set(categories) if categories else None
        rows: list[dict[str, Any]] = []
        for b in buckets:
            if allowed is not None and b.key not in allowed:
                continue
            day = _key_as_date(b.key)
            if day is not None:
                if date_from is not None and day < date_from:
                    continue
                if date_to is not None and day > date_to:
                    continue
            rows.append({"key": b.key, "count": b.count, "amount": b.amount})
        return ExportResult(rows=rows, fields=["key", "count", "amount"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_format(fmt: str) -> None:
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported export format {fmt!r}; expected one of {SUPPORTED_FORMATS}")


def _flatten_record(record: NormalizedRecord) -> dict[str, Any]:
    row = asdict(record)
    row["day"] = record.day.isoformat()
    row["timestamp"] = record.timestamp.isoformat() if record.timestamp else None
    return row


def _collect_fields(rows: list[dict[str, Any]]) -> list[str]:
    """Union of row keys in first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def _key_as_date(key: str) -> date | None:
    try:
        return date.fromisoformat(key)
    except ValueError:
        return None
