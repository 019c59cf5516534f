"""
app/services/notification_service.py

Notification center aggregation.

Filtering, sorting and grouping of notifications for the notification
panel. Every filter is an explicit argument; the service holds no panel
state between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal

from aggregation.bucketing import Bucket, BucketOrder, bucket, by_category, by_day
from aggregation.normalizer import RawInput, normalize
from aggregation.windows import filter_records
from app.connectors.base import RecordSource
from app.domain.records import NormalizedRecord

logger = logging.getLogger(__name__)

ReadStatus = Literal["all", "read", "unread"]


@dataclass(frozen=True)
class NotificationFilter:
    """
    Advanced notification filters; the defaults match everything.
    """

    date_from: date | None = None
    date_to: date | None = None
    categories: Collection[str] = field(default_factory=tuple)
    read_status: ReadStatus = "all"
    keywords: Collection[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class NotificationPanel:
    notifications: list[NormalizedRecord]
    unread_total: int
    unread_by_category: list[Bucket]
    by_day: list[Bucket]

    def to_payload(self) -> dict[str, Any]:
        return {
            "notifications": [
                {
                    "id": n.id,
                    "type": n.category,
                    "date": n.day.isoformat(),
                    "isRead": bool(n.is_read),
                    "text": n.text or "",
                }
                for n in self.notifications
            ],
            "unreadCount": self.unread_total,
            "unreadByType": {b.key: b.count for b in self.unread_by_category},
            "groups": [{"date": b.key, "count": b.count} for b in self.by_day],
        }


class NotificationCenterService:
    """
    Builds the notification panel from notification records.
    """

    def load_panel(
        self,
        source: RecordSource,
        user_id: str,
        criteria: NotificationFilter | None = None,
    ) -> NotificationPanel:
        return self.build_panel(source.fetch_notifications(user_id).records, criteria)

    def build_panel(
        self,
        notifications: Iterable[RawInput],
        criteria: NotificationFilter | None = None,
    ) -> NotificationPanel:
        records = [r for r in normalize(notifications) if r.kind == "notification"]
        visible = self.sort_newest_first(self.filter(records, criteria or NotificationFilter()))
        unread = [r for r in records if not r.is_read]

        logger.debug("notification panel total=%d visible=%d unread=%d", len(records), len(visible), len(unread))
        return NotificationPanel(
            notifications=visible,
            unread_total=len(unread),
            unread_by_category=self.unread_counts(records),
            by_day=self.group_by_day(visible),
        )

    def filter(
        self,
        records: Iterable[NormalizedRecord],
        criteria: NotificationFilter,
    ) -> list[NormalizedRecord]:
        """
        Apply date window, category allow-list, read status and keywords.

        Keywords are trimmed and match title or message text
        case-insensitively; any one keyword is enough.
        """
        matched = filter_records(
            records,
            date_from=criteria.date_from,
            date_to=criteria.date_to,
            categories=criteria.categories,
        )
        if criteria.read_status != "all":
            want_read = criteria.read_status == "read"
            matched = [r for r in matched if bool(r.is_read) == want_read]
        keywords = [k.strip().lower() for k in criteria.keywords if k.strip()]
        if keywords:
            matched = [r for r in matched if any(k in (r.text or "").lower() for k in keywords)]
        return matched

    @staticmethod
    def sort_newest_first(records: Iterable[NormalizedRecord]) -> list[NormalizedRecord]:
        """
        Newest first by day, then by timestamp within the day. Records
        without a timestamp sort last in their day; full ties keep input
        order.
        """
        return sorted(records, key=lambda r: (r.day, r.timestamp or datetime.min), reverse=True)

    @staticmethod
    def unread_counts(records: Iterable[NormalizedRecord]) -> list[Bucket]:
        """Unread notifications per type, largest count first."""
        unread = [r for r in records if not r.is_read]
        return sorted(bucket(unread, by_category), key=lambda b: -b.count)

    @staticmethod
    def group_by_day(records: Iterable[NormalizedRecord]) -> list[Bucket]:
        """Per-day groups for the panel, newest day first."""
        return list(reversed(bucket(records, by_day, BucketOrder.CHRONOLOGICAL)))
