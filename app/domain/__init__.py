"""
app/domain package marker.
"""

from app.domain.records import (
    RAW_RECORD_ADAPTER,
    RAW_RECORD_TYPES,
    ActivityRecord,
    DonationRecord,
    EngagementRecord,
    NormalizedRecord,
    NotificationRecord,
    RawRecord,
    RawRecordModel,
    RecordKind,
    SocialMetricRecord,
)

__all__ = [
    "RAW_RECORD_ADAPTER",
    "RAW_RECORD_TYPES",
    "ActivityRecord",
    "DonationRecord",
    "EngagementRecord",
    "NormalizedRecord",
    "NotificationRecord",
    "RawRecord",
    "RawRecordModel",
    "RecordKind",
    "SocialMetricRecord",
]
