"""
app/domain/records.py

Typed record shapes flowing through the aggregation pipeline.

Raw records arrive from the backend with snake_case column names, or from
client code with camelCase keys; both spellings are accepted. Each record
category is an explicit pydantic model tagged by ``kind`` so that shape
problems surface at the normalizer boundary instead of downstream.

``amount`` and ``created_at`` are kept exactly as received. Coercion and
timestamp parsing belong to :mod:`aggregation.normalizer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationInfo, field_validator

RecordKind = Literal["donation", "notification", "activity", "social_metric", "engagement"]


class _RawRecordBase(BaseModel):
    """
    Fields shared by every raw record category.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str
    created_at: Any = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt", "timestamp"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("id is required")
        return str(value)


def _default_when_null(cls: type[BaseModel], value: Any, info: ValidationInfo) -> Any:
    """Backend columns are nullable; a null falls back to the field default."""
    if value is None:
        return cls.model_fields[info.field_name].default
    return value


class DonationRecord(_RawRecordBase):
    """
    One row of ``campaign_donations``.
    """

    kind: Literal["donation"] = "donation"
    amount: Any = 0
    category: str = Field(
        default="one_time",
        validation_alias=AliasChoices("category", "donation_type", "donationType"),
    )
    country: str = Field(
        default="Unknown",
        validation_alias=AliasChoices("country", "location_country", "locationCountry"),
    )
    city: str = Field(
        default="Unknown",
        validation_alias=AliasChoices("city", "location_city", "locationCity"),
    )
    device_type: str = Field(
        default="unknown",
        validation_alias=AliasChoices("device_type", "deviceType"),
    )
    source: str = "direct"
    is_anonymous: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_anonymous", "isAnonymous"),
    )
    payment_status: str = Field(
        default="pending",
        validation_alias=AliasChoices("payment_status", "paymentStatus"),
    )
    currency: str = "USD"

    @field_validator(
        "category",
        "country",
        "city",
        "device_type",
        "source",
        "is_anonymous",
        "payment_status",
        "currency",
        mode="before",
    )
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _default_when_null(cls, value, info)


class NotificationRecord(_RawRecordBase):
    """
    One row of ``notifications``. Notifications carry no monetary amount.
    """

    kind: Literal["notification"] = "notification"
    category: str = Field(
        default="general",
        validation_alias=AliasChoices("category", "type", "notification_type"),
    )
    title: str = ""
    message: str = ""
    is_read: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_read", "isRead", "read"),
    )
    priority: str = "normal"

    @field_validator("category", "title", "message", "is_read", "priority", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _default_when_null(cls, value, info)


class ActivityRecord(_RawRecordBase):
    """
    One row of ``impact_activities``; ``amount`` holds the points earned.
    """

    kind: Literal["activity"] = "activity"
    amount: Any = Field(
        default=0,
        validation_alias=AliasChoices("amount", "points_earned", "pointsEarned"),
    )
    category: str = Field(
        default="general",
        validation_alias=AliasChoices("category", "activity_type", "activityType"),
    )
    description: str = ""
    verified: bool = False

    @field_validator("category", "description", "verified", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _default_when_null(cls, value, info)


class SocialMetricRecord(_RawRecordBase):
    """
    One row of ``campaign_social_metrics``: a single figure for one
    platform, tagged by ``metric_type`` (share, like, comment or reach).
    """

    kind: Literal["social_metric"] = "social_metric"
    category: str = Field(
        default="other",
        validation_alias=AliasChoices("category", "platform"),
    )
    metric_type: str = Field(
        default="reach",
        validation_alias=AliasChoices("metric_type", "metricType"),
    )
    amount: Any = Field(
        default=0,
        validation_alias=AliasChoices("amount", "value"),
    )

    @field_validator("category", "metric_type", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _default_when_null(cls, value, info)


class EngagementRecord(_RawRecordBase):
    """
    One row of ``campaign_engagement``; each row is one visitor action.
    """

    kind: Literal["engagement"] = "engagement"
    category: str = Field(
        default="view",
        validation_alias=AliasChoices("category", "action_type", "actionType"),
    )

    @field_validator("category", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _default_when_null(cls, value, info)


RawRecordModel = Union[DonationRecord, NotificationRecord, ActivityRecord, SocialMetricRecord, EngagementRecord]
RAW_RECORD_TYPES: tuple[type[_RawRecordBase], ...] = (
    DonationRecord,
    NotificationRecord,
    ActivityRecord,
    SocialMetricRecord,
    EngagementRecord,
)

RawRecord = Annotated[RawRecordModel, Field(discriminator="kind")]

RAW_RECORD_ADAPTER: TypeAdapter[Any] = TypeAdapter(RawRecord)


@dataclass(frozen=True)
class NormalizedRecord:
    """
    A raw record with a calendar date and a non-negative numeric amount.

    Every instance has a valid ``day``; records whose timestamp cannot be
    parsed never become a NormalizedRecord. ``timestamp`` is the parsed
    instant in naive UTC and only orders records within a day; it takes
    no part in equality. ``metric`` names the figure a social metric row
    carries.
    """

    id: str
    kind: str
    day: date
    amount: float
    category: str
    country: str | None = None
    device_type: str | None = None
    source: str | None = None
    is_anonymous: bool = False
    is_read: bool | None = None
    is_verified: bool = False
    text: str | None = None
    metric: str | None = None
    timestamp: datetime | None = field(default=None, compare=False)
