"""
app/services package marker.
"""

from app.services.aggregation_service import (
    CampaignAnalyticsService,
    CampaignDashboard,
    ImpactAnalyticsService,
    ImpactSummary,
)
from app.services.export_service import ExportResult, ExportService
from app.services.notification_service import (
    NotificationCenterService,
    NotificationFilter,
    NotificationPanel,
)

__all__ = [
    "CampaignAnalyticsService",
    "CampaignDashboard",
    "ImpactAnalyticsService",
    "ImpactSummary",
    "ExportResult",
    "ExportService",
    "NotificationCenterService",
    "NotificationFilter",
    "NotificationPanel",
]
