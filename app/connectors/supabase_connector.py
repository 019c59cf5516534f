"""
app/connectors/supabase_connector.py

Read-only connector for the backend-as-a-service REST interface.

Tables read
-----------
campaign_donations       donations of one campaign, optional created_at window
notifications            notifications addressed to one user
impact_activities        impact activities of one user
campaign_analytics       latest daily analytics row of one campaign
campaign_social_metrics  per-platform share, like, comment and reach figures
campaign_engagement      one row per visitor action on a campaign page

Rows are paged with ``limit``/``offset`` until a short page is returned.
Rows that fail record validation are counted in ``failed_records`` and
never reach the pipeline.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import requests

from aggregation.normalizer import parse_raw_records
from app.config import ExternalHTTPSettings, SupabaseSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult, ConnectorRequestError, Params
from app.logging_utils import log_event

logger = logging.getLogger(__name__)


class SupabaseRecordConnector(BaseConnector):
    """
    Fetches raw donation, notification, activity, social metric and
    engagement rows over REST.
    """

    def __init__(
        self,
        *,
        settings: SupabaseSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="supabase", http_settings=http_settings, session=session)
        if not settings.url or not settings.anon_key:
            raise ConnectorRequestError("supabase: SUPABASE_URL and SUPABASE_ANON_KEY must be set.")
        self._settings = settings
        self._base_url = f"{settings.url.rstrip('/')}/rest/v1"

    # ------------------------------------------------------------------
    # Typed fetches
    # ------------------------------------------------------------------

    def fetch_donations(
        self,
        campaign_id: str,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> ConnectorFetchResult:
        filters: list[tuple[str, Any]] = [
            ("campaign_id", f"eq.{campaign_id}"),
            ("order", "created_at.desc"),
        ]
        if date_from is not None:
            filters.append(("created_at", f"gte.{date_from.isoformat()}"))
        if date_to is not None:
            filters.append(("created_at", f"lte.{date_to.isoformat()}T23:59:59.999999"))
        return self._fetch_typed("campaign_donations", "donation", filters)

    def fetch_notifications(self, user_id: str) -> ConnectorFetchResult:
        filters = [("recipient_id", f"eq.{user_id}"), ("order", "created_at.desc")]
        return self._fetch_typed("notifications", "notification", filters)

    def fetch_activities(self, user_id: str) -> ConnectorFetchResult:
        filters = [("user_id", f"eq.{user_id}"), ("order", "created_at.desc")]
        return self._fetch_typed("impact_activities", "activity", filters)

    def fetch_social_metrics(self, campaign_id: str) -> ConnectorFetchResult:
        filters = [("campaign_id", f"eq.{campaign_id}"), ("order", "created_at.desc")]
        return self._fetch_typed("campaign_social_metrics", "social_metric", filters)

    def fetch_engagement(self, campaign_id: str) -> ConnectorFetchResult:
        filters = [("campaign_id", f"eq.{campaign_id}"), ("order", "created_at.desc")]
        return self._fetch_typed("campaign_engagement", "engagement", filters)

    def fetch_campaign_analytics(self, campaign_id: str) -> dict[str, Any] | None:
        """
        Return the most recent ``campaign_analytics`` row, or None when the
        campaign has no analytics yet.
        """
        rows = self._fetch_page(
            "campaign_analytics",
            filters=[("campaign_id", f"eq.{campaign_id}"), ("order", "date.desc")],
            limit=1,
            offset=0,
        )
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def fetch_rows(self, table: str, *, filters: Params | None = None) -> list[dict[str, Any]]:
        page_size = self._settings.page_size
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            page = self._fetch_page(table, filters=filters, limit=page_size, offset=offset)
            rows.extend(page)
            if len(page) < page_size:
                return rows
            offset += page_size

    def _fetch_typed(
        self,
        table: str,
        kind: str,
        filters: list[tuple[str, Any]],
    ) -> ConnectorFetchResult:
        rows = self.fetch_rows(table, filters=filters)
        records = parse_raw_records(rows, kind)
        failed = len(rows) - len(records)
        log_event(
            logger,
            logging.INFO,
            "connector_fetch",
            source=self.source,
            table=table,
            rows=len(rows),
            failed=failed,
        )
        return ConnectorFetchResult(source=self.source, records=records, failed_records=failed)

    def _fetch_page(
        self,
        table: str,
        *,
        filters: Params | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        params: list[tuple[str, Any]] = [("select", "*")]
        if isinstance(filters, dict):
            params.extend(filters.items())
        elif filters:
            params.extend(filters)
        params.extend([("limit", limit), ("offset", offset)])

        payload = self._request_json(
            method="GET",
            url=f"{self._base_url}/{table}",
            params=params,
            headers=self._headers(),
        )
        if not isinstance(payload, list):
            logger.error("Unexpected payload shape source=%s table=%s", self.source, table)
            raise ConnectorRequestError(f"{self.source}: expected a JSON array from {table}.")
        return [row for row in payload if isinstance(row, dict)]

    def _headers(self) -> dict[str, str]:
        key = self._settings.anon_key or ""
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
            "Accept-Profile": self._settings.schema,
        }
