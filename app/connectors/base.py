"""
app/connectors/base.py

Base connector abstraction and shared HTTP mechanics.

A connector is the data-access collaborator of the aggregation pipeline:
it fetches raw rows from the backend and hands back typed raw records.
The pipeline is never invoked on a failed fetch; failures surface as
:class:`ConnectorRequestError`.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

import requests

from app.config import ExternalHTTPSettings
from app.domain.records import RawRecordModel
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

Params = dict[str, Any] | list[tuple[str, Any]]


class ConnectorRequestError(RuntimeError):
    """
    A fetch failed for good: retries ran out, or the backend rejected the
    request outright.
    """


@dataclass(frozen=True)
class ConnectorFetchResult:
    """
    Rows of one table, validated into raw records. ``failed_records`` counts
    rows that did not validate and were left out.
    """

    source: str
    records: list[RawRecordModel] = field(default_factory=list)
    failed_records: int = 0


class RecordSource(Protocol):
    """
    Anything that can supply raw records to the aggregation services.
    """

    def fetch_donations(
        self,
        campaign_id: str,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> ConnectorFetchResult: ...

    def fetch_notifications(self, user_id: str) -> ConnectorFetchResult: ...

    def fetch_activities(self, user_id: str) -> ConnectorFetchResult: ...

    def fetch_campaign_analytics(self, campaign_id: str) -> dict[str, Any] | None: ...

    def fetch_social_metrics(self, campaign_id: str) -> ConnectorFetchResult: ...

    def fetch_engagement(self, campaign_id: str) -> ConnectorFetchResult: ...


class BaseConnector(ABC):
    """
    Read-only table access over HTTP with throttling and retry.

    Subclasses implement :meth:`fetch_rows`; every request they make goes
    through :meth:`_request_json`, which spaces requests by the configured
    rate limit and retries timeouts, dropped connections and
    ``RETRYABLE_STATUS_CODES`` with exponential backoff.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._http = http_settings
        self._min_interval = 1.0 / http_settings.rate_limit_per_second if http_settings.rate_limit_per_second > 0 else 0.0
        self._last_sent: float = 0.0

    @abstractmethod
    def fetch_rows(self, table: str, *, filters: Params | None = None) -> list[dict[str, Any]]:
        """
        Fetch every row of *table* matching *filters*.
        """

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: Params | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = self._request(method=method, url=url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(f"{self.source}: response from {url} is not JSON.") from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: Params | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        attempts = self._http.max_retries + 1
        failure: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return self._send_once(method=method, url=url, params=params, headers=headers)
            except _RetryableFailure as exc:
                failure = exc.__cause__ or exc

            if attempt == attempts:
                break
            delay = self._backoff_seconds(attempt)
            log_event(
                logger,
                logging.WARNING,
                "connector_retry",
                source=self.source,
                url=url,
                attempt=attempt,
                max_retries=self._http.max_retries,
                wait_seconds=round(delay, 3),
                error=failure,
            )
            time.sleep(delay)

        log_event(logger, logging.ERROR, "connector_retries_exhausted", source=self.source, url=url, error=failure)
        raise ConnectorRequestError(f"{self.source}: {url} still failing after {attempts} attempt(s).") from failure

    def _send_once(
        self,
        *,
        method: str,
        url: str,
        params: Params | None,
        headers: dict[str, str] | None,
    ) -> requests.Response:
        """
        One throttled request. Transient failures raise ``_RetryableFailure``;
        any other HTTP error raises :class:`ConnectorRequestError` at once.
        """
        self._throttle()
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                timeout=self._http.timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise _RetryableFailure() from exc

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise _RetryableFailure() from requests.HTTPError(
                f"HTTP {response.status_code}",
                response=response,
            )
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            log_event(
                logger,
                logging.ERROR,
                "connector_request_rejected",
                source=self.source,
                url=url,
                status=response.status_code,
            )
            raise ConnectorRequestError(f"{self.source}: {url} answered HTTP {response.status_code}.") from exc
        return response

    def _backoff_seconds(self, attempt: int) -> float:
        return self._http.backoff_initial_seconds * self._http.backoff_multiplier ** (attempt - 1)

    def _throttle(self) -> None:
        """Sleep until the minimum interval since the previous request has passed."""
        if self._min_interval <= 0:
            return
        wait = self._min_interval - (time.monotonic() - self._last_sent)
        if wait > 0:
            time.sleep(wait)
        self._last_sent = time.monotonic()


class _RetryableFailure(Exception):
    """A transient failure; the underlying error is chained as ``__cause__``."""
