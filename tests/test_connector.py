"""
tests/test_connector.py

Pytest unit tests for SupabaseRecordConnector.

No network: a fake session replays canned responses and records every
request. Backoff sleeps are patched out.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
import requests

from app.config import ExternalHTTPSettings, SupabaseSettings
from app.connectors import ConnectorRequestError, SupabaseRecordConnector
from app.domain.records import DonationRecord


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr("app.connectors.base.time.sleep", recorded.append)
    return recorded


@pytest.fixture()
def http_settings() -> ExternalHTTPSettings:
    return ExternalHTTPSettings(
        timeout_seconds=5.0,
        max_retries=2,
        backoff_initial_seconds=0.1,
        backoff_multiplier=2.0,
        rate_limit_per_second=0.0,
    )


@pytest.fixture()
def settings() -> SupabaseSettings:
    return SupabaseSettings(url="https://project.example.co/", anon_key="anon-key", page_size=2)


def _connector(settings, http_settings, *outcomes) -> tuple[SupabaseRecordConnector, FakeSession]:
    session = FakeSession(*outcomes)
    return SupabaseRecordConnector(settings=settings, http_settings=http_settings, session=session), session


def _row(record_id: str, amount: float = 10.0) -> dict[str, Any]:
    return {"id": record_id, "amount": amount, "created_at": "2024-01-01T00:00:00Z", "campaign_id": "c1"}


class TestConfiguration:
    def test_missing_credentials_raise(self, http_settings) -> None:
        with pytest.raises(ConnectorRequestError):
            SupabaseRecordConnector(settings=SupabaseSettings(), http_settings=http_settings, session=FakeSession())


class TestFetchDonations:
    def test_pages_until_short_page(self, settings, http_settings, sleeps) -> None:
        connector, session = _connector(
            settings,
            http_settings,
            FakeResponse(payload=[_row("d1"), _row("d2")]),
            FakeResponse(payload=[_row("d3")]),
        )
        result = connector.fetch_donations("c1")

        assert [r.id for r in result.records] == ["d1", "d2", "d3"]
        assert all(isinstance(r, DonationRecord) for r in result.records)
        assert result.failed_records == 0
        assert result.source == "supabase"
        assert len(session.calls) == 2
        assert ("offset", 0) in session.calls[0]["params"]
        assert ("offset", 2) in session.calls[1]["params"]

    def test_request_shape(self, settings, http_settings, sleeps) -> None:
        connector, session = _connector(settings, http_settings, FakeResponse(payload=[]))
        connector.fetch_donations("c1", date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))

        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "https://project.example.co/rest/v1/campaign_donations"
        assert call["timeout"] == 5.0
        assert call["headers"]["apikey"] == "anon-key"
        assert call["headers"]["Authorization"] == "Bearer anon-key"
        assert ("campaign_id", "eq.c1") in call["params"]
        assert ("created_at", "gte.2024-01-01") in call["params"]
        assert ("created_at", "lte.2024-01-31T23:59:59.999999") in call["params"]
        assert ("limit", 2) in call["params"]

    def test_invalid_rows_are_counted(self, settings, http_settings, sleeps) -> None:
        connector, _ = _connector(
            settings,
            http_settings,
            FakeResponse(payload=[_row("d1"), {"amount": 5}, "not-a-row"]),
        )
        result = connector.fetch_donations("c1")
        assert [r.id for r in result.records] == ["d1"]
        assert result.failed_records == 1


class TestRetries:
    def test_retryable_status_then_success(self, settings, http_settings, sleeps) -> None:
        connector, session = _connector(
            settings,
            http_settings,
            FakeResponse(status_code=503),
            FakeResponse(payload=[_row("d1")]),
        )
        result = connector.fetch_donations("c1")
        assert [r.id for r in result.records] == ["d1"]
        assert len(session.calls) == 2
        assert sleeps == [pytest.approx(0.1)]

    def test_connection_error_is_retried(self, settings, http_settings, sleeps) -> None:
        connector, session = _connector(
            settings,
            http_settings,
            requests.ConnectionError("reset"),
            requests.Timeout("slow"),
            FakeResponse(payload=[]),
        )
        assert connector.fetch_notifications("u1").records == []
        assert len(session.calls) == 3
        assert sleeps == [pytest.approx(0.1), pytest.approx(0.2)]

    def test_non_retryable_status_fails_fast(self, settings, http_settings, sleeps) -> None:
        connector, session = _connector(settings, http_settings, FakeResponse(status_code=404))
        with pytest.raises(ConnectorRequestError):
            connector.fetch_activities("u1")
        assert len(session.calls) == 1
        assert sleeps == []

    def test_retries_are_exhausted(self, settings, http_settings, sleeps) -> None:
        connector, session = _connector(
            settings,
            http_settings,
            FakeResponse(status_code=503),
            FakeResponse(status_code=502),
            FakeResponse(status_code=429),
        )
        with pytest.raises(ConnectorRequestError):
            connector.fetch_donations("c1")
        assert len(session.calls) == 3

    def test_non_array_payload_raises(self, settings, http_settings, sleeps) -> None:
        connector, _ = _connector(settings, http_settings, FakeResponse(payload={"message": "denied"}))
        with pytest.raises(ConnectorRequestError):
            connector.fetch_donations("c1")

    def test_invalid_json_raises(self, settings, http_settings, sleeps) -> None:
        connector, _ = _connector(settings, http_settings, FakeResponse(payload=ValueError("bad json")))
        with pytest.raises(ConnectorRequestError):
            connector.fetch_donations("c1")


class TestOtherTables:
    def test_campaign_analytics_latest_row(self, settings, http_settings, sleeps) -> None:
        row = {"campaign_id": "c1", "date": "2024-01-02", "total_views": 300}
        connector, session = _connector(settings, http_settings, FakeResponse(payload=[row]))
        assert connector.fetch_campaign_analytics("c1") == row
        assert ("order", "date.desc") in session.calls[0]["params"]
        assert ("limit", 1) in session.calls[0]["params"]

    def test_campaign_analytics_missing(self, settings, http_settings, sleeps) -> None:
        connector, _ = _connector(settings, http_settings, FakeResponse(payload=[]))
        assert connector.fetch_campaign_analytics("c1") is None

    def test_notifications_filter_on_recipient(self, settings, http_settings, sleeps) -> None:
        row = {"id": "n1", "created_at": "2024-03-01", "type": "system", "is_read": False}
        connector, session = _connector(settings, http_settings, FakeResponse(payload=[row]))
        result = connector.fetch_notifications("u1")
        assert result.records[0].kind == "notification"
        assert session.calls[0]["url"].endswith("/notifications")
        assert ("recipient_id", "eq.u1") in session.calls[0]["params"]

    def test_social_metrics_filter_on_campaign(self, settings, http_settings, sleeps) -> None:
        row = {"id": "s1", "created_at": "2024-01-01", "platform": "facebook", "metric_type": "reach", "value": 900}
        connector, session = _connector(settings, http_settings, FakeResponse(payload=[row]))
        result = connector.fetch_social_metrics("c1")
        assert result.records[0].kind == "social_metric"
        assert result.records[0].category == "facebook"
        assert session.calls[0]["url"].endswith("/campaign_social_metrics")
        assert ("campaign_id", "eq.c1") in session.calls[0]["params"]

    def test_engagement_filter_on_campaign(self, settings, http_settings, sleeps) -> None:
        rows = [
            {"id": "e1", "created_at": "2024-01-01", "action_type": "share"},
            {"id": "e2", "created_at": "2024-01-01", "action_type": "view"},
        ]
        connector, session = _connector(settings, http_settings, FakeResponse(payload=rows), FakeResponse(payload=[]))
        result = connector.fetch_engagement("c1")
        assert [r.category for r in result.records] == ["share", "view"]
        assert session.calls[0]["url"].endswith("/campaign_engagement")
        assert ("campaign_id", "eq.c1") in session.calls[0]["params"]
