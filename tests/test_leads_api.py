"""Tests for the leads API routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from dashboard.api.main import create_app
from models.lead_models import Lead
from scripts.leads_service import LeadsService
from scripts.lib.errors import DataFetchError
from scripts.lib.supabase_client import InMemoryLeadSource


@pytest.fixture
def leads():
    return [
        Lead(account="INVF", activity="PV", name="Alice", email="alice@example.com",
             collected_at="2024-01-01T10:00:00"),
        Lead(account="INVF", activity="ITE", name="Bruno", email="bruno@example.com",
             collected_at="2024-01-02T10:00:00"),
        Lead(account="INVC3", activity="PV", name="Chloé", email="chloe@example.com",
             collected_at="2024-01-02T11:00:00"),
        Lead(account="INVC4", activity="PAC", name="David", email="david@example.com",
             collected_at="2024-01-03T12:00:00"),
    ]


@pytest.fixture
def client(leads):
    service = LeadsService(InMemoryLeadSource(leads), accounts=["INVF", "INVC3", "INVC4"])
    with TestClient(create_app(service)) as test_client:
        yield test_client


@pytest.fixture
def failing_client():
    source = MagicMock()
    source.fetch_leads.side_effect = DataFetchError("Failed to fetch leads: timeout")
    with TestClient(create_app(LeadsService(source))) as test_client:
        yield test_client


class TestHealth:
    def test_health_reports_lead_source(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["integrations"]["lead_source"] is True


class TestLeadsRoutes:
    def test_list_all(self, client):
        resp = client.get("/api/leads")
        assert resp.status_code == 200
        assert resp.json()["count"] == 4

    def test_list_filtered(self, client):
        resp = client.get("/api/leads", params={
            "accounts": ["INVF", "INVC3"],
            "date_from": "2024-01-02",
            "date_to": "2024-01-02",
        })
        names = [r["name"] for r in resp.json()["results"]]
        assert names == ["Bruno", "Chloé"]

    def test_activity_all_means_no_filter(self, client):
        assert client.get("/api/leads", params={"activity": "all"}).json()["count"] == 4
        assert client.get("/api/leads", params={"activity": "PV"}).json()["count"] == 2

    def test_activity_all_overrides_configured_default(self, client):
        with patch("scripts.lib.config.LEADS_DEFAULT_ACTIVITY", "PV"):
            assert client.get("/api/leads").json()["count"] == 2
            assert client.get("/api/leads", params={"activity": "all"}).json()["count"] == 4
            assert client.get("/api/leads", params={"activity": "PAC"}).json()["count"] == 1

    def test_search(self, client):
        resp = client.get("/api/leads", params={"search": "DAVID"})
        assert [r["account"] for r in resp.json()["results"]] == ["INVC4"]

    def test_inverted_date_range_is_422(self, client):
        resp = client.get("/api/leads", params={"date_from": "2024-02-01", "date_to": "2024-01-01"})
        assert resp.status_code == 422

    def test_stats(self, client):
        body = client.get("/api/leads/stats").json()
        assert body["total"] == 4
        assert body["by_account"][0]["name"] == "INVF"
        assert body["by_account"][0]["count"] == 2
        assert body["best_day"] == {"date": "2024-01-02", "count": 2}
        assert body["total_days"] == 3

    def test_activities(self, client):
        body = client.get("/api/leads/activities").json()
        assert body["activities"][0]["name"] == "PV"
        assert body["activities"][0]["color"] == "#3b82f6"

    def test_timeseries_split(self, client):
        body = client.get("/api/leads/timeseries", params={"split_by_account": True}).json()
        assert body["split_by_account"] is True
        assert body["series"][1]["by_account"] == {"INVF": 1, "INVC3": 1}

    def test_heatmap(self, client):
        cells = client.get("/api/leads/heatmap").json()["cells"]
        assert [(c["account"], c["date"]) for c in cells] == [
            ("INVC3", "2024-01-02"),
            ("INVC4", "2024-01-03"),
            ("INVF", "2024-01-01"),
            ("INVF", "2024-01-02"),
        ]

    def test_compare(self, client):
        body = client.get("/api/leads/compare", params={"compare": ["INVC4", "X"]}).json()
        assert [e["account_name"] for e in body["comparison"]] == ["INVC4", "X"]
        assert body["comparison"][1]["total_count"] == 0
        assert body["highlights"]["best_total"]["account_name"] == "INVC4"

    def test_accounts(self, client):
        body = client.get("/api/leads/accounts").json()
        assert body["accounts"] == ["INVF", "INVC3", "INVC4"]
        assert body["activities"] == ["PV", "PAC", "ITE"]

    def test_insights(self, client):
        body = client.get("/api/leads/insights").json()
        assert body["insights"][0]["title"] == "Best account"
        assert body["weekly_trend"] == {"value": 0.0, "label": "0.0%", "direction": "flat"}

    def test_dashboard(self, client):
        body = client.get("/api/leads/dashboard", params={"compare": ["INVF"]}).json()
        assert body["stats"]["total"] == 4
        assert body["comparison"][0]["total_count"] == 2
        assert len(body["heatmap"]) == 4


class TestFailures:
    @pytest.mark.parametrize("path", [
        "/api/leads",
        "/api/leads/stats",
        "/api/leads/timeseries",
        "/api/leads/heatmap",
        "/api/leads/insights",
        "/api/leads/dashboard",
    ])
    def test_fetch_failure_is_502(self, failing_client, path):
        resp = failing_client.get(path)
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Failed to fetch leads: timeout"

    def test_unconfigured_source_is_503(self):
        # Without the context manager the lifespan never runs, so no service is built
        test_client = TestClient(create_app())

        assert test_client.get("/api/leads/stats").status_code == 503
        assert test_client.get("/api/health").json()["integrations"]["lead_source"] is False
