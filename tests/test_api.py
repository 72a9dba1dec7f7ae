"""
API Tests
=========
Tests for P3 Estimator REST API endpoints.
"""

import csv
import io
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

from p3_estimator.api.endpoints.estimates import get_estimator_service
from p3_estimator.core.live_pricing import RetailPriceFetcher
from p3_estimator.main import app
from p3_estimator.services.estimator import EstimatorService


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        """Test liveness check."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data


class TestEstimateEndpoints:
    """Tests for estimate endpoints."""

    def test_estimate_defaults(self, client: TestClient):
        """Test estimating the default profile."""
        response = client.post("/estimate", json={})
        assert response.status_code == 200
        data = response.json()

        assert Decimal(data["total_payg_cost_usd"]) == 13800
        assert Decimal(data["acus_required"]) == 13800
        assert data["recommended_tier"]["tier"] == 1
        assert Decimal(data["estimated_savings"]) == -5200
        assert data["volatility_score"] == "low"
        assert data["months_of_runway_from_macc"] is None

    def test_estimate_with_nested_inputs(self, client: TestClient):
        """Test that nested context and guardrails are honoured."""
        response = client.post(
            "/estimate",
            json={
                "customer_context": {"has_macc": True, "macc_remaining": 10000},
                "guardrails": {"monthly_cap_enabled": True, "monthly_cap_amount": 1500},
            },
        )
        assert response.status_code == 200
        data = response.json()

        assert data["months_of_runway_from_macc"] == 8
        assert Decimal(data["capped_p90_monthly_cost"]) == 1500

    def test_estimate_clamps_negative_values(self, client: TestClient):
        """Test that negative numbers are treated as zero."""
        response = client.post("/estimate", json={"monthly_users": -10, "knowledge_pct": 500})
        assert response.status_code == 200
        data = response.json()

        assert Decimal(data["monthly_queries"]) == 0

    def test_estimate_invalid_model_type(self, client: TestClient):
        """Test estimating with an unknown prompt model."""
        response = client.post("/estimate", json={"prompt_model_type": "ultra"})
        assert response.status_code == 422

    def test_estimate_unexpected_error(self, client: TestClient):
        """Test that unexpected failures map to 500."""

        class BrokenStore:
            def get(self):
                raise RuntimeError("rate sheet unavailable")

        app.dependency_overrides[get_estimator_service] = lambda: EstimatorService(BrokenStore())

        response = client.post("/estimate", json={})
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to compute estimate"

    def test_export_estimate(self, client: TestClient):
        """Test CSV export of an estimate."""
        response = client.post("/estimate/export", json={})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "estimate-export.csv" in response.headers["content-disposition"]

        rows = {r[0]: r[1:] for r in csv.reader(io.StringIO(response.text)) if r}
        assert rows["Total PAYG Cost (USD)"] == ["13800"]


class TestResidualEndpoints:
    """Tests for residual estimate endpoints."""

    def test_residual_defaults(self, client: TestClient):
        """Test the residual report for the default inputs."""
        response = client.post("/estimate/residual", json={})
        assert response.status_code == 200
        data = response.json()

        assert Decimal(data["outputs"]["total_residual_retail_cost"]) == 3600
        assert data["outputs"]["guidance"] == "small_residual"
        assert data["comparison"]["winner_key"] in {"pure_payg", "specialized_silos", "unified_p3"}
        assert data["comparison"]["pure_payg"]["label"] == "Pure PAYG + ACO"

    def test_residual_p3_wins(self, client: TestClient):
        """Test a residual large enough for a plan."""
        response = client.post(
            "/estimate/residual",
            json={"active_users": 10000, "queries_per_user_per_month": 80, "ptu_hours_per_month": 100},
        )
        assert response.status_code == 200
        comparison = response.json()["comparison"]

        assert comparison["winner_key"] == "unified_p3"
        assert comparison["win_guidance"].startswith("WIN:")

    def test_export_residual(self, client: TestClient):
        """Test CSV export of the residual estimate."""
        response = client.post("/estimate/residual/export", json={"has_macc": True})
        assert response.status_code == 200
        assert "p3-estimator-export.csv" in response.headers["content-disposition"]
        assert response.text.startswith('"Microsoft Agent P3 Estimator - Export"')


class TestAssumptionsEndpoints:
    """Tests for rate sheet endpoints."""

    def test_get_assumptions(self, client: TestClient):
        """Test reading the rate sheet."""
        response = client.get("/assumptions")
        assert response.status_code == 200
        data = response.json()

        assert len(data["agent_p3_tiers"]) == 3
        assert "copilot_credit_usd" in data

    def test_reload_assumptions(self, client: TestClient):
        """Test reloading the rate sheet."""
        response = client.post("/assumptions/reload")
        assert response.status_code == 200
        assert len(response.json()["agent_p3_tiers"]) == 3

    def test_live_pricing_unavailable(self, client: TestClient, monkeypatch: pytest.MonkeyPatch):
        """Test that a failing price API maps to 502."""

        def fail(self):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(RetailPriceFetcher, "fetch", fail)

        response = client.post("/assumptions/live-pricing")
        assert response.status_code == 502


class TestPresetEndpoints:
    """Tests for presets and discovery mappings."""

    def test_list_presets(self, client: TestClient):
        """Test listing presets."""
        response = client.get("/presets")
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == ["pilot", "finance_safe", "power_users"]

    def test_apply_preset(self, client: TestClient):
        """Test applying a preset over defaults."""
        response = client.post("/presets/pilot")
        assert response.status_code == 200
        data = response.json()

        assert Decimal(data["monthly_users"]) == 500
        assert data["guardrails"]["monthly_cap_enabled"] is True

    def test_apply_unknown_preset(self, client: TestClient):
        """Test applying an unknown preset."""
        response = client.post("/presets/unknown")
        assert response.status_code == 404

    def test_survey_inputs(self, client: TestClient):
        """Test mapping survey answers."""
        response = client.post(
            "/survey/inputs",
            json={"org_size": "5000-9999", "volume": "10000-50000", "complexity": "low"},
        )
        assert response.status_code == 200
        data = response.json()

        assert Decimal(data["monthly_users"]) == 2500
        assert Decimal(data["queries_per_user_per_month"]) == 30
        assert data["use_prompt_tools"] is False

    def test_discovery_inputs(self, client: TestClient):
        """Test mapping discovery answers."""
        response = client.post(
            "/discovery/inputs",
            json={"segment": "enterprise", "selected_use_case_ids": ["contact_center"]},
        )
        assert response.status_code == 200
        data = response.json()

        assert Decimal(data["active_users"]) == 800
        assert data["has_macc"] is True

    def test_discovery_invalid_segment(self, client: TestClient):
        """Test an unknown segment."""
        response = client.post("/discovery/inputs", json={"segment": "galactic"})
        assert response.status_code == 422
