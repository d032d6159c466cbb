"""
Tests for the calculation API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from redcf.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


# =============================================================================
# HEALTH
# =============================================================================


class TestHealth:
    """Test application-level endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# =============================================================================
# DCF
# =============================================================================


class TestDCFEndpoint:
    """Test the /api/calculate/dcf endpoint."""

    def test_calculate_dcf(self, client, example_inputs):
        """camelCase input runs the full analysis."""
        response = client.post("/api/calculate/dcf", json=example_inputs)
        assert response.status_code == 200

        data = response.json()
        result = data["result"]
        assert len(result["cf_asset"]) == 11
        assert result["cf_asset"][0] == -51_500_000
        assert result["remaining_debt_at_exit"] > 0
        assert result["irr_asset"] is not None
        assert result["irr_equity"] is not None
        assert len(result["debt_schedule"]) == 10

        metrics = data["metrics"]
        assert metrics["payback_period"] == 10
        assert metrics["investment_grade"] in {"excellent", "good", "caution", "poor"}
        assert metrics["irr_equity_display"].endswith("%")

    def test_calculate_dcf_snake_case(self, client, example_input):
        response = client.post("/api/calculate/dcf", json=example_input.to_dict())
        assert response.status_code == 200
        assert response.json()["result"]["cf_equity"][0] == -16_500_000

    def test_missing_field(self, client, example_inputs):
        del example_inputs["p0"]
        response = client.post("/api/calculate/dcf", json=example_inputs)
        assert response.status_code == 422

        error = response.json()["error"]
        assert error["type"] == "INVALID_INPUT"
        assert error["field"] == "p0"

    def test_invalid_years(self, client, example_inputs):
        example_inputs["years"] = 0
        response = client.post("/api/calculate/dcf", json=example_inputs)
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "years"

    def test_collapsing_sale_price(self, client, example_inputs):
        example_inputs.update({"priceDecay": 2.02, "years": 9})
        response = client.post("/api/calculate/dcf", json=example_inputs)
        assert response.status_code == 422
        assert response.json()["error"]["type"] == "UNREALISTIC_RESULT"

    def test_warnings_returned(self, client, example_inputs):
        example_inputs["loanRate"] = 0.12
        response = client.post("/api/calculate/dcf", json=example_inputs)
        assert response.status_code == 200

        warnings = response.json()["result"]["warnings"]
        assert any(w["field"] == "loan_rate" for w in warnings)
        assert all(w["severity"] == "warning" for w in warnings)


class TestValidateEndpoint:
    """Test the /api/calculate/validate endpoint."""

    def test_valid_input(self, client, example_inputs):
        response = client.post("/api/calculate/validate", json=example_inputs)
        assert response.status_code == 200

        data = response.json()
        assert data["is_valid"] is True
        assert data["errors"] == []

    def test_invalid_input(self, client, example_inputs):
        example_inputs["vacancy"] = 2
        response = client.post("/api/calculate/validate", json=example_inputs)
        assert response.status_code == 200

        data = response.json()
        assert data["is_valid"] is False
        assert [e["field"] for e in data["errors"]] == ["vacancy"]


# =============================================================================
# IRR / AMORTIZATION
# =============================================================================


class TestIRREndpoint:
    """Test the /api/calculate/irr endpoint."""

    def test_calculate_irr(self, client):
        response = client.post(
            "/api/calculate/irr", json={"cash_flows": [-100, 110], "discount_rate": 0.10}
        )
        assert response.status_code == 200

        data = response.json()
        assert abs(data["irr"] - 0.10) < 1e-6
        assert data["converged"] is True
        assert data["method"] == "newton-raphson"
        assert abs(data["npv"]) < 1e-9

    def test_npv_omitted_without_rate(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [-100, 110]})
        assert response.json()["npv"] is None

    def test_no_sign_change(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [100, 50]})
        assert response.status_code == 422

        error = response.json()["error"]
        assert error["type"] == "IRR_CALCULATION_FAILED"
        assert error["metadata"]["reason"] == "no_sign_change"


class TestAmortizationEndpoint:
    """Test the /api/calculate/amortization endpoint."""

    def test_full_term(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100_000, "annual_rate": 0.06, "term_years": 5},
        )
        assert response.status_code == 200

        data = response.json()
        assert len(data["schedule"]) == 5
        assert abs(data["total_principal"] - 100_000) < 1e-6
        assert data["remaining"] == 0

    def test_truncated_horizon(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100_000, "annual_rate": 0.06, "term_years": 5, "horizon": 3},
        )
        data = response.json()
        assert len(data["schedule"]) == 3
        assert data["remaining"] > 0
        assert data["schedule"][-1]["end_balance"] == data["remaining"]

    def test_zero_term_rejected(self, client):
        """A zero-year term would report an unpaid balance as fully repaid."""
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100_000, "annual_rate": 0.06, "term_years": 0},
        )
        assert response.status_code == 422

        error = response.json()["error"]
        assert error["type"] == "INVALID_INPUT"
        assert error["field"] == "term_years"

    def test_negative_horizon_rejected(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100_000, "annual_rate": 0.06, "term_years": 5, "horizon": -1},
        )
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "horizon"
