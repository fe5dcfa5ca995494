"""Integration tests for API endpoints"""

import pytest
from datetime import date
from fastapi.testclient import TestClient
from finance_analytics.api.dependencies import get_transaction_source
from finance_analytics.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from finance_analytics.infrastructure.clients.advice import FALLBACK_ADVICE


class FailingSource:
    """Transaction source that always raises the given error"""

    def __init__(self, error: Exception):
        self.error = error

    async def fetch_transactions(self, user_id, date_range, direction=None):
        raise self.error

    async def fetch_category_ids(self, user_id):
        raise self.error


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "finance_analytics_requests_total" in response.text


def test_forecast_endpoint(client: TestClient):
    """Forecast over four seeded months"""
    response = client.get("/v1/forecast", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    categories = {c["category"]: c for c in data["categories"]}
    assert set(categories) == {"Groceries", "Restaurants"}
    assert categories["Groceries"]["trend"] == "stable"
    assert categories["Groceries"]["predicted"] == 80000
    assert categories["Groceries"]["category_id"] == "cat_groceries"
    assert categories["Restaurants"]["trend"] == "up"
    assert data["total_income_predicted"] == 500000
    assert data["confidence"] == 72
    assert data["advice"] == FALLBACK_ADVICE


def test_forecast_unknown_user_has_no_history(client: TestClient):
    response = client.get("/v1/forecast", params={"user_id": "ghost"})

    assert response.status_code == 200
    data = response.json()
    assert data["total_predicted"] == 0
    assert data["categories"] == []
    assert data["advice"] == ["insufficient data"]


def test_forecast_requires_user_id(client: TestClient):
    assert client.get("/v1/forecast").status_code == 422


def test_month_comparison_endpoint(client: TestClient):
    response = client.get("/v1/comparison", params={"user_id": "user_1", "period": "month"})

    assert response.status_code == 200
    data = response.json()
    assert data["period_type"] == "month"
    assert len(data["timeline"]) == 12
    assert data["timeline"][-1]["income"] == 500000
    assert data["metrics"]["total_income"]["trend"] == "stable"
    # Restaurants 800.00 vs 600.00
    assert data["metrics"]["total_expense"]["current"] == 160000
    assert data["metrics"]["total_expense"]["previous"] == 140000
    assert data["by_category"][0]["category"] == "Restaurants"
    assert data["by_category"][0]["change"] == 20000


def test_comparison_rejects_unknown_period(client: TestClient):
    response = client.get("/v1/comparison", params={"user_id": "user_1", "period": "week"})
    assert response.status_code == 422


def test_custom_comparison_endpoint(client: TestClient):
    today = date.today()
    response = client.post(
        "/v1/comparison/custom",
        json={
            "user_id": "user_1",
            "current": {"start": today.replace(day=1).isoformat(), "end": today.isoformat()},
            "previous": {"start": "2000-01-01", "end": "2000-01-31"},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["period_type"] == "custom"
    assert data["metrics"]["total_income"]["previous"] == 0
    assert data["metrics"]["total_income"]["change_percentage"] == 0


def test_custom_comparison_rejects_inverted_range(client: TestClient):
    response = client.post(
        "/v1/comparison/custom",
        json={
            "user_id": "user_1",
            "current": {"start": "2025-02-28", "end": "2025-02-01"},
            "previous": {"start": "2025-01-01", "end": "2025-01-31"},
        },
    )
    assert response.status_code == 422


def test_health_score_endpoint(client: TestClient):
    response = client.post(
        "/v1/health/score",
        json={
            "monthly_income": 500000,
            "monthly_expense": 300000,
            "monthly_savings": 200000,
            "emergency_fund": 1800000,
            "total_debt": 0,
            "budget_compliance_rate": 80,
            "expense_variance": 0.2,
            "category_expenses": {"Restaurants": 50000, "Gadgets": 450000},
            "needs_pct": 50,
            "wants_pct": 30,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["score"]["overall_score"] == 93
    assert data["score"]["grade"] == "Excellent"
    assert [leak["category"] for leak in data["money_leaks"]] == ["Restaurants"]
    assert data["ideal_budget"]["user_actual"]["savings"] == pytest.approx(40.0)
    assert data["advice"] == FALLBACK_ADVICE


def test_health_score_validates_rate(client: TestClient):
    response = client.post(
        "/v1/health/score",
        json={"monthly_income": 1, "monthly_expense": 1, "monthly_savings": 0, "budget_compliance_rate": 140},
    )
    assert response.status_code == 422


def test_health_assess_endpoint(client: TestClient):
    response = client.post(
        "/v1/health/assess",
        json={"user_id": "user_1", "emergency_fund": 0, "total_debt": 0, "budget_compliance_rate": 75},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["inputs"]["monthly_income"] == 500000
    assert data["inputs"]["emergency_fund"] == 0
    assert data["score"]["breakdown"]["emergency_fund"] == 20
    assert data["score"]["grade"] in {"Excellent", "Good", "Fair", "Poor", "Critical"}


def test_trends_endpoint(client: TestClient):
    response = client.get("/v1/trends", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert [c["category"] for c in data["categories"]] == ["Groceries", "Restaurants"]
    assert data["overall_trend"]["total_transactions"] == 8


def test_seasonality_endpoint(client: TestClient):
    response = client.get("/v1/seasonality", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert len(data["by_season"]) == 4
    assert len(data["by_month"]) == 4
    assert data["current"]["label"] in {"high season", "low season", "normal", "insufficient data"}


@pytest.mark.parametrize(
    "error,status_code",
    [(TransactionStoreError("down"), 503), (InvalidTransactionDataError("bad row"), 422)],
)
@pytest.mark.parametrize("path", ["/v1/forecast", "/v1/comparison", "/v1/trends", "/v1/seasonality"])
def test_store_errors_are_mapped(client: TestClient, error, status_code, path):
    client.app.dependency_overrides[get_transaction_source] = lambda: FailingSource(error)

    response = client.get(path, params={"user_id": "user_1"})

    assert response.status_code == status_code


def test_assess_store_unavailable(client: TestClient):
    client.app.dependency_overrides[get_transaction_source] = lambda: FailingSource(TransactionStoreError("down"))

    response = client.post(
        "/v1/health/assess",
        json={"user_id": "user_1", "budget_compliance_rate": 75},
    )

    assert response.status_code == 503
