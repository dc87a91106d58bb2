"""Integration tests for budget endpoints"""

import uuid
from unittest.mock import patch
from fastapi.testclient import TestClient


def _create_budget(client: TestClient, category: str, amount: float, duration: str = "monthly", **extra) -> dict:
    response = client.post(
        "/api/v1/budget",
        json={"category": category, "amount": amount, "duration": duration, **extra},
    )
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def _expense(client: TestClient, category: str, amount: float, **extra) -> None:
    response = client.post(
        "/api/v1/transactions",
        json={"type": "expense", "amount": amount, "category": category, **extra},
    )
    assert response.status_code == 201, response.json()


def test_create_budget(client: TestClient):
    response = client.post("/api/v1/budget", json={"category": "Food", "amount": 1000, "duration": "monthly"})

    assert response.status_code == 201
    assert response.json()["msg"] == "Budget set successfully!"
    assert response.json()["data"]["category"] == "Food"
    assert response.json()["data"]["amount"] == 1000.0
    assert response.json()["data"]["currency"] == "LKR"


def test_create_budget_converts_amount(client: TestClient):
    budget = _create_budget(client, "Food", 50, currency="usd")

    assert budget["amount"] == 100.0
    assert budget["currency"] == "USD"


def test_create_duplicate_budget(client: TestClient):
    _create_budget(client, "Food", 1000)

    response = client.post("/api/v1/budget", json={"category": "Food", "amount": 500})

    assert response.status_code == 409
    assert response.json()["msg"] == "Budget already exists for this category."


def test_create_budget_invalid_category(client: TestClient):
    for category in ("Legacy", "Unknown"):
        response = client.post("/api/v1/budget", json={"category": category, "amount": 500})
        assert response.status_code == 400
        assert response.json()["msg"] == "Invalid or inactive category"


def test_create_budget_invalid_duration(client: TestClient):
    response = client.post("/api/v1/budget", json={"category": "Food", "amount": 500, "duration": "hourly"})

    assert response.status_code == 400
    assert response.json()["msg"].startswith('"duration"')


def test_update_budget(client: TestClient):
    budget = _create_budget(client, "Food", 1000)

    response = client.patch(f"/api/v1/budget/{budget['id']}", json={"amount": 1500, "duration": "weekly"})

    assert response.status_code == 200
    assert response.json()["msg"] == "Budget updated successfully!"
    assert response.json()["data"]["amount"] == 1500.0
    assert response.json()["data"]["duration"] == "weekly"


def test_update_budget_to_taken_category(client: TestClient):
    _create_budget(client, "Food", 1000)
    transport = _create_budget(client, "Transport", 300)

    response = client.patch(f"/api/v1/budget/{transport['id']}", json={"category": "Food"})

    assert response.status_code == 409


def test_update_missing_budget(client: TestClient):
    response = client.patch(f"/api/v1/budget/{uuid.uuid4()}", json={"amount": 10})

    assert response.status_code == 404
    assert response.json()["msg"] == "Budget not found"


def test_delete_budget(client: TestClient):
    budget = _create_budget(client, "Food", 1000)

    response = client.delete(f"/api/v1/budget/{budget['id']}")

    assert response.status_code == 200
    assert response.json()["msg"] == "Budget deleted successfully"
    assert client.get("/api/v1/budgets").status_code == 404


def test_list_budgets_paginated(client: TestClient):
    for category in ("Food", "Transport", "Salary"):
        _create_budget(client, category, 100)

    response = client.get("/api/v1/budgets", params={"page": 2, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["msg"] == "Budgets retrieved successfully"
    assert len(body["data"]) == 1
    assert body["pagination"] == {"totalCount": 3, "page": 2, "limit": 2, "totalPages": 2}


def test_list_budgets_empty(client: TestClient):
    response = client.get("/api/v1/budgets")

    assert response.status_code == 404
    assert response.json()["msg"] == "No budgets found."


def test_filter_budgets(client: TestClient):
    _create_budget(client, "Food", 100, "weekly")
    _create_budget(client, "Transport", 100, "monthly")

    response = client.get("/api/v1/budgets/filter", params={"duration": "weekly"})
    assert response.status_code == 200
    assert [b["category"] for b in response.json()["data"]] == ["Food"]

    response = client.get("/api/v1/budgets/filter", params={"duration": "yearly"})
    assert response.status_code == 404
    assert response.json()["msg"] == "No budgets found for the given filters"


def test_budget_recommendations(client: TestClient):
    _create_budget(client, "Food", 100)
    _create_budget(client, "Transport", 50)
    _expense(client, "Food", 85)
    _expense(client, "Food", 500, date="2020-01-15T00:00:00Z")  # outside the current month
    _expense(client, "Transport", 60)

    response = client.get("/api/v1/budgets/recommendations")

    assert response.status_code == 200
    assert response.json()["msg"] == "Budget recommendations generated successfully"
    by_category = {r["category"]: r for r in response.json()["data"]}
    assert by_category["Food"]["spent"] == 85.0
    assert by_category["Food"]["percentage"] == 85
    assert by_category["Food"]["recommendation"] == "near_limit"
    assert by_category["Transport"]["percentage"] == 120
    assert by_category["Transport"]["recommendation"] == "over_budget"


def test_budget_recommendations_without_budgets(client: TestClient):
    response = client.get("/api/v1/budgets/recommendations")

    assert response.status_code == 404
    assert response.json()["msg"] == "No budgets found for the user."


@patch("moneywise.infrastructure.database.repositories.BudgetRepository.get_by_category", return_value=None)
def test_concurrent_duplicate_budget_conflicts(mock_lookup, client: TestClient):
    # Both requests pass the lookup; the unique constraint decides
    _create_budget(client, "Food", 1000)

    response = client.post("/api/v1/budget", json={"category": "Food", "amount": 500})

    assert response.status_code == 409
    assert response.json() == {"msg": "Budget already exists for this category."}
    assert len(client.get("/api/v1/budgets").json()["data"]) == 1


def test_concurrent_budget_recategorise_conflicts(client: TestClient):
    _create_budget(client, "Food", 1000)
    transport = _create_budget(client, "Transport", 300)

    with patch("moneywise.infrastructure.database.repositories.BudgetRepository.get_by_category", return_value=None):
        response = client.patch(f"/api/v1/budget/{transport['id']}", json={"category": "Food"})

    assert response.status_code == 409
    assert response.json() == {"msg": "Budget already exists for this category."}
    assert client.get("/api/v1/budgets/filter", params={"category": "Transport"}).status_code == 200
