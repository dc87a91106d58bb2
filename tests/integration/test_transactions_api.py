"""Integration tests for transaction endpoints"""

import uuid
from fastapi.testclient import TestClient


def _add(client: TestClient, type: str, amount: float, category: str, **extra) -> dict:
    response = client.post(
        "/api/v1/transactions",
        json={"type": type, "amount": amount, "category": category, **extra},
    )
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def test_create_transaction(client: TestClient):
    response = client.post(
        "/api/v1/transactions",
        json={"type": "expense", "amount": 42.5, "category": "Food", "description": "Lunch", "tags": ["work"]},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["msg"] == "Transaction added!"
    assert body["data"]["amount"] == 42.5
    assert body["data"]["tags"] == ["work"]
    assert body["data"]["userId"] == "user_1"


def test_create_transaction_converts_amount(client: TestClient):
    transaction = _add(client, "income", 100, "Salary", currency="USD")
    assert transaction["amount"] == 200.0


def test_create_transaction_invalid_type(client: TestClient):
    response = client.post("/api/v1/transactions", json={"type": "transfer", "amount": 10, "category": "Food"})

    assert response.status_code == 400
    assert "Invalid transaction type" in response.json()["msg"]


def test_create_transaction_category_type_mismatch(client: TestClient):
    response = client.post("/api/v1/transactions", json={"type": "income", "amount": 10, "category": "Food"})

    assert response.status_code == 400


def test_create_transaction_inactive_category(client: TestClient):
    response = client.post("/api/v1/transactions", json={"type": "expense", "amount": 10, "category": "Legacy"})

    assert response.status_code == 400
    assert response.json()["msg"] == "Invalid or inactive category"


def test_list_transactions(client: TestClient, identity: dict):
    _add(client, "expense", 10, "Food")
    _add(client, "income", 1000, "Salary")
    identity["user_id"] = "user_2"
    _add(client, "expense", 99, "Transport")
    identity["user_id"] = "user_1"

    response = client.get("/api/v1/transactions")

    assert response.status_code == 200
    assert response.json()["msg"] == "Transactions retrieved successfully"
    assert sorted(t["category"] for t in response.json()["data"]) == ["Food", "Salary"]


def test_filter_transactions(client: TestClient):
    _add(client, "expense", 10, "Food", tags=["groceries"], date="2024-03-10T10:00:00Z")
    _add(client, "expense", 20, "Transport", tags=["commute"], date="2024-04-10T10:00:00Z")
    _add(client, "income", 1000, "Salary", date="2024-04-01T09:00:00Z")

    response = client.get("/api/v1/transactions/filter", params={"type": "expense", "startDate": "2024-04-01T00:00:00"})
    assert [t["category"] for t in response.json()["data"]] == ["Transport"]

    response = client.get("/api/v1/transactions/filter", params={"tags": "groceries,holiday"})
    assert [t["category"] for t in response.json()["data"]] == ["Food"]

    response = client.get("/api/v1/transactions/filter", params={"category": "Salary"})
    assert [t["amount"] for t in response.json()["data"]] == [1000.0]


def test_get_transaction(client: TestClient):
    transaction = _add(client, "expense", 10, "Food")

    response = client.get(f"/api/v1/transactions/{transaction['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == transaction["id"]

    response = client.get(f"/api/v1/transactions/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["msg"] == "Transaction not found"


def test_update_transaction(client: TestClient):
    transaction = _add(client, "expense", 10, "Food")

    response = client.patch(
        f"/api/v1/transactions/{transaction['id']}",
        json={"amount": 15, "category": "Transport", "tags": ["taxi"]},
    )

    assert response.status_code == 200
    assert response.json()["data"]["amount"] == 15.0
    assert response.json()["data"]["category"] == "Transport"
    assert response.json()["data"]["tags"] == ["taxi"]


def test_delete_transaction(client: TestClient):
    transaction = _add(client, "expense", 10, "Food")

    response = client.delete(f"/api/v1/transactions/{transaction['id']}")
    assert response.status_code == 200

    response = client.delete(f"/api/v1/transactions/{transaction['id']}")
    assert response.status_code == 404
    assert response.json()["msg"] == "Transaction not found"


def test_create_transaction_with_recurring(client: TestClient):
    transaction = _add(
        client, "expense", 12, "Transport", currency="USD", recurring={"isRecurring": True, "frequency": "monthly"}
    )

    assert transaction["amount"] == 24.0
    assert transaction["recurring"] == {"isRecurring": True, "frequency": "monthly"}

    response = client.get(f"/api/v1/transactions/{transaction['id']}")
    assert response.json()["data"]["recurring"] == {"isRecurring": True, "frequency": "monthly"}


def test_recurring_defaults(client: TestClient):
    one_off = _add(client, "expense", 10, "Food", recurring={"isRecurring": False})
    plain = _add(client, "expense", 10, "Food")

    assert one_off["recurring"] == {"isRecurring": False, "frequency": None}
    assert plain["recurring"] is None


def test_update_transaction_recurring(client: TestClient):
    transaction = _add(client, "expense", 10, "Food")

    response = client.patch(
        f"/api/v1/transactions/{transaction['id']}",
        json={"recurring": {"isRecurring": True, "frequency": "weekly"}},
    )

    assert response.status_code == 200
    assert response.json()["data"]["recurring"] == {"isRecurring": True, "frequency": "weekly"}


def test_recurring_rejects_unknown_frequency(client: TestClient):
    response = client.post(
        "/api/v1/transactions",
        json={"type": "expense", "amount": 10, "category": "Food", "recurring": {"isRecurring": True, "frequency": "hourly"}},
    )

    assert response.status_code == 400


def test_sort_transactions_by_tags(client: TestClient):
    _add(client, "expense", 10, "Food", tags=["work", "lunch"], date="2024-03-01T12:00:00Z")
    _add(client, "expense", 20, "Transport", tags=["commute", "work"], date="2024-03-02T08:00:00Z")
    _add(client, "expense", 30, "Food", tags=["groceries"], date="2024-03-03T18:00:00Z")

    response = client.get("/api/v1/transactions/sort-by-tags", params={"tags": "work", "sortOrder": "asc"})
    assert response.status_code == 200
    assert response.json()["msg"] == "Transactions retrieved successfully"
    assert [t["amount"] for t in response.json()["data"]] == [20.0, 10.0]

    response = client.get("/api/v1/transactions/sort-by-tags", params={"tags": "work", "sortOrder": "desc"})
    assert [t["amount"] for t in response.json()["data"]] == [10.0, 20.0]

    response = client.get("/api/v1/transactions/sort-by-tags")
    assert [t["amount"] for t in response.json()["data"]] == [20.0, 30.0, 10.0]


def test_sort_transactions_by_tags_invalid_order(client: TestClient):
    response = client.get("/api/v1/transactions/sort-by-tags", params={"sortOrder": "sideways"})

    assert response.status_code == 400
