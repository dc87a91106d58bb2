"""Integration tests for the category registry endpoints"""

import uuid
from fastapi.testclient import TestClient
from moneywise.infrastructure.database.models import Category


def test_list_categories(client: TestClient):
    response = client.get("/api/v1/categories")

    assert response.status_code == 200
    assert response.json()["msg"] == "Categories retrieved successfully"
    assert [c["name"] for c in response.json()["data"]] == ["Food", "Legacy", "Salary", "Transport"]


def test_list_categories_empty(client: TestClient, db):
    db.query(Category).delete()
    db.commit()

    response = client.get("/api/v1/categories")

    assert response.status_code == 404
    assert response.json()["msg"] == "No categories found"


def test_create_category(client: TestClient):
    response = client.post("/api/v1/categories", json={"name": "Rent", "type": "expense"})

    assert response.status_code == 201
    assert response.json()["msg"] == "Category created successfully"
    assert response.json()["data"]["active"] is True


def test_create_duplicate_category(client: TestClient):
    response = client.post("/api/v1/categories", json={"name": "Food", "type": "expense"})

    assert response.status_code == 409
    assert response.json()["msg"] == "Category already exists"


def test_deactivated_category_cannot_be_budgeted(client: TestClient):
    food = next(c for c in client.get("/api/v1/categories").json()["data"] if c["name"] == "Food")

    response = client.patch(f"/api/v1/categories/{food['id']}", json={"active": False})
    assert response.status_code == 200
    assert response.json()["msg"] == "Category updated successfully"

    response = client.post("/api/v1/budget", json={"category": "Food", "amount": 100})
    assert response.status_code == 400


def test_update_missing_category(client: TestClient):
    response = client.patch(f"/api/v1/categories/{uuid.uuid4()}", json={"active": False})

    assert response.status_code == 404
    assert response.json()["msg"] == "Category not found"


def test_delete_category(client: TestClient):
    created = client.post("/api/v1/categories", json={"name": "Rent", "type": "expense"}).json()["data"]

    response = client.delete(f"/api/v1/categories/{created['id']}")

    assert response.status_code == 200
    assert response.json()["msg"] == "Category deleted successfully"
