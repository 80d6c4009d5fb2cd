"""
Shared fixtures: an in-memory MongoDB (mongomock) swapped in for
`database.db`, and a TestClient over the app.
"""
import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main


@pytest.fixture
def db(monkeypatch):
    mock_db = mongomock.MongoClient()["gucci-store-test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    return TestClient(main.app)


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/seed")
    assert res.status_code == 201
    login = client.post(
        "/api/auth/login",
        json={"email": "admin@gucci.com", "password": "SuperAdmin@2025"},
    )
    return {"Authorization": f"Bearer {login.json()['token']}"}


@pytest.fixture
def user_headers(client):
    res = client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "secret123"},
    )
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def address_body():
    return _address_body


def _address_body(user_id="user-1", **overrides):
    body = {
        "userId": user_id,
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "2025550143",
        "street": "12 Analytical Way",
        "city": "London",
        "state": "Greater London",
        "zipCode": "N1 9GU",
        "country": "United Kingdom",
        "countryCode": "GB",
        "isDefault": False,
    }
    body.update(overrides)
    return body
