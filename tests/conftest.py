"""
Shared fixtures: an in-memory SQLite database rebuilt for every test and
helpers that drive the API the way a client would.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("ADMIN_API_KEY", None)
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient

from core.database import create_tables, drop_tables, get_db_session
from main import app

PASSWORD = "Secret123!"


@pytest.fixture(autouse=True)
def fresh_database():
    drop_tables()
    create_tables()
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    with get_db_session() as session:
        yield session


def register(client, username, **extra):
    """Create an account and return its token, user payload and auth headers"""
    body = {
        "username": username,
        "email": f"{username}@example.com",
        "password": PASSWORD,
        "firstName": username.capitalize(),
        "lastName": "Tester",
    }
    body.update(extra)
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "token": data["token"],
        "user": data["user"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


def recipe_body(**overrides):
    body = {
        "title": "Tomato Soup",
        "description": "A warming soup made from ripe tomatoes",
        "prepTimeMinutes": 10,
        "cookTimeMinutes": 20,
        "servings": 4,
        "difficulty": "Easy",
        "instructions": ["Chop the tomatoes", "Simmer for twenty minutes"],
        "ingredients": [
            {"name": "Tomato", "quantity": 2.5, "unit": "kg"},
            {"name": "Salt", "quantity": 1, "unit": "tsp", "notes": "to taste"},
        ],
        "categoryIds": [],
        "isPublic": True,
    }
    body.update(overrides)
    return body


def create_recipe(client, account, **overrides):
    response = client.post("/api/recipes", json=recipe_body(**overrides), headers=account["headers"])
    assert response.status_code == 201, response.text
    return response.json()["recipe"]


@pytest.fixture
def alice(client):
    return register(client, "alice")


@pytest.fixture
def bob(client):
    return register(client, "bob")


@pytest.fixture
def carol(client):
    return register(client, "carol")
