"""
Tests for authentication endpoints.
"""
from datetime import timedelta

from conftest import PASSWORD, register
from services.auth_service import auth_service


def test_register_returns_token_and_lowercases_identity(client):
    response = client.post(
        "/api/auth/register",
        json={
            "username": "ChefMike",
            "email": "Mike@Example.com",
            "password": PASSWORD,
            "firstName": "Mike",
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["user"]["username"] == "chefmike"
    assert data["user"]["email"] == "mike@example.com"
    assert data["expiresIn"] == "7d"
    assert data["token"]
    assert "passwordHash" not in data["user"]
    assert "timestamp" in data


def test_register_duplicate_is_case_insensitive(client, alice):
    response = client.post(
        "/api/auth/register",
        json={"username": "ALICE", "email": "other@example.com", "password": PASSWORD, "firstName": "A"},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "User already exists"


def test_register_rejects_weak_password(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "weak", "email": "weak@example.com", "password": "password", "firstName": "W"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert any(detail["field"] == "password" for detail in body["details"])


def test_register_rejects_bad_username(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "no spaces", "email": "x@example.com", "password": PASSWORD, "firstName": "X"},
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "username"


def test_login_by_username_or_email(client, alice):
    by_name = client.post("/api/auth/login", json={"emailOrUsername": "ALICE", "password": PASSWORD})
    assert by_name.status_code == 200
    assert by_name.json()["message"] == "Login successful"

    by_email = client.post("/api/auth/login", json={"emailOrUsername": "alice@example.com", "password": PASSWORD})
    assert by_email.status_code == 200
    assert by_email.json()["user"]["id"] == alice["user"]["id"]


def test_login_invalid_credentials(client, alice):
    response = client.post("/api/auth/login", json={"emailOrUsername": "alice", "password": "Wrong123!"})
    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "Invalid credentials"
    assert body["message"] == "Email/username or password is incorrect"


def test_login_unknown_user_gives_same_error(client):
    response = client.post("/api/auth/login", json={"emailOrUsername": "ghost", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_profile_requires_token(client):
    response = client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"


def test_profile_rejects_garbage_token(client):
    response = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_expired_token_is_rejected(client, alice):
    token = auth_service.create_access_token(alice["user"]["id"], timedelta(seconds=-10))
    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_token_for_deleted_user_is_rejected(client):
    token = auth_service.create_access_token("00000000-0000-0000-0000-000000000000")
    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


def test_profile_includes_stats(client, alice, bob):
    client.post("/api/recipes", json=_minimal_recipe(), headers=alice["headers"])
    client.post("/api/users/alice/follow", headers=bob["headers"])

    response = client.get("/api/auth/profile", headers=alice["headers"])
    assert response.status_code == 200
    stats = response.json()["user"]["stats"]
    assert stats["recipeCount"] == 1
    assert stats["followersCount"] == 1
    assert stats["followingCount"] == 0
    assert stats["totalLikes"] == 0


def test_verify_token(client, alice):
    response = client.get("/api/auth/verify", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "Token is valid"
    assert response.json()["user"]["username"] == "alice"


def test_change_password_flow(client, alice):
    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "NewSecret1!", "confirmPassword": "NewSecret1!"},
        headers=alice["headers"],
    )
    assert response.status_code == 200

    old = client.post("/api/auth/login", json={"emailOrUsername": "alice", "password": PASSWORD})
    assert old.status_code == 401
    new = client.post("/api/auth/login", json={"emailOrUsername": "alice", "password": "NewSecret1!"})
    assert new.status_code == 200


def test_change_password_wrong_current(client, alice):
    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "Nope1234!", "newPassword": "NewSecret1!", "confirmPassword": "NewSecret1!"},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid current password"


def test_change_password_confirmation_mismatch(client, alice):
    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "NewSecret1!", "confirmPassword": "Different1!"},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_register_helper_accounts_are_distinct(client):
    first = register(client, "first")
    second = register(client, "second")
    assert first["user"]["id"] != second["user"]["id"]


def _minimal_recipe():
    return {
        "title": "Toast",
        "description": "Bread, but warmer and crunchier",
        "prepTimeMinutes": 1,
        "cookTimeMinutes": 3,
        "servings": 1,
        "difficulty": "Easy",
        "instructions": ["Toast the bread"],
        "ingredients": [{"name": "Bread", "quantity": 1, "unit": "slice"}],
    }
