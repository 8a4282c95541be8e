"""
Tests for categories, admin schema routes, health and the service root.
"""
from sqlalchemy import update

from conftest import create_recipe
from core.config import settings
from models.categories import Category


def test_categories_are_seeded_with_counts(client, alice):
    categories = client.get("/api/categories").json()
    names = [c["name"] for c in categories["categories"]]
    assert names == sorted(names)
    assert "Desserts" in names
    assert categories["totalCategories"] == len(names)

    desserts = next(c for c in categories["categories"] if c["name"] == "Desserts")
    create_recipe(client, alice, categoryIds=[desserts["id"]])
    create_recipe(client, alice, title="Hidden", categoryIds=[desserts["id"]], isPublic=False)

    single = client.get(f"/api/categories/{desserts['id']}").json()["category"]
    assert single["recipeCount"] == 1
    assert single["isActive"] is True


def test_inactive_categories_hidden_by_default(client, db_session):
    db_session.execute(update(Category).where(Category.name == "Snacks").values(is_active=False))
    db_session.commit()

    active = [c["name"] for c in client.get("/api/categories").json()["categories"]]
    assert "Snacks" not in active

    everything = [c["name"] for c in client.get("/api/categories", params={"active": "false"}).json()["categories"]]
    assert "Snacks" in everything


def test_unknown_category(client):
    response = client.get("/api/categories/424242")
    assert response.status_code == 404
    assert response.json()["error"] == "Category not found"


def test_admin_status_and_init(client):
    status = client.get("/api/admin/status").json()
    assert status["status"] == "connected"
    assert "recipes" in status["tables"]
    assert status["tableCount"] == len(status["tables"])

    init = client.post("/api/admin/init")
    assert init.status_code == 200
    assert init.json()["message"] == "Database initialized successfully"


def test_admin_reset_wipes_data(client, alice):
    create_recipe(client, alice)
    response = client.post("/api/admin/reset")
    assert response.status_code == 200
    assert response.json()["warning"] == "All data has been deleted"

    assert client.get("/api/recipes").json()["recipes"] == []
    assert client.get("/api/categories").json()["totalCategories"] > 0


def test_admin_force_reset(client, alice):
    response = client.post("/api/admin/force-reset")
    assert response.status_code == 200
    assert client.get("/api/admin/status").json()["tableCount"] > 0


def test_admin_key_enforced_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", "let-me-in")

    assert client.get("/api/admin/status").status_code == 403
    assert client.get("/api/admin/status", headers={"X-Admin-Key": "wrong"}).status_code == 403
    assert client.get("/api/admin/status", headers={"X-Admin-Key": "let-me-in"}).status_code == 200


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"]["status"] == "connected"
    assert body["environment"] == "testing"
    assert body["version"] == settings.VERSION


def test_health_degraded_when_database_unreachable(client, monkeypatch):
    from core import database

    monkeypatch.setattr(
        database.DatabaseHealthCheck,
        "check_connection",
        staticmethod(lambda: {"status": "disconnected", "responseTime": "0ms"}),
    )
    response = client.get("/api/health")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


def test_root_overview(client):
    body = client.get("/").json()
    assert body["service"] == settings.APP_NAME
    assert body["endpoints"]["recipes"] == "/api/recipes"
    assert body["documentation"] == "/api/docs"
