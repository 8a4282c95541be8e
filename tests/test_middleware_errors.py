"""
Tests for middleware behavior and the shared error envelope.
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.config import settings
from middleware.rate_limiting import RateLimitMiddleware
from middleware.security import SecurityMiddleware
from utils.rate_limiter import RateLimiter


def build_app(middleware, **options):
    app = FastAPI()

    @app.get("/api/ping")
    async def ping():
        return {"pong": True}

    @app.post("/api/echo")
    async def echo(payload: dict):
        return payload

    @app.post("/api/auth/login")
    async def login():
        return {"ok": True}

    @app.get("/api/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(middleware, **options)
    return app


def test_oversized_body_is_rejected():
    client = TestClient(build_app(SecurityMiddleware, max_request_size=16))
    response = client.post("/api/echo", json={"text": "x" * 64})
    assert response.status_code == 413
    assert response.json()["error"] == "Payload too large"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_security_headers_on_api_responses(client):
    response = client.get("/api/categories")
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Cache-Control"].startswith("no-store")
    assert "X-Process-Time" in response.headers


def test_each_response_gets_a_request_id(client):
    first = client.get("/api/categories").headers["X-Request-ID"]
    second = client.get("/api/categories").headers["X-Request-ID"]
    assert first and second
    assert first != second


def test_global_rate_limit():
    app = build_app(
        RateLimitMiddleware, limiter=RateLimiter(redis_url=""), global_requests=2, auth_requests=1, window_seconds=60
    )
    client = TestClient(app)

    first = client.get("/api/ping")
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert client.get("/api/ping").status_code == 200

    blocked = client.get("/api/ping")
    assert blocked.status_code == 429
    assert blocked.json()["error"] == "Too many requests"
    assert int(blocked.headers["Retry-After"]) >= 1

    assert client.get("/api/health").status_code == 200


def test_auth_rate_limit_is_stricter():
    app = build_app(
        RateLimitMiddleware, limiter=RateLimiter(redis_url=""), global_requests=10, auth_requests=1, window_seconds=60
    )
    client = TestClient(app)

    assert client.post("/api/auth/login").status_code == 200
    blocked = client.post("/api/auth/login")
    assert blocked.status_code == 429
    assert blocked.json()["error"] == "Too many authentication attempts"
    assert client.get("/api/ping").status_code == 200


def test_unknown_api_route(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "API endpoint not found"
    assert body["message"] == "Cannot GET /api/nowhere"
    assert "timestamp" in body


def test_invalid_json_body(client, alice):
    response = client.post(
        "/api/recipes",
        content="{not json",
        headers={**alice["headers"], "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON"


def test_validation_error_details(client):
    response = client.post("/api/auth/register", json={"username": "ab"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    fields = {detail["field"] for detail in body["details"]}
    assert {"username", "email", "password", "firstName"} <= fields


def test_docs_served_outside_production(client):
    assert client.get(f"{settings.API_PREFIX}/openapi.json").status_code == 200
