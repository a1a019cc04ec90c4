"""Basic API smoke tests — health, public routes, error bodies."""

import pytest


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"
    assert data["service"] == "auth0-study-api"


@pytest.mark.asyncio
async def test_health_degraded_without_database(offline_client):
    r = await offline_client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["database"] == "unavailable"
    assert r.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_public(client):
    r = await client.get("/api/public")
    assert r.status_code == 200
    data = r.json()
    assert "no authentication required" in data["message"]
    assert data["info"]["hint"]
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_public_messages(client):
    r = await client.get("/api/public/messages")
    assert r.status_code == 200
    messages = r.json()["messages"]
    assert len(messages) == 3
    assert all(m["public"] is True for m in messages)


@pytest.mark.asyncio
async def test_unknown_route(client):
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found", "message": "Cannot GET /api/nope"}


@pytest.mark.asyncio
async def test_unknown_method_reported_as_not_found(client):
    r = await client.delete("/api/public")
    assert r.status_code == 404
    assert r.json()["message"] == "Cannot DELETE /api/public"


@pytest.mark.asyncio
async def test_unhandled_error_hides_details(app, client):
    async def boom():
        raise RuntimeError("secret connection string leaked")

    app.add_api_route("/api/boom", boom)

    r = await client.get("/api/boom")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error", "message": "Something went wrong"}
    assert "secret" not in r.text


@pytest.mark.asyncio
async def test_cors_preflight(client):
    r = await client.options(
        "/api/protected",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"
