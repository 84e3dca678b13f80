"""Integration tests for per-endpoint rate limiting."""

import pytest
from httpx import AsyncClient

AUTH = "/api/v1/auth"


@pytest.mark.asyncio
async def test_sixth_login_attempt_is_rejected(client: AsyncClient, create_user):
    await create_user()
    credentials = {"email": "alice@example.com", "password": "Wrong-Pass-42!"}

    for _ in range(5):
        res = await client.post(f"{AUTH}/login", json=credentials)
        assert res.status_code == 401

    res = await client.post(f"{AUTH}/login", json=credentials)

    assert res.status_code == 429
    assert res.json()["error"]["code"] == "RATE_LIMITED"
    assert res.headers["RateLimit-Limit"] == "5"
    assert res.headers["RateLimit-Remaining"] == "0"
    assert 0 < int(res.headers["Retry-After"]) <= 15 * 60


@pytest.mark.asyncio
async def test_login_limit_is_per_email(client: AsyncClient, create_user):
    await create_user()
    for _ in range(6):
        await client.post(f"{AUTH}/login", json={"email": "mallory@example.com", "password": "x"})

    res = await client.post(f"{AUTH}/login", json={"email": "alice@example.com", "password": "Correct-Horse-42!"})

    assert res.status_code == 200
    assert res.headers["RateLimit-Limit"] == "5"


@pytest.mark.asyncio
async def test_failed_validation_still_counts(client: AsyncClient):
    for _ in range(3):
        res = await client.post(f"{AUTH}/register", json={"email": "bad"})
        assert res.status_code == 400

    res = await client.post(f"{AUTH}/register", json={"email": "bad"})
    assert res.status_code == 429


@pytest.mark.asyncio
async def test_forwarded_for_selects_the_client(client: AsyncClient):
    for _ in range(3):
        await client.post(f"{AUTH}/register", json={"email": "bad"}, headers={"X-Forwarded-For": "198.51.100.1"})

    res = await client.post(
        f"{AUTH}/register", json={"email": "bad"}, headers={"X-Forwarded-For": "198.51.100.2, 10.0.0.1"}
    )

    assert res.status_code == 400


@pytest.mark.asyncio
async def test_disabled_rate_limiting(app, client: AsyncClient):
    app.state.settings = app.state.settings.model_copy(update={"rate_limit_enabled": False})

    for _ in range(5):
        res = await client.post(f"{AUTH}/register", json={"email": "bad"})
        assert res.status_code == 400
