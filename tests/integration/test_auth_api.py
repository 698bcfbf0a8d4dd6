"""Integration tests for authentication endpoints."""

import pytest

from fuel_ledger.auth.security import hash_refresh_token
from fuel_ledger.main import app
from tests.conftest import add_user


@pytest.fixture(autouse=True)
def _clear_overrides():
    """Clear dependency overrides after each test."""
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def operator(fake_repos):
    return add_user(fake_repos, username="operator", email="op@example.com")


async def _login(client, email="op@example.com", password="password123"):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.mark.asyncio
class TestMeEndpoint:
    async def test_me_returns_profile(self, client, fake_repos, operator):
        token = (await _login(client)).json()["accessToken"]
        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == operator.id
        assert body["role"] == "operasional"
        assert body["site"] == "GENSET"
        assert "passwordDigest" not in body
        assert "password" not in body

    async def test_unauthenticated_me(self, client):
        resp = await client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["kind"] == "Unauthorized"
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    async def test_invalid_token_me(self, client):
        client.headers["Authorization"] = "Bearer invalid.token.here"
        resp = await client.get("/api/auth/me")
        assert resp.status_code == 401

    async def test_deleted_user_me(self, admin_client, fake_repos):
        resp = await admin_client.get("/api/auth/me")
        assert resp.status_code == 404
        assert resp.json()["kind"] == "NotFound"


@pytest.mark.asyncio
class TestLoginEndpoint:
    async def test_login_success(self, client, operator):
        resp = await _login(client)
        assert resp.status_code == 200
        body = resp.json()
        assert body["accessToken"]
        assert body["refreshToken"]
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] == 15 * 60
        assert body["user"]["email"] == "op@example.com"

    async def test_login_is_case_insensitive_on_email(self, client, operator):
        resp = await _login(client, email="OP@Example.com")
        assert resp.status_code == 200

    async def test_login_wrong_password(self, client, operator):
        resp = await _login(client, password="wrong-password")
        assert resp.status_code == 401
        assert resp.json()["kind"] == "Unauthorized"

    async def test_login_unknown_email(self, client, operator):
        resp = await _login(client, email="nobody@example.com")
        assert resp.status_code == 401

    async def test_login_requires_valid_email(self, client, operator):
        resp = await client.post("/api/auth/login", json={"email": "x", "password": "p"})
        assert resp.status_code == 422
        assert resp.json()["kind"] == "ValidationError"


@pytest.mark.asyncio
class TestRefreshEndpoint:
    async def test_refresh_rotates_token(self, client, fake_repos, operator):
        first = (await _login(client)).json()

        resp = await client.post(
            "/api/auth/refresh", json={"refreshToken": first["refreshToken"]}
        )
        assert resp.status_code == 200
        second = resp.json()
        assert second["refreshToken"] != first["refreshToken"]

        old = next(
            t for t in fake_repos.tokens.tokens
            if t.token_hash == hash_refresh_token(first["refreshToken"])
        )
        assert old.revoked_at is not None

    async def test_refresh_token_is_single_use(self, client, operator):
        first = (await _login(client)).json()
        await client.post("/api/auth/refresh", json={"refreshToken": first["refreshToken"]})

        resp = await client.post(
            "/api/auth/refresh", json={"refreshToken": first["refreshToken"]}
        )
        assert resp.status_code == 401

    async def test_unknown_refresh_token(self, client, fake_repos):
        resp = await client.post("/api/auth/refresh", json={"refreshToken": "nope"})
        assert resp.status_code == 401

    async def test_access_token_is_not_a_refresh_token(self, client, operator):
        session = (await _login(client)).json()
        resp = await client.post(
            "/api/auth/refresh", json={"refreshToken": session["accessToken"]}
        )
        assert resp.status_code == 401


@pytest.mark.asyncio
class TestLogoutEndpoint:
    async def test_logout_revokes_refresh_tokens(self, client, fake_repos, operator):
        session = (await _login(client)).json()

        resp = await client.post(
            "/api/auth/logout",
            headers={"Authorization": f"Bearer {session['accessToken']}"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert all(t.revoked_at is not None for t in fake_repos.tokens.tokens)

        resp = await client.post(
            "/api/auth/refresh", json={"refreshToken": session["refreshToken"]}
        )
        assert resp.status_code == 401

    async def test_logout_requires_auth(self, client):
        resp = await client.post("/api/auth/logout")
        assert resp.status_code == 401
