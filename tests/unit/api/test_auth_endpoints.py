"""
Tests for authentication endpoints.

Tests:
- Registration and login
- Current user and logout
- Token and session validation
- Demo account bootstrap
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from core.config import settings
from core.security import create_access_token
from core.utils.datetime import now
from database.models.users import User, UserSession
from tests.helpers import auth_headers


async def register(http, username="jane", password="Password123", **extra):
    return await http.post(
        "/api/auth/register", json={"username": username, "password": password, **extra}
    )


class TestRegister:

    @pytest.mark.asyncio
    async def test_register(self, client, session_factory):
        response = await register(client, email="jane@example.com", fullName="Jane Doe")

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["username"] == "jane"
        assert data["user"]["role"] == "candidate"
        assert data["user"]["fullName"] == "Jane Doe"
        assert "password" not in str(data["user"]).lower()

        async with session_factory() as session:
            user = (await session.execute(select(User))).scalars().one()
        assert user.password_hash != "Password123"
        assert user.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_hr_role(self, client):
        response = await register(client, role="hr")

        assert response.json()["user"]["role"] == "hr"

    @pytest.mark.asyncio
    async def test_admin_role_not_self_assignable(self, client):
        response = await register(client, role="admin")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client):
        await register(client)

        response = await register(client)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_weak_password(self, client):
        response = await register(client, password="abcdefgh")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"
        assert response.json()["error"]["details"] == ["Password must contain at least one digit"]

    @pytest.mark.asyncio
    async def test_password_without_letters(self, client):
        response = await register(client, password="12345678")

        assert response.status_code == 400
        assert response.json()["error"]["details"] == ["Password must contain at least one letter"]

    @pytest.mark.asyncio
    async def test_short_password(self, client):
        response = await register(client, password="abc1")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login(self, client):
        await register(client)

        response = await client.post(
            "/api/auth/login", json={"username": "jane", "password": "Password123"}
        )

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "jane"
        assert response.json()["token"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await register(client)

        response = await client.post(
            "/api/auth/login", json={"username": "jane", "password": "Wrong1234"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        response = await client.post(
            "/api/auth/login", json={"username": "ghost", "password": "Password123"}
        )

        assert response.status_code == 401


class TestSession:

    @pytest.mark.asyncio
    async def test_me(self, client):
        token = (await register(client)).json()["token"]

        response = await client.get("/api/auth/me", headers=auth_headers(token))

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "jane"

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        response = await client.get("/api/auth/me", headers=auth_headers("not-a-jwt"))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client):
        token = (await register(client)).json()["token"]

        logout = await client.post("/api/auth/logout", headers=auth_headers(token))
        after = await client.get("/api/auth/me", headers=auth_headers(token))

        assert logout.status_code == 200
        assert after.status_code == 401

    @pytest.mark.asyncio
    async def test_other_sessions_survive_logout(self, client):
        first = (await register(client)).json()["token"]
        second = (
            await client.post("/api/auth/login", json={"username": "jane", "password": "Password123"})
        ).json()["token"]

        await client.post("/api/auth/logout", headers=auth_headers(first))

        assert (await client.get("/api/auth/me", headers=auth_headers(second))).status_code == 200

    @pytest.mark.asyncio
    async def test_expired_session(self, client, session_factory):
        token = (await register(client)).json()["token"]
        async with session_factory() as session:
            login_session = (await session.execute(select(UserSession))).scalars().one()
            login_session.expires_at = now() - timedelta(minutes=1)
            await session.commit()

        response = await client.get("/api/auth/me", headers=auth_headers(token))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_without_session(self, client):
        user_id = (await register(client)).json()["user"]["id"]
        token = create_access_token(user_id, "unknown-session", "candidate")

        response = await client.get("/api/auth/me", headers=auth_headers(token))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_rejected_on_optional_endpoints(self, client):
        response = await client.post(
            "/api/interviews/start", headers=auth_headers("not-a-jwt")
        )

        assert response.status_code == 401


class TestInitDemo:

    @pytest.mark.asyncio
    async def test_creates_accounts_once(self, client):
        first = await client.post("/api/auth/init-demo")
        second = await client.post("/api/auth/init-demo")

        assert first.status_code == 200
        assert sorted(first.json()["created"]) == ["demo_candidate", "demo_hr"]
        assert second.json()["created"] == []

        login = await client.post(
            "/api/auth/login",
            json={"username": "demo_hr", "password": settings.demo_password},
        )
        assert login.json()["user"]["role"] == "hr"

    @pytest.mark.asyncio
    async def test_disabled_in_production(self, client, monkeypatch):
        monkeypatch.setattr(settings, "app_env", "production")

        response = await client.post("/api/auth/init-demo")

        assert response.status_code == 403
