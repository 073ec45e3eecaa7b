"""
Blogwrite Backend — Auth Endpoint Tests
========================================

What:  Registration, login, /me and the 401 paths of the bearer dependency.
How:   httpx AsyncClient against a per-test app on SQLite.
"""

import pytest
from datetime import timedelta
from uuid import uuid4


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_token_and_user(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "Alice@Example.com", "password": "secret123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["token"]
        assert body["user"]["username"] == "alice"
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["bio"] == ""
        assert "createdAt" in body["user"]
        assert "password" not in body["user"]
        assert "passwordHash" not in body["user"]

    @pytest.mark.asyncio
    async def test_duplicate_username(self, test_client, register_user):
        await register_user("alice")
        response = await test_client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "other@example.com", "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"

    @pytest.mark.asyncio
    async def test_duplicate_email_case_insensitive(self, test_client, register_user):
        await register_user("alice")
        response = await test_client.post(
            "/api/auth/register",
            json={"username": "alice2", "email": "ALICE@example.com", "password": "secret123"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"username": "al", "email": "a@example.com", "password": "secret123"}, "username"),
            ({"username": "bad name", "email": "a@example.com", "password": "secret123"}, "username"),
            ({"username": "alice", "email": "not-an-email", "password": "secret123"}, "email"),
            ({"username": "alice", "email": "a@example.com", "password": "123"}, "password"),
        ],
    )
    async def test_invalid_input(self, test_client, payload, field):
        response = await test_client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert any(e["field"] == field for e in body["errors"])


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, test_client, register_user):
        user, _ = await register_user("alice", password="secret123")
        response = await test_client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "secret123"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"]["id"] == user["id"]

        me = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert me.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, register_user):
        await register_user("alice")
        response = await test_client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_email(self, test_client):
        """Same answer as a wrong password."""
        response = await test_client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "secret123"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestMe:

    @pytest.mark.asyncio
    async def test_me(self, test_client, register_user):
        user, headers = await register_user("alice")
        response = await test_client.get("/api/auth/me", headers=headers)
        assert response.status_code == 200
        me = response.json()["user"]
        assert me["id"] == user["id"]
        assert me["username"] == "alice"
        assert me["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        body = response.json()
        assert body["error"] == "unauthenticated"
        assert body["message"] == "No token, authorization denied"

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client):
        response = await test_client.get(
            "/api/auth/me", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Token is not valid"

    @pytest.mark.asyncio
    async def test_expired_token(self, test_client, register_user, app):
        user, _ = await register_user("alice")
        token = app.state.token_manager.create_access_token(
            user["id"], "alice", expires_delta=timedelta(seconds=-10)
        )
        response = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(self, test_client, app):
        token = app.state.token_manager.create_access_token(uuid4(), "ghost")
        response = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
