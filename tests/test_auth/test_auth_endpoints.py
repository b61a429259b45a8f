"""Integration tests for the auth endpoints and bearer dependencies."""

import pytest

from flipdeck.auth.jwt import create_token_pair


@pytest.mark.asyncio
class TestRegister:
    async def test_register_returns_user_and_tokens(self, client):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "priya@example.com", "password": "password123", "name": "Priya"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "priya@example.com"
        assert data["tokens"]["token_type"] == "bearer"

    async def test_new_user_is_free(self, client):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "new@example.com", "password": "password123", "name": "New"},
        )
        token = response.json()["tokens"]["access_token"]
        role = await client.get("/api/v1/billing/role", headers={"Authorization": f"Bearer {token}"})
        assert role.json() == {"role": "free"}

    async def test_duplicate_email(self, client, test_user):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": test_user.email, "password": "password123", "name": "Dup"},
        )
        assert response.status_code == 409

    async def test_duplicate_email_other_case(self, client, test_user):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": test_user.email.upper(), "password": "password123", "name": "Dup"},
        )
        assert response.status_code == 409

    async def test_short_password(self, client):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "short@example.com", "password": "abc", "name": "Short"},
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestLogin:
    async def test_login_success(self, client, test_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "testpass123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(test_user.id)
        assert response.json()["user"]["role"] == "free"

    async def test_login_ignores_email_case(self, client, test_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email.upper(), "password": "testpass123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == test_user.email

    async def test_wrong_password(self, client, test_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "wrong-password"},
        )
        assert response.status_code == 401

    async def test_unknown_email(self, client):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": "whatever123"},
        )
        assert response.status_code == 401

    async def test_inactive_user(self, client, db_session, test_user):
        test_user.is_active = False
        await db_session.flush()
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "testpass123"},
        )
        assert response.status_code == 403


@pytest.mark.asyncio
class TestRefresh:
    async def test_refresh_issues_new_pair(self, client, test_user):
        refresh_token = create_token_pair(str(test_user.id))["refresh_token"]
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 200
        assert "access_token" in response.json()

    async def test_access_token_rejected_for_refresh(self, client, test_user):
        access_token = create_token_pair(str(test_user.id))["access_token"]
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})
        assert response.status_code == 401


@pytest.mark.asyncio
class TestMe:
    async def test_me(self, client, test_user, auth_headers):
        response = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user.email
        assert response.json()["role"] == "free"

    async def test_me_reports_pro_role(self, client, pro_headers):
        response = await client.get("/api/v1/auth/me", headers=pro_headers)
        assert response.json()["role"] == "pro"

    async def test_no_token(self, client):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

    async def test_refresh_token_not_accepted_as_access(self, client, test_user):
        refresh_token = create_token_pair(str(test_user.id))["refresh_token"]
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh_token}"})
        assert response.status_code == 401

    async def test_garbage_token(self, client):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
