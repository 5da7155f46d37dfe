"""
Integration tests for Authentication Flow.

Verifies Register -> Login -> Me -> Refresh -> Logout with the role rules.
"""

import pytest

from swiftdrop.app.core.token_revocation import TOKEN_BLACKLIST_PREFIX
from swiftdrop.tests.helpers import auth_headers, register_user


@pytest.mark.asyncio
async def test_admin_registration_blocked(client):
    """
    Rule 1: ADMIN role cannot be created via API.
    """
    payload = {
        "email": "admin@test.com",
        "username": "admin",
        "password": "password123",
        "role": "admin"
    }
    response = await client.post("/v1/auth/register", json=payload)
    assert response.status_code == 403
    data = response.json()
    assert data["status"] == "fail"
    assert "Admin users cannot be registered" in data["message"]


@pytest.mark.asyncio
async def test_register_returns_camel_case_tokens(client):
    payload = {
        "email": "Sender@Test.com",
        "username": "sender1",
        "password": "password123",
        "role": "sender"
    }
    response = await client.post("/v1/auth/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "sender"
    assert data["email"] == "sender@test.com"
    assert data["tokenType"] == "bearer"
    assert data["accessToken"]
    assert data["refreshToken"]
    assert "access_token" not in data


@pytest.mark.asyncio
async def test_register_defaults_to_sender(client):
    response = await client.post("/v1/auth/register", json={
        "email": "plain@test.com",
        "username": "plain",
        "password": "password123",
    })
    assert response.status_code == 201
    assert response.json()["role"] == "sender"


@pytest.mark.asyncio
async def test_duplicate_username_rejected(client):
    await register_user(client, "dupe")
    response = await client.post("/v1/auth/register", json={
        "email": "other@test.com",
        "username": "dupe",
        "password": "password123",
        "role": "receiver"
    })
    assert response.status_code == 400
    assert response.json() == {"status": "fail", "message": "Username already registered"}


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client):
    await register_user(client, "first")
    response = await client.post("/v1/auth/register", json={
        "email": "FIRST@test.com",
        "username": "second",
        "password": "password123",
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_invalid_email(client):
    response = await client.post("/v1/auth/register", json={
        "email": "not-an-email",
        "username": "someone",
        "password": "password123",
    })
    assert response.status_code == 400
    assert response.json()["status"] == "fail"
    assert "email" in response.json()["message"]


@pytest.mark.asyncio
async def test_login_by_username_or_email(client):
    await register_user(client, "receiver1", "receiver")

    for identifier in ("receiver1", "receiver1@test.com"):
        response = await client.post("/v1/auth/login", json={
            "username": identifier,
            "password": "password123",
        })
        assert response.status_code == 200
        assert response.json()["role"] == "receiver"


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    await register_user(client, "sender1")
    response = await client.post("/v1/auth/login", json={
        "username": "sender1",
        "password": "wrong-password",
    })
    assert response.status_code == 401
    assert response.json() == {"status": "fail", "message": "Invalid credentials"}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"

    response = await client.get("/v1/auth/me", headers=auth_headers("garbage"))
    assert response.status_code == 401
    assert response.json()["message"] == "Could not validate credentials"


@pytest.mark.asyncio
async def test_me_returns_profile(client, sender):
    response = await client.get("/v1/auth/me", headers=auth_headers(sender["token"]))
    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "sender1"
    assert data["id"] == sender["user_id"]
    assert data["isActive"] is True
    assert "hashedPassword" not in data


@pytest.mark.asyncio
async def test_refresh_token_cannot_be_used_as_access_token(client, sender):
    response = await client.get("/v1/auth/me", headers=auth_headers(sender["refresh_token"]))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(client, sender):
    response = await client.post("/v1/auth/refresh", json={"refreshToken": sender["refresh_token"]})
    assert response.status_code == 200
    data = response.json()
    assert data["refreshToken"] != sender["refresh_token"]

    response = await client.get("/v1/auth/me", headers=auth_headers(data["accessToken"]))
    assert response.status_code == 200

    # The old refresh token was replaced by the rotation
    response = await client.post("/v1/auth/refresh", json={"refreshToken": sender["refresh_token"]})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid refresh token"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, sender):
    response = await client.post("/v1/auth/refresh", json={"refreshToken": sender["token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_tokens(client, sender, redis_mock):
    headers = auth_headers(sender["token"])

    response = await client.post("/v1/auth/logout", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"status": "success", "data": {"message": "Logged out"}}
    assert f"{TOKEN_BLACKLIST_PREFIX}{sender['token']}" in redis_mock.store

    response = await client.get("/v1/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"

    response = await client.post("/v1/auth/refresh", json={"refreshToken": sender["refresh_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_users_admin_only(client, admin, sender):
    response = await client.get("/v1/users", headers=auth_headers(sender["token"]))
    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required"

    response = await client.get("/v1/users", headers=auth_headers(admin["token"]))
    assert response.status_code == 200
    usernames = [u["username"] for u in response.json()["data"]]
    assert usernames == ["admin", "sender1"]


@pytest.mark.asyncio
async def test_inactive_user_is_forbidden(client, sender, db_session):
    from sqlalchemy import update
    from swiftdrop.app.models.user import User

    await db_session.execute(update(User).where(User.id == sender["user_id"]).values(is_active=False))
    await db_session.commit()

    response = await client.get("/v1/auth/me", headers=auth_headers(sender["token"]))
    assert response.status_code == 403
