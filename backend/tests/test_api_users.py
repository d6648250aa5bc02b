from __future__ import annotations

import pytest

from siscei.core.dependencies import SESSION_COOKIE_NAME


@pytest.mark.asyncio
async def test_auth_status_and_initial_registration(client, mailer):
    response = await client.get("/api/auth/status")
    assert response.json() == {"app_name": "SISCEI", "has_users": False}

    payload = {"name": "Administrador", "email": "admin@email.com", "password": "supersecret"}
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "ADMIN"
    assert body["enabled"] is True
    assert "password" not in body

    response = await client.post("/api/auth/register", json={**payload, "email": "other@email.com"})
    assert response.status_code == 400

    response = await client.get("/api/auth/status")
    assert response.json()["has_users"] is True


@pytest.mark.asyncio
async def test_login_sets_session_cookie(client, seeded_users):
    response = await client.post("/api/auth/login", json={"email": "admin@email.com", "password": "admin"})

    assert response.status_code == 200
    assert response.json()["access_token"]
    assert response.json()["expires_in"] == 480 * 60
    assert SESSION_COOKIE_NAME in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials_and_disabled_users(client, seeded_users):
    response = await client.post("/api/auth/login", json={"email": "admin@email.com", "password": "nope"})
    assert response.status_code == 401

    response = await client.post("/api/auth/login", json={"email": "enzo.user@email.com", "password": "user"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_session(client, seeded_users, sign_in):
    assert (await client.get("/api/auth/me")).status_code == 401

    sign_in(9999)
    response = await client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == "admin@email.com"


@pytest.mark.asyncio
async def test_insert_user_without_session_is_unauthorized(client, seeded_users):
    payload = {"name": "Testing user", "email": "test@user.com", "password": "password1"}

    response = await client.post("/api/users/", json=payload)

    assert response.status_code == 401
    assert (await client.get("/api/users/", params={"filters": "test@user.com"})).json()["total_elements"] == 0


@pytest.mark.asyncio
async def test_insert_user(client, seeded_users, sign_in, mailer):
    sign_in(9999)
    payload = {"name": "Testing user", "email": "test@user.com", "password": "password1"}

    response = await client.post("/api/users/", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["created"]
    assert body["enabled"] is True
    assert body["role"] == "USER"
    await mailer.aclose()
    assert [message.recipient for message in mailer.messages] == ["test@user.com"]

    duplicate = await client.post("/api/users/", json=payload)
    assert duplicate.status_code == 400


@pytest.mark.asyncio
async def test_insert_user_validates_payload(client, seeded_users, sign_in):
    sign_in(9999)
    response = await client.post("/api/users/", json={"name": "x", "email": "not-an-email", "password": "password1"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_user(client, seeded_users):
    response = await client.get("/api/users/9999")
    assert response.status_code == 200
    assert response.json()["email"] == "admin@email.com"

    assert (await client.get("/api/users/4242")).status_code == 404


@pytest.mark.asyncio
async def test_list_users(client, seeded_users):
    response = await client.get("/api/users/")
    assert response.json()["total_elements"] == 4

    response = await client.get("/api/users/", params={"filters": "user"})
    assert response.json()["total_elements"] == 2

    response = await client.get("/api/users/", params={"filters": "1000,1001,xó", "size": 2})
    body = response.json()
    assert body["total_elements"] == 3
    assert body["total_pages"] == 2
    assert [user["id"] for user in body["content"]] == [1000, 1001]


@pytest.mark.asyncio
async def test_update_user_permissions(client, seeded_users, sign_in):
    sign_in(1000)
    response = await client.put("/api/users/1000", json={"name": "Rodrigo P. Fraga"})
    assert response.status_code == 200
    assert response.json()["name"] == "Rodrigo P. Fraga"

    assert (await client.put("/api/users/1001", json={"name": "Hijacked"})).status_code == 403
    assert (await client.put("/api/users/1000", json={"role": "ADMIN"})).status_code == 403


@pytest.mark.asyncio
async def test_disable_and_enable_user(client, seeded_users, sign_in):
    sign_in(1000)
    assert (await client.post("/api/users/1001/disable")).status_code == 403

    sign_in(9999)
    response = await client.post("/api/users/1001/disable")
    assert response.status_code == 200
    assert response.json()["enabled"] is False

    response = await client.post("/api/users/1001/enable")
    assert response.json()["enabled"] is True


@pytest.mark.asyncio
async def test_change_password(client, seeded_users, sign_in):
    assert (await client.put("/api/auth/password", json={"current_password": "user", "new_password": "password2"})).status_code == 401

    sign_in(1000)
    response = await client.put(
        "/api/auth/password", json={"current_password": "wrong", "new_password": "password2"}
    )
    assert response.status_code == 400

    response = await client.put(
        "/api/auth/password", json={"current_password": "user", "new_password": "password2"}
    )
    assert response.status_code == 200

    login = await client.post("/api/auth/login", json={"email": "rodrigo.user@email.com", "password": "password2"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_non_admin_cannot_create_admin_account(client, seeded_users, sign_in):
    sign_in(1000)
    payload = {"name": "Sneaky", "email": "sneaky@email.com", "password": "password1", "role": "ADMIN"}

    response = await client.post("/api/users/", json=payload)

    assert response.status_code == 403
    assert (await client.get("/api/users/", params={"filters": "sneaky"})).json()["total_elements"] == 0


@pytest.mark.asyncio
async def test_list_users_folds_accented_letters(client, seeded_users):
    response = await client.get("/api/users/", params={"filters": "XÓ"})
    assert [user["id"] for user in response.json()["content"]] == [1002]
