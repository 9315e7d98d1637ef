"""
Tests for /api/v1/auth – register, login, refresh, /me, change-password.
"""
import pytest

from app.core.config import settings
from app.core.security import create_refresh_token
from tests.conftest import auth_headers, PASSWORD


BASE = "/api/v1/auth"

REGISTER_PAYLOAD = {
    "username": "newbie",
    "email": "newbie@test.be",
    "password": "longenough1",
    "first_name": "New",
    "last_name": "Bie",
    "phone": "+32 470 12 34 56",
    "national_number": "90.01.01-123.45",
    "address": "Rue Haute 1, Bruxelles",
}


# ── Register ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_register_creates_staff_account(client):
    resp = await client.post(f"{BASE}/register", json=REGISTER_PAYLOAD)
    assert resp.status_code == 201
    data = resp.json()
    assert data["username"] == "newbie"
    assert data["role"] == "staff"
    assert data["positions"] == []
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_ignores_requested_role(client):
    resp = await client.post(f"{BASE}/register", json={**REGISTER_PAYLOAD, "role": "manager"})
    assert resp.status_code == 201
    assert resp.json()["role"] == "staff"


@pytest.mark.asyncio
async def test_register_duplicate_username(client, staff_user):
    resp = await client.post(f"{BASE}/register", json={**REGISTER_PAYLOAD, "username": staff_user.username})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_register_missing_required_field(client):
    payload = {k: v for k, v in REGISTER_PAYLOAD.items() if k != "national_number"}
    resp = await client.post(f"{BASE}/register", json=payload)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_register_short_password(client):
    resp = await client.post(f"{BASE}/register", json={**REGISTER_PAYLOAD, "password": "short"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_register_closed(client, monkeypatch):
    monkeypatch.setattr(settings, "REGISTRATION_OPEN", False)
    resp = await client.post(f"{BASE}/register", json=REGISTER_PAYLOAD)
    assert resp.status_code == 403


# ── Login ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_login_valid(client, staff_user):
    resp = await client.post(f"{BASE}/login", json={
        "username": staff_user.username,
        "password": PASSWORD,
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_wrong_password(client, staff_user):
    resp = await client.post(f"{BASE}/login", json={
        "username": staff_user.username,
        "password": "wrongpassword",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_username(client):
    resp = await client.post(f"{BASE}/login", json={"username": "nobody", "password": PASSWORD})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(client, db, staff_user):
    staff_user.is_active = False
    await db.commit()

    resp = await client.post(f"{BASE}/login", json={
        "username": staff_user.username,
        "password": PASSWORD,
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_registered_user_can_login(client):
    await client.post(f"{BASE}/register", json=REGISTER_PAYLOAD)
    resp = await client.post(f"{BASE}/login", json={
        "username": REGISTER_PAYLOAD["username"],
        "password": REGISTER_PAYLOAD["password"],
    })
    assert resp.status_code == 200


# ── Refresh ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_refresh_valid(client, staff_user):
    resp = await client.post(f"{BASE}/refresh", json={"refresh_token": create_refresh_token(staff_user.id)})
    assert resp.status_code == 200
    data = resp.json()
    assert data["access_token"]
    assert data["refresh_token"]


@pytest.mark.asyncio
async def test_refresh_invalid_token(client):
    resp = await client.post(f"{BASE}/refresh", json={"refresh_token": "invalid.token.here"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, staff_token):
    resp = await client.post(f"{BASE}/refresh", json={"refresh_token": staff_token})
    assert resp.status_code == 401


# ── /me ───────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_me(client, staff_user, staff_token):
    resp = await client.get(f"{BASE}/me", headers=auth_headers(staff_token))
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == str(staff_user.id)
    assert data["role"] == "staff"


@pytest.mark.asyncio
async def test_me_without_token(client):
    resp = await client.get(f"{BASE}/me")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_me_with_refresh_token(client, staff_user):
    resp = await client.get(f"{BASE}/me", headers=auth_headers(create_refresh_token(staff_user.id)))
    assert resp.status_code == 401


# ── Change password ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_change_password(client, staff_user, staff_token):
    resp = await client.post(
        f"{BASE}/change-password",
        json={"current_password": PASSWORD, "new_password": "brandnew123"},
        headers=auth_headers(staff_token),
    )
    assert resp.status_code == 204

    login = await client.post(f"{BASE}/login", json={
        "username": staff_user.username,
        "password": "brandnew123",
    })
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client, staff_token):
    resp = await client.post(
        f"{BASE}/change-password",
        json={"current_password": "notmypassword", "new_password": "brandnew123"},
        headers=auth_headers(staff_token),
    )
    assert resp.status_code == 400
