import pytest
import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.db.models.user import User
from collecta.errors import InvalidInput
from collecta.services.auth_service import AuthService
from tests.helpers import register_and_login


@pytest.mark.asyncio
async def test_register_returns_profile_without_password(client):
    response = await client.post(
        "/auth/register",
        json={
            "name": "Carol",
            "username": "carol",
            "email": "carol@example.com",
            "password": "hunter22",
            "date_of_birth": "1990-04-12",
        },
    )

    body = response.json()
    assert response.status_code == 201
    assert body["success"] is True
    assert body["user"]["username"] == "carol"
    assert body["user"]["date_of_birth"] == "1990-04-12"
    assert "password" not in str(body)


@pytest.mark.asyncio
async def test_register_rejects_duplicates(client, alice):
    response = await client.post(
        "/auth/register",
        json={"name": "Other", "username": "alice", "email": "other@example.com", "password": "hunter22"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Username or email is already in use."


@pytest.mark.asyncio
async def test_register_race_on_the_same_username_is_invalid_input(session_factory, monkeypatch):
    async with session_factory() as session:
        await AuthService.register(session, "Gina", "gina", "gina@example.com", "hunter22")

    async def nothing_taken(*args, **kwargs):
        return None

    # The name was taken between the availability check and the insert.
    with monkeypatch.context() as m:
        m.setattr(AsyncSession, "scalar", nothing_taken)
        async with session_factory() as session:
            with pytest.raises(InvalidInput, match="already in use"):
                await AuthService.register(session, "Gina", "gina", "other@example.com", "hunter22")

    async with session_factory() as session:
        assert await session.scalar(sa.select(sa.func.count()).select_from(User)) == 1


@pytest.mark.asyncio
async def test_register_rejects_invalid_email(client):
    response = await client.post(
        "/auth/register",
        json={"name": "Dan", "username": "dan", "email": "not-an-email", "password": "hunter22"},
    )

    assert response.status_code == 400
    assert "email" in response.json()["error"]


@pytest.mark.asyncio
async def test_login_with_wrong_password(client, alice):
    response = await client.post("/auth/login", json={"username": "alice", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials."}


@pytest.mark.asyncio
async def test_refresh_and_logout(client):
    await register_and_login(client, "erin")
    login = await client.post("/auth/login", json={"username": "erin", "password": "s3cret-pass"})
    refresh_token = login.json()["refresh_token"]

    refreshed = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert refreshed.status_code == 200
    new_access = refreshed.json()["access_token"]

    profile = await client.get("/users/me", headers={"Authorization": f"Bearer {new_access}"})
    assert profile.json()["user"]["username"] == "erin"

    logout = await client.post("/auth/logout", json={"refresh_token": refresh_token})
    assert logout.json() == {"success": True}

    revoked = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert revoked.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token_cannot_be_used_as_access_token(client):
    await register_and_login(client, "frank")
    login = await client.post("/auth/login", json={"username": "frank", "password": "s3cret-pass"})

    response = await client.get("/users/me", headers={"Authorization": f"Bearer {login.json()['refresh_token']}"})
    assert response.status_code == 401

    access_as_refresh = await client.post("/auth/refresh", json={"refresh_token": login.json()["access_token"]})
    assert access_as_refresh.status_code == 401
