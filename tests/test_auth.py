# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Guest login endpoint tests."""

import asyncio

import pytest
from httpx import AsyncClient

from conftest import login

pytestmark = pytest.mark.anyio


async def test_guest_login_and_me(client: AsyncClient):
    """Guest login returns a token that identifies the user on /me."""
    headers = await login(client, "  ana  ")
    r = await client.get("/api/v1/auth/me", headers=headers)
    assert r.status_code == 200
    data = r.json()
    assert data["username"] == "ana"
    assert data["last_login_at"] is not None


async def test_same_name_resumes_same_user(client: AsyncClient):
    first = await client.get("/api/v1/auth/me", headers=await login(client, "rui"))
    second = await client.get("/api/v1/auth/me", headers=await login(client, "rui"))
    other = await client.get("/api/v1/auth/me", headers=await login(client, "rita"))
    assert first.json()["id"] == second.json()["id"]
    assert other.json()["id"] != first.json()["id"]


async def test_guest_login_rejects_blank_name(client: AsyncClient):
    r = await client.post("/api/v1/auth/guest", json={"username": "   "})
    assert r.status_code == 422


async def test_me_requires_auth(client: AsyncClient):
    """GET /auth/me without token returns 401."""
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert "detail" in r.json()


async def test_me_rejects_garbage_token(client: AsyncClient):
    r = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_guest_login_rate_limited(client: AsyncClient):
    for _ in range(10):
        r = await client.post("/api/v1/auth/guest", json={"username": "spammer"})
        assert r.status_code == 200
    r = await client.post("/api/v1/auth/guest", json={"username": "spammer"})
    assert r.status_code == 429


async def test_concurrent_logins_with_new_name_share_one_user(client: AsyncClient):
    responses = await asyncio.gather(
        *(client.post("/api/v1/auth/guest", json={"username": "bob"}) for _ in range(4))
    )
    assert [r.status_code for r in responses] == [200] * 4

    ids = set()
    for r in responses:
        me = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {r.json()['access_token']}"}
        )
        assert me.status_code == 200
        ids.add(me.json()["id"])
    assert len(ids) == 1
