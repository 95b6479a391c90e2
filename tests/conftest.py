# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. API tests run against a throwaway SQLite database."""

import os
import tempfile
import uuid

# Must be set before albumpmp_server.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.gettempdir(), f"albumpmp-test-{uuid.uuid4().hex[:8]}.db"
)

import pytest
from httpx import ASGITransport, AsyncClient

from albumpmp_server.api.schemas import CatalogAlbum, CatalogLookup, CatalogTrack
from albumpmp_server.database import engine, init_db
from albumpmp_server.main import app
from albumpmp_server.models import Base
from albumpmp_server.rate_limit import reset_rate_limits
from albumpmp_server.services import itunes


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
async def client():
    await init_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def login(client: AsyncClient, username: str) -> dict[str, str]:
    """Guest login; returns request headers carrying the bearer token."""
    r = await client.post("/api/v1/auth/guest", json={"username": username})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def make_lookup(apple_id: int = 1001, titles: tuple[str, ...] = ("One", "Two", "Three")) -> CatalogLookup:
    """Catalog answer for a small album."""
    return CatalogLookup(
        album=CatalogAlbum(
            apple_id=apple_id,
            title=f"Album {apple_id}",
            artist="Some Band",
            cover=f"https://example.test/{apple_id}/600x600bb.jpg",
        ),
        tracks=[
            CatalogTrack(
                apple_track_id=apple_id * 100 + n,
                apple_album_id=apple_id,
                name=title,
                artist="Some Band",
                track_number=n,
                duration_ms=180000 + n,
                preview_url=f"https://example.test/{apple_id}/{n}.m4a" if n % 2 else None,
            )
            for n, title in enumerate(titles, start=1)
        ],
    )


@pytest.fixture
def fake_catalog(monkeypatch):
    """Serve lookups from make_lookup() instead of the network."""

    async def fake_lookup(apple_id: int, client=None) -> CatalogLookup:
        return make_lookup(apple_id)

    monkeypatch.setattr(itunes, "lookup_album", fake_lookup)
    return fake_lookup


async def submit_album(client: AsyncClient, headers: dict[str, str], apple_id: int = 1001) -> dict:
    r = await client.post("/api/v1/albums", json={"apple_id": apple_id}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()
