# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Catalog client and proxy endpoint tests. No network access."""

import httpx
import pytest
from httpx import AsyncClient

from albumpmp_server.api.schemas import CatalogAlbum, CatalogLookup
from albumpmp_server.services import itunes

pytestmark = pytest.mark.anyio

COLLECTION = {
    "wrapperType": "collection",
    "collectionType": "Album",
    "collectionId": 1440857781,
    "collectionName": "In Rainbows",
    "artistName": "Radiohead",
    "artworkUrl100": "https://is1.example.test/image/100x100bb.jpg",
    "releaseDate": "2007-10-10T07:00:00Z",
    "trackCount": 10,
    "primaryGenreName": "Alternative",
}


def _song(number: int, **extra) -> dict:
    song = {
        "wrapperType": "track",
        "kind": "song",
        "collectionId": 1440857781,
        "trackId": 1440857781 + number,
        "artistName": "Radiohead",
        "trackName": f"Song {number}",
        "trackNumber": number,
        "trackTimeMillis": 200000 + number,
        "previewUrl": f"https://audio.example.test/{number}.m4a",
    }
    song.update(extra)
    return song


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_search_keeps_only_collections():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"resultCount": 2, "results": [COLLECTION, _song(1)]})

    async with _mock_client(handler) as client:
        albums = await itunes.search_albums("in rainbows", client=client)

    assert seen["path"] == "/search"
    assert seen["params"] == {"term": "in rainbows", "entity": "album"}
    assert len(albums) == 1
    album = albums[0]
    assert album.apple_id == 1440857781
    assert album.title == "In Rainbows"
    assert album.cover == "https://is1.example.test/image/600x600bb.jpg"
    assert album.artwork_url100 == COLLECTION["artworkUrl100"]
    assert album.genre == "Alternative"


async def test_lookup_splits_album_and_songs():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/lookup"
        assert request.url.params["entity"] == "song"
        results = [
            COLLECTION,
            _song(1),
            _song(2, previewUrl=None, trackTimeMillis=None),
            _song(3, kind="music-video"),
        ]
        return httpx.Response(200, json={"results": results})

    async with _mock_client(handler) as client:
        found = await itunes.lookup_album(1440857781, client=client)

    assert found.album.title == "In Rainbows"
    assert [t.track_number for t in found.tracks] == [1, 2]
    assert found.tracks[0].preview_url.endswith("1.m4a")
    assert found.tracks[1].preview_url is None
    assert found.tracks[1].duration_ms == 0


async def test_lookup_without_collection():
    async with _mock_client(lambda request: httpx.Response(200, json={"results": []})) as client:
        found = await itunes.lookup_album(1, client=client)
    assert found.album is None
    assert found.tracks == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="<html>not json</html>"),
    ],
)
async def test_upstream_failures_raise_catalog_error(response):
    async with _mock_client(lambda request: response) as client:
        with pytest.raises(itunes.CatalogError):
            await itunes.search_albums("x", client=client)


async def test_connection_error_raises_catalog_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    async with _mock_client(handler) as client:
        with pytest.raises(itunes.CatalogError):
            await itunes.lookup_album(1, client=client)


async def test_search_endpoint_missing_query(client: AsyncClient):
    for url in ("/api/v1/catalog/search", "/api/v1/catalog/search?q=%20"):
        r = await client.get(url)
        assert r.status_code == 400
        assert r.json()["detail"] == "Missing query"


async def test_lookup_endpoint_missing_id(client: AsyncClient):
    r = await client.get("/api/v1/catalog/lookup")
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing Album ID"


@pytest.mark.parametrize("value", ["abc", "0", "-5", "1.5", "  "])
async def test_lookup_endpoint_rejects_non_id(client: AsyncClient, monkeypatch, value):
    async def fake_lookup(apple_id, client=None):
        raise AssertionError("catalog must not be called")

    monkeypatch.setattr(itunes, "lookup_album", fake_lookup)
    r = await client.get("/api/v1/catalog/lookup", params={"id": value})
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing Album ID"


async def test_lookup_endpoint_passes_numeric_id(client: AsyncClient, monkeypatch):
    seen = []

    async def fake_lookup(apple_id, client=None):
        seen.append(apple_id)
        return CatalogLookup(album=None, tracks=[])

    monkeypatch.setattr(itunes, "lookup_album", fake_lookup)
    r = await client.get("/api/v1/catalog/lookup", params={"id": " 1440857781 "})
    assert r.status_code == 200
    assert seen == [1440857781]


async def test_search_endpoint(client: AsyncClient, monkeypatch):
    async def fake_search(term, client=None):
        assert term == "radiohead"
        return [CatalogAlbum(apple_id=1, title="In Rainbows", artist="Radiohead", cover="c")]

    monkeypatch.setattr(itunes, "search_albums", fake_search)
    r = await client.get("/api/v1/catalog/search", params={"q": "radiohead"})
    assert r.status_code == 200
    assert [a["title"] for a in r.json()] == ["In Rainbows"]


async def test_lookup_endpoint(client: AsyncClient, monkeypatch):
    async def fake_lookup(apple_id, client=None):
        return CatalogLookup(album=None, tracks=[])

    monkeypatch.setattr(itunes, "lookup_album", fake_lookup)
    r = await client.get("/api/v1/catalog/lookup", params={"id": 42})
    assert r.status_code == 200
    assert r.json() == {"album": None, "tracks": []}


async def test_endpoints_report_upstream_failure(client: AsyncClient, monkeypatch):
    async def broken(*args, **kwargs):
        raise itunes.CatalogError("down")

    monkeypatch.setattr(itunes, "search_albums", broken)
    monkeypatch.setattr(itunes, "lookup_album", broken)
    r = await client.get("/api/v1/catalog/search", params={"q": "x"})
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal Server Error"}
    r = await client.get("/api/v1/catalog/lookup", params={"id": 1})
    assert r.status_code == 500
