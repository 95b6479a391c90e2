# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""iTunes Search API client for album search and tracklist lookup."""

import logging

import httpx

from albumpmp_server.api.schemas import CatalogAlbum, CatalogLookup, CatalogTrack
from albumpmp_server.config import settings

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """The catalog could not be reached or answered with a failure."""


def _cover_url(artwork_url100: str | None) -> str:
    """Swap the 100x100 thumbnail for the configured artwork size."""
    if not artwork_url100:
        return ""
    return artwork_url100.replace("100x100", settings.artwork_size)


def _to_album(item: dict) -> CatalogAlbum:
    return CatalogAlbum(
        apple_id=item["collectionId"],
        title=item.get("collectionName") or "",
        artist=item.get("artistName") or "",
        cover=_cover_url(item.get("artworkUrl100")),
        artwork_url100=item.get("artworkUrl100"),
        track_count=item.get("trackCount"),
        release_date=item.get("releaseDate"),
        genre=item.get("primaryGenreName"),
    )


def _to_track(item: dict) -> CatalogTrack:
    return CatalogTrack(
        apple_track_id=item["trackId"],
        apple_album_id=item["collectionId"],
        name=item.get("trackName") or "",
        artist=item.get("artistName") or "",
        track_number=item.get("trackNumber") or 1,
        duration_ms=item.get("trackTimeMillis") or 0,
        preview_url=item.get("previewUrl") or None,
    )


async def _get_results(path: str, params: dict, client: httpx.AsyncClient | None = None) -> list[dict]:
    """GET a catalog endpoint and return its `results` list. Raises CatalogError."""
    url = f"{settings.itunes_base_url.rstrip('/')}/{path}"
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.catalog_timeout_seconds) as own:
                r = await own.get(url, params=params)
        else:
            r = await client.get(url, params=params)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("iTunes %s failed: %s", path, e)
        raise CatalogError(str(e)) from e
    results = data.get("results") if isinstance(data, dict) else None
    return [item for item in results or [] if isinstance(item, dict)]


async def search_albums(term: str, client: httpx.AsyncClient | None = None) -> list[CatalogAlbum]:
    """Free-text album search. Only collection results are returned."""
    results = await _get_results("search", {"term": term, "entity": "album"}, client)
    return [
        _to_album(item)
        for item in results
        if item.get("wrapperType") == "collection" and item.get("collectionId")
    ]


async def lookup_album(apple_id: int, client: httpx.AsyncClient | None = None) -> CatalogLookup:
    """
    Fetch one album and its songs. The catalog answers with a mixed list;
    the collection entry becomes `album`, song entries become `tracks`.
    """
    results = await _get_results("lookup", {"id": apple_id, "entity": "song"}, client)
    album = next(
        (
            _to_album(item)
            for item in results
            if item.get("wrapperType") == "collection" and item.get("collectionId")
        ),
        None,
    )
    tracks = [
        _to_track(item)
        for item in results
        if item.get("wrapperType") == "track"
        and item.get("kind") == "song"
        and item.get("trackId")
        and item.get("collectionId")
    ]
    return CatalogLookup(album=album, tracks=tracks)
