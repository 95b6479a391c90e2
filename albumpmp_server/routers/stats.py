# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Statistics API - leaderboards, per-album rankings and a live stream."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from albumpmp_server.config import settings
from albumpmp_server.database import async_session_maker, get_db
from albumpmp_server.models import Album, Rating, Track
from albumpmp_server.api.schemas import AlbumStatsResponse, LeaderboardResponse
from albumpmp_server.services.change_feed import ChangeFeed, change_feed
from albumpmp_server.services.leaderboard import build_album_stats, build_leaderboard, load_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(db: AsyncSession = Depends(get_db)) -> LeaderboardResponse:
    """Best track, ranked albums (rated ones only) and masterpieces."""
    snapshot = await load_snapshot(db)
    return build_leaderboard(snapshot, settings.masterpiece_threshold)


async def _current_frame() -> str:
    async with async_session_maker() as db:
        board = build_leaderboard(await load_snapshot(db), settings.masterpiece_threshold)
    return f"data: {board.model_dump_json()}\n\n"


async def leaderboard_events(
    is_disconnected: Callable[[], Awaitable[bool]],
    feed: ChangeFeed = change_feed,
    keepalive: float | None = None,
) -> AsyncIterator[str]:
    """
    SSE frames: the leaderboard on connect, a recomputed one after each
    change published on the feed, and a keepalive comment when idle.
    Ends once the client has disconnected.
    """
    if keepalive is None:
        keepalive = settings.stream_keepalive_seconds
    async with feed.subscribe() as updates:
        yield await _current_frame()
        while True:
            try:
                await asyncio.wait_for(updates.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                if await is_disconnected():
                    logger.debug("Leaderboard stream client went away")
                    break
                yield ": keepalive\n\n"
                continue
            yield await _current_frame()


@router.get("/stream")
async def leaderboard_stream(request: Request):
    """
    Stream the leaderboard via Server-Sent Events. Sends it once on connect
    and again after every album or rating change.
    """
    return StreamingResponse(
        leaderboard_events(request.is_disconnected),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/albums/{album_id}", response_model=AlbumStatsResponse)
async def album_stats(
    album_id: int,
    db: AsyncSession = Depends(get_db),
) -> AlbumStatsResponse:
    """Album mean, its best track and the full ranked tracklist."""
    result = await db.execute(select(Album).where(Album.id == album_id))
    album = result.scalar_one_or_none()
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")
    tracks = (
        await db.execute(
            select(Track).where(Track.album_id == album_id).order_by(Track.track_number, Track.id)
        )
    ).scalars().all()
    ratings = (await db.execute(select(Rating).where(Rating.album_id == album_id))).scalars().all()
    return build_album_stats(album, list(tracks), list(ratings))
