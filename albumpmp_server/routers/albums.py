# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album API routes - dashboard list, detail, submission and removal."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumpmp_server.auth import get_current_user
from albumpmp_server.database import get_db
from albumpmp_server.models import Album, Rating, Track, User
from albumpmp_server.api.schemas import AlbumCreate, AlbumResponse, TrackResponse
from albumpmp_server.services import itunes, rankings
from albumpmp_server.services.albums import create_album_with_tracks, delete_album_cascade
from albumpmp_server.services.change_feed import change_feed
from albumpmp_server.services.leaderboard import album_response, dashboard_albums, load_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/albums", tags=["albums"])


async def _get_album_or_404(db: AsyncSession, album_id: int) -> Album:
    result = await db.execute(select(Album).where(Album.id == album_id))
    album = result.scalar_one_or_none()
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")
    return album


async def _album_with_score(db: AsyncSession, album: Album) -> AlbumResponse:
    track_count = await db.scalar(
        select(func.count()).select_from(Track).where(Track.album_id == album.id)
    ) or 0
    ratings = (await db.execute(select(Rating).where(Rating.album_id == album.id))).scalars().all()
    return album_response(album, track_count, rankings.album_median_for_dashboard(ratings, album.id))


@router.get("", response_model=list[AlbumResponse])
async def list_albums(db: AsyncSession = Depends(get_db)) -> list[AlbumResponse]:
    """All albums, newest first, with their dashboard score (null when unrated)."""
    snapshot = await load_snapshot(db)
    return dashboard_albums(snapshot.albums, snapshot.tracks, snapshot.ratings)


@router.get("/mine", response_model=AlbumResponse)
async def get_my_album(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AlbumResponse:
    """The album the current user submitted."""
    result = await db.execute(select(Album).where(Album.submitted_by_user_id == user.id))
    album = result.scalar_one_or_none()
    if not album:
        raise HTTPException(status_code=404, detail="You have not submitted an album")
    return await _album_with_score(db, album)


@router.get("/{album_id}", response_model=AlbumResponse)
async def get_album(
    album_id: int,
    db: AsyncSession = Depends(get_db),
) -> AlbumResponse:
    """Get album by ID."""
    album = await _get_album_or_404(db, album_id)
    return await _album_with_score(db, album)


@router.get("/{album_id}/tracks", response_model=list[TrackResponse])
async def get_album_tracks(
    album_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[TrackResponse]:
    """Tracks of an album in track-number order."""
    await _get_album_or_404(db, album_id)
    result = await db.execute(
        select(Track).where(Track.album_id == album_id).order_by(Track.track_number, Track.id)
    )
    return [TrackResponse.model_validate(t) for t in result.scalars().all()]


@router.get("/{album_id}/ratings/me", response_model=dict[int, float])
async def get_my_album_ratings(
    album_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[int, float]:
    """Current user's scores on this album, keyed by track id."""
    await _get_album_or_404(db, album_id)
    result = await db.execute(
        select(Rating.track_id, Rating.score).where(
            Rating.album_id == album_id,
            Rating.user_id == user.id,
        )
    )
    return {track_id: score for track_id, score in result.all()}


@router.post("", response_model=AlbumResponse, status_code=status.HTTP_201_CREATED)
async def submit_album(
    data: AlbumCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AlbumResponse:
    """Submit a catalog album with its tracklist. One album per user."""
    existing = await db.scalar(select(Album.id).where(Album.submitted_by_user_id == user.id))
    if existing is not None:
        raise HTTPException(status_code=409, detail="You have already submitted an album")
    try:
        found = await itunes.lookup_album(data.apple_id)
    except itunes.CatalogError as e:
        logger.error("Catalog lookup for %s failed: %s", data.apple_id, e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
    if found.album is None:
        raise HTTPException(status_code=404, detail="Album not found in catalog")
    try:
        album = await create_album_with_tracks(db, user, found.album, found.tracks)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="You have already submitted an album")
    change_feed.publish()
    return album_response(album, len(found.tracks))


@router.delete("/{album_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_album(
    album_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete own album together with its tracks and ratings."""
    album = await _get_album_or_404(db, album_id)
    if album.submitted_by_user_id != user.id:
        raise HTTPException(status_code=403, detail="Only the submitter can delete this album")
    await delete_album_cascade(db, album.id)
    change_feed.publish()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
