# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album submission, cascade delete and rating upsert.

Each function does all of its writes in the caller's session and commits once,
so a failure part way leaves nothing behind.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumpmp_server.api.schemas import CatalogAlbum, CatalogTrack
from albumpmp_server.models import Album, Rating, Track, User

logger = logging.getLogger(__name__)


async def create_album_with_tracks(
    db: AsyncSession,
    user: User,
    catalog_album: CatalogAlbum,
    catalog_tracks: list[CatalogTrack],
) -> Album:
    """Store a catalog album and its tracklist for the submitting user."""
    album = Album(
        apple_id=catalog_album.apple_id,
        title=catalog_album.title,
        artist=catalog_album.artist,
        cover=catalog_album.cover,
        submitted_by=user.username,
        submitted_by_user_id=user.id,
    )
    db.add(album)
    await db.flush()
    for t in catalog_tracks:
        db.add(
            Track(
                album_id=album.id,
                apple_album_id=t.apple_album_id,
                name=t.name,
                artist=t.artist,
                track_number=t.track_number,
                duration_ms=t.duration_ms,
                preview_url=t.preview_url,
            )
        )
    await db.commit()
    await db.refresh(album)
    logger.info("Album %s (%r) submitted by %s with %d tracks", album.id, album.title, user.username, len(catalog_tracks))
    return album


async def delete_album_cascade(db: AsyncSession, album_id: int) -> None:
    """Delete an album with its tracks and every rating tagged with it."""
    track_ids = select(Track.id).where(Track.album_id == album_id)
    await db.execute(
        delete(Rating).where((Rating.album_id == album_id) | Rating.track_id.in_(track_ids))
    )
    await db.execute(delete(Track).where(Track.album_id == album_id))
    await db.execute(delete(Album).where(Album.id == album_id))
    await db.commit()
    logger.info("Album %s deleted with its tracks and ratings", album_id)


async def upsert_rating(db: AsyncSession, user: User, track: Track, score: float) -> Rating:
    """
    Create the user's rating for a track, or overwrite the existing one.
    When a concurrent request inserts the same (user, track) row first, the
    losing insert is rolled back and applied as an update instead.
    """
    # Plain values: a rollback expires the ORM instances
    user_id, username = user.id, user.username
    track_id, album_id = track.id, track.album_id

    async def existing() -> Rating | None:
        result = await db.execute(
            select(Rating).where(Rating.user_id == user_id, Rating.track_id == track_id)
        )
        return result.scalar_one_or_none()

    def overwrite(rating: Rating) -> None:
        rating.username = username
        rating.album_id = album_id
        rating.score = score
        rating.created_at = datetime.now(timezone.utc)

    rating = await existing()
    if rating is not None:
        overwrite(rating)
        await db.commit()
    else:
        rating = Rating(
            user_id=user_id,
            username=username,
            track_id=track_id,
            album_id=album_id,
            score=score,
        )
        db.add(rating)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.debug("Rating for user %s track %s inserted concurrently; updating", user_id, track_id)
            rating = await existing()
            if rating is None:
                raise
            overwrite(rating)
            await db.commit()
    await db.refresh(rating)
    return rating
