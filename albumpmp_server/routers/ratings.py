# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Rating API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from albumpmp_server.auth import get_current_user
from albumpmp_server.database import get_db
from albumpmp_server.models import Track, User
from albumpmp_server.api.schemas import RatingResponse, RatingUpsert
from albumpmp_server.services.albums import upsert_rating
from albumpmp_server.services.change_feed import change_feed

router = APIRouter(prefix="/tracks", tags=["ratings"])


@router.put("/{track_id}/rating", response_model=RatingResponse)
async def rate_track(
    track_id: int,
    data: RatingUpsert,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> RatingResponse:
    """Rate a track. Rating the same track again replaces the earlier score."""
    result = await db.execute(select(Track).where(Track.id == track_id))
    track = result.scalar_one_or_none()
    if not track:
        raise HTTPException(status_code=404, detail="Track not found")
    rating = await upsert_rating(db, user, track, data.score)
    change_feed.publish()
    return RatingResponse.model_validate(rating)
