# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Snapshot loading and statistics views built on the ranking functions."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from albumpmp_server.api.schemas import (
    AlbumResponse,
    AlbumStatsResponse,
    LeaderboardResponse,
    RankedAlbumResponse,
    RankedTrackResponse,
    TrackResponse,
)
from albumpmp_server.models import Album, Rating, Track
from albumpmp_server.services import rankings


@dataclass
class Snapshot:
    """Every album, track and rating, as loaded at one point in time."""

    albums: list[Album] = field(default_factory=list)
    tracks: list[Track] = field(default_factory=list)
    ratings: list[Rating] = field(default_factory=list)


async def load_snapshot(db: AsyncSession) -> Snapshot:
    """Load the full data set. The group is small enough to keep in memory."""
    albums = (await db.execute(select(Album).order_by(Album.created_at.desc(), Album.id.desc()))).scalars().all()
    tracks = (await db.execute(select(Track).order_by(Track.album_id, Track.track_number, Track.id))).scalars().all()
    ratings = (await db.execute(select(Rating))).scalars().all()
    return Snapshot(albums=list(albums), tracks=list(tracks), ratings=list(ratings))


def album_response(album: Album, track_count: int = 0, rating: float | None = None) -> AlbumResponse:
    return AlbumResponse(
        id=album.id,
        apple_id=album.apple_id,
        title=album.title,
        artist=album.artist,
        cover=album.cover,
        submitted_by=album.submitted_by,
        submitted_by_user_id=album.submitted_by_user_id,
        created_at=album.created_at,
        track_count=track_count,
        rating=rating,
    )


def ranked_track_response(ranked: rankings.RankedTrack, cover: str | None = None) -> RankedTrackResponse:
    return RankedTrackResponse(
        **TrackResponse.model_validate(ranked.track).model_dump(),
        average_score=ranked.average_score,
        vote_count=ranked.vote_count,
        star_score=ranked.star_score,
        cover=cover,
    )


def ranked_album_response(ranked: rankings.RankedAlbum, track_count: int = 0) -> RankedAlbumResponse:
    return RankedAlbumResponse(
        **album_response(ranked.album, track_count, ranked.average_score).model_dump(),
        average_score=ranked.average_score,
        vote_count=ranked.vote_count,
    )


def dashboard_albums(albums: Iterable[Album], tracks: Iterable[Track], ratings: list[Rating]) -> list[AlbumResponse]:
    """Albums in the given order, each with its track count and dashboard score."""
    track_counts = Counter(t.album_id for t in tracks)
    return [
        album_response(a, track_counts[a.id], rankings.album_median_for_dashboard(ratings, a.id))
        for a in albums
    ]


def build_leaderboard(
    snapshot: Snapshot,
    threshold: float = rankings.MASTERPIECE_THRESHOLD,
) -> LeaderboardResponse:
    """Best track overall, album ranking and masterpieces for one snapshot."""
    covers = {a.id: a.cover for a in snapshot.albums}
    track_counts = Counter(t.album_id for t in snapshot.tracks)
    ranked_albums = rankings.rank_albums_globally(snapshot.albums, snapshot.ratings)
    ranked_tracks = rankings.rank_tracks_globally(snapshot.tracks, snapshot.ratings)
    masterpieces = rankings.select_masterpieces(ranked_albums, ranked_tracks, threshold)
    best = rankings.best_track_globally(snapshot.tracks, snapshot.ratings)
    return LeaderboardResponse(
        best_track=ranked_track_response(best, covers.get(best.track.album_id, "")) if best else None,
        top_albums=[ranked_album_response(ra, track_counts[ra.album.id]) for ra in ranked_albums],
        masterpieces=[ranked_album_response(ra, track_counts[ra.album.id]) for ra in masterpieces],
    )


def build_album_stats(album: Album, tracks: list[Track], ratings: list[Rating]) -> AlbumStatsResponse:
    """Statistics page for one album. Tracks must be in track-number order."""
    summary = rankings.summarize_album(album, tracks, ratings)
    return AlbumStatsResponse(
        album=album_response(
            album,
            len(tracks),
            summary.average_score if summary.vote_count else None,
        ),
        average_score=summary.average_score,
        vote_count=summary.vote_count,
        best_track=ranked_track_response(summary.best_track, album.cover) if summary.best_track else None,
        tracks=[ranked_track_response(rt, album.cover) for rt in summary.tracks],
    )
