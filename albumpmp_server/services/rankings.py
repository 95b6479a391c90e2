# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Rating aggregation and ranking: pure functions over an in-memory snapshot.
# Records are duck-typed (ORM rows or anything with the same attributes):
#   ratings need .score, .track_id, .album_id; tracks need .id; albums need .id.

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from operator import attrgetter
from typing import Any

MASTERPIECE_THRESHOLD = 4.5


@dataclass(frozen=True)
class RankedTrack:
    """A track with its aggregate score. Not persisted."""

    track: Any
    average_score: float
    vote_count: int
    star_score: float


@dataclass(frozen=True)
class RankedAlbum:
    """An album with its vote-weighted aggregate score. Not persisted."""

    album: Any
    average_score: float
    vote_count: int


@dataclass(frozen=True)
class AlbumSummary:
    """Everything the per-album statistics page shows."""

    album: Any
    tracks: list[RankedTrack]
    average_score: float
    vote_count: int
    best_track: RankedTrack | None


def average_score(ratings: Iterable[Any]) -> float:
    """Arithmetic mean of the scores, or 0.0 when there are none. Not rounded."""
    scores = [r.score for r in ratings]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def star_score(average: float) -> float:
    """Round to the nearest half star. Ties go up (3.25 -> 3.5)."""
    return math.floor(average * 2 + 0.5) / 2


def _group(ratings: Iterable[Any], key: str) -> dict[Any, list[Any]]:
    groups: defaultdict[Any, list[Any]] = defaultdict(list)
    get = attrgetter(key)
    for r in ratings:
        groups[get(r)].append(r)
    return groups


def _rank(items: list) -> list:
    # sorted() is stable with reverse=True, so ties keep their input order
    return sorted(items, key=attrgetter("average_score"), reverse=True)


def _ranked_track(track: Any, track_ratings: Sequence[Any]) -> RankedTrack:
    avg = average_score(track_ratings)
    return RankedTrack(
        track=track,
        average_score=avg,
        vote_count=len(track_ratings),
        star_score=star_score(avg),
    )


def rank_tracks_within_album(tracks: Iterable[Any], ratings: Iterable[Any]) -> list[RankedTrack]:
    """
    Rank every given track by average score, best first.
    Tracks without votes are kept (average 0) and end up last, in input order,
    so pass tracks sorted by track number.
    """
    by_track = _group(ratings, "track_id")
    return _rank([_ranked_track(t, by_track.get(t.id, [])) for t in tracks])


def rank_tracks_globally(tracks: Iterable[Any], ratings: Iterable[Any]) -> list[RankedTrack]:
    """Rank the tracks that have at least one vote, best first."""
    by_track = _group(ratings, "track_id")
    return _rank([_ranked_track(t, by_track[t.id]) for t in tracks if by_track.get(t.id)])


def rank_albums_globally(albums: Iterable[Any], ratings: Iterable[Any]) -> list[RankedAlbum]:
    """
    Rank albums by the mean of every rating tagged with them (vote-weighted,
    not a mean of track means). Albums nobody has rated are left out.
    """
    by_album = _group(ratings, "album_id")
    ranked = []
    for album in albums:
        album_ratings = by_album.get(album.id)
        if not album_ratings:
            continue
        ranked.append(
            RankedAlbum(
                album=album,
                average_score=average_score(album_ratings),
                vote_count=len(album_ratings),
            )
        )
    return _rank(ranked)


def best_track_globally(tracks: Iterable[Any], ratings: Iterable[Any]) -> RankedTrack | None:
    """Highest rated track with at least one vote, or None."""
    ranked = rank_tracks_globally(tracks, ratings)
    return ranked[0] if ranked else None


def select_masterpieces(
    ranked_albums: Iterable[RankedAlbum],
    ranked_tracks: Iterable[RankedTrack],
    threshold: float = MASTERPIECE_THRESHOLD,
) -> list[RankedAlbum]:
    """
    Albums holding at least one track whose average reaches the threshold.
    The album's own mean does not matter. Order follows ranked_albums.
    """
    album_ids = {rt.track.album_id for rt in ranked_tracks if rt.average_score >= threshold}
    return [ra for ra in ranked_albums if ra.album.id in album_ids]


def album_median_for_dashboard(ratings: Iterable[Any], album_id: Any) -> float | None:
    """
    Dashboard score for an album: the arithmetic mean (despite the name) of
    all its ratings. None means unrated, which is not the same as a 0 score.
    """
    album_ratings = [r for r in ratings if r.album_id == album_id]
    if not album_ratings:
        return None
    return average_score(album_ratings)


def summarize_album(album: Any, tracks: Iterable[Any], ratings: Iterable[Any]) -> AlbumSummary:
    """Ranked tracklist plus the album mean over ratings on its tracks."""
    tracks = list(tracks)
    track_ids = {t.id for t in tracks}
    own = [r for r in ratings if r.track_id in track_ids]
    ranked = rank_tracks_within_album(tracks, own)
    best = ranked[0] if ranked and ranked[0].vote_count > 0 else None
    return AlbumSummary(
        album=album,
        tracks=ranked,
        average_score=average_score(own),
        vote_count=len(own),
        best_track=best,
    )
