# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Auth
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class GuestLogin(BaseModel):
    username: str = Field(..., max_length=64)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be empty")
        return v


class UserResponse(BaseModel):
    id: int
    username: str
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# Albums
class AlbumCreate(BaseModel):
    apple_id: int


class AlbumResponse(BaseModel):
    id: int
    apple_id: int
    title: str
    artist: str
    cover: str
    submitted_by: str
    submitted_by_user_id: int
    created_at: datetime
    track_count: int = 0
    # Dashboard score: None when nobody has rated the album yet
    rating: float | None = None

    model_config = ConfigDict(from_attributes=True)


class TrackResponse(BaseModel):
    id: int
    album_id: int
    apple_album_id: int
    name: str
    artist: str
    track_number: int
    duration_ms: int
    preview_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


# Ratings
class RatingUpsert(BaseModel):
    score: float

    @field_validator("score")
    @classmethod
    def half_star_step(cls, v: float) -> float:
        """Scores run from 1 to 5 in half-point steps."""
        if not 1 <= v <= 5 or (v * 2) != int(v * 2):
            raise ValueError("Score must be between 1 and 5 in steps of 0.5")
        return v


class RatingResponse(BaseModel):
    user_id: int
    username: str
    track_id: int
    album_id: int
    score: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Statistics
class RankedTrackResponse(TrackResponse):
    average_score: float
    vote_count: int
    star_score: float
    cover: str | None = None


class RankedAlbumResponse(AlbumResponse):
    average_score: float
    vote_count: int


class LeaderboardResponse(BaseModel):
    best_track: RankedTrackResponse | None = None
    top_albums: list[RankedAlbumResponse] = []
    masterpieces: list[RankedAlbumResponse] = []


class AlbumStatsResponse(BaseModel):
    album: AlbumResponse
    average_score: float
    vote_count: int
    best_track: RankedTrackResponse | None = None
    tracks: list[RankedTrackResponse] = []


# Catalog
class CatalogAlbum(BaseModel):
    apple_id: int
    title: str
    artist: str
    cover: str
    artwork_url100: str | None = None
    track_count: int | None = None
    release_date: str | None = None
    genre: str | None = None


class CatalogTrack(BaseModel):
    apple_track_id: int
    apple_album_id: int
    name: str
    artist: str
    track_number: int
    duration_ms: int
    preview_url: str | None = None


class CatalogLookup(BaseModel):
    album: CatalogAlbum | None = None
    tracks: list[CatalogTrack] = []
