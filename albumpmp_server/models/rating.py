# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Rating model."""

from sqlalchemy import Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from albumpmp_server.models.base import Base
from albumpmp_server.models.timestamp import TimestampMixin


class Rating(Base, TimestampMixin):
    """One user's score for one track. Resubmitting overwrites the row."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "track_id", name="ratings_user_track_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    track_id: Mapped[int] = mapped_column(ForeignKey("tracks.id"), nullable=False, index=True)
    # Denormalized from the track so album-level queries need no join
    album_id: Mapped[int] = mapped_column(ForeignKey("albums.id"), nullable=False, index=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
