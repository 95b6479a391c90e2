# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from albumpmp_server.models.base import Base
from albumpmp_server.models.user import User
from albumpmp_server.models.album import Album
from albumpmp_server.models.track import Track
from albumpmp_server.models.rating import Rating

__all__ = [
    "Base",
    "User",
    "Album",
    "Track",
    "Rating",
]
