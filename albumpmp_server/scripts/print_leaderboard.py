#!/usr/bin/env python3
# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Print the current leaderboard. Run: python -m albumpmp_server.scripts.print_leaderboard"""

import asyncio

from albumpmp_server.config import settings
from albumpmp_server.database import async_session_maker, init_db
from albumpmp_server.services import rankings
from albumpmp_server.services.leaderboard import load_snapshot


async def main():
    await init_db()
    async with async_session_maker() as session:
        snapshot = await load_snapshot(session)

    ranked_albums = rankings.rank_albums_globally(snapshot.albums, snapshot.ratings)
    if not ranked_albums:
        print("No rated albums yet.")
        return
    for position, ranked in enumerate(ranked_albums, start=1):
        a = ranked.album
        print(f"#{position:<3} {ranked.average_score:4.1f}  ({ranked.vote_count} votes)  {a.title} - {a.artist}  [{a.submitted_by}]")

    best = rankings.best_track_globally(snapshot.tracks, snapshot.ratings)
    if best:
        print(f"\nBest track: {best.track.name} - {best.track.artist}  {best.average_score:.1f}")

    ranked_tracks = rankings.rank_tracks_globally(snapshot.tracks, snapshot.ratings)
    masterpieces = rankings.select_masterpieces(ranked_albums, ranked_tracks, settings.masterpiece_threshold)
    if masterpieces:
        print(f"\nMasterpieces (a track at {settings.masterpiece_threshold}+):")
        for ranked in masterpieces:
            print(f"  {ranked.album.title} - album mean {ranked.average_score:.1f}")


if __name__ == "__main__":
    asyncio.run(main())
