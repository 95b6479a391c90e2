# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-process change notifications for live leaderboard streams.

Writers call publish() after committing a change to albums or ratings.
Subscribers only learn that something changed and recompute from the
database, so pending notifications collapse into one.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ChangeFeed:
    """Fan-out of change notifications to any number of subscribers."""

    def __init__(self) -> None:
        self._version = 0
        self._subscribers: set[asyncio.Queue[int]] = set()

    @property
    def version(self) -> int:
        return self._version

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self) -> int:
        """Record a change and wake every subscriber. Returns the new version."""
        self._version += 1
        for queue in self._subscribers:
            if queue.full():
                continue
            queue.put_nowait(self._version)
        return self._version

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue[int]]:
        """Yield a queue that receives the latest version after each change."""
        queue: asyncio.Queue[int] = asyncio.Queue(maxsize=1)
        self._subscribers.add(queue)
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)


change_feed = ChangeFeed()
