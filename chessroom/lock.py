from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RoomLocks:
    """Per-room mutual exclusion for a single-process authority.

    Every join, move, reset and leave for a room runs inside `hold(room_id)`,
    broadcasts included, so operations on one room are totally ordered.
    A room's lock exists only while some task holds or waits on it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._locks

    @asynccontextmanager
    async def hold(self, room_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        self._users[room_id] = self._users.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._users[room_id] - 1
            if remaining:
                self._users[room_id] = remaining
            else:
                del self._users[room_id]
                del self._locks[room_id]
