"""Keyed Lock — one asyncio.Lock per key, created on demand and dropped when idle.

Invariants:
    - Holders of the same key are serialized; holders of different keys never wait on each other
    - A key's lock is removed once no task holds or waits for it (registry does not grow unbounded)
    - Lock is released on every exit path, including cancellation

Design Decisions:
    - Reference count per key instead of WeakValueDictionary: the count is updated
      synchronously around the await, so there is no window where two tasks get
      different locks for the same key
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """Registry of per-key asyncio locks."""

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_held(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
