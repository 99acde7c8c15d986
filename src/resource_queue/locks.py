# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Per-resource mutual exclusion.

The keyed store has no transactions, so every read-modify-write on one
resource's records runs under that resource's asyncio.Lock. Locks are created
on first use and dropped once nobody holds or waits on them.
"""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

DIRECTORY_LOCK_KEY = "__directory__"
"""Lock key guarding the resource id list. Never a valid resource id."""


class ResourceLocks:
    """
    Registry of asyncio locks keyed by resource id.

    asyncio locks are not reentrant: code that already holds a resource's
    lock must call the unlocked helpers rather than a public method that
    acquires it again.

    Example:
        >>> locks = ResourceLocks()
        >>> async with locks.hold("a1b2c3d4"):
        ...     ...
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, key: str) -> asyncio.Lock:
        """The lock for ``key``, created on first use."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self.lock_for(key)
        async with lock:
            yield

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ["DIRECTORY_LOCK_KEY", "ResourceLocks"]
