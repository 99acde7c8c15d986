# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
MemoryBackend for the resource queue

This module provides an in-memory backend implementation that doesn't require Redis.
Perfect for testing, development, and single-process applications.
"""

import asyncio
import logging

from .base import BaseBackend, HealthCheckResult

logger = logging.getLogger(__name__)


class MemoryBackend(BaseBackend):
    """
    An in-memory keyed store.

    This backend provides a simple, Redis-free implementation suitable for:
    - Testing and development
    - Single-process applications
    - Hosts that persist nothing across restarts

    Records are stored as the strings the Store hands over, so callers can
    never alias a stored record by mutating an object they still hold.

    Note:
        This backend is NOT suitable for:
        - Multi-process applications
        - Anything that must survive a restart
    """

    def __init__(self, namespace: str = "resource_queue_memory") -> None:
        """
        Initialize the in-memory backend.

        Args:
            namespace: Namespace for key isolation (for compatibility)
        """
        super().__init__(namespace)
        self._records: dict[str, str] = {}

        # Async lock for thread safety
        self._lock = asyncio.Lock()

        logger.debug(f"Initialized MemoryBackend with namespace '{namespace}'")

    async def get(self, key: str) -> str | None:
        """Get the record stored under a key."""
        async with self._lock:
            return self._records.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a record under a key."""
        async with self._lock:
            self._records[key] = value

    async def delete(self, key: str) -> None:
        """Delete a key if present."""
        async with self._lock:
            self._records.pop(key, None)

    async def keys(self) -> list[str]:
        """Snapshot of every stored key, for diagnostics."""
        async with self._lock:
            return list(self._records)

    async def clear(self) -> None:
        """Drop every stored record."""
        async with self._lock:
            self._records.clear()
            logger.debug("Cleared all records")

    async def health_check(self) -> HealthCheckResult:
        """Perform health check."""
        async with self._lock:
            return HealthCheckResult(
                healthy=True,
                backend_type="memory",
                namespace=self.namespace,
                metadata={"keys": len(self._records)},
            )


__all__ = ["MemoryBackend"]
