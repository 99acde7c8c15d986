# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Bounded per-resource log of completed booking sessions."""

import logging

from .config import ConfigSource
from .locks import ResourceLocks
from .store import Store
from .types import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryLog:
    """
    Append-only session history, capped at ``max_history`` entries per resource.

    ``append_locked`` is for callers that already hold the resource's lock
    (the ledger's close-out); ``append`` takes the lock itself.
    """

    def __init__(
        self, store: Store, locks: ResourceLocks, config_source: ConfigSource
    ) -> None:
        self.store = store
        self.locks = locks
        self.config_source = config_source

    async def append(self, entry: HistoryEntry) -> None:
        async with self.locks.hold(entry.resource_id):
            await self.append_locked(entry)

    async def append_locked(self, entry: HistoryEntry) -> None:
        max_history = self.config_source.get_config().max_history
        entries = await self.store.get_history(entry.resource_id)
        entries.append(entry)
        if len(entries) > max_history:
            entries = entries[-max_history:]
        await self.store.save_history(entry.resource_id, entries)
        logger.debug(
            f"History for {entry.resource_id}: {entry.user_id} "
            f"{entry.started_at.isoformat()} - {entry.ended_at.isoformat()}"
        )

    async def list(self, resource_id: str, limit: int = 0) -> list[HistoryEntry]:
        """Most recent session first (by start time); ``limit > 0`` truncates."""
        entries = sorted(
            await self.store.get_history(resource_id),
            key=lambda e: e.started_at,
            reverse=True,
        )
        if limit > 0:
            entries = entries[:limit]
        return entries


__all__ = ["HistoryLog"]
