# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Users watching a resource for availability changes."""

import logging

from .exceptions import AlreadySubscribedError, NotFoundError
from .locks import ResourceLocks
from .notifications import Notifications
from .store import Store

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Per-resource subscriber sets, in subscription order."""

    def __init__(
        self, store: Store, locks: ResourceLocks, notifications: Notifications
    ) -> None:
        self.store = store
        self.locks = locks
        self.notifications = notifications

    async def subscribe(self, resource_id: str, user_id: str) -> None:
        async with self.locks.hold(resource_id):
            if await self.store.get_resource(resource_id) is None:
                raise NotFoundError(resource_id)
            user_ids = await self.store.get_subscribers(resource_id)
            if user_id in user_ids:
                raise AlreadySubscribedError(resource_id, user_id)
            await self.store.save_subscribers(resource_id, [*user_ids, user_id])
        logger.debug(f"{user_id} subscribed to {resource_id}")

    async def unsubscribe(self, resource_id: str, user_id: str) -> None:
        """Stop watching; not subscribed is not an error."""
        async with self.locks.hold(resource_id):
            user_ids = await self.store.get_subscribers(resource_id)
            if user_id not in user_ids:
                return
            await self.store.save_subscribers(
                resource_id, [uid for uid in user_ids if uid != user_id]
            )
        logger.debug(f"{user_id} unsubscribed from {resource_id}")

    async def subscribers(self, resource_id: str) -> list[str]:
        return await self.store.get_subscribers(resource_id)

    async def is_subscribed(self, resource_id: str, user_id: str) -> bool:
        return user_id in await self.store.get_subscribers(resource_id)

    async def broadcast(
        self,
        resource_id: str,
        message: str,
        exclude: str | None = None,
        kind: str = "availability",
    ) -> int:
        """
        Notify every subscriber except ``exclude``.

        Must be called without holding the resource's lock. Returns the
        number of messages delivered.
        """
        recipients = [
            uid for uid in await self.store.get_subscribers(resource_id) if uid != exclude
        ]
        return await self.notifications.send_many(recipients, message, kind)


__all__ = ["SubscriptionRegistry"]
