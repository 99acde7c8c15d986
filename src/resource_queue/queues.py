# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Bounded FIFO of users waiting for a busy resource.

Waiters are not booked automatically when the resource frees up: the
front entry is popped and told it may book now. A popped user who still
wants the resource after missing that chance joins again at the back.
"""

import logging

from .clock import Clock, utc_now
from .config import ConfigSource
from .exceptions import (
    AlreadyHolderError,
    AlreadyQueuedError,
    NotFoundError,
    QueueFullError,
)
from .locks import ResourceLocks
from .notifications import Notifications, queue_joined_message
from .observability.collector import MetricsCollector
from .observability.constants import HANDOFFS_TOTAL, QUEUE_JOINS_TOTAL
from .store import Store
from .types import QueueEntry

logger = logging.getLogger(__name__)


class QueueManager:
    """
    Per-resource waiting queues.

    The manager reads the booking record straight from the store to reject
    the holder and to flag the booking once a first waiter arrives; it never
    creates or removes bookings.
    """

    def __init__(
        self,
        store: Store,
        locks: ResourceLocks,
        config_source: ConfigSource,
        notifications: Notifications,
        metrics: MetricsCollector | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.locks = locks
        self.config_source = config_source
        self.notifications = notifications
        self.metrics = metrics
        self.clock = clock

    async def join(
        self,
        resource_id: str,
        user_id: str,
        desired_minutes: int | None = None,
        purpose: str = "",
    ) -> int:
        """
        Append ``user_id`` to the queue and return its 1-based position.

        A missing or non-positive ``desired_minutes`` records the configured
        default. The first waiter during a booking triggers a one-time notice
        to the holder.

        Raises:
            NotFoundError: Unknown resource
            AlreadyHolderError: The user holds the effective booking
            AlreadyQueuedError: The user is already waiting
            QueueFullError: The queue is at capacity
        """
        config = self.config_source.get_config()
        if desired_minutes is None or desired_minutes <= 0:
            desired_minutes = config.default_queue_minutes
        notify_holder: str | None = None

        async with self.locks.hold(resource_id):
            resource = await self.store.get_resource(resource_id)
            if resource is None:
                raise NotFoundError(resource_id)

            now = self.clock()
            booking = await self.store.get_booking(resource_id)
            if booking is not None and booking.is_expired(now):
                booking = None
            if booking is not None and booking.user_id == user_id:
                raise AlreadyHolderError(resource_id, user_id)

            entries = await self.store.get_queue(resource_id)
            if any(e.user_id == user_id for e in entries):
                raise AlreadyQueuedError(resource_id, user_id)
            if len(entries) >= config.max_queue_size:
                raise QueueFullError(resource_id, config.max_queue_size)

            entries.append(
                QueueEntry(
                    resource_id=resource_id,
                    user_id=user_id,
                    desired_minutes=desired_minutes,
                    purpose=purpose.strip()[: config.max_purpose_len],
                    queued_at=now,
                )
            )
            await self.store.save_queue(resource_id, entries)
            position = len(entries)

            if booking is not None and not booking.notified_queue_joined:
                booking.notified_queue_joined = True
                await self.store.save_booking(booking)
                notify_holder = booking.user_id

        logger.debug(f"{user_id} joined queue for {resource_id} at position {position}")
        if self.metrics:
            self.metrics.inc_counter(QUEUE_JOINS_TOTAL)

        if notify_holder is not None:
            waiter_name = await self.notifications.display_name(user_id)
            await self.notifications.send(
                notify_holder,
                queue_joined_message(resource.name, waiter_name),
                kind="queue_joined",
            )
        return position

    async def leave(self, resource_id: str, user_id: str) -> None:
        """Remove ``user_id`` from the queue; not queued is not an error."""
        async with self.locks.hold(resource_id):
            await self.remove_locked(resource_id, user_id)

    async def remove_locked(self, resource_id: str, user_id: str) -> bool:
        """Remove a waiter while the caller holds the resource's lock."""
        entries = await self.store.get_queue(resource_id)
        remaining = [e for e in entries if e.user_id != user_id]
        if len(remaining) == len(entries):
            return False
        await self.store.save_queue(resource_id, remaining)
        logger.debug(f"{user_id} left queue for {resource_id}")
        return True

    async def hand_off(self, resource_id: str) -> QueueEntry | None:
        async with self.locks.hold(resource_id):
            return await self.hand_off_locked(resource_id)

    async def hand_off_locked(self, resource_id: str) -> QueueEntry | None:
        """Pop the front waiter, or return None for an empty queue."""
        entries = await self.store.get_queue(resource_id)
        if not entries:
            return None
        head, rest = entries[0], entries[1:]
        await self.store.save_queue(resource_id, rest)
        logger.debug(f"Handing {resource_id} off to {head.user_id}")
        if self.metrics:
            self.metrics.inc_counter(HANDOFFS_TOTAL)
        return head

    async def entries(self, resource_id: str) -> list[QueueEntry]:
        return await self.store.get_queue(resource_id)

    async def position(self, resource_id: str, user_id: str) -> int | None:
        """1-based position of ``user_id``, or None when not queued."""
        for index, entry in enumerate(await self.store.get_queue(resource_id), 1):
            if entry.user_id == user_id:
                return index
        return None


__all__ = ["QueueManager"]
