# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Booking ledger: the single active booking of each resource.

Every way a booking ends (explicit release, admin release, expiry) goes
through the same close-out sequence:

    1. append the finished session to the history log
    2. delete the booking record
    3. pop the front waiter from the queue

Steps run under the resource's lock; notifications about the outcome are sent
after the lock has been released.
"""

import logging
from datetime import datetime, timedelta

from .clock import Clock, utc_now
from .config import ConfigSource
from .exceptions import (
    AlreadyBookedError,
    DurationExceededError,
    ForbiddenError,
    InvalidDurationError,
    NotBookedError,
    NotFoundError,
    NotHolderError,
)
from .history import HistoryLog
from .locks import ResourceLocks
from .notifications import (
    Notifications,
    auto_released_message,
    booked_message,
    handoff_message,
    near_expiry_message,
    released_message,
)
from .observability.collector import MetricsCollector
from .observability.constants import (
    BOOKINGS_CREATED_TOTAL,
    BOOKINGS_ENDED_TOTAL,
    BOOKINGS_EXTENDED_TOTAL,
    EXPIRY_WARNINGS_TOTAL,
)
from .queues import QueueManager
from .store import Store
from .subscriptions import SubscriptionRegistry
from .types import Booking, HistoryEntry, QueueEntry

logger = logging.getLogger(__name__)


class BookingLedger:
    """
    Creates, extends and ends bookings.

    A booking whose expiry instant has passed is no longer effective:
    ``current`` hides it and a new booking may replace it, even before the
    expiry scheduler has closed it out.
    """

    def __init__(
        self,
        store: Store,
        locks: ResourceLocks,
        config_source: ConfigSource,
        queues: QueueManager,
        history: HistoryLog,
        subscriptions: SubscriptionRegistry,
        notifications: Notifications,
        metrics: MetricsCollector | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.locks = locks
        self.config_source = config_source
        self.queues = queues
        self.history = history
        self.subscriptions = subscriptions
        self.notifications = notifications
        self.metrics = metrics
        self.clock = clock

    # === Reads ===

    async def current(self, resource_id: str) -> Booking | None:
        """The effective booking, or None when absent or expired."""
        booking = await self.store.get_booking(resource_id)
        if booking is None or booking.is_expired(self.clock()):
            return None
        return booking

    async def current_raw(self, resource_id: str) -> Booking | None:
        """The stored booking regardless of expiry."""
        return await self.store.get_booking(resource_id)

    # === Mutations ===

    async def book(
        self,
        resource_id: str,
        user_id: str,
        minutes: int,
        purpose: str = "",
    ) -> Booking:
        """
        Book a free resource for ``minutes`` starting now.

        The new holder leaves the resource's queue if they were waiting, and
        subscribers other than the holder hear that the resource is taken. A
        lapsed booking the scheduler has not swept yet is closed out here and
        its holder gets the auto-release notice.

        Raises:
            NotFoundError: Unknown resource
            InvalidDurationError: Non-positive or over the maximum
            AlreadyBookedError: An effective booking exists
        """
        config = self.config_source.get_config()
        lapsed: Booking | None = None

        async with self.locks.hold(resource_id):
            resource = await self.store.get_resource(resource_id)
            if resource is None:
                raise NotFoundError(resource_id)
            if minutes <= 0 or minutes > config.max_booking_minutes:
                raise InvalidDurationError(minutes, config.max_booking_minutes)

            now = self.clock()
            existing = await self.store.get_booking(resource_id)
            if existing is not None:
                if not existing.is_expired(now):
                    raise AlreadyBookedError(resource_id, existing.user_id)
                # Not swept yet; keep the finished session in the history
                await self.history.append_locked(self._session(existing, existing.expires_at))
                lapsed = existing

            booking = Booking(
                resource_id=resource_id,
                user_id=user_id,
                purpose=purpose.strip()[: config.max_purpose_len],
                started_at=now,
                expires_at=now + timedelta(minutes=minutes),
            )
            await self.store.save_booking(booking)
            await self.queues.remove_locked(resource_id, user_id)

        logger.info(f"{resource_id} booked by {user_id} for {minutes}m")
        if self.metrics:
            self.metrics.inc_counter(BOOKINGS_CREATED_TOTAL)

        if lapsed is not None:
            if self.metrics:
                self.metrics.inc_counter(BOOKINGS_ENDED_TOTAL, labels={"reason": "expired"})
            await self.notifications.send(
                lapsed.user_id, auto_released_message(resource.name), kind="auto_released"
            )

        holder_name = await self.notifications.display_name(user_id)
        await self.subscriptions.broadcast(
            resource_id,
            booked_message(resource.name, holder_name, minutes),
            exclude=user_id,
        )
        return booking

    async def extend(self, resource_id: str, user_id: str, extra_minutes: int) -> Booking:
        """
        Push the holder's expiry back by ``extra_minutes``.

        The near-expiry warning is re-armed so the holder is warned again
        before the new expiry.

        Raises:
            NotBookedError: No effective booking
            NotHolderError: ``user_id`` is not the holder
            InvalidDurationError: ``extra_minutes`` is not positive
            DurationExceededError: The booking would exceed the maximum length
        """
        config = self.config_source.get_config()

        async with self.locks.hold(resource_id):
            booking = await self.current(resource_id)
            if booking is None:
                raise NotBookedError(resource_id)
            if booking.user_id != user_id:
                raise NotHolderError(resource_id, user_id)
            if extra_minutes <= 0:
                raise InvalidDurationError(extra_minutes)

            new_expiry = booking.expires_at + timedelta(minutes=extra_minutes)
            total = new_expiry - booking.started_at
            if total > timedelta(minutes=config.max_booking_minutes):
                raise DurationExceededError(
                    resource_id,
                    int(total.total_seconds() // 60),
                    config.max_booking_minutes,
                )

            booking.expires_at = new_expiry
            booking.notified_near_expiry = False
            await self.store.save_booking(booking)

        logger.info(f"{resource_id} extended by {user_id} for {extra_minutes}m")
        if self.metrics:
            self.metrics.inc_counter(BOOKINGS_EXTENDED_TOTAL)
        return booking

    async def release(
        self, resource_id: str, user_id: str, is_admin: bool = False
    ) -> Booking:
        """
        End the effective booking now and hand the resource to the next waiter.

        Returns the booking that was ended.

        Raises:
            NotBookedError: No effective booking
            ForbiddenError: ``user_id`` is neither the holder nor an admin
        """
        async with self.locks.hold(resource_id):
            booking = await self.current(resource_id)
            if booking is None:
                raise NotBookedError(resource_id)
            if booking.user_id != user_id and not is_admin:
                raise ForbiddenError(
                    f"User {user_id} may not release {resource_id}", user_id=user_id
                )
            next_entry = await self.close_out_locked(
                resource_id, booking, ended_at=self.clock(), reason="released"
            )
            name = await self._resource_name(resource_id)

        logger.info(f"{resource_id} released by {user_id}")
        await self.subscriptions.broadcast(resource_id, released_message(name))
        await self._notify_handoff(resource_id, name, next_entry)
        return booking

    async def close_out(
        self, resource_id: str, booking: Booking, ended_at: datetime
    ) -> QueueEntry | None:
        """Run the close-out sequence under the resource's lock."""
        async with self.locks.hold(resource_id):
            return await self.close_out_locked(resource_id, booking, ended_at)

    async def close_out_locked(
        self,
        resource_id: str,
        booking: Booking,
        ended_at: datetime,
        reason: str = "released",
    ) -> QueueEntry | None:
        """
        History append, booking delete, queue hand-off, in that order.

        The caller must hold the resource's lock. Returns the popped waiter,
        if any, for the caller to notify once the lock is released.
        """
        await self.history.append_locked(self._session(booking, ended_at))
        await self.store.delete_booking(resource_id)
        next_entry = await self.queues.hand_off_locked(resource_id)
        if self.metrics:
            self.metrics.inc_counter(BOOKINGS_ENDED_TOTAL, labels={"reason": reason})
        return next_entry

    # === Scheduler steps ===

    async def expire_if_due(self, resource_id: str, now: datetime) -> bool:
        """
        Close out the stored booking when its expiry has passed.

        The session is recorded as ending at its expiry instant, not at the
        moment the sweep noticed it. Returns True when a booking was ended.
        """
        async with self.locks.hold(resource_id):
            booking = await self.store.get_booking(resource_id)
            if booking is None or not booking.is_expired(now):
                return False
            next_entry = await self.close_out_locked(
                resource_id, booking, ended_at=booking.expires_at, reason="expired"
            )
            name = await self._resource_name(resource_id)

        logger.info(f"{resource_id} auto-released from {booking.user_id}")
        await self.notifications.send(
            booking.user_id, auto_released_message(name), kind="auto_released"
        )
        await self.subscriptions.broadcast(
            resource_id, released_message(name, expired=True)
        )
        await self._notify_handoff(resource_id, name, next_entry)
        return True

    async def warn_if_near_expiry(
        self, resource_id: str, now: datetime, window: timedelta
    ) -> bool:
        """
        Warn the holder once when fewer than ``window`` remains.

        Returns True when a warning was issued.
        """
        async with self.locks.hold(resource_id):
            booking = await self.store.get_booking(resource_id)
            if (
                booking is None
                or booking.is_expired(now)
                or booking.notified_near_expiry
                or booking.remaining(now) > window
            ):
                return False
            booking.notified_near_expiry = True
            await self.store.save_booking(booking)
            name = await self._resource_name(resource_id)

        logger.debug(f"Warning {booking.user_id} that {resource_id} expires soon")
        if self.metrics:
            self.metrics.inc_counter(EXPIRY_WARNINGS_TOTAL)
        await self.notifications.send(
            booking.user_id,
            near_expiry_message(name, booking.remaining(now)),
            kind="near_expiry",
        )
        return True

    # === Helpers ===

    @staticmethod
    def _session(booking: Booking, ended_at: datetime) -> HistoryEntry:
        return HistoryEntry(
            resource_id=booking.resource_id,
            user_id=booking.user_id,
            purpose=booking.purpose,
            started_at=booking.started_at,
            ended_at=ended_at,
        )

    async def _resource_name(self, resource_id: str) -> str:
        resource = await self.store.get_resource(resource_id)
        return resource.name if resource else resource_id

    async def _notify_handoff(
        self, resource_id: str, name: str, entry: QueueEntry | None
    ) -> None:
        if entry is None:
            return
        await self.notifications.send(
            entry.user_id,
            handoff_message(name, resource_id, entry.desired_minutes),
            kind="handoff",
        )


__all__ = ["BookingLedger"]
