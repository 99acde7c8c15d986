# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
ResourceQueueService: the facade a host embeds.

The service wires one store, one lock registry and one notifier into the
directory, ledger, queue, subscription and history components, runs the
expiry scheduler, and adds the identity checks a host would otherwise do
itself (directory changes need a privileged user, admins may release other
users' bookings).

Example:
    >>> service = create_service(identity=StaticIdentity(admins={"root"}))
    >>> async with service:
    ...     res = await service.create_resource("root", "build-box")
    ...     await service.book(res.id, "alice", minutes=30)
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from typing_extensions import Self

from .backends.base import BaseBackend, HealthCheckResult
from .backends.memory import MemoryBackend
from .clock import Clock, utc_now
from .config import ConfigSource, QueueConfig, StaticConfigSource
from .directory import ResourceDirectory
from .exceptions import ForbiddenError, ResourceQueueError, StorageError
from .history import HistoryLog
from .ledger import BookingLedger
from .locks import ResourceLocks
from .notifications import Notifications
from .observability.collector import MetricsCollector, get_metrics_collector
from .observability.constants import REJECTIONS_TOTAL
from .protocols.identity import IdentityProtocol, StaticIdentity
from .protocols.notifier import NotifierProtocol, NullNotifier
from .queues import QueueManager
from .scheduler.expiry import ExpiryScheduler
from .store import Store
from .subscriptions import SubscriptionRegistry
from .types import (
    DEFAULT_PRESETS,
    Booking,
    BookingView,
    DurationPreset,
    HistoryView,
    QueueView,
    Resource,
    ResourceStatus,
    StatusResponse,
)

logger = logging.getLogger(__name__)


class ResourceQueueService:
    """
    User-facing operations addressed by resource id and user id.

    All components share the same Store and ResourceLocks, so every
    read-modify-write on a resource is serialized no matter which operation
    or the scheduler performs it.
    """

    def __init__(
        self,
        backend: BaseBackend,
        notifier: NotifierProtocol,
        identity: IdentityProtocol,
        config_source: ConfigSource,
        metrics: MetricsCollector | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.backend = backend
        self.config_source = config_source
        self.metrics = metrics
        self.clock = clock

        self.store = Store(backend)
        self.locks = ResourceLocks()
        self.notifications = Notifications(notifier, identity, metrics)

        self.directory = ResourceDirectory(self.store, self.locks, config_source, clock)
        self.history_log = HistoryLog(self.store, self.locks, config_source)
        self.subscriptions = SubscriptionRegistry(
            self.store, self.locks, self.notifications
        )
        self.queues = QueueManager(
            self.store, self.locks, config_source, self.notifications, metrics, clock
        )
        self.ledger = BookingLedger(
            self.store,
            self.locks,
            config_source,
            self.queues,
            self.history_log,
            self.subscriptions,
            self.notifications,
            metrics,
            clock,
        )
        self.scheduler = ExpiryScheduler(
            self.ledger, self.directory, config_source, metrics, clock
        )

    @property
    def config(self) -> QueueConfig:
        return self.config_source.get_config()

    @contextmanager
    def _rejections(self) -> Iterator[None]:
        """Count rejected operations by error class."""
        try:
            yield
        except ResourceQueueError as e:
            if self.metrics and not isinstance(e, StorageError):
                self.metrics.inc_counter(
                    REJECTIONS_TOTAL, labels={"error": type(e).__name__}
                )
            raise

    async def _require_privileged(self, user_id: str, action: str) -> None:
        if not await self.notifications.is_privileged(user_id):
            raise ForbiddenError(f"Only admins may {action}", user_id=user_id)

    # === Lifecycle ===

    def start(self) -> None:
        self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()

    async def close(self) -> None:
        """Stop the scheduler and release the backend."""
        await self.stop()
        await self.backend.close()

    async def health_check(self) -> HealthCheckResult:
        return await self.backend.health_check()

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # === Directory ===

    async def create_resource(
        self,
        actor_id: str,
        name: str,
        *,
        location: str = "",
        icon: str = "",
        description: str = "",
        metadata: dict[str, str] | None = None,
    ) -> Resource:
        with self._rejections():
            await self._require_privileged(actor_id, "create resources")
            return await self.directory.create(
                name,
                actor_id,
                location=location,
                icon=icon,
                description=description,
                metadata=metadata,
            )

    async def update_resource(
        self,
        actor_id: str,
        resource_id: str,
        *,
        name: str | None = None,
        location: str | None = None,
        icon: str | None = None,
        description: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> Resource:
        with self._rejections():
            await self._require_privileged(actor_id, "update resources")
            return await self.directory.update(
                resource_id,
                name=name,
                location=location,
                icon=icon,
                description=description,
                metadata=metadata,
            )

    async def delete_resource(self, actor_id: str, resource_id: str) -> None:
        with self._rejections():
            await self._require_privileged(actor_id, "delete resources")
            await self.directory.delete(resource_id)

    async def get_resource(self, resource_id: str) -> Resource:
        with self._rejections():
            return await self.directory.get(resource_id)

    async def list_resources(self) -> list[Resource]:
        return await self.directory.list()

    async def find_resource(self, name_or_id: str) -> Resource:
        with self._rejections():
            return await self.directory.find(name_or_id)

    # === Bookings ===

    async def book(
        self, resource_id: str, user_id: str, minutes: int, purpose: str = ""
    ) -> Booking:
        with self._rejections():
            return await self.ledger.book(resource_id, user_id, minutes, purpose)

    async def extend(self, resource_id: str, user_id: str, minutes: int) -> Booking:
        with self._rejections():
            return await self.ledger.extend(resource_id, user_id, minutes)

    async def release(self, resource_id: str, user_id: str) -> Booking:
        """Release a booking; admins may release anyone's."""
        with self._rejections():
            is_admin = await self.notifications.is_privileged(user_id)
            return await self.ledger.release(resource_id, user_id, is_admin=is_admin)

    # === Queue ===

    async def join_queue(
        self,
        resource_id: str,
        user_id: str,
        minutes: int | None = None,
        purpose: str = "",
    ) -> int:
        with self._rejections():
            return await self.queues.join(resource_id, user_id, minutes, purpose)

    async def leave_queue(self, resource_id: str, user_id: str) -> None:
        await self.queues.leave(resource_id, user_id)

    # === Subscriptions ===

    async def subscribe(self, resource_id: str, user_id: str) -> None:
        with self._rejections():
            await self.subscriptions.subscribe(resource_id, user_id)

    async def unsubscribe(self, resource_id: str, user_id: str) -> None:
        await self.subscriptions.unsubscribe(resource_id, user_id)

    # === Views ===

    async def _status_for(self, resource: Resource, user_id: str) -> ResourceStatus:
        booking = await self.ledger.current(resource.id)
        entries = await self.queues.entries(resource.id)
        subscribers = await self.subscriptions.subscribers(resource.id)

        booking_view = None
        if booking is not None:
            booking_view = BookingView(
                **booking.model_dump(),
                username=await self.notifications.display_name(booking.user_id),
            )
        queue_views = [
            QueueView(
                **entry.model_dump(),
                username=await self.notifications.display_name(entry.user_id),
            )
            for entry in entries
        ]

        return ResourceStatus(
            resource=resource,
            booking=booking_view,
            queue=queue_views,
            subscribers=len(subscribers),
            is_subscribed=user_id in subscribers,
            is_holder=booking is not None and booking.user_id == user_id,
            in_queue=any(e.user_id == user_id for e in entries),
        )

    async def status(self, resource_id: str, user_id: str) -> ResourceStatus:
        """Combined state of one resource as seen by ``user_id``."""
        with self._rejections():
            resource = await self.directory.get(resource_id)
        return await self._status_for(resource, user_id)

    async def all_statuses(self, user_id: str) -> StatusResponse:
        """Status of every resource in directory order."""
        statuses = [
            await self._status_for(resource, user_id)
            for resource in await self.directory.list()
        ]
        return StatusResponse(
            user_id=user_id,
            is_admin=await self.notifications.is_privileged(user_id),
            statuses=statuses,
        )

    async def history(
        self, resource_id: str, limit: int | None = None
    ) -> list[HistoryView]:
        """Recent sessions, newest first, with display names."""
        if limit is None:
            limit = self.config.history_page_size
        entries = await self.history_log.list(resource_id, limit)
        return [
            HistoryView(
                **entry.model_dump(),
                username=await self.notifications.display_name(entry.user_id),
            )
            for entry in entries
        ]

    def presets(self) -> list[DurationPreset]:
        """Suggested booking lengths that fit the current maximum."""
        max_minutes = self.config.max_booking_minutes
        return [p for p in DEFAULT_PRESETS if p.minutes <= max_minutes]


def create_service(
    backend: BaseBackend | None = None,
    notifier: NotifierProtocol | None = None,
    identity: IdentityProtocol | None = None,
    config: QueueConfig | ConfigSource | None = None,
    metrics: MetricsCollector | None = None,
    clock: Clock = utc_now,
) -> ResourceQueueService:
    """
    Build a service with in-memory defaults.

    Args:
        backend: Storage backend (MemoryBackend when omitted)
        notifier: Message delivery (messages are dropped when omitted)
        identity: Name and privilege lookups (nobody is privileged when omitted)
        config: A QueueConfig, a ConfigSource, or None for the defaults
        metrics: Metrics collector (the global collector when omitted)
        clock: Time source

    Returns:
        A ResourceQueueService whose scheduler is not yet started
    """
    if config is None or isinstance(config, QueueConfig):
        config_source: ConfigSource = StaticConfigSource(config)
    else:
        config_source = config

    return ResourceQueueService(
        backend=backend or MemoryBackend(),
        notifier=notifier or NullNotifier(),
        identity=identity or StaticIdentity(),
        config_source=config_source,
        metrics=metrics if metrics is not None else get_metrics_collector(),
        clock=clock,
    )


__all__ = ["ResourceQueueService", "create_service"]
