# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Resource Queue - Time-limited exclusive bookings for shared resources.

This library lets a group of users book shared named resources (machines,
license seats, rooms) for a bounded time, wait in a FIFO queue while a
resource is busy, subscribe to availability changes and review past usage.

Key Features:
    - Exclusive bookings with a configurable maximum length and extensions
    - Bounded per-resource waiting queues with hand-off on release
    - Background auto-release and near-expiry warnings
    - Per-resource history of completed sessions
    - Multiple backend options (memory, Redis)
    - Host-agnostic design with protocol-based notifier and identity

Quick Start:
    >>> from resource_queue import StaticIdentity, create_service
    >>>
    >>> class PrintNotifier:
    ...     async def notify_user(self, user_id: str, message: str) -> None:
    ...         print(user_id, message)
    >>>
    >>> service = create_service(
    ...     notifier=PrintNotifier(), identity=StaticIdentity(admins={"root"})
    ... )
    >>> async with service:
    ...     gpu = await service.create_resource("root", "gpu-01")
    ...     await service.book(gpu.id, "alice", minutes=60)

Main Exports:
    - ResourceQueueService, create_service: The service facade
    - MemoryBackend, RedisBackend: Storage backends
    - QueueConfig, StaticConfigSource, EnvConfigSource: Configuration
    - NotifierProtocol, IdentityProtocol: Host boundary protocols

Note: RedisBackend requires the 'redis' extra. Install with:
    pip install resource-queue[redis]

Version: 1.0.0
"""

__version__ = "1.0.0"

from typing import TYPE_CHECKING

from .backends import (
    BaseBackend,
    HealthCheckResult,
    MemoryBackend,
)
from .config import (
    ConfigSource,
    EnvConfigSource,
    QueueConfig,
    StaticConfigSource,
)
from .directory import ResourceDirectory
from .exceptions import (
    AlreadyBookedError,
    AlreadyHolderError,
    AlreadyQueuedError,
    AlreadySubscribedError,
    AmbiguousResourceError,
    BackendConnectionError,
    BackendOperationError,
    CapacityExceededError,
    ConfigurationError,
    DurationExceededError,
    ForbiddenError,
    InvalidDurationError,
    InvalidFieldError,
    NotBookedError,
    NotFoundError,
    NotHolderError,
    QueueFullError,
    ResourceQueueError,
    StorageError,
)
from .history import HistoryLog
from .ledger import BookingLedger
from .locks import ResourceLocks
from .notifications import Notifications
from .protocols import (
    IdentityProtocol,
    NotifierProtocol,
    NullNotifier,
    StaticIdentity,
)
from .queues import QueueManager
from .scheduler import ExpiryScheduler, SweepResult
from .service import ResourceQueueService, create_service
from .store import Store
from .subscriptions import SubscriptionRegistry
from .types import (
    DEFAULT_PRESETS,
    Booking,
    BookingView,
    DurationPreset,
    HistoryEntry,
    HistoryView,
    QueueEntry,
    QueueView,
    Resource,
    ResourceStatus,
    StatusResponse,
)

# Lazy import for optional redis backend
if TYPE_CHECKING:
    from .backends import RedisBackend

__all__ = [
    "DEFAULT_PRESETS",
    # Exceptions
    "AlreadyBookedError",
    "AlreadyHolderError",
    "AlreadyQueuedError",
    "AlreadySubscribedError",
    "AmbiguousResourceError",
    "BackendConnectionError",
    "BackendOperationError",
    # Backends
    "BaseBackend",
    # Types
    "Booking",
    # Components
    "BookingLedger",
    "BookingView",
    "CapacityExceededError",
    # Config
    "ConfigSource",
    "ConfigurationError",
    "DurationExceededError",
    "DurationPreset",
    "EnvConfigSource",
    "ExpiryScheduler",
    "ForbiddenError",
    "HealthCheckResult",
    "HistoryEntry",
    "HistoryLog",
    "HistoryView",
    # Protocols
    "IdentityProtocol",
    "InvalidDurationError",
    "InvalidFieldError",
    "MemoryBackend",
    "NotBookedError",
    "NotFoundError",
    "NotHolderError",
    "Notifications",
    "NotifierProtocol",
    "NullNotifier",
    "QueueConfig",
    "QueueEntry",
    "QueueFullError",
    "QueueManager",
    "QueueView",
    "RedisBackend",  # Lazy loaded - requires redis extra
    "Resource",
    "ResourceDirectory",
    "ResourceLocks",
    "ResourceQueueError",
    # Service
    "ResourceQueueService",
    "ResourceStatus",
    "StaticConfigSource",
    "StaticIdentity",
    "StatusResponse",
    "StorageError",
    "Store",
    "SubscriptionRegistry",
    "SweepResult",
    "create_service",
]


def __getattr__(name: str) -> type:
    """Lazy import for optional redis backend."""
    if name == "RedisBackend":
        from .backends import RedisBackend

        return RedisBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
