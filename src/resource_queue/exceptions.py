# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the resource queue library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from ResourceQueueError, making it easy to catch
every rejection raised by a core operation with a single except clause.

Every core operation validates before it writes, so catching one of these
exceptions means no state was changed by the failed call.
"""


class ResourceQueueError(Exception):
    """Base exception for all resource queue errors.

    Example:
        try:
            await service.book(resource_id, user_id, minutes=30)
        except ResourceQueueError as e:
            await reply(user_id, str(e))
    """

    pass


class NotFoundError(ResourceQueueError):
    """Raised when a resource does not exist.

    Attributes:
        resource_id: The identifier (or lookup text) that was not found.
    """

    def __init__(self, resource_id: str, message: str | None = None):
        super().__init__(message or f"Resource not found: {resource_id}")
        self.resource_id = resource_id


class AmbiguousResourceError(ResourceQueueError):
    """Raised when a name lookup matches more than one resource.

    Attributes:
        query: The lookup text supplied by the caller.
        candidates: Names of every resource that matched.
    """

    def __init__(self, query: str, candidates: list[str]):
        super().__init__(
            f"Ambiguous resource '{query}': matches {', '.join(candidates)}"
        )
        self.query = query
        self.candidates = candidates


class AlreadyBookedError(ResourceQueueError):
    """Raised when booking a resource that already has an effective booking.

    Attributes:
        resource_id: The busy resource.
        holder_id: The user currently holding it.
    """

    def __init__(self, resource_id: str, holder_id: str):
        super().__init__(f"Resource {resource_id} is already booked by {holder_id}")
        self.resource_id = resource_id
        self.holder_id = holder_id


class NotBookedError(ResourceQueueError):
    """Raised when an operation needs an effective booking and there is none."""

    def __init__(self, resource_id: str):
        super().__init__(f"Resource {resource_id} is not booked")
        self.resource_id = resource_id


class NotHolderError(ResourceQueueError):
    """Raised when a user who does not hold the booking tries to change it."""

    def __init__(self, resource_id: str, user_id: str):
        super().__init__(f"User {user_id} does not hold resource {resource_id}")
        self.resource_id = resource_id
        self.user_id = user_id


class ForbiddenError(ResourceQueueError):
    """Raised when an ownership or privilege check fails.

    Attributes:
        user_id: The user that was refused.
    """

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message)
        self.user_id = user_id


class InvalidDurationError(ResourceQueueError):
    """Raised when a requested duration is non-positive or above the maximum.

    Attributes:
        minutes: The rejected duration in minutes.
        max_minutes: The configured maximum at the time of the call.
    """

    def __init__(self, minutes: int, max_minutes: int | None = None):
        if max_minutes is not None and minutes > 0:
            message = f"Duration {minutes}m exceeds the maximum of {max_minutes}m"
        else:
            message = f"Duration must be positive, got {minutes}m"
        super().__init__(message)
        self.minutes = minutes
        self.max_minutes = max_minutes


class DurationExceededError(ResourceQueueError):
    """Raised when an extension would push a booking past the maximum length.

    Attributes:
        resource_id: The booked resource.
        total_minutes: Booking length the extension would have produced.
        max_minutes: The configured maximum booking length.
    """

    def __init__(self, resource_id: str, total_minutes: int, max_minutes: int):
        super().__init__(
            f"Extending {resource_id} to {total_minutes}m exceeds "
            f"the maximum of {max_minutes}m"
        )
        self.resource_id = resource_id
        self.total_minutes = total_minutes
        self.max_minutes = max_minutes


class AlreadyHolderError(ResourceQueueError):
    """Raised when the current holder tries to queue for their own resource."""

    def __init__(self, resource_id: str, user_id: str):
        super().__init__(f"User {user_id} already holds resource {resource_id}")
        self.resource_id = resource_id
        self.user_id = user_id


class AlreadyQueuedError(ResourceQueueError):
    """Raised when a user joins a queue they are already waiting in."""

    def __init__(self, resource_id: str, user_id: str):
        super().__init__(f"User {user_id} is already queued for {resource_id}")
        self.resource_id = resource_id
        self.user_id = user_id


class AlreadySubscribedError(ResourceQueueError):
    """Raised when a user subscribes twice to the same resource."""

    def __init__(self, resource_id: str, user_id: str):
        super().__init__(f"User {user_id} is already subscribed to {resource_id}")
        self.resource_id = resource_id
        self.user_id = user_id


class QueueFullError(ResourceQueueError):
    """Raised when a resource queue is at its configured capacity.

    This is a backpressure mechanism to keep per-resource records bounded.

    Attributes:
        resource_id: The resource whose queue is full.
        capacity: The configured queue capacity.
    """

    def __init__(self, resource_id: str, capacity: int):
        super().__init__(f"Queue for {resource_id} is full (max {capacity})")
        self.resource_id = resource_id
        self.capacity = capacity


class CapacityExceededError(ResourceQueueError):
    """Raised when the directory already holds the maximum number of resources."""

    def __init__(self, limit: int):
        super().__init__(f"Maximum number of resources ({limit}) reached")
        self.limit = limit


class InvalidFieldError(ResourceQueueError, ValueError):
    """Raised when a resource field is empty or longer than its cap.

    Attributes:
        field: Name of the offending field.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class ConfigurationError(ResourceQueueError, ValueError):
    """Raised when configuration values are invalid.

    Common causes include non-positive limits or a warning window that is
    not shorter than the maximum booking length.
    """

    pass


class StorageError(ResourceQueueError):
    """Raised when the keyed store fails or returns a corrupt record.

    Storage errors are never retried by the core. Request handlers surface
    them as a generic failure; the expiry scheduler skips the resource and
    tries again on its next tick.
    """

    pass


class BackendConnectionError(StorageError):
    """Raised when connection to the storage backend fails.

    Example:
        try:
            async with RedisBackend(redis_url) as backend:
                ...
        except BackendConnectionError:
            logger.warning("Redis unavailable, falling back to memory backend")
            backend = MemoryBackend()
    """

    pass


class BackendOperationError(StorageError):
    """Raised when a single backend operation fails on an open connection."""

    pass


__all__ = [
    "AlreadyBookedError",
    "AlreadyHolderError",
    "AlreadyQueuedError",
    "AlreadySubscribedError",
    "AmbiguousResourceError",
    "BackendConnectionError",
    "BackendOperationError",
    "CapacityExceededError",
    "ConfigurationError",
    "DurationExceededError",
    "ForbiddenError",
    "InvalidDurationError",
    "InvalidFieldError",
    "NotBookedError",
    "NotFoundError",
    "NotHolderError",
    "QueueFullError",
    "ResourceQueueError",
    "StorageError",
]
