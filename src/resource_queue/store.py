# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Typed access to the keyed store.

Store owns the key scheme and the serialization of every record type, so the
components above it deal in pydantic models and backends deal in strings.

Key scheme (one key per entity):
    res_list      ordered list of resource ids
    res:<id>      resource definition
    bk:<id>       active booking
    q:<id>        waiting queue
    sub:<id>      subscriber set
    hist:<id>     completed sessions
"""

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .backends.base import BaseBackend
from .exceptions import StorageError
from .types import (
    Booking,
    HistoryEntry,
    HistoryRecord,
    QueueEntry,
    QueueRecord,
    Resource,
    ResourceIndex,
    SubscriptionRecord,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RESOURCE_LIST_KEY = "res_list"


def resource_key(resource_id: str) -> str:
    return f"res:{resource_id}"


def booking_key(resource_id: str) -> str:
    return f"bk:{resource_id}"


def queue_key(resource_id: str) -> str:
    return f"q:{resource_id}"


def subscriptions_key(resource_id: str) -> str:
    return f"sub:{resource_id}"


def history_key(resource_id: str) -> str:
    return f"hist:{resource_id}"


class Store:
    """
    Record-level access to a backend.

    Every failure surfaces as StorageError: backend errors that already are
    StorageError propagate unchanged, anything else a backend raises and any
    record that no longer parses is wrapped.
    """

    def __init__(self, backend: BaseBackend) -> None:
        self.backend = backend

    # === Raw access ===

    async def _read(self, key: str, model: type[ModelT]) -> ModelT | None:
        try:
            raw = await self.backend.get(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {e}") from e
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Corrupt record under {key}: {e}")
            raise StorageError(f"Corrupt record under {key}") from e

    async def _write(self, key: str, record: BaseModel) -> None:
        try:
            await self.backend.set(key, record.model_dump_json())
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    async def _delete(self, key: str) -> None:
        try:
            await self.backend.delete(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    # === Directory ===

    async def get_resource_ids(self) -> list[str]:
        index = await self._read(RESOURCE_LIST_KEY, ResourceIndex)
        return index.ids if index else []

    async def save_resource_ids(self, ids: list[str]) -> None:
        await self._write(RESOURCE_LIST_KEY, ResourceIndex(ids=ids))

    async def get_resource(self, resource_id: str) -> Resource | None:
        return await self._read(resource_key(resource_id), Resource)

    async def save_resource(self, resource: Resource) -> None:
        await self._write(resource_key(resource.id), resource)

    async def delete_resource(self, resource_id: str) -> None:
        await self._delete(resource_key(resource_id))

    # === Bookings ===

    async def get_booking(self, resource_id: str) -> Booking | None:
        return await self._read(booking_key(resource_id), Booking)

    async def save_booking(self, booking: Booking) -> None:
        await self._write(booking_key(booking.resource_id), booking)

    async def delete_booking(self, resource_id: str) -> None:
        await self._delete(booking_key(resource_id))

    # === Queues ===

    async def get_queue(self, resource_id: str) -> list[QueueEntry]:
        record = await self._read(queue_key(resource_id), QueueRecord)
        return record.entries if record else []

    async def save_queue(self, resource_id: str, entries: list[QueueEntry]) -> None:
        if not entries:
            await self._delete(queue_key(resource_id))
            return
        await self._write(queue_key(resource_id), QueueRecord(entries=entries))

    async def delete_queue(self, resource_id: str) -> None:
        await self._delete(queue_key(resource_id))

    # === Subscriptions ===

    async def get_subscribers(self, resource_id: str) -> list[str]:
        record = await self._read(subscriptions_key(resource_id), SubscriptionRecord)
        return record.user_ids if record else []

    async def save_subscribers(self, resource_id: str, user_ids: list[str]) -> None:
        if not user_ids:
            await self._delete(subscriptions_key(resource_id))
            return
        await self._write(
            subscriptions_key(resource_id), SubscriptionRecord(user_ids=user_ids)
        )

    async def delete_subscribers(self, resource_id: str) -> None:
        await self._delete(subscriptions_key(resource_id))

    # === History ===

    async def get_history(self, resource_id: str) -> list[HistoryEntry]:
        record = await self._read(history_key(resource_id), HistoryRecord)
        return record.entries if record else []

    async def save_history(self, resource_id: str, entries: list[HistoryEntry]) -> None:
        await self._write(history_key(resource_id), HistoryRecord(entries=entries))

    async def delete_history(self, resource_id: str) -> None:
        await self._delete(history_key(resource_id))


__all__ = [
    "RESOURCE_LIST_KEY",
    "Store",
    "booking_key",
    "history_key",
    "queue_key",
    "resource_key",
    "subscriptions_key",
]
