"""Tests for the typed Store layer over a backend."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from resource_queue.backends.memory import MemoryBackend
from resource_queue.exceptions import BackendConnectionError, StorageError
from resource_queue.store import Store
from resource_queue.types import Booking, HistoryEntry, QueueEntry, Resource

NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return Store(backend)


def _booking(resource_id: str = "r1") -> Booking:
    return Booking(
        resource_id=resource_id,
        user_id="alice",
        purpose="training",
        started_at=NOW,
        expires_at=NOW + timedelta(minutes=30),
    )


class TestKeyScheme:
    @pytest.mark.asyncio
    async def test_keys(self, store, backend):
        await store.save_resource_ids(["r1"])
        await store.save_resource(Resource(id="r1", name="gpu"))
        await store.save_booking(_booking())
        await store.save_queue(
            "r1", [QueueEntry(resource_id="r1", user_id="bob", desired_minutes=60)]
        )
        await store.save_subscribers("r1", ["carol"])
        await store.save_history(
            "r1",
            [
                HistoryEntry(
                    resource_id="r1", user_id="alice", started_at=NOW, ended_at=NOW
                )
            ],
        )
        assert sorted(await backend.keys()) == [
            "bk:r1",
            "hist:r1",
            "q:r1",
            "res:r1",
            "res_list",
            "sub:r1",
        ]


class TestRoundTrip:
    @pytest.mark.asyncio
    async def test_booking(self, store):
        booking = _booking()
        await store.save_booking(booking)
        loaded = await store.get_booking("r1")
        assert loaded == booking
        assert loaded is not booking

    @pytest.mark.asyncio
    async def test_absent_records(self, store):
        assert await store.get_resource_ids() == []
        assert await store.get_resource("r1") is None
        assert await store.get_booking("r1") is None
        assert await store.get_queue("r1") == []
        assert await store.get_subscribers("r1") == []
        assert await store.get_history("r1") == []

    @pytest.mark.asyncio
    async def test_empty_queue_deletes_key(self, store, backend):
        entry = QueueEntry(resource_id="r1", user_id="bob", desired_minutes=60)
        await store.save_queue("r1", [entry])
        await store.save_queue("r1", [])
        assert "q:r1" not in await backend.keys()

    @pytest.mark.asyncio
    async def test_delete_booking(self, store):
        await store.save_booking(_booking())
        await store.delete_booking("r1")
        assert await store.get_booking("r1") is None


class TestFailures:
    @pytest.mark.asyncio
    async def test_corrupt_record_is_storage_error(self, store, backend):
        await backend.set("bk:r1", "not json")
        with pytest.raises(StorageError, match="bk:r1"):
            await store.get_booking("r1")

    @pytest.mark.asyncio
    async def test_storage_errors_propagate_unchanged(self):
        backend = AsyncMock()
        backend.get.side_effect = BackendConnectionError("down")
        with pytest.raises(BackendConnectionError):
            await Store(backend).get_booking("r1")

    @pytest.mark.asyncio
    async def test_foreign_errors_are_wrapped(self):
        backend = AsyncMock()
        backend.set.side_effect = OSError("disk full")
        with pytest.raises(StorageError) as exc_info:
            await Store(backend).save_booking(_booking())
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_delete_errors_are_wrapped(self):
        backend = AsyncMock()
        backend.delete.side_effect = RuntimeError("boom")
        with pytest.raises(StorageError):
            await Store(backend).delete_history("r1")
