"""Tests for ResourceQueueService and create_service."""

from unittest.mock import AsyncMock, patch

import pytest
from prometheus_client import CollectorRegistry

from resource_queue.backends.memory import MemoryBackend
from resource_queue.config import QueueConfig, StaticConfigSource
from resource_queue.exceptions import (
    AlreadyBookedError,
    ForbiddenError,
    NotFoundError,
    StorageError,
)
from resource_queue.observability.collector import (
    MetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from resource_queue.observability.constants import REJECTIONS_TOTAL
from resource_queue.protocols.notifier import NullNotifier
from resource_queue.service import ResourceQueueService, create_service


class TestDirectoryAccess:
    @pytest.mark.asyncio
    async def test_non_admin_cannot_create(self, service):
        with pytest.raises(ForbiddenError):
            await service.create_resource("alice", "gpu-02")
        assert await service.list_resources() == []

    @pytest.mark.asyncio
    async def test_non_admin_cannot_update_or_delete(self, service, resource):
        with pytest.raises(ForbiddenError):
            await service.update_resource("alice", resource.id, name="mine")
        with pytest.raises(ForbiddenError):
            await service.delete_resource("alice", resource.id)
        assert (await service.get_resource(resource.id)).name == "gpu-01"

    @pytest.mark.asyncio
    async def test_admin_manages_directory(self, service, resource):
        assert resource.created_by == "admin"
        updated = await service.update_resource("admin", resource.id, icon="🖥️")
        assert updated.icon == "🖥️"

        await service.delete_resource("admin", resource.id)
        with pytest.raises(NotFoundError):
            await service.get_resource(resource.id)

    @pytest.mark.asyncio
    async def test_find_resource(self, service, resource):
        assert (await service.find_resource("GPU")).id == resource.id


class TestRelease:
    @pytest.mark.asyncio
    async def test_admin_releases_other_users_booking(self, service, resource):
        await service.book(resource.id, "alice", 60)
        ended = await service.release(resource.id, "admin")
        assert ended.user_id == "alice"

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, service, resource):
        await service.book(resource.id, "alice", 60)
        with pytest.raises(ForbiddenError):
            await service.release(resource.id, "bob")


class TestViews:
    @pytest.mark.asyncio
    async def test_status_of_free_resource(self, service, resource):
        status = await service.status(resource.id, "alice")
        assert status.resource == resource
        assert status.booking is None
        assert status.queue == []
        assert not status.is_holder

    @pytest.mark.asyncio
    async def test_status_with_booking_and_queue(self, service, resource):
        await service.book(resource.id, "admin", 60, "maintenance")
        await service.join_queue(resource.id, "bob", 30)
        await service.join_queue(resource.id, "dave", 30)
        await service.subscribe(resource.id, "carol")

        status = await service.status(resource.id, "bob")

        assert status.booking.user_id == "admin"
        assert status.booking.username == "root"
        assert status.booking.purpose == "maintenance"
        assert [q.username for q in status.queue] == ["bob", "dave"]
        assert status.subscribers == 1
        assert status.in_queue
        assert not status.is_subscribed
        assert not status.is_holder

    @pytest.mark.asyncio
    async def test_status_hides_expired_booking(self, service, resource, clock):
        await service.book(resource.id, "alice", 30)
        clock.advance(minutes=30)
        assert (await service.status(resource.id, "alice")).booking is None

    @pytest.mark.asyncio
    async def test_status_unknown_resource(self, service):
        with pytest.raises(NotFoundError):
            await service.status("deadbeef", "alice")

    @pytest.mark.asyncio
    async def test_all_statuses(self, service, resource):
        second = await service.create_resource("admin", "gpu-02")
        await service.book(second.id, "alice", 30)

        response = await service.all_statuses("alice")

        assert response.user_id == "alice"
        assert response.is_admin is False
        assert [s.resource.id for s in response.statuses] == [resource.id, second.id]
        assert [s.is_holder for s in response.statuses] == [False, True]
        assert (await service.all_statuses("admin")).is_admin is True

    @pytest.mark.asyncio
    async def test_history_with_names(self, service, resource, clock):
        for user in ("alice", "bob", "carol"):
            await service.book(resource.id, user, 30)
            clock.advance(minutes=10)
            await service.release(resource.id, user)

        history = await service.history(resource.id)
        assert [h.username for h in history] == ["carol", "bob", "alice"]

    @pytest.mark.asyncio
    async def test_history_default_page_size(self, service, resource, clock, config_source):
        config_source.update(history_page_size=2)
        for user in ("alice", "bob", "carol"):
            await service.book(resource.id, user, 30)
            clock.advance(minutes=10)
            await service.release(resource.id, user)

        assert len(await service.history(resource.id)) == 2
        assert len(await service.history(resource.id, limit=0)) == 3

    def test_presets_fit_maximum(self, service, config_source):
        assert [p.minutes for p in service.presets()] == [30, 60, 120, 240, 480, 600]
        config_source.update(max_booking_hours=2)
        assert [p.minutes for p in service.presets()] == [30, 60, 120]


class TestRejectionMetrics:
    @pytest.mark.asyncio
    async def test_rejections_counted_by_error(self, service, resource, metrics):
        await service.book(resource.id, "alice", 30)
        with pytest.raises(AlreadyBookedError):
            await service.book(resource.id, "bob", 30)
        with pytest.raises(ForbiddenError):
            await service.create_resource("bob", "x")

        assert metrics.get_counter(REJECTIONS_TOTAL, {"error": "AlreadyBookedError"}) == 1
        assert metrics.get_counter(REJECTIONS_TOTAL, {"error": "ForbiddenError"}) == 1

    @pytest.mark.asyncio
    async def test_storage_errors_not_counted(self, service, resource, metrics):
        with patch.object(
            service.store, "get_booking", AsyncMock(side_effect=StorageError("down"))
        ):
            with pytest.raises(StorageError):
                await service.book(resource.id, "alice", 30)

        assert metrics.get_metrics()["counters"].get(REJECTIONS_TOTAL) is None


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_health_check(self, service):
        result = await service.health_check()
        assert result.healthy
        assert result.backend_type == "memory"

    @pytest.mark.asyncio
    async def test_context_manager_runs_scheduler(self, service, backend):
        with patch.object(backend, "close", AsyncMock()) as close:
            async with service as running:
                assert running is service
                assert service.scheduler.is_running()
            assert not service.scheduler.is_running()
        close.assert_awaited_once()


class TestCreateService:
    def setup_method(self) -> None:
        reset_metrics_collector()

    def teardown_method(self) -> None:
        reset_metrics_collector()

    def test_defaults(self):
        service = create_service()
        assert isinstance(service, ResourceQueueService)
        assert isinstance(service.backend, MemoryBackend)
        assert isinstance(service.notifications.notifier, NullNotifier)
        assert service.config == QueueConfig()
        assert service.metrics is get_metrics_collector()

    def test_accepts_config_or_source(self):
        metrics = MetricsCollector(registry=CollectorRegistry())
        service = create_service(config=QueueConfig(max_queue_size=3), metrics=metrics)
        assert service.config.max_queue_size == 3

        source = StaticConfigSource()
        service = create_service(config=source, metrics=metrics)
        assert service.config_source is source

    @pytest.mark.asyncio
    async def test_nobody_privileged_by_default(self):
        service = create_service(metrics=MetricsCollector(registry=CollectorRegistry()))
        with pytest.raises(ForbiddenError):
            await service.create_resource("alice", "gpu-01")
