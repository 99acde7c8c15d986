"""Shared fixtures: a controllable clock, a recording notifier and a wired service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from prometheus_client import CollectorRegistry

from resource_queue.backends.memory import MemoryBackend
from resource_queue.config import QueueConfig, StaticConfigSource
from resource_queue.observability.collector import MetricsCollector
from resource_queue.protocols.identity import StaticIdentity
from resource_queue.service import ResourceQueueService

START = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> datetime:
        self.now += timedelta(minutes=minutes, seconds=seconds)
        return self.now


class RecordingNotifier:
    """Notifier that keeps every message; users in ``failing`` raise instead."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []
        self.failing: set[str] = set()

    async def notify_user(self, user_id: str, message: str) -> None:
        if user_id in self.failing:
            raise RuntimeError(f"delivery to {user_id} failed")
        self.messages.append((user_id, message))

    def to(self, user_id: str) -> list[str]:
        return [m for uid, m in self.messages if uid == user_id]

    def clear(self) -> None:
        self.messages.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def identity() -> StaticIdentity:
    return StaticIdentity(
        names={"alice": "alice", "bob": "bob", "carol": "carol", "admin": "root"},
        admins={"admin"},
    )


@pytest.fixture
def config_source() -> StaticConfigSource:
    return StaticConfigSource(QueueConfig())


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend(namespace="test")


@pytest.fixture
def service(backend, notifier, identity, config_source, metrics, clock):
    return ResourceQueueService(
        backend=backend,
        notifier=notifier,
        identity=identity,
        config_source=config_source,
        metrics=metrics,
        clock=clock,
    )


@pytest.fixture
async def resource(service):
    return await service.create_resource("admin", "gpu-01", location="10.0.0.5")
