"""
Unit tests for RedisBackend.

Most tests run against fakeredis; failure paths use AsyncMock clients.
"""

from unittest.mock import AsyncMock, patch

import fakeredis.aioredis
import pytest
from redis.exceptions import ConnectionError, ResponseError, TimeoutError

from resource_queue.backends.redis import RedisBackend
from resource_queue.exceptions import (
    BackendConnectionError,
    BackendOperationError,
    StorageError,
)


@pytest.fixture
def fake_redis():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def backend(fake_redis):
    return RedisBackend(redis_client=fake_redis, namespace="test")


class TestRedisBackendInit:
    def test_explicit_url(self):
        backend = RedisBackend(redis_url="redis://example:6380", namespace="ns")
        assert backend.redis_url == "redis://example:6380"
        assert backend.namespace == "ns"
        assert backend._owned_redis is True

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://from-env:6379")
        assert RedisBackend().redis_url == "redis://from-env:6379"

    def test_default_url(self, monkeypatch):
        monkeypatch.delenv("REDIS_URL", raising=False)
        assert RedisBackend().redis_url == "redis://localhost:6379"

    def test_injected_client_not_owned(self, fake_redis):
        backend = RedisBackend(redis_client=fake_redis)
        assert backend._owned_redis is False


class TestRedisBackendRecords:
    @pytest.mark.asyncio
    async def test_set_get(self, backend):
        await backend.set("bk:abc", '{"user_id": "alice"}')
        assert await backend.get("bk:abc") == '{"user_id": "alice"}'

    @pytest.mark.asyncio
    async def test_keys_are_namespaced(self, backend, fake_redis):
        await backend.set("res_list", '{"ids": []}')
        assert await fake_redis.get("test:res_list") == '{"ids": []}'
        assert await fake_redis.get("res_list") is None

    @pytest.mark.asyncio
    async def test_get_missing(self, backend):
        assert await backend.get("missing") is None

    @pytest.mark.asyncio
    async def test_delete(self, backend):
        await backend.set("q:abc", "{}")
        await backend.delete("q:abc")
        assert await backend.get("q:abc") is None

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, fake_redis):
        one = RedisBackend(redis_client=fake_redis, namespace="one")
        two = RedisBackend(redis_client=fake_redis, namespace="two")
        await one.set("k", "1")
        assert await two.get("k") is None

    @pytest.mark.asyncio
    async def test_health_check(self, backend):
        result = await backend.health_check()
        assert result.healthy is True
        assert result.backend_type == "redis"
        assert result.namespace == "test"


class TestRedisBackendErrors:
    @pytest.mark.asyncio
    async def test_ping_failure_raises_connection_error(self):
        client = AsyncMock()
        client.ping.side_effect = ConnectionError("refused")
        backend = RedisBackend(redis_client=client)

        with pytest.raises(BackendConnectionError):
            await backend.get("k")

    @pytest.mark.asyncio
    async def test_timeout_translates_to_connection_error(self):
        client = AsyncMock()
        client.ping.return_value = True
        client.get.side_effect = TimeoutError("slow")
        backend = RedisBackend(redis_client=client)

        with pytest.raises(BackendConnectionError):
            await backend.get("k")
        # The next call pings again
        assert backend._connected is False

    @pytest.mark.asyncio
    async def test_other_redis_errors_translate_to_operation_error(self):
        client = AsyncMock()
        client.ping.return_value = True
        client.set.side_effect = ResponseError("WRONGTYPE")
        backend = RedisBackend(redis_client=client)

        with pytest.raises(BackendOperationError) as exc_info:
            await backend.set("k", "v")
        assert isinstance(exc_info.value, StorageError)

    @pytest.mark.asyncio
    async def test_health_check_reports_failure(self):
        client = AsyncMock()
        client.ping.side_effect = ConnectionError("refused")
        backend = RedisBackend(redis_client=client)

        result = await backend.health_check()
        assert result.healthy is False
        assert "refused" in result.error


class TestRedisBackendLifecycle:
    @pytest.mark.asyncio
    async def test_lazy_client_creation(self, fake_redis):
        with patch(
            "resource_queue.backends.redis.Redis.from_url", return_value=fake_redis
        ) as from_url:
            backend = RedisBackend(redis_url="redis://localhost:6379")
            await backend.set("k", "v")

            from_url.assert_called_once()
            assert from_url.call_args.kwargs["decode_responses"] is True
            assert await backend.get("k") == "v"

    @pytest.mark.asyncio
    async def test_close_owned_client(self):
        client = AsyncMock()
        client.ping.return_value = True
        with patch("resource_queue.backends.redis.Redis.from_url", return_value=client):
            backend = RedisBackend()
            await backend.get("k")
            await backend.close()

        client.aclose.assert_awaited_once()
        assert backend._redis is None

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        client = AsyncMock()
        client.ping.return_value = True
        backend = RedisBackend(redis_client=client)
        await backend.get("k")
        await backend.close()

        client.aclose.assert_not_awaited()
