# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
RedisBackend for the resource queue

This module provides a Redis-backed keyed store so that booking state
survives process restarts and can be inspected by other tools.

Key Features:
- One Redis string per record, prefixed with the backend namespace
- Lazy connection with liveness check and event loop switch handling
- Redis errors translated into BackendConnectionError/BackendOperationError
- Accepts a pre-configured client (used by tests with fakeredis)

Redis is only used as a plain keyed store here. Records are never updated
with multi-key transactions; the core's per-resource locks serialize
conflicting writes inside the single process that drives the scheduler.
"""

import asyncio
import logging
import os
import time
from collections.abc import Awaitable
from typing import Any, cast

from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError,
    RedisError,
    TimeoutError,
)

from ..exceptions import BackendConnectionError, BackendOperationError
from .base import BaseBackend, HealthCheckResult

logger = logging.getLogger(__name__)


class RedisBackend(BaseBackend):
    """
    A Redis keyed store.

    Deployment Requirements:
    - Any Redis version supporting GET/SET/DEL
    - A single process driving the expiry scheduler against the namespace
    """

    def __init__(
        self,
        redis_url: str | None = None,
        redis_client: Any | None = None,
        namespace: str = "resource_queue",
        max_connections: int = 10,
        socket_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the Redis backend.

        Args:
            redis_url: Redis connection URL. If not provided, falls back to REDIS_URL
                environment variable, then to "redis://localhost:6379".
            redis_client: Optional pre-configured Redis client. It must decode
                responses to str.
            namespace: Namespace prefix for keys
            max_connections: Maximum connections per pool
            socket_timeout: Connect and read timeout in seconds

        Environment Variables:
            REDIS_URL: Default Redis connection URL when redis_url parameter is not provided.
        """
        super().__init__(namespace)

        # Use env var as fallback, then hardcoded default
        self.redis_url = (
            redis_url or os.environ.get("REDIS_URL") or "redis://localhost:6379"
        )
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout

        # Redis client state
        self._redis: Any | None = redis_client
        self._owned_redis = redis_client is None
        self._event_loop_id: int | None = None
        self._connected = False
        self._connection_lock = asyncio.Lock()

    def _key(self, key: str) -> str:
        """Namespaced Redis key for a store key."""
        return f"{self.namespace}:{key}"

    async def _ensure_connected(self) -> Any:
        """Ensure a live Redis connection on the current event loop."""
        loop_id = id(asyncio.get_running_loop())

        async with self._connection_lock:
            # Connections are bound to the loop that created them
            if (
                self._owned_redis
                and self._event_loop_id is not None
                and self._event_loop_id != loop_id
            ):
                old_connection = self._redis
                self._redis = None
                self._connected = False
                if old_connection is not None:
                    await self._cleanup_connection(self._event_loop_id, old_connection)

            self._event_loop_id = loop_id

            if self._redis is not None and self._connected:
                return self._redis

            if self._redis is None:
                self._redis = Redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=self.socket_timeout,
                    socket_timeout=self.socket_timeout,
                    max_connections=self.max_connections,
                )

            try:
                await asyncio.wait_for(
                    cast(Awaitable[bool], self._redis.ping()),
                    timeout=self.socket_timeout,
                )
            except (ConnectionError, TimeoutError, asyncio.TimeoutError) as e:
                logger.warning(f"Redis connection to {self.redis_url} failed: {e}")
                if self._owned_redis:
                    self._redis = None
                raise BackendConnectionError(f"Cannot connect to Redis: {e}") from e

            self._connected = True
            logger.info(f"Connected to Redis for namespace '{self.namespace}'")
            return self._redis

    async def _cleanup_connection(
        self, loop_id: int, connection: Any, timeout: float = 2.5
    ) -> None:
        """Clean up Redis connection with timeout protection."""
        try:
            if hasattr(connection, "aclose"):
                await asyncio.wait_for(connection.aclose(), timeout=timeout)
            elif hasattr(connection, "close"):
                await asyncio.wait_for(connection.close(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Connection cleanup timed out for loop {loop_id}")
        except Exception as e:
            logger.error(f"Error during connection cleanup: {e}")

    def _translate(self, operation: str, key: str, error: RedisError) -> Exception:
        """Map a redis error onto the library's storage errors."""
        if isinstance(error, (ConnectionError, TimeoutError)):
            # Force a reconnect on the next call
            self._connected = False
            return BackendConnectionError(f"Redis {operation} {key} failed: {error}")
        return BackendOperationError(f"Redis {operation} {key} failed: {error}")

    # === BaseBackend Interface Implementation ===

    async def get(self, key: str) -> str | None:
        """Get the record stored under a key."""
        redis_client = await self._ensure_connected()
        try:
            value = await redis_client.get(self._key(key))
        except RedisError as e:
            logger.error(f"Redis error getting {key}: {e}")
            raise self._translate("GET", key, e) from e
        return cast(str | None, value)

    async def set(self, key: str, value: str) -> None:
        """Store a record under a key."""
        redis_client = await self._ensure_connected()
        try:
            await redis_client.set(self._key(key), value)
        except RedisError as e:
            logger.error(f"Redis error setting {key}: {e}")
            raise self._translate("SET", key, e) from e

    async def delete(self, key: str) -> None:
        """Delete a key if present."""
        redis_client = await self._ensure_connected()
        try:
            await redis_client.delete(self._key(key))
        except RedisError as e:
            logger.error(f"Redis error deleting {key}: {e}")
            raise self._translate("DEL", key, e) from e

    async def health_check(self) -> HealthCheckResult:
        """Perform health check on the backend."""
        try:
            redis_client = await self._ensure_connected()

            test_key = self._key(f"health_check_{int(time.time())}")
            await redis_client.set(test_key, "test", ex=60)
            result = await redis_client.get(test_key)
            await redis_client.delete(test_key)

            return HealthCheckResult(
                healthy=result == "test",
                backend_type="redis",
                namespace=self.namespace,
                metadata={
                    "redis_url": self.redis_url,
                    "connected": self._connected,
                },
            )
        except Exception as e:
            return HealthCheckResult(
                healthy=False,
                backend_type="redis",
                namespace=self.namespace,
                error=str(e),
            )

    async def close(self) -> None:
        """Close the connection if this backend created it."""
        if self._redis is not None and self._owned_redis:
            try:
                await self._cleanup_connection(self._event_loop_id or 0, self._redis)
            finally:
                self._redis = None
                self._event_loop_id = None
        self._connected = False


__all__ = ["RedisBackend"]
