# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Backend implementations for resource queue storage.

This module provides the abstract base class and concrete implementations
of the keyed record store the booking engine runs on.

Available backends:
- BaseBackend: Abstract base class defining the backend interface
- MemoryBackend: In-memory backend for single-process deployments
- RedisBackend: Redis-based backend for persistent deployments (requires redis extra)

Supporting types:
- HealthCheckResult: Structured result from backend health checks

Note: RedisBackend is lazily imported to avoid requiring the redis package
when only using MemoryBackend.
"""

from typing import TYPE_CHECKING, cast

from .base import BaseBackend, HealthCheckResult
from .memory import MemoryBackend

# Lazy imports for optional redis backend
if TYPE_CHECKING:
    from .redis import RedisBackend

__all__ = [
    "BaseBackend",
    "HealthCheckResult",
    "MemoryBackend",
    # Redis backend (lazy loaded)
    "RedisBackend",
]


def __getattr__(name: str) -> type:
    """Lazy import for the optional redis backend."""
    if name == "RedisBackend":
        try:
            from . import redis as redis_module

            return cast(type, getattr(redis_module, name))
        except ImportError as e:  # pragma: no cover
            raise ImportError(  # pragma: no cover
                f"'{name}' requires the 'redis' extra. "
                "Install with: pip install resource-queue[redis]"
            ) from e
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
