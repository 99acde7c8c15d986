# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base Backend for the resource queue

This module provides the BaseBackend abstract class that defines the keyed
store interface every backend implements.

The interface is deliberately small: per-key get/set/delete of opaque
string records. There are no transactions, no multi-key atomicity and no
compare-and-swap; the core serializes conflicting updates itself with
per-resource locks.
"""

import abc
import logging
from dataclasses import dataclass
from typing import Any

from typing_extensions import Self

logger = logging.getLogger(__name__)


@dataclass
class HealthCheckResult:
    """
    Structured health check result for backend monitoring.

    Attributes:
        healthy: Whether the backend is operational
        backend_type: Type of backend (e.g., 'redis', 'memory')
        namespace: Backend namespace
        error: Error message if unhealthy
        metadata: Additional backend-specific information
    """

    healthy: bool
    backend_type: str
    namespace: str
    error: str | None = None
    metadata: dict[str, Any] | None = None


class BaseBackend(abc.ABC):
    """
    An abstract base class for keyed record storage.

    Backends store opaque serialized records by string key. Implementations
    raise StorageError subclasses (BackendConnectionError,
    BackendOperationError) on failure; the Store wraps anything else.
    """

    def __init__(self, namespace: str = "resource_queue"):
        """
        Initialize the backend with a namespace for isolation.

        Args:
            namespace: Namespace for isolating data across different instances
        """
        self.namespace = namespace

    # ==========================================================================
    # Keyed Records
    # ==========================================================================

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Get the record stored under a key.

        Args:
            key: The key to read

        Returns:
            The stored record, or None when the key is absent
        """
        pass

    @abc.abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a record under a key, replacing any previous value.

        Args:
            key: The key to write
            value: The serialized record
        """
        pass

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a key. Deleting an absent key is not an error.

        Args:
            key: The key to delete
        """
        pass

    # ==========================================================================
    # Maintenance
    # ==========================================================================

    @abc.abstractmethod
    async def health_check(self) -> HealthCheckResult:
        """
        Perform a health check on the backend.

        Returns:
            HealthCheckResult with backend status
        """
        pass

    async def close(self) -> None:  # noqa: B027
        """Release backend resources. The default backend holds none."""
        pass

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


__all__ = ["BaseBackend", "HealthCheckResult"]
