# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Configuration for the resource queue core.

The host owns the configuration and may change it at runtime, so the core
never caches a QueueConfig: every operation asks its ConfigSource for the
current values.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueConfig:
    """
    Limits and timings consumed by the booking engine and expiry scheduler.
    """

    # === Booking ===

    max_booking_hours: int = 24
    """Maximum total length of a booking, including extensions."""

    notify_before_minutes: int = 10
    """Near-expiry window: the holder is warned once inside this window."""

    # === Scheduler ===

    check_interval_seconds: float = 30.0
    """Interval between expiry sweeps in seconds."""

    # === Capacities ===

    max_queue_size: int = 20
    """Maximum number of waiters per resource."""

    max_resources: int = 100
    """Maximum number of resources in the directory."""

    max_history: int = 100
    """Maximum number of history entries retained per resource."""

    history_page_size: int = 50
    """Default number of history entries returned to readers."""

    default_queue_minutes: int = 60
    """Desired duration recorded for waiters who did not ask for one."""

    # === Field length caps ===

    max_name_len: int = 64
    max_location_len: int = 64
    max_icon_len: int = 10
    max_description_len: int = 512
    max_purpose_len: int = 256
    max_metadata_key_len: int = 64
    max_metadata_value_len: int = 256
    max_metadata_entries: int = 32

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value <= 0:
                raise ConfigurationError(f"{f.name} must be positive, got {value}")
        if self.notify_before_minutes >= self.max_booking_minutes:
            raise ConfigurationError(
                "notify_before_minutes must be shorter than the maximum booking"
            )

    @property
    def max_booking_minutes(self) -> int:
        return self.max_booking_hours * 60


@runtime_checkable
class ConfigSource(Protocol):
    """Anything that can hand out the current QueueConfig."""

    def get_config(self) -> QueueConfig:
        """Return the configuration in effect right now."""
        ...


class StaticConfigSource:
    """
    Config source holding a single QueueConfig that can be swapped at runtime.

    Example:
        >>> source = StaticConfigSource()
        >>> source.update(max_queue_size=5)
        >>> source.get_config().max_queue_size
        5
    """

    def __init__(self, config: QueueConfig | None = None) -> None:
        self._config = config or QueueConfig()

    def get_config(self) -> QueueConfig:
        return self._config

    def update(self, **changes: Any) -> QueueConfig:
        """Replace selected fields; the new config is validated before it is used."""
        self._config = dataclasses.replace(self._config, **changes)
        logger.info(f"Configuration updated: {changes}")
        return self._config


class EnvConfigSource:
    """
    Config source that reads environment variables on every call.

    Each QueueConfig field maps to ``<prefix><FIELD_NAME>`` in upper case,
    e.g. ``RESOURCE_QUEUE_MAX_BOOKING_HOURS``. A missing variable uses the
    default; an unparsable or non-positive one logs a warning and uses the
    default as well, so a bad host setting never stops the scheduler.

    Environment Variables:
        RESOURCE_QUEUE_MAX_BOOKING_HOURS, RESOURCE_QUEUE_NOTIFY_BEFORE_MINUTES,
        RESOURCE_QUEUE_CHECK_INTERVAL_SECONDS, RESOURCE_QUEUE_MAX_QUEUE_SIZE,
        ... one per QueueConfig field.
    """

    def __init__(
        self,
        prefix: str = "RESOURCE_QUEUE_",
        environ: dict[str, str] | None = None,
    ) -> None:
        self.prefix = prefix
        self._environ = environ

    def get_config(self) -> QueueConfig:
        environ = self._environ if self._environ is not None else os.environ
        defaults = QueueConfig()
        values: dict[str, Any] = {}

        for f in dataclasses.fields(QueueConfig):
            name = f"{self.prefix}{f.name.upper()}"
            raw = environ.get(name)
            if raw is None or raw.strip() == "":
                continue
            default = getattr(defaults, f.name)
            try:
                parsed = type(default)(raw.strip())
            except ValueError:
                logger.warning(f"Ignoring unparsable {name}={raw!r}, using {default}")
                continue
            if parsed <= 0:
                logger.warning(f"Ignoring non-positive {name}={raw!r}, using {default}")
                continue
            values[f.name] = parsed

        try:
            return QueueConfig(**values)
        except ConfigurationError as e:
            logger.warning(f"Invalid environment configuration ({e}), using defaults")
            return defaults


__all__ = [
    "ConfigSource",
    "EnvConfigSource",
    "QueueConfig",
    "StaticConfigSource",
]
