"""Tests for QueueConfig and the config sources."""

import logging

import pytest

from resource_queue.config import (
    ConfigSource,
    EnvConfigSource,
    QueueConfig,
    StaticConfigSource,
)
from resource_queue.exceptions import ConfigurationError


class TestQueueConfig:
    def test_defaults(self):
        config = QueueConfig()
        assert config.max_booking_hours == 24
        assert config.max_booking_minutes == 1440
        assert config.notify_before_minutes == 10
        assert config.check_interval_seconds == 30.0
        assert config.max_queue_size == 20
        assert config.max_resources == 100
        assert config.max_history == 100
        assert config.default_queue_minutes == 60

    @pytest.mark.parametrize(
        "field", ["max_booking_hours", "max_queue_size", "check_interval_seconds"]
    )
    def test_non_positive_rejected(self, field):
        with pytest.raises(ConfigurationError, match=field):
            QueueConfig(**{field: 0})

    def test_warning_window_must_fit_in_booking(self):
        with pytest.raises(ConfigurationError):
            QueueConfig(max_booking_hours=1, notify_before_minutes=60)

    def test_frozen(self):
        config = QueueConfig()
        with pytest.raises(AttributeError):
            config.max_queue_size = 5  # type: ignore[misc]


class TestStaticConfigSource:
    def test_protocol(self):
        assert isinstance(StaticConfigSource(), ConfigSource)

    def test_update_replaces_config(self):
        source = StaticConfigSource()
        source.update(max_queue_size=5)
        assert source.get_config().max_queue_size == 5
        assert source.get_config().max_history == 100

    def test_update_validates(self):
        source = StaticConfigSource()
        with pytest.raises(ConfigurationError):
            source.update(max_queue_size=-1)
        assert source.get_config().max_queue_size == 20


class TestEnvConfigSource:
    def test_defaults_when_unset(self):
        assert EnvConfigSource(environ={}).get_config() == QueueConfig()

    def test_reads_values(self):
        source = EnvConfigSource(
            environ={
                "RESOURCE_QUEUE_MAX_BOOKING_HOURS": "8",
                "RESOURCE_QUEUE_CHECK_INTERVAL_SECONDS": "2.5",
            }
        )
        config = source.get_config()
        assert config.max_booking_hours == 8
        assert config.check_interval_seconds == 2.5

    def test_reread_on_every_call(self):
        environ = {"RESOURCE_QUEUE_MAX_QUEUE_SIZE": "3"}
        source = EnvConfigSource(environ=environ)
        assert source.get_config().max_queue_size == 3
        environ["RESOURCE_QUEUE_MAX_QUEUE_SIZE"] = "7"
        assert source.get_config().max_queue_size == 7

    def test_unparsable_falls_back_with_warning(self, caplog):
        source = EnvConfigSource(environ={"RESOURCE_QUEUE_MAX_QUEUE_SIZE": "lots"})
        with caplog.at_level(logging.WARNING):
            assert source.get_config().max_queue_size == 20
        assert "RESOURCE_QUEUE_MAX_QUEUE_SIZE" in caplog.text

    def test_non_positive_falls_back(self):
        source = EnvConfigSource(environ={"RESOURCE_QUEUE_NOTIFY_BEFORE_MINUTES": "0"})
        assert source.get_config().notify_before_minutes == 10

    def test_invalid_combination_uses_defaults(self):
        source = EnvConfigSource(
            environ={
                "RESOURCE_QUEUE_MAX_BOOKING_HOURS": "1",
                "RESOURCE_QUEUE_NOTIFY_BEFORE_MINUTES": "90",
            }
        )
        assert source.get_config() == QueueConfig()

    def test_custom_prefix(self):
        source = EnvConfigSource(prefix="RQ_", environ={"RQ_MAX_HISTORY": "5"})
        assert source.get_config().max_history == 5
