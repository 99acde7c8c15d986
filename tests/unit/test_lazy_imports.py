"""Tests for lazy import patterns in __init__.py modules.

These tests cover the __getattr__ lazy import mechanisms used for the
optional Redis dependency.
"""

import pytest


class TestTopLevelLazyImports:
    """Test lazy imports from the top-level resource_queue module."""

    def test_lazy_redis_backend_import(self):
        """Cover __getattr__ lazy import of RedisBackend from top-level module."""
        from resource_queue import RedisBackend
        from resource_queue.backends.redis import RedisBackend as direct

        assert RedisBackend is direct

    def test_unknown_attribute_error_message_format(self):
        import resource_queue

        with pytest.raises(
            AttributeError,
            match=r"module 'resource_queue' has no attribute 'FakeClass'",
        ):
            _ = resource_queue.FakeClass

    def test_version(self):
        import resource_queue

        assert resource_queue.__version__ == "1.0.0"


class TestBackendsLazyImports:
    """Test lazy imports from the backends submodule."""

    def test_lazy_redis_backend_import(self):
        from resource_queue.backends import RedisBackend

        assert RedisBackend.__name__ == "RedisBackend"

    def test_unknown_attribute_raises_attribute_error(self):
        import resource_queue.backends

        with pytest.raises(AttributeError, match=r"has no attribute"):
            _ = resource_queue.backends.NonExistentBackend
