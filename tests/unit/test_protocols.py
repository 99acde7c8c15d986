"""Tests for the notifier and identity protocols and their defaults."""

import pytest

from resource_queue.protocols import (
    IdentityProtocol,
    NotifierProtocol,
    NullNotifier,
    StaticIdentity,
)


class TestNotifierProtocol:
    def test_null_notifier_conforms(self):
        assert isinstance(NullNotifier(), NotifierProtocol)

    def test_custom_notifier_conforms(self, notifier):
        assert isinstance(notifier, NotifierProtocol)

    def test_object_without_method_does_not_conform(self):
        assert not isinstance(object(), NotifierProtocol)

    @pytest.mark.asyncio
    async def test_null_notifier_drops_messages(self):
        assert await NullNotifier().notify_user("alice", "hello") is None


class TestStaticIdentity:
    def test_conforms(self):
        assert isinstance(StaticIdentity(), IdentityProtocol)

    @pytest.mark.asyncio
    async def test_display_name_falls_back_to_id(self):
        identity = StaticIdentity(names={"u1": "Alice"})
        assert await identity.display_name("u1") == "Alice"
        assert await identity.display_name("u2") == "u2"

    @pytest.mark.asyncio
    async def test_privilege(self):
        identity = StaticIdentity(admins={"root"})
        assert await identity.is_privileged("root")
        assert not await identity.is_privileged("alice")

    def test_tables_are_copied(self):
        names = {"u1": "Alice"}
        identity = StaticIdentity(names=names)
        names["u1"] = "Mallory"
        assert identity.names == {"u1": "Alice"}
