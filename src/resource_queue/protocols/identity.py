# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for user identity lookups."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IdentityProtocol(Protocol):
    """
    Identity lookups keyed by user id.

    The core never inspects role strings; it only asks whether a user is
    privileged (may manage resources and release other users' bookings).
    """

    async def display_name(self, user_id: str) -> str:
        """Human readable name for ``user_id``."""
        ...

    async def is_privileged(self, user_id: str) -> bool:
        """Whether ``user_id`` has administrative rights."""
        ...


class StaticIdentity:
    """
    Identity provider backed by in-memory tables.

    Example:
        >>> identity = StaticIdentity(names={"u1": "alice"}, admins={"u1"})
    """

    def __init__(
        self,
        names: dict[str, str] | None = None,
        admins: set[str] | None = None,
    ) -> None:
        self.names = dict(names or {})
        self.admins = set(admins or ())

    async def display_name(self, user_id: str) -> str:
        return self.names.get(user_id, user_id)

    async def is_privileged(self, user_id: str) -> bool:
        return user_id in self.admins
