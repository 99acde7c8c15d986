# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for delivering messages to users."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class NotifierProtocol(Protocol):
    """
    Minimal protocol for message delivery.

    The core never builds chat-platform payloads. It hands over one plain
    text message for one recipient and the host decides how to deliver it
    (direct message, e-mail, webhook).
    """

    async def notify_user(self, user_id: str, message: str) -> None:
        """Deliver ``message`` to ``user_id``."""
        ...


class NullNotifier:
    """Notifier that drops every message, for hosts without delivery."""

    async def notify_user(self, user_id: str, message: str) -> None:
        return None
