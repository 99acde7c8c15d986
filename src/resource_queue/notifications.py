# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
User-facing messages and best-effort delivery.

Notifications are side effects of state transitions, never part of them: a
message that cannot be delivered is logged and counted, and the operation
that triggered it still succeeds.
"""

import logging
from datetime import timedelta

from .observability.collector import MetricsCollector
from .observability.constants import (
    NOTIFICATION_FAILURES_TOTAL,
    NOTIFICATIONS_SENT_TOTAL,
)
from .protocols.identity import IdentityProtocol
from .protocols.notifier import NotifierProtocol

logger = logging.getLogger(__name__)

UNKNOWN_USER = "unknown"


# =============================================================================
# Formatting
# =============================================================================


def format_duration(minutes: int) -> str:
    """
    Compact duration, e.g. ``45m``, ``2h``, ``1h30m``.

    >>> format_duration(90)
    '1h30m'
    """
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h{mins}m"


def format_time_left(left: timedelta) -> str:
    """Remaining time in words; negative values read as ``expired``."""
    seconds = int(left.total_seconds())
    if seconds < 0:
        return "expired"
    if seconds < 60:
        return f"{seconds} sec"
    if seconds < 3600:
        return f"{seconds // 60} min"
    hours, mins = divmod(seconds // 60, 60)
    if mins == 0:
        return f"{hours} h"
    return f"{hours} h {mins} min"


# =============================================================================
# Message builders
# =============================================================================


def booked_message(resource_name: str, holder_name: str, minutes: int) -> str:
    return f"🔒 **{resource_name}** booked by @{holder_name} for {format_duration(minutes)}"


def released_message(resource_name: str, expired: bool = False) -> str:
    if expired:
        return f"🔓 **{resource_name}** is free (booking expired)"
    return f"🔓 **{resource_name}** is free"


def auto_released_message(resource_name: str) -> str:
    return f"⏰ Your booking of **{resource_name}** has expired. The resource was released."


def near_expiry_message(resource_name: str, left: timedelta) -> str:
    return (
        f"⚠️ Your booking of **{resource_name}** expires in {format_time_left(left)}. "
        f"Extend it to keep the resource."
    )


def queue_joined_message(resource_name: str, waiter_name: str) -> str:
    return f"👋 @{waiter_name} joined the queue for **{resource_name}**"


def handoff_message(resource_name: str, resource_id: str, minutes: int) -> str:
    return (
        f"🎉 **{resource_name}** is free and you are next in line. "
        f"Book it now: `book {resource_id} {format_duration(minutes)}`"
    )


# =============================================================================
# Delivery
# =============================================================================


class Notifications:
    """
    Best-effort message delivery through the host's notifier.

    Also resolves display names through the identity protocol, falling back
    to ``"unknown"`` when the lookup fails.
    """

    def __init__(
        self,
        notifier: NotifierProtocol,
        identity: IdentityProtocol,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.notifier = notifier
        self.identity = identity
        self.metrics = metrics

    async def send(self, user_id: str, message: str, kind: str = "generic") -> bool:
        """
        Deliver one message. Returns False when delivery failed.

        Args:
            user_id: Recipient
            message: Plain text message
            kind: Notification kind, used as a metric label
        """
        try:
            await self.notifier.notify_user(user_id, message)
        except Exception as e:
            logger.warning(f"Failed to notify {user_id} ({kind}): {e}")
            if self.metrics:
                self.metrics.inc_counter(
                    NOTIFICATION_FAILURES_TOTAL, labels={"kind": kind}
                )
            return False

        logger.debug(f"Notified {user_id} ({kind})")
        if self.metrics:
            self.metrics.inc_counter(NOTIFICATIONS_SENT_TOTAL, labels={"kind": kind})
        return True

    async def send_many(
        self, user_ids: list[str], message: str, kind: str = "generic"
    ) -> int:
        """Deliver the same message to several users; returns the delivered count."""
        delivered = 0
        for user_id in user_ids:
            if await self.send(user_id, message, kind):
                delivered += 1
        return delivered

    async def display_name(self, user_id: str) -> str:
        try:
            return await self.identity.display_name(user_id)
        except Exception as e:
            logger.warning(f"Display name lookup failed for {user_id}: {e}")
            return UNKNOWN_USER

    async def is_privileged(self, user_id: str) -> bool:
        try:
            return bool(await self.identity.is_privileged(user_id))
        except Exception as e:
            logger.warning(f"Privilege lookup failed for {user_id}: {e}")
            return False


__all__ = [
    "UNKNOWN_USER",
    "Notifications",
    "auto_released_message",
    "booked_message",
    "format_duration",
    "format_time_left",
    "handoff_message",
    "near_expiry_message",
    "queue_joined_message",
    "released_message",
]
