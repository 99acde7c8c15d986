# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Read-side views combining stored records with resolved display names.
"""

from pydantic import BaseModel, Field

from .booking import Booking, HistoryEntry, QueueEntry
from .resource import Resource


class BookingView(Booking):
    """Booking with the holder's display name."""

    username: str


class QueueView(QueueEntry):
    """Queue entry with the waiter's display name."""

    username: str


class HistoryView(HistoryEntry):
    """History entry with the user's display name."""

    username: str


class ResourceStatus(BaseModel):
    """
    Combined state of one resource as seen by a particular user.

    Attributes:
        resource: The resource definition
        booking: Effective booking, or None when the resource is free
        queue: Waiters in wait order
        subscribers: Number of users watching the resource
        is_subscribed: Whether the requesting user is watching it
        is_holder: Whether the requesting user holds the booking
        in_queue: Whether the requesting user is waiting for it
    """

    resource: Resource
    booking: BookingView | None = None
    queue: list[QueueView] = Field(default_factory=list)
    subscribers: int = 0
    is_subscribed: bool = False
    is_holder: bool = False
    in_queue: bool = False


class StatusResponse(BaseModel):
    """Status of every resource for one user."""

    user_id: str
    is_admin: bool
    statuses: list[ResourceStatus] = Field(default_factory=list)


class DurationPreset(BaseModel):
    """A suggested booking length offered to users."""

    label: str
    minutes: int


DEFAULT_PRESETS: tuple[DurationPreset, ...] = (
    DurationPreset(label="30 min", minutes=30),
    DurationPreset(label="1 hour", minutes=60),
    DurationPreset(label="2 hours", minutes=120),
    DurationPreset(label="4 hours", minutes=240),
    DurationPreset(label="8 hours", minutes=480),
    DurationPreset(label="Until end of day", minutes=600),
)


__all__ = [
    "DEFAULT_PRESETS",
    "BookingView",
    "DurationPreset",
    "HistoryView",
    "QueueView",
    "ResourceStatus",
    "StatusResponse",
]
