# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Booking types.

Contains the active booking record, the waiting-queue entries and the
history entries written when a booking ends.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from ..clock import utc_now


class Booking(BaseModel):
    """
    An exclusive, time-bounded hold on a resource.

    At most one booking exists per resource. The two notification flags are
    one-shot: once set they stay set for the lifetime of the booking, except
    that ``notified_near_expiry`` is cleared again when the booking is
    extended.
    """

    resource_id: str
    user_id: str
    purpose: str = ""
    started_at: datetime
    expires_at: datetime
    notified_near_expiry: bool = False
    notified_queue_joined: bool = False

    def is_expired(self, now: datetime) -> bool:
        """A booking is expired from its expiry instant onwards."""
        return now >= self.expires_at

    def remaining(self, now: datetime) -> timedelta:
        return self.expires_at - now

    @property
    def duration(self) -> timedelta:
        return self.expires_at - self.started_at


class QueueEntry(BaseModel):
    """A user waiting for a resource."""

    resource_id: str
    user_id: str
    desired_minutes: int
    purpose: str = ""
    queued_at: datetime = Field(default_factory=utc_now)


class QueueRecord(BaseModel):
    """Stored form of one resource's queue; list order is wait order."""

    entries: list[QueueEntry] = Field(default_factory=list)


class SubscriptionRecord(BaseModel):
    """Stored form of one resource's subscriber set."""

    user_ids: list[str] = Field(default_factory=list)


class HistoryEntry(BaseModel):
    """A completed booking session."""

    resource_id: str
    user_id: str
    purpose: str = ""
    started_at: datetime
    ended_at: datetime


class HistoryRecord(BaseModel):
    """Stored form of one resource's history, oldest first."""

    entries: list[HistoryEntry] = Field(default_factory=list)


__all__ = [
    "Booking",
    "HistoryEntry",
    "HistoryRecord",
    "QueueEntry",
    "QueueRecord",
    "SubscriptionRecord",
]
