# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Type definitions for the resource queue.

This module exports the stored record models and the read-side views.

Records:
    - Resource, ResourceIndex: Directory entries and the ordered id list
    - Booking: The active hold on a resource
    - QueueEntry, QueueRecord: Waiters and the stored queue
    - SubscriptionRecord: Stored subscriber set
    - HistoryEntry, HistoryRecord: Completed sessions

Views:
    - BookingView, QueueView, HistoryView: Records with display names
    - ResourceStatus, StatusResponse: Per-user status snapshots
    - DurationPreset, DEFAULT_PRESETS: Suggested booking lengths
"""

from .booking import (
    Booking,
    HistoryEntry,
    HistoryRecord,
    QueueEntry,
    QueueRecord,
    SubscriptionRecord,
)
from .resource import Resource, ResourceIndex
from .status import (
    DEFAULT_PRESETS,
    BookingView,
    DurationPreset,
    HistoryView,
    QueueView,
    ResourceStatus,
    StatusResponse,
)

__all__ = [
    "DEFAULT_PRESETS",
    "Booking",
    "BookingView",
    "DurationPreset",
    "HistoryEntry",
    "HistoryRecord",
    "HistoryView",
    "QueueEntry",
    "QueueRecord",
    "QueueView",
    "Resource",
    "ResourceIndex",
    "ResourceStatus",
    "StatusResponse",
    "SubscriptionRecord",
]
