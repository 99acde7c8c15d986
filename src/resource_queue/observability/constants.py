# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the `resource_queue_` prefix.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `reason` - Why a booking ended (enum: released, expired)
    - `error` - Rejection class name (bounded by the exception hierarchy)
    - `kind` - Notification kind (enum: near_expiry, queue_joined, ...)

    NEVER use:
    - `resource_id` - Grows with the directory
    - `user_id` - Unique per user (unbounded!)

Usage:
    >>> from resource_queue.observability.constants import BOOKINGS_CREATED_TOTAL
    >>> print(BOOKINGS_CREATED_TOTAL)
    'resource_queue_bookings_created_total'
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "resource_queue"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Booking Metrics (ledger.py)
# =============================================================================

BOOKINGS_CREATED_TOTAL = f"{METRIC_PREFIX}_bookings_created_total"
"""Total bookings created."""

BOOKINGS_ENDED_TOTAL = f"{METRIC_PREFIX}_bookings_ended_total"
"""Total bookings closed out, labelled by reason (released, expired)."""

BOOKINGS_EXTENDED_TOTAL = f"{METRIC_PREFIX}_bookings_extended_total"
"""Total successful booking extensions."""

REJECTIONS_TOTAL = f"{METRIC_PREFIX}_rejections_total"
"""Total operations rejected with a ResourceQueueError, labelled by error."""


# =============================================================================
# Queue Metrics (queues.py)
# =============================================================================

QUEUE_JOINS_TOTAL = f"{METRIC_PREFIX}_queue_joins_total"
"""Total users added to a waiting queue."""

HANDOFFS_TOTAL = f"{METRIC_PREFIX}_handoffs_total"
"""Total queue hand-offs after a booking ended."""


# =============================================================================
# Notification Metrics (notifications.py)
# =============================================================================

NOTIFICATIONS_SENT_TOTAL = f"{METRIC_PREFIX}_notifications_sent_total"
"""Total notifications handed to the notifier, labelled by kind."""

NOTIFICATION_FAILURES_TOTAL = f"{METRIC_PREFIX}_notification_failures_total"
"""Total notifications the notifier failed to deliver."""


# =============================================================================
# Scheduler Metrics (scheduler/expiry.py)
# =============================================================================

SCHEDULER_SWEEPS_TOTAL = f"{METRIC_PREFIX}_scheduler_sweeps_total"
"""Total expiry sweeps completed."""

SCHEDULER_FAILURES_TOTAL = f"{METRIC_PREFIX}_scheduler_failures_total"
"""Total resources skipped by a sweep because processing failed."""

EXPIRY_WARNINGS_TOTAL = f"{METRIC_PREFIX}_expiry_warnings_total"
"""Total near-expiry warnings issued."""

SWEEP_DURATION_SECONDS = f"{METRIC_PREFIX}_sweep_duration_seconds"
"""Wall time of one expiry sweep."""


# =============================================================================
# Active State Gauges
# =============================================================================

BOOKED_RESOURCES = f"{METRIC_PREFIX}_booked_resources"
"""Number of resources holding an effective booking after the last sweep."""


# =============================================================================
# Histogram Buckets
# =============================================================================

SWEEP_DURATION_BUCKETS = [0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0]
"""Buckets for sweep duration in seconds."""


__all__ = [
    "BOOKED_RESOURCES",
    "BOOKINGS_CREATED_TOTAL",
    "BOOKINGS_ENDED_TOTAL",
    "BOOKINGS_EXTENDED_TOTAL",
    "EXPIRY_WARNINGS_TOTAL",
    "HANDOFFS_TOTAL",
    "METRIC_PREFIX",
    "NOTIFICATIONS_SENT_TOTAL",
    "NOTIFICATION_FAILURES_TOTAL",
    "QUEUE_JOINS_TOTAL",
    "REJECTIONS_TOTAL",
    "SCHEDULER_FAILURES_TOTAL",
    "SCHEDULER_SWEEPS_TOTAL",
    "SWEEP_DURATION_BUCKETS",
    "SWEEP_DURATION_SECONDS",
]
