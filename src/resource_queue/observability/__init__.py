# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability and metrics for the resource queue.

Classes:
    MetricsCollector: Metrics collector keeping dict and Prometheus views.

Functions:
    get_metrics_collector: Get the global metrics collector singleton.
    reset_metrics_collector: Reset the global metrics collector singleton.

Constants:
    All metric name constants from the constants module.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    MetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    BOOKED_RESOURCES,
    BOOKINGS_CREATED_TOTAL,
    BOOKINGS_ENDED_TOTAL,
    BOOKINGS_EXTENDED_TOTAL,
    EXPIRY_WARNINGS_TOTAL,
    HANDOFFS_TOTAL,
    METRIC_PREFIX,
    NOTIFICATION_FAILURES_TOTAL,
    NOTIFICATIONS_SENT_TOTAL,
    QUEUE_JOINS_TOTAL,
    REJECTIONS_TOTAL,
    SCHEDULER_FAILURES_TOTAL,
    SCHEDULER_SWEEPS_TOTAL,
    SWEEP_DURATION_BUCKETS,
    SWEEP_DURATION_SECONDS,
)

__all__ = [
    "BOOKED_RESOURCES",
    "BOOKINGS_CREATED_TOTAL",
    "BOOKINGS_ENDED_TOTAL",
    "BOOKINGS_EXTENDED_TOTAL",
    "EXPIRY_WARNINGS_TOTAL",
    "HANDOFFS_TOTAL",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "NOTIFICATIONS_SENT_TOTAL",
    "NOTIFICATION_FAILURES_TOTAL",
    "QUEUE_JOINS_TOTAL",
    "REJECTIONS_TOTAL",
    "SCHEDULER_FAILURES_TOTAL",
    "SCHEDULER_SWEEPS_TOTAL",
    "SWEEP_DURATION_BUCKETS",
    "SWEEP_DURATION_SECONDS",
    "MetricDefinition",
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
