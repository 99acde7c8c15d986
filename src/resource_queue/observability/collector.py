# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics collector keeping a dict snapshot alongside Prometheus metrics.

This module provides the MetricsCollector class that serves as the single
source of truth for all metrics in the resource-queue library.

Features:
    1. Thread-safe counter/gauge/histogram operations
    2. Prometheus metric registration (optionally on an injected registry)
    3. Dict snapshot for JSON export and tests
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from resource_queue.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('resource_queue_bookings_ended_total',
    ...                       labels={'reason': 'expired'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from .constants import (
    BOOKED_RESOURCES,
    BOOKINGS_CREATED_TOTAL,
    BOOKINGS_ENDED_TOTAL,
    BOOKINGS_EXTENDED_TOTAL,
    EXPIRY_WARNINGS_TOTAL,
    HANDOFFS_TOTAL,
    NOTIFICATION_FAILURES_TOTAL,
    NOTIFICATIONS_SENT_TOTAL,
    QUEUE_JOINS_TOTAL,
    REJECTIONS_TOTAL,
    SCHEDULER_FAILURES_TOTAL,
    SCHEDULER_SWEEPS_TOTAL,
    SWEEP_DURATION_BUCKETS,
    SWEEP_DURATION_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """
    Definition for a metric that can be instantiated.

    This dataclass defines the schema for metrics, including their type,
    description, labels, and histogram buckets.
    """

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


# Pre-defined metrics for the library
METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    # === Booking Counters ===
    BOOKINGS_CREATED_TOTAL: MetricDefinition(
        BOOKINGS_CREATED_TOTAL,
        "counter",
        "Total bookings created",
    ),
    BOOKINGS_ENDED_TOTAL: MetricDefinition(
        BOOKINGS_ENDED_TOTAL,
        "counter",
        "Total bookings closed out",
        ("reason",),
    ),
    BOOKINGS_EXTENDED_TOTAL: MetricDefinition(
        BOOKINGS_EXTENDED_TOTAL,
        "counter",
        "Total booking extensions",
    ),
    REJECTIONS_TOTAL: MetricDefinition(
        REJECTIONS_TOTAL,
        "counter",
        "Total rejected operations",
        ("error",),
    ),
    # === Queue Counters ===
    QUEUE_JOINS_TOTAL: MetricDefinition(
        QUEUE_JOINS_TOTAL,
        "counter",
        "Total queue joins",
    ),
    HANDOFFS_TOTAL: MetricDefinition(
        HANDOFFS_TOTAL,
        "counter",
        "Total queue hand-offs",
    ),
    # === Notification Counters ===
    NOTIFICATIONS_SENT_TOTAL: MetricDefinition(
        NOTIFICATIONS_SENT_TOTAL,
        "counter",
        "Total notifications sent",
        ("kind",),
    ),
    NOTIFICATION_FAILURES_TOTAL: MetricDefinition(
        NOTIFICATION_FAILURES_TOTAL,
        "counter",
        "Total notification delivery failures",
        ("kind",),
    ),
    # === Scheduler ===
    SCHEDULER_SWEEPS_TOTAL: MetricDefinition(
        SCHEDULER_SWEEPS_TOTAL,
        "counter",
        "Total expiry sweeps",
    ),
    SCHEDULER_FAILURES_TOTAL: MetricDefinition(
        SCHEDULER_FAILURES_TOTAL,
        "counter",
        "Total resources skipped by a failing sweep step",
    ),
    EXPIRY_WARNINGS_TOTAL: MetricDefinition(
        EXPIRY_WARNINGS_TOTAL,
        "counter",
        "Total near-expiry warnings",
    ),
    SWEEP_DURATION_SECONDS: MetricDefinition(
        SWEEP_DURATION_SECONDS,
        "histogram",
        "Expiry sweep duration",
        buckets=SWEEP_DURATION_BUCKETS,
    ),
    # === Gauges ===
    BOOKED_RESOURCES: MetricDefinition(
        BOOKED_RESOURCES,
        "gauge",
        "Resources with an effective booking",
    ),
}


class MetricsCollector:
    """
    Metrics collector supporting both dict snapshots and Prometheus metrics.

    Thread Safety:
        All operations use RLock for thread-safe access. The Prometheus
        HTTP server reads from a separate thread.

    Cardinality Protection:
        To prevent unbounded memory growth, a maximum of MAX_LABEL_COMBINATIONS
        unique label combinations are tracked per metric.

    Example:
        >>> from prometheus_client import CollectorRegistry
        >>> collector = MetricsCollector(registry=CollectorRegistry())
        >>> collector.inc_counter('resource_queue_bookings_created_total')
        >>> collector.get_metrics()["counters"]
        {'resource_queue_bookings_created_total': {'': 1}}
    """

    # Maximum unique label combinations per metric to prevent cardinality explosion
    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to mirror metrics into Prometheus
            registry: Optional Prometheus CollectorRegistry for testing
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        # Dict-based metrics (always available)
        self._counters: dict[str, dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )

        self._lock = threading.RLock()

        # Prometheus metric instances (lazy initialized)
        self._prom_metrics: dict[str, Any] = {}

        # Label cardinality tracking
        self._label_combinations: dict[str, set[str]] = defaultdict(set)

        self._server_running = False

        logger.debug(
            f"MetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        """
        Check if adding this label combination would exceed cardinality limit.

        Returns:
            True if the label combination is allowed, False otherwise
        """
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom(self, name: str, metric_type: str) -> Any | None:
        """Get or create the Prometheus metric backing ``name``."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name in self._prom_metrics:
                return self._prom_metrics[name]

            defn = METRIC_DEFINITIONS.get(name)
            if defn is None or defn.metric_type != metric_type:
                # Dynamic metric (not pre-defined)
                defn = MetricDefinition(name, metric_type, f"Dynamic {metric_type}: {name}")

            try:
                if metric_type == "counter":
                    metric = Counter(
                        name,
                        defn.description,
                        list(defn.label_names),
                        registry=self._registry,
                    )
                elif metric_type == "gauge":
                    metric = Gauge(
                        name,
                        defn.description,
                        list(defn.label_names),
                        registry=self._registry,
                    )
                else:
                    metric = Histogram(
                        name,
                        defn.description,
                        list(defn.label_names),
                        buckets=defn.buckets or SWEEP_DURATION_BUCKETS,
                        registry=self._registry,
                    )
            except ValueError as e:
                # Already registered on this registry by another collector
                logger.warning(f"Failed to create Prometheus {metric_type} {name}: {e}")
                metric = None

            self._prom_metrics[name] = metric
            return metric

    def _apply_prom(
        self, metric: Any, labels: dict[str, str] | None, action: str, value: float
    ) -> None:
        if metric is None:
            return
        try:
            target = metric.labels(**labels) if labels else metric
            getattr(target, action)(value)
        except ValueError as e:
            logger.debug(f"Prometheus {action} failed: {e}")

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Args:
            name: Metric name (should follow Prometheus naming convention)
            value: Value to increment by (must be positive)
            labels: Optional labels dict

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        self._apply_prom(self._get_or_create_prom(name, "counter"), labels, "inc", value)

    # === Gauge Operations ===

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to a specific value."""
        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        self._apply_prom(self._get_or_create_prom(name, "gauge"), labels, "set", value)

    # === Histogram Operations ===

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Record an observation in a histogram."""
        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._histograms[name][label_key].append(value)
            # Keep only recent observations to prevent memory growth
            if len(self._histograms[name][label_key]) > 10000:
                self._histograms[name][label_key] = self._histograms[name][label_key][
                    -5000:
                ]

        self._apply_prom(
            self._get_or_create_prom(name, "histogram"), labels, "observe", value
        )

    # === Snapshot Operations ===

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Returns a dict suitable for JSON serialization with structure:
        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {
                name: dict(label_values)
                for name, label_values in self._counters.items()
            }
            gauges = {
                name: dict(label_values) for name, label_values in self._gauges.items()
            }

            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {}
                for label_key, observations in label_values.items():
                    if observations:
                        histograms[name][label_key] = {
                            "count": len(observations),
                            "sum": sum(observations),
                            "avg": sum(observations) / len(observations),
                            "min": min(observations),
                            "max": max(observations),
                        }

        return {
            "counters": counters,
            "gauges": gauges,
            "histograms": histograms,
        }

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Current dict value of one counter series (0 when never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(self._labels_to_key(labels), 0)

    # === Lifecycle ===

    def reset(self) -> None:
        """Reset all dict metrics to zero."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    # === Prometheus HTTP Server ===

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Args:
            host: Host to bind to (default: 127.0.0.1 for localhost only)
            port: Port to bind to

        Returns:
            True if server started successfully, False otherwise
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            # start_http_server runs in a daemon thread
            start_http_server(port, addr=host, registry=self._registry)
            self._server_running = True
            logger.info(f"Prometheus metrics server started on {host}:{port}")
            return True
        except OSError as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Singleton Pattern
# =============================================================================

_global_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(enable_prometheus: bool = True) -> MetricsCollector:
    """
    Get or create the global metrics collector singleton.

    Args:
        enable_prometheus: Whether to enable Prometheus metrics
            (only used on first call)

    Returns:
        The MetricsCollector singleton
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = MetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """
    Reset the global metrics collector singleton (mainly for testing).

    Prometheus metrics already registered on the default registry stay
    registered; a new collector built afterwards keeps only dict metrics
    for names it cannot register again.
    """
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
