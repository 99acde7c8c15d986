# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Background expiry scheduler.

Every tick the scheduler walks the directory and, for each resource:

- closes out a booking whose expiry has passed (auto-release), recording the
  session as ending at its expiry instant, then notifies the former holder,
  the subscribers and the next waiter;
- warns the holder once when the booking enters the near-expiry window.

The tick interval and the warning window are read from the config source at
every tick, so host configuration changes apply without a restart.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from ..clock import Clock, utc_now
from ..config import ConfigSource
from ..directory import ResourceDirectory
from ..ledger import BookingLedger
from ..observability.collector import MetricsCollector
from ..observability.constants import (
    BOOKED_RESOURCES,
    SCHEDULER_FAILURES_TOTAL,
    SCHEDULER_SWEEPS_TOTAL,
    SWEEP_DURATION_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Outcome of one pass over the directory."""

    checked: int = 0
    expired: int = 0
    warned: int = 0
    failed: int = 0
    booked: int = 0


class ExpiryScheduler:
    """
    Periodic auto-release and near-expiry warnings.

    Only one process may run a scheduler against a given store. ``stop()``
    never interrupts a sweep: it signals the loop and waits for the current
    sweep to finish, so a close-out is never left half done.

    Example:
        >>> async with ExpiryScheduler(ledger, directory, config_source):
        ...     await serve_forever()
    """

    def __init__(
        self,
        ledger: BookingLedger,
        directory: ResourceDirectory,
        config_source: ConfigSource,
        metrics: MetricsCollector | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.ledger = ledger
        self.directory = directory
        self.config_source = config_source
        self.metrics = metrics
        self.clock = clock

        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    # === Lifecycle ===

    def start(self) -> None:
        """Start the background loop; a running scheduler is left alone."""
        if self.is_running():
            logger.warning("Expiry scheduler already running")
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="expiry_scheduler")
        logger.info("Expiry scheduler started")

    async def stop(self) -> None:
        """Signal the loop to exit and wait for any in-flight sweep."""
        if self._task is None:
            return
        self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None
        logger.info("Expiry scheduler stopped")

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def __aenter__(self) -> "ExpiryScheduler":
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            interval = self.config_source.get_config().check_interval_seconds
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.sweep()
            except Exception as e:
                # sweep() already isolates resources; this guards the loop itself
                logger.error(f"Expiry sweep failed: {e}", exc_info=True)

    # === Sweep ===

    async def sweep(self) -> SweepResult:
        """Run one pass over every resource and report what happened."""
        started = time.perf_counter()
        result = SweepResult()
        config = self.config_source.get_config()
        window = timedelta(minutes=config.notify_before_minutes)

        try:
            resource_ids = await self.directory.ids()
        except Exception as e:
            logger.error(f"Expiry sweep could not list resources: {e}", exc_info=True)
            result.failed += 1
            self._record(result, started)
            return result

        for resource_id in resource_ids:
            result.checked += 1
            try:
                await self._process(resource_id, window, result)
            except Exception as e:
                result.failed += 1
                logger.error(
                    f"Expiry sweep skipped {resource_id}: {e}", exc_info=True
                )

        self._record(result, started)
        if result.expired or result.warned or result.failed:
            logger.info(
                f"Expiry sweep: {result.checked} checked, {result.expired} expired, "
                f"{result.warned} warned, {result.failed} failed"
            )
        return result

    async def _process(
        self, resource_id: str, window: timedelta, result: SweepResult
    ) -> None:
        now = self.clock()
        booking = await self.ledger.current_raw(resource_id)
        if booking is None:
            return
        if booking.is_expired(now):
            if await self.ledger.expire_if_due(resource_id, now):
                result.expired += 1
            return
        result.booked += 1
        if await self.ledger.warn_if_near_expiry(resource_id, now, window):
            result.warned += 1

    def _record(self, result: SweepResult, started: float) -> None:
        if not self.metrics:
            return
        self.metrics.inc_counter(SCHEDULER_SWEEPS_TOTAL)
        if result.failed:
            self.metrics.inc_counter(SCHEDULER_FAILURES_TOTAL, value=result.failed)
        self.metrics.observe_histogram(
            SWEEP_DURATION_SECONDS, time.perf_counter() - started
        )
        self.metrics.set_gauge(BOOKED_RESOURCES, result.booked)


__all__ = ["ExpiryScheduler", "SweepResult"]
