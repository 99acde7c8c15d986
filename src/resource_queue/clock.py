# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Time source shared by the ledger and the expiry scheduler."""

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


__all__ = ["Clock", "utc_now"]
