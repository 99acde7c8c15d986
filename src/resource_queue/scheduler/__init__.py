# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Background scheduling for the resource queue.

This module provides:
- ExpiryScheduler: Periodic auto-release and near-expiry warnings
- SweepResult: Outcome of a single sweep
"""

from .expiry import ExpiryScheduler, SweepResult

__all__ = ["ExpiryScheduler", "SweepResult"]
