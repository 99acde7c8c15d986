# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for the host boundary.

Available protocols:
- NotifierProtocol: Delivers one text message to one user
- IdentityProtocol: Resolves display names and privilege

Default implementations:
- NullNotifier: Drops every message
- StaticIdentity: In-memory names and admin set
"""

from .identity import IdentityProtocol, StaticIdentity
from .notifier import NotifierProtocol, NullNotifier

__all__ = [
    "IdentityProtocol",
    "NotifierProtocol",
    "NullNotifier",
    "StaticIdentity",
]
