# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Resource types for the directory.

A resource is anything that one user at a time may hold: a machine, a
license seat, a room. Resources are addressed by an immutable short id.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..clock import utc_now


class Resource(BaseModel):
    """
    A shareable item that can be booked by one user at a time.

    Attributes:
        id: Short generated identifier, immutable once created
        name: Display name, never empty
        location: Optional location tag (host name, IP address, room number)
        icon: Optional short icon (usually an emoji)
        description: Optional free text
        metadata: Arbitrary key/value pairs shown alongside the resource
        created_at: UTC timestamp of creation
        created_by: User id of the creator
    """

    id: str
    name: str
    location: str = ""
    icon: str = ""
    description: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    created_by: str = ""


class ResourceIndex(BaseModel):
    """The directory's ordered list of known resource ids."""

    ids: list[str] = Field(default_factory=list)


__all__ = ["Resource", "ResourceIndex"]
