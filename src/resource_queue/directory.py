# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Resource directory: create, look up, update and delete resources.

The directory is the only writer of resource records and of the id list.
Deleting a resource also removes every record keyed by its id.
"""

import logging
import uuid

from .clock import Clock, utc_now
from .config import ConfigSource, QueueConfig
from .exceptions import (
    AmbiguousResourceError,
    CapacityExceededError,
    InvalidFieldError,
    NotFoundError,
)
from .locks import DIRECTORY_LOCK_KEY, ResourceLocks
from .store import Store
from .types import Resource

logger = logging.getLogger(__name__)


def _clean(field: str, value: str, cap: int, required: bool = False) -> str:
    """Trim ``value`` and enforce its length cap."""
    value = value.strip()
    if required and not value:
        raise InvalidFieldError(field, "must not be empty")
    if len(value) > cap:
        raise InvalidFieldError(field, f"longer than {cap} characters")
    return value


def _clean_metadata(metadata: dict[str, str], config: QueueConfig) -> dict[str, str]:
    """Trim keys and values; keys that end up empty are dropped."""
    clean: dict[str, str] = {}
    for key, value in metadata.items():
        key = _clean("metadata key", str(key), config.max_metadata_key_len)
        if not key:
            continue
        if key in clean:
            raise InvalidFieldError("metadata", f"duplicate key {key!r}")
        clean[key] = _clean(
            f"metadata[{key}]", str(value), config.max_metadata_value_len
        )
    if len(clean) > config.max_metadata_entries:
        raise InvalidFieldError(
            "metadata", f"more than {config.max_metadata_entries} entries"
        )
    return clean


class ResourceDirectory:
    """
    Catalog of bookable resources.

    The id list keeps creation order and is guarded by its own lock; a
    resource's record is written under that resource's lock.
    """

    def __init__(
        self,
        store: Store,
        locks: ResourceLocks,
        config_source: ConfigSource,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.locks = locks
        self.config_source = config_source
        self.clock = clock

    async def create(
        self,
        name: str,
        created_by: str,
        *,
        location: str = "",
        icon: str = "",
        description: str = "",
        metadata: dict[str, str] | None = None,
    ) -> Resource:
        """
        Add a resource with a freshly generated id.

        Raises:
            InvalidFieldError: A field is empty or over its cap
            CapacityExceededError: The directory is full
        """
        config = self.config_source.get_config()
        resource = Resource(
            id="",
            name=_clean("name", name, config.max_name_len, required=True),
            location=_clean("location", location, config.max_location_len),
            icon=_clean("icon", icon, config.max_icon_len),
            description=_clean(
                "description", description, config.max_description_len
            ),
            metadata=_clean_metadata(metadata or {}, config),
            created_at=self.clock(),
            created_by=created_by,
        )

        async with self.locks.hold(DIRECTORY_LOCK_KEY):
            ids = await self.store.get_resource_ids()
            if len(ids) >= config.max_resources:
                raise CapacityExceededError(config.max_resources)

            resource_id = uuid.uuid4().hex[:8]
            while resource_id in ids:
                resource_id = uuid.uuid4().hex[:8]
            resource.id = resource_id

            await self.store.save_resource(resource)
            await self.store.save_resource_ids([*ids, resource_id])

        logger.info(f"Resource {resource_id} '{resource.name}' created by {created_by}")
        return resource

    async def get(self, resource_id: str) -> Resource:
        """Resource by id; raises NotFoundError when absent."""
        resource = await self.store.get_resource(resource_id)
        if resource is None:
            raise NotFoundError(resource_id)
        return resource

    async def update(
        self,
        resource_id: str,
        *,
        name: str | None = None,
        location: str | None = None,
        icon: str | None = None,
        description: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> Resource:
        """
        Change selected fields; ``None`` leaves a field as it is.

        The id, creator and creation time never change.
        """
        config = self.config_source.get_config()
        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = _clean("name", name, config.max_name_len, required=True)
        if location is not None:
            changes["location"] = _clean(
                "location", location, config.max_location_len
            )
        if icon is not None:
            changes["icon"] = _clean("icon", icon, config.max_icon_len)
        if description is not None:
            changes["description"] = _clean(
                "description", description, config.max_description_len
            )
        if metadata is not None:
            changes["metadata"] = _clean_metadata(metadata, config)

        async with self.locks.hold(resource_id):
            existing = await self.get(resource_id)
            updated = existing.model_copy(update=changes)
            await self.store.save_resource(updated)

        logger.info(f"Resource {resource_id} updated: {sorted(changes)}")
        return updated

    async def delete(self, resource_id: str) -> None:
        """
        Remove a resource and everything recorded about it.

        Raises:
            NotFoundError: Neither a record nor a directory entry exists
        """
        async with self.locks.hold(resource_id):
            async with self.locks.hold(DIRECTORY_LOCK_KEY):
                ids = await self.store.get_resource_ids()
                record = await self.store.get_resource(resource_id)
                if record is None and resource_id not in ids:
                    raise NotFoundError(resource_id)

                await self.store.delete_resource(resource_id)
                await self.store.delete_booking(resource_id)
                await self.store.delete_queue(resource_id)
                await self.store.delete_subscribers(resource_id)
                await self.store.delete_history(resource_id)
                await self.store.save_resource_ids(
                    [rid for rid in ids if rid != resource_id]
                )

        logger.info(f"Resource {resource_id} deleted")

    async def ids(self) -> list[str]:
        """Resource ids in directory order, including dangling ones."""
        return await self.store.get_resource_ids()

    async def list(self) -> list[Resource]:
        """Resources in directory order; ids without a record are skipped."""
        resources = []
        for resource_id in await self.store.get_resource_ids():
            resource = await self.store.get_resource(resource_id)
            if resource is not None:
                resources.append(resource)
        return resources

    async def find(self, name_or_id: str) -> Resource:
        """
        Resolve user input to one resource.

        An exact id or name (case-insensitive) wins outright. Otherwise the
        query must match exactly one resource by name substring or id prefix.

        Raises:
            AmbiguousResourceError: Several partial matches
            NotFoundError: No match
        """
        query = name_or_id.strip().lower()
        if not query:
            raise NotFoundError(name_or_id)

        matches = []
        for resource in await self.list():
            if resource.id.lower() == query or resource.name.lower() == query:
                return resource
            if query in resource.name.lower() or resource.id.lower().startswith(query):
                matches.append(resource)

        if len(matches) == 1:
            return matches[0]
        if matches:
            raise AmbiguousResourceError(name_or_id, [r.name for r in matches])
        raise NotFoundError(name_or_id)


__all__ = ["ResourceDirectory"]
