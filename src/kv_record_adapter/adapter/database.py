"""Collection-level CRUD over a key-value connection.

Records are addressed only by primary key. A record of collection `user` with primary key `id` equal to
`u1` lives under the key `waterline:user:id:u1` and its value is the record serialized as JSON.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Final

from kv_record_adapter.adapter.criteria import MatchAll, PrimaryKeyEquality, Unsupported, is_scalar, present, resolve_criteria
from kv_record_adapter.errors import CollectionNotRegisteredError, InvalidCriteriaError, InvalidRecordError, PrimaryKeyUpdateError
from kv_record_adapter.protocols.connection import AsyncKeyValueConnection
from kv_record_adapter.schema.registry import SchemaRegistry
from kv_record_adapter.utils.concurrency import DEFAULT_MAX_CONCURRENCY, gather_bounded
from kv_record_adapter.utils.sanitize import escape_glob
from kv_record_adapter.utils.serialization import dump_to_json, load_from_json
from kv_record_adapter.utils.time_to_live import prepare_record_ttl

logger = logging.getLogger(__name__)

DEFAULT_TTL_ATTRIBUTE: Final[str] = "_ttl"
DEFAULT_DROP_BATCH_SIZE: Final[int] = 100


class RecordStoreAdapter:
    """Makes a key-value store look like a minimal document collection store.

    Defined collections:
        `defined_collections` is the set of collections `define`d during the current session. It exists for
        the ORM's safe auto-migration: `describe` reports a collection as absent (None) unless it is in this
        set, so a schema that only exists from an earlier sync is never mistaken for one created now. Pass
        your own set to share or inspect it; by default each adapter owns an empty one.
    """

    connection: AsyncKeyValueConnection
    registry: SchemaRegistry
    defined_collections: set[str]

    ttl_attribute: str
    persist_ttl_attribute: bool
    max_concurrency: int
    drop_batch_size: int

    def __init__(
        self,
        connection: AsyncKeyValueConnection,
        *,
        registry: SchemaRegistry | None = None,
        defined_collections: set[str] | None = None,
        ttl_attribute: str = DEFAULT_TTL_ATTRIBUTE,
        persist_ttl_attribute: bool = False,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        drop_batch_size: int = DEFAULT_DROP_BATCH_SIZE,
    ) -> None:
        """Create a new RecordStoreAdapter.

        Args:
            connection: The key-value connection shared by every collection.
            registry: The schema registry. Defaults to a new, empty registry.
            defined_collections: The session-scoped set of defined collections. Defaults to a new, empty set.
            ttl_attribute: The reserved record attribute holding the seconds-to-live of a record.
            persist_ttl_attribute: Whether the TTL attribute is kept in the stored payload. Defaults to False.
            max_concurrency: The maximum number of key-value requests a bulk operation has in flight.
            drop_batch_size: The number of keys removed by each request of a drop.
        """
        if drop_batch_size < 1:
            msg = f"drop_batch_size must be at least 1: {drop_batch_size}"
            raise ValueError(msg)

        self.connection = connection
        self.registry = registry if registry is not None else SchemaRegistry()
        self.defined_collections = defined_collections if defined_collections is not None else set()

        self.ttl_attribute = ttl_attribute
        self.persist_ttl_attribute = persist_ttl_attribute
        self.max_concurrency = max_concurrency
        self.drop_batch_size = drop_batch_size

    def configure(self, collection: str, definition: Mapping[str, Any] | None) -> None:
        """Register the schema of a collection."""
        self.registry.register_collection(name=collection.lower(), definition=definition)

    async def sync(self) -> None:
        """Persist the registered schemas to the key-value store."""
        await self.registry.sync(connection=self.connection)

    async def define(self, collection: str, definition: Mapping[str, Any] | None) -> None:
        """Register the schema of a collection and mark it as defined in this session."""
        name = collection.lower()

        self.registry.register_collection(name=name, definition=definition)

        self.defined_collections.add(name)

    async def describe(self, collection: str) -> dict[str, Any] | None:
        """Describe a collection.

        Returns:
            The registered definition, or None if the definition is empty or the collection was not defined
            in this session.

        Raises:
            CollectionNotRegisteredError: If the collection is not registered.
        """
        name = collection.lower()

        description: dict[str, Any] | None = self.registry.retrieve(name=name)

        if description is None:
            raise CollectionNotRegisteredError(collection=name)

        if not description or name not in self.defined_collections:
            return None

        return description

    async def drop(self, collection: str, relations: Sequence[str] | None = None) -> None:  # noqa: ARG002
        """Delete every record of a collection. The registration of the collection is kept.

        `relations` is accepted for compatibility with the ORM and ignored.
        """
        name = collection.lower()
        primary_key = self.registry.primary_key_of(name=name)

        key_prefix: str = self.registry.record_key(collection=name, primary_key=primary_key, value="")

        keys: list[str] = await self.connection.keys(pattern=escape_glob(key_prefix) + "*")

        batches: list[list[str]] = [keys[i : i + self.drop_batch_size] for i in range(0, len(keys), self.drop_batch_size)]

        deleted_counts: list[int] = await gather_bounded(
            operations=[lambda batch=batch: self.connection.delete_many(keys=batch) for batch in batches],
            max_concurrency=self.max_concurrency,
        )

        logger.debug("Dropped collection", extra={"collection": name, "keys": len(keys), "deleted": sum(deleted_counts)})

    async def find(self, collection: str, criteria: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        """Find the record named by a primary key criteria.

        Returns:
            A list holding the record, or an empty list if there is no such record.

        Raises:
            InvalidCriteriaError: If the criteria is not a single primary key equality.
        """
        name = collection.lower()
        primary_key = self.registry.primary_key_of(name=name)

        resolved = resolve_criteria(criteria=criteria, primary_key=primary_key)

        if not isinstance(resolved, PrimaryKeyEquality):
            raise InvalidCriteriaError(operation="find", collection=name, reason=_reason(resolved))

        record_key: str = self.registry.record_key(collection=name, primary_key=primary_key, value=resolved.value)

        payload: str | None = await self.connection.get(key=record_key)

        if payload is None:
            return []

        return [self.registry.parse(collection=name, record=load_from_json(json_str=payload))]

    async def create(self, collection: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """Create a record and return it as it reads back from the store.

        A record without a primary key value is given the next sequence value when its primary key is declared
        `autoIncrement`.

        Raises:
            InvalidRecordError: If the record has no usable primary key value.
            SerializationError: If the record cannot be serialized.
        """
        name = collection.lower()
        primary_key = self.registry.primary_key_of(name=name)

        record: dict[str, Any] = dict(data)

        if not present(record.get(primary_key)) and self.registry.collection(name=name).auto_increment:
            record[primary_key] = await self.registry.next_sequence_value(connection=self.connection, collection=name)

        primary_key_value: Any = record.get(primary_key)  # pyright: ignore[reportAny]

        if not present(primary_key_value) or not is_scalar(primary_key_value):
            raise InvalidRecordError(collection=name, primary_key=primary_key)

        record_key: str = self.registry.record_key(collection=name, primary_key=primary_key, value=primary_key_value)

        await self._set(key=record_key, data=record)

        payload: str | None = await self.connection.get(key=record_key)

        if payload is None:
            # The record expired or was removed between the write and the read
            return self.registry.parse(collection=name, record=self._storable(data=record))

        return self.registry.parse(collection=name, record=load_from_json(json_str=payload))

    async def update(self, collection: str, criteria: Mapping[str, Any] | None, values: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Merge `values` into the record named by a primary key criteria.

        Returns:
            The merged records.

        Raises:
            PrimaryKeyUpdateError: If `values` changes the primary key.
            InvalidCriteriaError: If the criteria is not a single primary key equality.
        """
        name = collection.lower()
        primary_key = self.registry.primary_key_of(name=name)

        resolved = resolve_criteria(criteria=criteria, primary_key=primary_key)

        if not isinstance(resolved, PrimaryKeyEquality):
            raise InvalidCriteriaError(operation="update", collection=name, reason=_reason(resolved))

        if present(values.get(primary_key)) and values[primary_key] != resolved.value:
            raise PrimaryKeyUpdateError(collection=name, primary_key=primary_key)

        changes: dict[str, Any] = {attribute: value for attribute, value in values.items() if attribute != primary_key}

        records: list[dict[str, Any]] = await self.find(collection=name, criteria=criteria)

        async def update_record(record: dict[str, Any]) -> dict[str, Any]:
            record_key: str = self.registry.record_key(collection=name, primary_key=primary_key, value=record[primary_key])

            merged: dict[str, Any] = {**record, **changes}

            await self._set(key=record_key, data=merged, keep_ttl=self.ttl_attribute not in changes)

            return self._storable(data=merged)

        return await gather_bounded(
            operations=[lambda record=record: update_record(record) for record in records],
            max_concurrency=self.max_concurrency,
        )

    async def destroy(self, collection: str, criteria: Mapping[str, Any] | None) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Destroy the record named by a primary key criteria, or every record when the criteria is empty.

        Returns:
            The record as stored before deletion, an empty list if there was no such record, or None when every
            record of the collection was destroyed.

        Raises:
            InvalidCriteriaError: If the criteria is neither empty nor a single primary key equality.
        """
        name = collection.lower()
        primary_key = self.registry.primary_key_of(name=name)

        resolved = resolve_criteria(criteria=criteria, primary_key=primary_key)

        if isinstance(resolved, MatchAll):
            await self.drop(collection=name)
            return None

        if isinstance(resolved, Unsupported):
            raise InvalidCriteriaError(operation="destroy", collection=name, reason=resolved.reason)

        record_key: str = self.registry.record_key(collection=name, primary_key=primary_key, value=resolved.value)

        payload: str | None = await self.connection.get(key=record_key)

        if payload is None:
            return []

        _ = await self.connection.delete(key=record_key)

        return load_from_json(json_str=payload)

    def _storable(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Return the record as it is written to the store."""
        if self.persist_ttl_attribute:
            return dict(data)

        return {attribute: value for attribute, value in data.items() if attribute != self.ttl_attribute}

    async def _set(self, key: str, data: Mapping[str, Any], *, keep_ttl: bool = False) -> None:
        """Write a record, expiring it after the seconds given by its TTL attribute.

        A missing, zero or `-1` TTL writes a record that does not expire. With `keep_ttl`, a record without a
        TTL attribute keeps the remaining expiry of the key it overwrites.

        Raises:
            InvalidTTLError: If the TTL attribute is not a usable number of seconds.
            SerializationError: If the record cannot be serialized.
        """
        has_ttl: bool = self.ttl_attribute in data

        ttl: float | None = prepare_record_ttl(data.get(self.ttl_attribute))

        payload: str = dump_to_json(obj=self._storable(data=data))

        if ttl is None:
            await self.connection.set(key=key, value=payload, keep_ttl=keep_ttl and not has_ttl)
            return

        await self.connection.setex(key=key, ttl=ttl, value=payload)


def _reason(resolved: MatchAll | Unsupported) -> str:
    """Explain why a resolved criteria cannot name a single record."""
    if isinstance(resolved, MatchAll):
        return "the criteria has no conditions"
    return resolved.reason
