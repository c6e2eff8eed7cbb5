"""Registry of collection schemas.

The registry knows, for every registered collection, which attribute is the primary key, how a record is
addressed in the key-value store and how stored values are coerced back into typed records.
"""

import logging
from collections.abc import Mapping
from typing import Any, Final

from pydantic import ValidationError
from pydantic.type_adapter import TypeAdapter

from kv_record_adapter.errors import CollectionNotRegisteredError, DeserializationError
from kv_record_adapter.protocols.connection import AsyncKeyValueConnection
from kv_record_adapter.schema.definition import CollectionDefinition
from kv_record_adapter.type_checking.bear_spray import bear_enforce
from kv_record_adapter.utils.sanitize import sanitize_key_component
from kv_record_adapter.utils.serialization import dump_to_json

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX: Final[str] = "waterline"
KEY_SEPARATOR: Final[str] = ":"
SCHEMA_KEY_SUFFIX: Final[str] = "_schema"
SEQUENCES_KEY_SEGMENT: Final[str] = "_sequences"


class SchemaRegistry:
    """Holds the schema of every registered collection."""

    key_prefix: str

    _definitions: dict[str, dict[str, Any]]
    _collections: dict[str, CollectionDefinition]
    _primary: dict[str, str]
    _parsers: dict[str, dict[str, TypeAdapter[Any]]]

    def __init__(self, *, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        """Create an empty registry.

        Args:
            key_prefix: The prefix of every key written by the adapter. Defaults to "waterline".
        """
        self.key_prefix = key_prefix

        self._definitions = {}
        self._collections = {}
        self._primary = {}
        self._parsers = {}

    def register_collection(self, name: str, definition: Mapping[str, Any] | None) -> None:
        """Register (or replace) the definition of a collection."""
        definition = dict(definition or {})

        collection = CollectionDefinition.from_definition(collection=name, definition=definition)

        parsers: dict[str, TypeAdapter[Any]] = {}
        for attribute_name, attribute in collection.attributes.items():
            if (type_adapter := attribute.type_adapter()) is not None:
                parsers[attribute_name] = type_adapter

        self._definitions[name] = definition
        self._collections[name] = collection
        self._primary[name] = collection.primary_key
        self._parsers[name] = parsers

        logger.debug("Registered collection", extra={"collection": name, "primary_key": collection.primary_key})

    def retrieve(self, name: str) -> dict[str, Any] | None:
        """Return the registered definition of a collection, or None if it is not registered."""
        if (definition := self._definitions.get(name)) is None:
            return None

        return dict(definition)

    def collection(self, name: str) -> CollectionDefinition:
        """Return the validated definition of a registered collection."""
        if (collection := self._collections.get(name)) is None:
            raise CollectionNotRegisteredError(collection=name)

        return collection

    def primary_key_of(self, name: str) -> str:
        """Return the primary key attribute of a registered collection."""
        if (primary_key := self._primary.get(name)) is None:
            raise CollectionNotRegisteredError(collection=name)

        return primary_key

    @property
    def collections(self) -> list[str]:
        return list(self._definitions)

    @bear_enforce
    def record_key(self, collection: str, primary_key: str, value: Any) -> str:  # pyright: ignore[reportAny]
        """Derive the storage key of a record.

        The same arguments always produce the same key and different values produce different keys. Passing
        an empty value yields the prefix shared by every record of the collection.
        """
        return KEY_SEPARATOR.join(
            [
                self.key_prefix,
                sanitize_key_component(collection),
                sanitize_key_component(primary_key),
                sanitize_key_component(value),
            ]
        )

    def schema_key(self, collection: str) -> str:
        """The key `sync` writes the schema of a collection to."""
        return KEY_SEPARATOR.join([self.key_prefix, sanitize_key_component(collection), SCHEMA_KEY_SUFFIX])

    def sequence_key(self, collection: str) -> str:
        """The key holding the last auto-increment value of a collection."""
        return KEY_SEPARATOR.join(
            [
                self.key_prefix,
                sanitize_key_component(collection),
                SEQUENCES_KEY_SEGMENT,
                sanitize_key_component(self.primary_key_of(collection)),
            ]
        )

    def parse(self, collection: str, record: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce the declared attributes of a freshly deserialized record into their registered types.

        Undeclared attributes and None values are passed through unchanged.

        Raises:
            DeserializationError: If a stored value cannot be coerced into its declared type.
        """
        parsers: dict[str, TypeAdapter[Any]] = self._parsers.get(collection, {})

        parsed: dict[str, Any] = {}

        for attribute_name, value in record.items():
            type_adapter: TypeAdapter[Any] | None = parsers.get(attribute_name)

            if type_adapter is None or value is None:
                parsed[attribute_name] = value
                continue

            try:
                parsed[attribute_name] = type_adapter.validate_python(value)
            except ValidationError as e:
                msg = f"Stored value of attribute {attribute_name!r} in collection {collection!r} does not match its type"
                raise DeserializationError(message=msg) from e

        return parsed

    async def next_sequence_value(self, connection: AsyncKeyValueConnection, collection: str) -> int:
        """Allocate the next auto-increment primary key value of a collection."""
        return await connection.incr(key=self.sequence_key(collection=collection))

    async def sync(self, connection: AsyncKeyValueConnection) -> None:
        """Persist every registered definition to the key-value store."""
        for name, collection in self._collections.items():
            payload: str = dump_to_json(
                obj={
                    "collection": name,
                    "primary_key": collection.primary_key,
                    "attributes": {
                        attribute_name: attribute.model_dump(by_alias=True, exclude_none=True)
                        for attribute_name, attribute in collection.attributes.items()
                    },
                }
            )

            await connection.set(key=self.schema_key(collection=name), value=payload)

        logger.debug("Synced collection schemas", extra={"collections": len(self._collections)})
