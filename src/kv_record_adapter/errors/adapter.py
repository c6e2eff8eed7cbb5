"""Errors raised by the collection-level operations."""

from kv_record_adapter.errors.base import RecordAdapterError


class CollectionNotRegisteredError(RecordAdapterError):
    """Raised when a collection is described before it was registered."""

    def __init__(self, collection: str):
        super().__init__(
            message="Collection is not registered.",
            extra_info={"collection": collection},
        )


class InvalidCriteriaError(RecordAdapterError):
    """Raised when criteria cannot be resolved to a single primary key lookup."""

    def __init__(self, operation: str, collection: str, reason: str | None = None):
        super().__init__(
            message=f'Please use primary key for the criteria, eg. {operation}("PRIMARY-KEY")',
            extra_info={"operation": operation, "collection": collection, "reason": reason},
        )


class PrimaryKeyUpdateError(RecordAdapterError):
    """Raised when an update attempts to change a record's primary key."""

    def __init__(self, collection: str, primary_key: str):
        super().__init__(
            message="The primary key of a record cannot be updated.",
            extra_info={"collection": collection, "primary_key": primary_key},
        )


class SchemaDefinitionError(RecordAdapterError):
    """Raised when a collection definition is invalid."""
