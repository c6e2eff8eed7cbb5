from typing import Any

from kv_record_adapter.errors.base import ExtraInfoType, RecordAdapterError


class RecordOperationError(RecordAdapterError):
    """Base exception for all record operation errors."""


class SerializationError(RecordOperationError):
    """Raised when a record cannot be serialized for storage."""


class DeserializationError(RecordOperationError):
    """Raised when stored data cannot be deserialized back into a record."""


class InvalidTTLError(RecordOperationError):
    """Raised when a TTL is invalid."""

    def __init__(self, ttl: Any, extra_info: ExtraInfoType | None = None):
        super().__init__(
            message="A TTL is invalid.",
            extra_info={"ttl": str(ttl), **(extra_info or {})},
        )


class InvalidRecordError(RecordOperationError):
    """Raised when a record has no usable primary key value."""

    def __init__(self, collection: str, primary_key: str):
        super().__init__(
            message="A record must contain a present, non-array value for its primary key.",
            extra_info={"collection": collection, "primary_key": primary_key},
        )
