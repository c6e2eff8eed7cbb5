from kv_record_adapter.errors.adapter import (
    CollectionNotRegisteredError,
    InvalidCriteriaError,
    PrimaryKeyUpdateError,
    SchemaDefinitionError,
)
from kv_record_adapter.errors.base import ExtraInfoType, RecordAdapterError
from kv_record_adapter.errors.record import (
    DeserializationError,
    InvalidRecordError,
    InvalidTTLError,
    RecordOperationError,
    SerializationError,
)
from kv_record_adapter.errors.store import RecordStoreError, StoreConnectionError, StoreSetupError

__all__ = [
    "CollectionNotRegisteredError",
    "DeserializationError",
    "ExtraInfoType",
    "InvalidCriteriaError",
    "InvalidRecordError",
    "InvalidTTLError",
    "PrimaryKeyUpdateError",
    "RecordAdapterError",
    "RecordOperationError",
    "RecordStoreError",
    "SchemaDefinitionError",
    "SerializationError",
    "StoreConnectionError",
    "StoreSetupError",
]
