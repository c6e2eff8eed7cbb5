"""KV Record Adapter - collection-oriented CRUD over a key-value store, addressed by primary key."""

from kv_record_adapter.adapter import MatchAll, PrimaryKeyEquality, RecordStoreAdapter, Unsupported, resolve_criteria
from kv_record_adapter.connections import BaseConnection, connect
from kv_record_adapter.protocols import AsyncKeyValueConnection
from kv_record_adapter.schema import SchemaRegistry

__all__ = [
    "AsyncKeyValueConnection",
    "BaseConnection",
    "MatchAll",
    "PrimaryKeyEquality",
    "RecordStoreAdapter",
    "SchemaRegistry",
    "Unsupported",
    "connect",
    "resolve_criteria",
]
