from kv_record_adapter.protocols.connection import AsyncKeyValueConnection

__all__ = ["AsyncKeyValueConnection"]
