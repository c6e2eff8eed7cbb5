from kv_record_adapter.connections.memory.connection import MemoryConnection

__all__ = ["MemoryConnection"]
