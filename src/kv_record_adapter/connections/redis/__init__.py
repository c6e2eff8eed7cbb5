from kv_record_adapter.connections.redis.connection import RedisConnection

__all__ = ["RedisConnection"]
