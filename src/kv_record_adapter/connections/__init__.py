"""Key-value connections the record adapter can run on."""

from typing import Any
from urllib.parse import urlparse

from kv_record_adapter.connections.base import BaseConnection


def connect(url: str, **kwargs: Any) -> BaseConnection:
    """Create a connection from a URL.

    `memory://` creates an in-process MemoryConnection, `redis://` and `rediss://` create a RedisConnection.
    Extra keyword arguments are passed to the connection constructor.
    """
    scheme = urlparse(url).scheme

    if scheme == "memory":
        from kv_record_adapter.connections.memory import MemoryConnection

        return MemoryConnection(**kwargs)

    if scheme in ("redis", "rediss"):
        from kv_record_adapter.connections.redis import RedisConnection

        return RedisConnection(url=url, **kwargs)

    msg = f"Unsupported connection URL scheme: {scheme!r}"
    raise ValueError(msg)


def __getattr__(name: str) -> Any:
    """Lazy import for optional connection implementations."""
    if name == "MemoryConnection":
        try:
            from kv_record_adapter.connections.memory import MemoryConnection
        except ImportError as e:
            raise ImportError(f"MemoryConnection requires cachetools to be installed: {e}") from e
        return MemoryConnection

    if name == "RedisConnection":
        try:
            from kv_record_adapter.connections.redis import RedisConnection
        except ImportError as e:
            raise ImportError(f"RedisConnection requires redis to be installed: {e}") from e
        return RedisConnection

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["BaseConnection", "MemoryConnection", "RedisConnection", "connect"]  # noqa: F822
