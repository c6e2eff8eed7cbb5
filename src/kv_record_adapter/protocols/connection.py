from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class AsyncKeyValueConnection(Protocol):
    """A minimal text key-value transport, as offered by Redis and similar stores.

    Keys are flat strings. Values are the serialized text payloads of records. The record adapter
    never interprets what a connection stores beyond handing the text to the schema registry.
    """

    async def get(self, key: str) -> str | None:
        """Retrieve the payload stored under `key`.

        Returns:
            The payload, or None if the key does not exist or has expired.
        """
        ...

    async def set(self, key: str, value: str, *, keep_ttl: bool = False) -> None:
        """Store a payload that does not expire.

        Args:
            key: The key to store.
            value: The payload to store.
            keep_ttl: Keep the remaining expiry of an existing key instead of clearing it.
        """
        ...

    async def setex(self, key: str, ttl: float, value: str) -> None:
        """Store a payload that expires after `ttl` seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if the key existed."""
        ...

    async def delete_many(self, keys: Sequence[str]) -> int:
        """Delete several keys. Returns the number of keys that existed."""
        ...

    async def keys(self, pattern: str) -> list[str]:
        """List the keys matching a glob-style pattern (`*`, `?` and `[...]` classes)."""
        ...

    async def incr(self, key: str) -> int:
        """Atomically increment the integer stored under `key`, starting from 0, and return the new value."""
        ...
