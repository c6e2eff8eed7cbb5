from collections.abc import Sequence

from typing_extensions import override

from kv_record_adapter.protocols.connection import AsyncKeyValueConnection


class BaseConnectionWrapper(AsyncKeyValueConnection):
    """A base wrapper for connections that passes through to the underlying connection."""

    connection: AsyncKeyValueConnection

    @override
    async def get(self, key: str) -> str | None:
        return await self.connection.get(key=key)

    @override
    async def set(self, key: str, value: str, *, keep_ttl: bool = False) -> None:
        return await self.connection.set(key=key, value=value, keep_ttl=keep_ttl)

    @override
    async def setex(self, key: str, ttl: float, value: str) -> None:
        return await self.connection.setex(key=key, ttl=ttl, value=value)

    @override
    async def delete(self, key: str) -> bool:
        return await self.connection.delete(key=key)

    @override
    async def delete_many(self, keys: Sequence[str]) -> int:
        return await self.connection.delete_many(keys=keys)

    @override
    async def keys(self, pattern: str) -> list[str]:
        return await self.connection.keys(pattern=pattern)

    @override
    async def incr(self, key: str) -> int:
        return await self.connection.incr(key=key)
