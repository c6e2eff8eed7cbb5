"""
Base class for key-value connections.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from types import TracebackType

from typing_extensions import Self

from kv_record_adapter.errors import RecordStoreError, StoreSetupError
from kv_record_adapter.protocols.connection import AsyncKeyValueConnection


class BaseConnection(AsyncKeyValueConnection, ABC):
    """An opinionated base class for key-value connections.

    Handles one-time setup and the async context manager protocol. Implementations only need to provide the
    underscored storage primitives.
    """

    _setup_complete: bool
    _setup_lock: asyncio.Lock

    def __init__(self) -> None:
        self._setup_complete = False
        self._setup_lock = asyncio.Lock()

    async def _setup(self) -> None:
        """Initialize the connection (called once before first use)."""

    async def setup(self) -> None:
        await self.setup_once()

    async def setup_once(self) -> None:
        if not self._setup_complete:
            async with self._setup_lock:
                if not self._setup_complete:
                    try:
                        await self._setup()
                    except RecordStoreError:
                        raise
                    except Exception as e:
                        raise StoreSetupError(message=f"Failed to setup connection: {e}", extra_info={"connection": type(self).__name__}) from e
                    self._setup_complete = True

    async def close(self) -> None:
        await self._close()

    async def _close(self) -> None:
        """Release resources held by the connection."""

    async def __aenter__(self) -> Self:
        await self.setup_once()
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None
    ) -> None:
        await self.close()

    async def get(self, key: str) -> str | None:
        await self.setup_once()
        return await self._get(key=key)

    async def set(self, key: str, value: str, *, keep_ttl: bool = False) -> None:
        await self.setup_once()
        await self._set(key=key, value=value, keep_ttl=keep_ttl)

    async def setex(self, key: str, ttl: float, value: str) -> None:
        await self.setup_once()
        await self._setex(key=key, ttl=ttl, value=value)

    async def delete(self, key: str) -> bool:
        await self.setup_once()
        return await self._delete(key=key)

    async def delete_many(self, keys: Sequence[str]) -> int:
        await self.setup_once()
        if not keys:
            return 0
        return await self._delete_many(keys=keys)

    async def keys(self, pattern: str) -> list[str]:
        await self.setup_once()
        return await self._keys(pattern=pattern)

    async def incr(self, key: str) -> int:
        await self.setup_once()
        return await self._incr(key=key)

    @abstractmethod
    async def _get(self, *, key: str) -> str | None: ...

    @abstractmethod
    async def _set(self, *, key: str, value: str, keep_ttl: bool) -> None: ...

    @abstractmethod
    async def _setex(self, *, key: str, ttl: float, value: str) -> None: ...

    @abstractmethod
    async def _delete(self, *, key: str) -> bool: ...

    async def _delete_many(self, *, keys: Sequence[str]) -> int:
        deleted_count: int = 0

        for key in keys:
            if await self._delete(key=key):
                deleted_count += 1

        return deleted_count

    @abstractmethod
    async def _keys(self, *, pattern: str) -> list[str]: ...

    @abstractmethod
    async def _incr(self, *, key: str) -> int: ...
