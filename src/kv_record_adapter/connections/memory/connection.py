import fnmatch
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from typing_extensions import override

from kv_record_adapter.connections.base import BaseConnection

try:
    from cachetools import TLRUCache
except ImportError as e:
    msg = "MemoryConnection requires kv-record-adapter[memory]"
    raise ImportError(msg) from e


@dataclass
class MemoryCacheEntry:
    """A cache entry for the memory connection."""

    value: str

    ttl_at_insert: float | None = field(default=None)

    expires_at: float | None = field(default=None)


def _memory_cache_ttu(_key: Any, value: MemoryCacheEntry, now: float) -> float:
    """Calculate time-to-use for cache entries based on their TTL."""
    if value.expires_at is not None:
        return value.expires_at

    if value.ttl_at_insert is None:
        return math.inf

    value.expires_at = now + value.ttl_at_insert

    return value.expires_at


def _memory_cache_getsizeof(value: MemoryCacheEntry) -> int:  # noqa: ARG001
    """Return size of cache entry (always 1 for entry counting)."""
    return 1


DEFAULT_MAX_ENTRIES = 100000


class MemoryConnection(BaseConnection):
    """A fixed-size in-process connection using a TLRU (Time-aware Least Recently Used) cache.

    Useful for tests and single-process deployments. Expired keys are never returned.
    """

    max_entries: int

    _cache: TLRUCache[str, MemoryCacheEntry]

    def __init__(self, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize a fixed-size in-memory connection.

        Args:
            max_entries: The maximum number of keys held. Defaults to 100,000 keys.
        """
        self.max_entries = max_entries

        self._cache = TLRUCache[str, MemoryCacheEntry](
            maxsize=max_entries,
            ttu=_memory_cache_ttu,
            timer=time.monotonic,
            getsizeof=_memory_cache_getsizeof,
        )

        super().__init__()

    @override
    async def _get(self, *, key: str) -> str | None:
        entry: MemoryCacheEntry | None = self._cache.get(key)

        if entry is None:
            return None

        return entry.value

    @override
    async def _set(self, *, key: str, value: str, keep_ttl: bool) -> None:
        if keep_ttl and (existing := self._cache.get(key)) is not None:
            self._cache[key] = MemoryCacheEntry(value=value, ttl_at_insert=existing.ttl_at_insert, expires_at=existing.expires_at)
            return

        self._cache[key] = MemoryCacheEntry(value=value)

    @override
    async def _setex(self, *, key: str, ttl: float, value: str) -> None:
        self._cache[key] = MemoryCacheEntry(value=value, ttl_at_insert=ttl)

    @override
    async def _delete(self, *, key: str) -> bool:
        if key not in self._cache:
            return False

        return self._cache.pop(key, None) is not None

    @override
    async def _delete_many(self, *, keys: Sequence[str]) -> int:
        return sum(1 for key in keys if key in self._cache and self._cache.pop(key, None) is not None)

    @override
    async def _keys(self, *, pattern: str) -> list[str]:
        _ = self._cache.expire()

        return [key for key in list(self._cache.keys()) if fnmatch.fnmatchcase(key, pattern)]

    @override
    async def _incr(self, *, key: str) -> int:
        entry: MemoryCacheEntry | None = self._cache.get(key)

        current: int = int(entry.value) if entry is not None else 0

        next_value: int = current + 1

        if entry is None:
            self._cache[key] = MemoryCacheEntry(value=str(next_value))
        else:
            self._cache[key] = MemoryCacheEntry(value=str(next_value), ttl_at_insert=entry.ttl_at_insert, expires_at=entry.expires_at)

        return next_value
