from collections.abc import Sequence
from typing import Any, overload
from urllib.parse import urlparse

from typing_extensions import override

from kv_record_adapter.connections.base import BaseConnection
from kv_record_adapter.errors import StoreConnectionError

try:
    from redis.asyncio import Redis
except ImportError as e:
    msg = "RedisConnection requires kv-record-adapter[redis]"
    raise ImportError(msg) from e

DEFAULT_SCAN_COUNT = 500


class RedisConnection(BaseConnection):
    """Redis-backed key-value connection."""

    _client: Redis

    @overload
    def __init__(self, *, client: Redis) -> None: ...

    @overload
    def __init__(self, *, url: str) -> None: ...

    @overload
    def __init__(self, *, host: str = "localhost", port: int = 6379, db: int = 0, password: str | None = None) -> None: ...

    def __init__(
        self,
        *,
        client: Redis | None = None,
        url: str | None = None,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
    ) -> None:
        """Initialize the Redis connection.

        Args:
            client: An existing Redis client to use. It must be created with `decode_responses=True`.
            url: Redis URL (e.g., redis://localhost:6379/0).
            host: Redis host. Defaults to localhost.
            port: Redis port. Defaults to 6379.
            db: Redis database number. Defaults to 0.
            password: Redis password. Defaults to None.
        """
        self._owns_client = client is None

        if client:
            self._client = client
        elif url:
            parsed_url = urlparse(url)
            self._client = Redis(
                host=parsed_url.hostname or "localhost",
                port=parsed_url.port or 6379,
                db=int(parsed_url.path.lstrip("/")) if parsed_url.path and parsed_url.path != "/" else 0,
                password=parsed_url.password or password,
                decode_responses=True,
            )
        else:
            self._client = Redis(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=True,
            )

        super().__init__()

    @override
    async def _setup(self) -> None:
        if not await self._client.ping():  # pyright: ignore[reportUnknownMemberType, reportGeneralTypeIssues]
            raise StoreConnectionError(message="Failed to connect to Redis")

    @override
    async def _close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @override
    async def _get(self, *, key: str) -> str | None:
        response: Any = await self._client.get(name=key)  # pyright: ignore[reportAny]

        if not isinstance(response, str):
            return None

        return response

    @override
    async def _set(self, *, key: str, value: str, keep_ttl: bool) -> None:
        _ = await self._client.set(name=key, value=value, keepttl=keep_ttl)  # pyright: ignore[reportAny]

    @override
    async def _setex(self, *, key: str, ttl: float, value: str) -> None:
        # Redis does not support fractional or <= 0 TTLs
        seconds = max(int(ttl), 1)

        _ = await self._client.setex(name=key, time=seconds, value=value)  # pyright: ignore[reportAny]

    @override
    async def _delete(self, *, key: str) -> bool:
        return await self._client.delete(key) != 0  # pyright: ignore[reportAny]

    @override
    async def _delete_many(self, *, keys: Sequence[str]) -> int:
        return await self._client.delete(*keys)  # pyright: ignore[reportAny]

    @override
    async def _keys(self, *, pattern: str) -> list[str]:
        # SCAN may return a key more than once
        found_keys: dict[str, None] = {}

        async for key in self._client.scan_iter(match=pattern, count=DEFAULT_SCAN_COUNT):  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
            if not isinstance(key, str):
                continue

            found_keys[key] = None

        return list(found_keys)

    @override
    async def _incr(self, *, key: str) -> int:
        return await self._client.incr(name=key)  # pyright: ignore[reportAny]
