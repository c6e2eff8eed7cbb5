import json
import logging
from collections.abc import Sequence
from typing import Any

from typing_extensions import override

from kv_record_adapter.protocols.connection import AsyncKeyValueConnection
from kv_record_adapter.wrappers.base import BaseConnectionWrapper


class LoggingConnectionWrapper(BaseConnectionWrapper):
    """Wrapper that logs the start and finish of every request made to a connection.

    Example:
        connection = LoggingConnectionWrapper(connection=MemoryConnection(), log_level=logging.INFO)

        await connection.get(key="waterline:user:id:u1")
        # Start GET keys='waterline:user:id:u1'
        # Finish GET keys='waterline:user:id:u1' ({'hit': False})
    """

    def __init__(
        self,
        connection: AsyncKeyValueConnection,
        log_level: int = logging.DEBUG,
        structured_logs: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the logging wrapper.

        Args:
            connection: The connection to wrap.
            log_level: The level messages are logged at. Defaults to DEBUG.
            structured_logs: Log one JSON object per message instead of a plain text line.
            logger: The logger to use. Defaults to this module's logger.
        """
        self.connection: AsyncKeyValueConnection = connection
        self.log_level: int = log_level
        self.structured_logs: bool = structured_logs
        self.logger: logging.Logger = logger or logging.getLogger(__name__)

        super().__init__()

    def _format_message(self, status: str, action: str, keys: str | Sequence[str], extra: dict[str, Any] | None) -> str:
        keys_value: str | list[str] = keys if isinstance(keys, str) else list(keys)

        if self.structured_logs:
            message: dict[str, Any] = {"status": status, "action": action, "keys": keys_value}
            if extra:
                message["extra"] = extra
            return json.dumps(message)

        line = f"{status.capitalize()} {action} keys='{keys_value}'"
        if extra:
            line += f" ({extra})"
        return line

    def _log(self, status: str, action: str, keys: str | Sequence[str], extra: dict[str, Any] | None = None) -> None:
        self.logger.log(self.log_level, self._format_message(status=status, action=action, keys=keys, extra=extra))

    @override
    async def get(self, key: str) -> str | None:
        self._log("start", "GET", key)
        value = await self.connection.get(key=key)
        self._log("finish", "GET", key, {"hit": value is not None})
        return value

    @override
    async def set(self, key: str, value: str, *, keep_ttl: bool = False) -> None:
        self._log("start", "SET", key, {"keep_ttl": keep_ttl} if keep_ttl else None)
        await self.connection.set(key=key, value=value, keep_ttl=keep_ttl)
        self._log("finish", "SET", key)

    @override
    async def setex(self, key: str, ttl: float, value: str) -> None:
        self._log("start", "SETEX", key, {"ttl": ttl})
        await self.connection.setex(key=key, ttl=ttl, value=value)
        self._log("finish", "SETEX", key)

    @override
    async def delete(self, key: str) -> bool:
        self._log("start", "DELETE", key)
        deleted = await self.connection.delete(key=key)
        self._log("finish", "DELETE", key, {"deleted": deleted})
        return deleted

    @override
    async def delete_many(self, keys: Sequence[str]) -> int:
        self._log("start", "DELETE_MANY", keys)
        deleted = await self.connection.delete_many(keys=keys)
        self._log("finish", "DELETE_MANY", keys, {"deleted": deleted})
        return deleted

    @override
    async def keys(self, pattern: str) -> list[str]:
        self._log("start", "KEYS", pattern)
        found = await self.connection.keys(pattern=pattern)
        self._log("finish", "KEYS", pattern, {"count": len(found)})
        return found

    @override
    async def incr(self, key: str) -> int:
        self._log("start", "INCR", key)
        value = await self.connection.incr(key=key)
        self._log("finish", "INCR", key, {"value": value})
        return value
