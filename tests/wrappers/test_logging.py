import logging
from collections.abc import AsyncGenerator
from typing import Any

import pytest
from _pytest.logging import LogCaptureFixture
from inline_snapshot import snapshot
from typing_extensions import override

from kv_record_adapter.adapter import RecordStoreAdapter
from kv_record_adapter.connections.memory import MemoryConnection
from kv_record_adapter.wrappers.logging import LoggingConnectionWrapper
from tests.conftest import USER_DEFINITION
from tests.connections.base import BaseConnectionTests


def get_messages_from_caplog(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [record.message for record in caplog.records if record.name == "kv_record_adapter.wrappers.logging.wrapper"]


class TestLoggingConnectionWrapper(BaseConnectionTests):
    @override
    @pytest.fixture
    async def connection(self) -> LoggingConnectionWrapper:  # pyright: ignore[reportIncompatibleMethodOverride]
        return LoggingConnectionWrapper(connection=MemoryConnection(max_entries=500), log_level=logging.INFO)

    @pytest.fixture
    async def structured_logs_connection(self) -> LoggingConnectionWrapper:
        return LoggingConnectionWrapper(connection=MemoryConnection(max_entries=500), log_level=logging.INFO, structured_logs=True)

    @pytest.fixture
    async def capture_logs(self, caplog: pytest.LogCaptureFixture) -> AsyncGenerator[LogCaptureFixture, Any]:
        with caplog.at_level(logging.INFO):
            yield caplog

    async def test_logging_get_set_operations(
        self, connection: LoggingConnectionWrapper, structured_logs_connection: LoggingConnectionWrapper, capture_logs: LogCaptureFixture
    ):
        await connection.set(key="test", value="value")
        assert await connection.get(key="test") == "value"
        await connection.setex(key="test", ttl=10, value="value")
        await connection.set(key="test", value="value", keep_ttl=True)

        assert get_messages_from_caplog(capture_logs) == snapshot(
            [
                "Start SET keys='test'",
                "Finish SET keys='test'",
                "Start GET keys='test'",
                "Finish GET keys='test' ({'hit': True})",
                "Start SETEX keys='test' ({'ttl': 10})",
                "Finish SETEX keys='test'",
                "Start SET keys='test' ({'keep_ttl': True})",
                "Finish SET keys='test'",
            ]
        )

        capture_logs.clear()

        assert await structured_logs_connection.get(key="test") is None
        assert get_messages_from_caplog(capture_logs) == snapshot(
            [
                '{"status": "start", "action": "GET", "keys": "test"}',
                '{"status": "finish", "action": "GET", "keys": "test", "extra": {"hit": false}}',
            ]
        )

    async def test_logging_delete_operations(
        self, connection: LoggingConnectionWrapper, structured_logs_connection: LoggingConnectionWrapper, capture_logs: LogCaptureFixture
    ):
        await connection.delete(key="test")
        await connection.delete_many(keys=["test", "test_2"])

        assert get_messages_from_caplog(capture_logs) == snapshot(
            [
                "Start DELETE keys='test'",
                "Finish DELETE keys='test' ({'deleted': False})",
                "Start DELETE_MANY keys='['test', 'test_2']'",
                "Finish DELETE_MANY keys='['test', 'test_2']' ({'deleted': 0})",
            ]
        )

        capture_logs.clear()

        await structured_logs_connection.delete_many(keys=["test", "test_2"])
        assert get_messages_from_caplog(capture_logs) == snapshot(
            [
                '{"status": "start", "action": "DELETE_MANY", "keys": ["test", "test_2"]}',
                '{"status": "finish", "action": "DELETE_MANY", "keys": ["test", "test_2"], "extra": {"deleted": 0}}',
            ]
        )

    async def test_logging_keys_and_incr(self, connection: LoggingConnectionWrapper, capture_logs: LogCaptureFixture):
        await connection.incr(key="counter")
        await connection.keys(pattern="count*")

        assert get_messages_from_caplog(capture_logs) == snapshot(
            [
                "Start INCR keys='counter'",
                "Finish INCR keys='counter' ({'value': 1})",
                "Start KEYS keys='count*'",
                "Finish KEYS keys='count*' ({'count': 1})",
            ]
        )

    async def test_logging_below_level(self, caplog: pytest.LogCaptureFixture):
        connection = LoggingConnectionWrapper(connection=MemoryConnection(), log_level=logging.DEBUG)

        with caplog.at_level(logging.INFO):
            await connection.get(key="test")

        assert get_messages_from_caplog(caplog) == []

    async def test_adapter_requests(self, connection: LoggingConnectionWrapper, capture_logs: LogCaptureFixture):
        adapter = RecordStoreAdapter(connection=connection)
        await adapter.define("user", USER_DEFINITION)

        await adapter.create("user", {"id": "u1", "name": "Ann", "_ttl": 30})
        await adapter.destroy("user", {"where": {"id": "u1"}})

        assert get_messages_from_caplog(capture_logs) == snapshot(
            [
                "Start SETEX keys='waterline:user:id:u1' ({'ttl': 30.0})",
                "Finish SETEX keys='waterline:user:id:u1'",
                "Start GET keys='waterline:user:id:u1'",
                "Finish GET keys='waterline:user:id:u1' ({'hit': True})",
                "Start GET keys='waterline:user:id:u1'",
                "Finish GET keys='waterline:user:id:u1' ({'hit': True})",
                "Start DELETE keys='waterline:user:id:u1'",
                "Finish DELETE keys='waterline:user:id:u1' ({'deleted': True})",
            ]
        )
