import pytest
from typing_extensions import override

from kv_record_adapter.connections import connect
from kv_record_adapter.connections.memory import MemoryConnection
from tests.connections.base import BaseConnectionTests


class TestMemoryConnection(BaseConnectionTests):
    @override
    @pytest.fixture
    async def connection(self) -> MemoryConnection:
        return MemoryConnection(max_entries=500)

    async def test_not_unbounded(self):
        """Tests that the connection evicts keys beyond its capacity."""
        connection = MemoryConnection(max_entries=10)

        for i in range(20):
            await connection.set(key=f"test_{i}", value=str(i))

        assert await connection.get(key="test_0") is None
        assert await connection.get(key="test_19") == "19"

    async def test_context_manager(self):
        async with MemoryConnection() as connection:
            await connection.set(key="test", value="test")
            assert await connection.get(key="test") == "test"


def test_connect_memory_url():
    assert isinstance(connect("memory://"), MemoryConnection)


def test_connect_unsupported_url():
    with pytest.raises(ValueError, match="Unsupported connection URL scheme"):
        connect("ftp://example.com")
