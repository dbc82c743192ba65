"""
Unit tests for DuckDBConnector.

Runs against real DuckDB files under pytest's tmp_path.
"""

import asyncio

import pytest

from quackbridge.connectors.base import ConnectionError, QueryError, QueryResult
from quackbridge.connectors.duckdb import DuckDBConnector


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "duckdb_0123456789abcdef.db"


class TestConnection:
    """Test connection management."""

    @pytest.mark.asyncio
    async def test_connect_creates_file(self, database_path):
        connector = DuckDBConnector(database_path)

        await connector.connect()
        try:
            assert connector.is_connected is True
            assert database_path.exists()
        finally:
            await connector.close()

    @pytest.mark.asyncio
    async def test_connect_idempotent(self, database_path):
        connector = DuckDBConnector(database_path)
        await connector.connect()
        first = connector._connection
        await connector.connect()

        assert connector._connection is first
        await connector.close()

    @pytest.mark.asyncio
    async def test_connect_failure_raises_connection_error(self, tmp_path):
        missing_dir = tmp_path / "missing" / "nested" / "duckdb_x.db"
        connector = DuckDBConnector(missing_dir, read_only=True)

        with pytest.raises(ConnectionError, match="Failed to open DuckDB database"):
            await connector.connect()
        assert connector.is_connected is False

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, database_path):
        connector = DuckDBConnector(database_path)
        await connector.connect()

        await connector.close()
        await connector.close()

        assert connector.is_connected is False

    @pytest.mark.asyncio
    async def test_context_manager(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            assert connector.is_connected is True

        assert connector.is_connected is False

    @pytest.mark.asyncio
    async def test_execute_requires_connection(self, database_path):
        connector = DuckDBConnector(database_path)

        with pytest.raises(ConnectionError, match="Not connected"):
            await connector.execute("SELECT 1")


class TestQueryExecution:
    """Test query execution."""

    @pytest.mark.asyncio
    async def test_execute_simple_query(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            result = await connector.execute("SELECT 42 AS answer, 'duck' AS animal")

        assert isinstance(result, QueryResult)
        assert result.row_count == 1
        assert result.columns == ["answer", "animal"]
        assert result.rows == [{"answer": 42, "animal": "duck"}]
        assert result.execution_time_ms >= 0

    @pytest.mark.asyncio
    async def test_data_persists_across_connections(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            await connector.execute("CREATE TABLE ducks (name VARCHAR)")
            await connector.execute("INSERT INTO ducks VALUES ('Daffy'), ('Donald')")

        async with DuckDBConnector(database_path) as connector:
            result = await connector.execute("SELECT name FROM ducks ORDER BY name")

        assert [row["name"] for row in result.rows] == ["Daffy", "Donald"]

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            await connector.execute("CREATE TABLE t (i INTEGER)")
            result = await connector.execute("SELECT * FROM t")

        assert result.is_empty
        assert result.rows == []
        assert result.columns == ["i"]

    @pytest.mark.asyncio
    async def test_syntax_error_raises_query_error_with_engine_message(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            with pytest.raises(QueryError) as exc_info:
                await connector.execute("SELEC 1")

        assert "syntax error" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_missing_table_raises_query_error(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            with pytest.raises(QueryError, match="no_such_table"):
                await connector.execute("SELECT * FROM no_such_table")

    @pytest.mark.asyncio
    async def test_connection_usable_after_query_error(self, database_path):
        async with DuckDBConnector(database_path) as connector:
            with pytest.raises(QueryError):
                await connector.execute("SELECT * FROM nowhere")
            result = await connector.execute("SELECT 1 AS ok")

        assert result.rows == [{"ok": 1}]

    @pytest.mark.asyncio
    async def test_concurrent_queries_are_serialized(self, database_path):
        """Concurrent tasks sharing one connector all get their own results."""
        async with DuckDBConnector(database_path) as connector:
            results = await asyncio.gather(
                *(connector.execute(f"SELECT {i} AS n") for i in range(10))
            )

        assert [result.rows[0]["n"] for result in results] == list(range(10))
