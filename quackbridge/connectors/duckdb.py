"""
DuckDB Connector

Async DuckDB connector for per-user embedded analytical databases.

Features:
- Async query execution using asyncio.to_thread
- One lock per connection so statements never interleave on a shared handle
- Engine error messages surfaced verbatim through QueryError

Usage:
    connector = DuckDBConnector("/tmp/duckdb_a6658157f0df8390.db")

    await connector.connect()

    result = await connector.execute("SELECT * FROM read_csv('data.csv')")

    await connector.close()
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

import duckdb

from quackbridge.connectors.base import (
    BaseConnector,
    ConnectionError,
    QueryError,
    QueryResult,
)

logger = logging.getLogger(__name__)


class DuckDBConnector(BaseConnector):
    """
    DuckDB database connector.

    Note: the duckdb Python API is synchronous and a single connection object
    is not safe to use from several threads at once. Calls are wrapped with
    asyncio.to_thread and serialized with an asyncio.Lock.
    """

    def __init__(
        self,
        database_path: Path | str,
        read_only: bool = False,
        **kwargs,
    ):
        """
        Initialize DuckDB connector.

        Args:
            database_path: DuckDB file, created on connect if absent
            read_only: Open the file in read-only mode
            **kwargs: Extra DuckDB configuration passed as ``config``
        """
        super().__init__(database_path=database_path, **kwargs)

        self.read_only = read_only
        self._connection: duckdb.DuckDBPyConnection | None = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """
        Open the DuckDB file.

        Raises:
            ConnectionError: If the file cannot be opened
        """
        async with self._lock:
            if self._connected and self._connection:
                logger.debug("Already connected, skipping connection")
                return

            try:
                logger.info(f"Initializing database at {self.database_path}")

                self._connection = await asyncio.to_thread(
                    duckdb.connect,
                    database=str(self.database_path),
                    read_only=self.read_only,
                    config=dict(self.kwargs),
                )
                self._connected = True

            except Exception as e:
                logger.error(f"DuckDB connection failed: {e}")
                raise ConnectionError(f"Failed to open DuckDB database: {e}") from e

    async def execute(self, query: str) -> QueryResult:
        """
        Execute a SQL query.

        Args:
            query: SQL text, passed to DuckDB unchanged

        Returns:
            QueryResult with rows and metadata. Statements that produce no
            result set return an empty result.

        Raises:
            QueryError: If DuckDB rejects the query
            ConnectionError: If not connected
        """
        async with self._lock:
            if not self._connected or not self._connection:
                raise ConnectionError("Not connected to database. Call connect() first.")

            start_time = time.perf_counter()

            try:
                columns, rows = await asyncio.to_thread(self._run, self._connection, query)
            except duckdb.Error as e:
                logger.warning(f"Query failed: {e}\nQuery: {query[:200]}")
                raise QueryError(str(e)) from e
            except Exception as e:
                logger.error(f"Unexpected error during query execution: {e}")
                raise QueryError(str(e)) from e

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        result_rows = [dict(zip(columns, row)) for row in rows]

        logger.debug(
            f"Query executed in {execution_time_ms:.2f}ms, returned {len(result_rows)} rows"
        )

        return QueryResult(
            rows=result_rows,
            row_count=len(result_rows),
            columns=columns,
            execution_time_ms=execution_time_ms,
        )

    async def close(self) -> None:
        """Close the DuckDB connection, waiting for any running statement."""
        async with self._lock:
            if self._connection is not None:
                try:
                    await asyncio.to_thread(self._connection.close)
                    logger.info(f"Closed database at {self.database_path}")
                except Exception as e:
                    logger.error(f"Error closing DuckDB connection: {e}")
                finally:
                    self._connection = None
                    self._connected = False

    @staticmethod
    def _run(
        connection: duckdb.DuckDBPyConnection, query: str
    ) -> tuple[list[str], list[tuple[Any, ...]]]:
        cursor = connection.execute(query)
        if cursor.description is None:
            return [], []
        columns = [column[0] for column in cursor.description]
        return columns, cursor.fetchall()
