"""
Base Database Connector

Abstract base class for embedded database connectors. Provides a consistent
async interface for opening, querying, and closing a file-backed database.

All connectors must implement:
- connect(): Open the database file (creating it if absent)
- execute(): Run a query and return structured rows
- close(): Release the underlying handle
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ============================================================================
# Data Models
# ============================================================================


class QueryResult(BaseModel):
    """Result from query execution."""

    rows: list[dict[str, Any]] = Field(..., description="Query result rows")
    row_count: int = Field(..., description="Number of rows returned")
    columns: list[str] = Field(..., description="Column names")
    execution_time_ms: float = Field(..., description="Query execution time in ms")

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error opening or managing the database handle."""

    pass


class QueryError(ConnectorError):
    """Error executing a query. The message is the engine's own message."""

    pass


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for embedded database connectors.

    Features:
    - Async interface throughout
    - Idempotent connect/close
    - Async context manager support

    Usage:
        async with DuckDBConnector(Path("/tmp/duckdb_0123456789abcdef.db")) as connector:
            result = await connector.execute("SELECT 42 AS answer")
            print(result.rows)
    """

    def __init__(self, database_path: Path | str, **kwargs):
        """
        Initialize connector.

        Args:
            database_path: Path to the database file
            **kwargs: Additional connector-specific parameters
        """
        self.database_path = Path(database_path)
        self.kwargs = kwargs

        self._connected = False

        logger.debug(f"Initialized {self.__class__.__name__} for {self.database_path}")

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the database.

        Should be idempotent - calling multiple times should not open
        multiple handles.

        Raises:
            ConnectionError: If the database cannot be opened
        """
        pass

    @abstractmethod
    async def execute(self, query: str) -> QueryResult:
        """
        Execute a SQL query.

        Args:
            query: SQL query string, passed to the engine verbatim

        Returns:
            QueryResult with rows, columns, and metadata

        Raises:
            QueryError: If query execution fails
            ConnectionError: If not connected
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close the database handle.

        Should be idempotent - safe to call multiple times.
        """
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation."""
        status = "connected" if self._connected else "disconnected"
        return f"<{self.__class__.__name__} {self.database_path} ({status})>"
