"""
Database Connectors Module

Provides async connectors for the per-user embedded DuckDB databases.

Available Connectors:
    - BaseConnector: Abstract base class
    - DuckDBConnector: DuckDB connector (duckdb)
    - DuckDBConnectionRegistry: One connector per user file, LRU-bounded

Usage:
    from quackbridge.connectors import DuckDBConnectionRegistry

    registry = DuckDBConnectionRegistry(root="/tmp", capacity=8)

    async with registry.lease("octocat") as connector:
        result = await connector.execute("SELECT 42 AS answer")
"""

from quackbridge.connectors.base import (
    BaseConnector,
    ConnectionError,
    ConnectorError,
    QueryError,
    QueryResult,
)
from quackbridge.connectors.duckdb import DuckDBConnector
from quackbridge.connectors.paths import identity_digest, user_database_path
from quackbridge.connectors.registry import DuckDBConnectionRegistry

__all__ = [
    "BaseConnector",
    "DuckDBConnector",
    "DuckDBConnectionRegistry",
    "identity_digest",
    "user_database_path",
    "QueryResult",
    "ConnectorError",
    "ConnectionError",
    "QueryError",
]
