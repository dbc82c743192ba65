"""Per-user DuckDB connection registry with least-recently-used eviction."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from quackbridge.connectors.base import BaseConnector
from quackbridge.connectors.duckdb import DuckDBConnector
from quackbridge.connectors.paths import user_database_path

logger = logging.getLogger(__name__)


@dataclass
class _RegistryEntry:
    connector: BaseConnector
    leases: int = 0
    opened: asyncio.Event = field(default_factory=asyncio.Event)
    error: BaseException | None = None


class DuckDBConnectionRegistry:
    """
    Keep one open connector per user database file.

    Connectors are opened lazily on the first lease for an identity. When more
    than ``capacity`` are open, the least recently used connector without an
    active lease is closed. Leased connectors are never evicted, so the
    registry may briefly hold more than ``capacity`` under load.

    The registry lock only guards bookkeeping. Opening and closing files
    happens outside it, so a slow file never holds up other users. Concurrent
    leases of a file that is still opening wait for that one open.

    Usage:
        registry = DuckDBConnectionRegistry(root=Path("/tmp"), capacity=8)

        async with registry.lease("octocat") as connector:
            result = await connector.execute("SELECT 1")

        await registry.close()
    """

    def __init__(
        self,
        root: Path | str,
        capacity: int = 8,
        connector_factory: Callable[[Path], BaseConnector] = DuckDBConnector,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.root = Path(root)
        self.capacity = capacity
        self._connector_factory = connector_factory
        self._entries: OrderedDict[Path, _RegistryEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    def path_for(self, identity: str) -> Path:
        """Storage path for ``identity`` under this registry's root."""
        return user_database_path(identity, self.root)

    @asynccontextmanager
    async def lease(self, identity: str) -> AsyncIterator[BaseConnector]:
        """Yield the connector for ``identity``, opening it if needed."""
        path = self.path_for(identity)
        async with self._lock:
            entry = self._entries.get(path)
            opener = entry is None
            if opener:
                entry = _RegistryEntry(connector=self._connector_factory(path))
                self._entries[path] = entry
            self._entries.move_to_end(path)
            entry.leases += 1

        try:
            if opener:
                await self._open(path, entry)
            else:
                await entry.opened.wait()
                if entry.error is not None:
                    raise entry.error
            await self._close_connectors(await self._take_idle())
            yield entry.connector
        finally:
            async with self._lock:
                entry.leases -= 1
                victims = self._take_idle_locked()
            await self._close_connectors(victims)

    async def close(self) -> None:
        """Close every open connector."""
        async with self._lock:
            entries = list(self._entries.items())
            self._entries.clear()
        await self._close_connectors(entries)

    async def _open(self, path: Path, entry: _RegistryEntry) -> None:
        try:
            await entry.connector.connect()
        except BaseException as e:
            entry.error = e
            async with self._lock:
                if self._entries.get(path) is entry:
                    del self._entries[path]
            raise
        finally:
            entry.opened.set()
        logger.info(
            "Opened user database",
            extra={"path": str(path), "open_databases": len(self._entries)},
        )

    async def _take_idle(self) -> list[tuple[Path, _RegistryEntry]]:
        async with self._lock:
            return self._take_idle_locked()

    def _take_idle_locked(self) -> list[tuple[Path, _RegistryEntry]]:
        # Caller holds self._lock. Leased or still-opening entries are skipped.
        victims = []
        while len(self._entries) > self.capacity:
            victim = next(
                (path for path, entry in self._entries.items() if entry.leases == 0),
                None,
            )
            if victim is None:
                break
            victims.append((victim, self._entries.pop(victim)))
        return victims

    async def _close_connectors(self, entries: list[tuple[Path, _RegistryEntry]]) -> None:
        for path, entry in entries:
            if entry.error is not None:
                continue
            logger.info("Closing user database", extra={"path": str(path)})
            try:
                await entry.connector.close()
            except Exception as e:
                logger.error(f"Error closing database {path}: {e}")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: object) -> bool:
        return isinstance(identity, str) and self.path_for(identity) in self._entries
