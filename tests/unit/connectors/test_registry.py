"""Unit tests for DuckDBConnectionRegistry."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from quackbridge.connectors.base import ConnectionError
from quackbridge.connectors.duckdb import DuckDBConnector
from quackbridge.connectors.paths import user_database_path
from quackbridge.connectors.registry import DuckDBConnectionRegistry


def _fake_factory():
    """Connector factory recording every connector it builds."""
    created: dict[Path, MagicMock] = {}

    def factory(path: Path):
        connector = MagicMock()
        connector.database_path = path
        connector.connect = AsyncMock()
        connector.close = AsyncMock()
        created[path] = connector
        return connector

    return factory, created


class TestLease:
    """Test lazy opening and reuse."""

    @pytest.mark.asyncio
    async def test_opens_user_database_on_first_lease(self, tmp_path):
        factory, created = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=2, connector_factory=factory)

        async with registry.lease("octocat") as connector:
            assert connector is created[user_database_path("octocat", tmp_path)]
            connector.connect.assert_awaited_once()

        assert "octocat" in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_reuses_connector_for_same_identity(self, tmp_path):
        factory, created = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=2, connector_factory=factory)

        async with registry.lease("octocat") as first:
            pass
        async with registry.lease("octocat") as second:
            pass

        assert first is second
        assert len(created) == 1

    @pytest.mark.asyncio
    async def test_different_identities_are_isolated(self, tmp_path):
        factory, _ = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=4, connector_factory=factory)

        async with registry.lease("octocat") as first:
            pass
        async with registry.lease("hubot") as second:
            pass

        assert first is not second
        assert first.database_path != second.database_path

    @pytest.mark.asyncio
    async def test_failed_open_is_not_cached(self, tmp_path):
        factory, _ = _fake_factory()

        def failing_factory(path):
            connector = factory(path)
            connector.connect.side_effect = ConnectionError("disk full")
            return connector

        registry = DuckDBConnectionRegistry(
            tmp_path, capacity=2, connector_factory=failing_factory
        )

        with pytest.raises(ConnectionError):
            async with registry.lease("octocat"):
                pass

        assert len(registry) == 0

    def test_capacity_must_be_positive(self, tmp_path):
        with pytest.raises(ValueError):
            DuckDBConnectionRegistry(tmp_path, capacity=0)


class TestEviction:
    """Test least-recently-used eviction."""

    @pytest.mark.asyncio
    async def test_evicts_least_recently_used(self, tmp_path):
        factory, created = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=2, connector_factory=factory)

        for identity in ("a", "b", "a", "c"):
            async with registry.lease(identity):
                pass

        assert "a" in registry
        assert "c" in registry
        assert "b" not in registry
        created[user_database_path("b", tmp_path)].close.assert_awaited_once()
        created[user_database_path("a", tmp_path)].close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_leased_connector_is_never_evicted(self, tmp_path):
        factory, created = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=1, connector_factory=factory)

        async with registry.lease("a") as held:
            async with registry.lease("b"):
                # Both leased: registry temporarily exceeds capacity.
                assert len(registry) == 2
            # Releasing "b" makes it the only idle entry, so it goes.
            assert "b" not in registry
            created[user_database_path("b", tmp_path)].close.assert_awaited_once()

        held.close.assert_not_awaited()
        assert len(registry) == 1
        assert "a" in registry

    @pytest.mark.asyncio
    async def test_close_closes_everything(self, tmp_path):
        factory, created = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=4, connector_factory=factory)
        for identity in ("a", "b", "c"):
            async with registry.lease(identity):
                pass

        await registry.close()

        assert len(registry) == 0
        for connector in created.values():
            connector.close.assert_awaited_once()


class TestConcurrentLeases:
    """Opening a file never holds up leases for other users."""

    @pytest.mark.asyncio
    async def test_slow_open_does_not_block_other_users(self, tmp_path):
        factory, created = _fake_factory()
        gate = asyncio.Event()
        slow_path = user_database_path("slow", tmp_path)

        def gated_factory(path):
            connector = factory(path)
            if path == slow_path:
                connector.connect.side_effect = gate.wait
            return connector

        registry = DuckDBConnectionRegistry(tmp_path, capacity=4, connector_factory=gated_factory)

        async def use(identity):
            async with registry.lease(identity) as connector:
                return connector

        slow_task = asyncio.create_task(use("slow"))
        await asyncio.sleep(0)

        fast = await asyncio.wait_for(use("fast"), timeout=1)

        assert fast is created[user_database_path("fast", tmp_path)]
        assert not slow_task.done()

        gate.set()
        assert await slow_task is created[slow_path]

    @pytest.mark.asyncio
    async def test_concurrent_leases_share_one_open(self, tmp_path):
        factory, created = _fake_factory()
        gate = asyncio.Event()

        def gated_factory(path):
            connector = factory(path)
            connector.connect.side_effect = gate.wait
            return connector

        registry = DuckDBConnectionRegistry(tmp_path, capacity=4, connector_factory=gated_factory)

        async def use():
            async with registry.lease("octocat") as connector:
                return connector

        tasks = [asyncio.create_task(use()) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        connectors = await asyncio.gather(*tasks)

        assert len(created) == 1
        assert all(connector is connectors[0] for connector in connectors)
        connectors[0].connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_open_reaches_every_waiter(self, tmp_path):
        factory, _ = _fake_factory()
        gate = asyncio.Event()

        async def failing_connect():
            await gate.wait()
            raise ConnectionError("disk full")

        def failing_factory(path):
            connector = factory(path)
            connector.connect.side_effect = failing_connect
            return connector

        registry = DuckDBConnectionRegistry(
            tmp_path, capacity=4, connector_factory=failing_factory
        )

        async def use():
            async with registry.lease("octocat"):
                pass

        tasks = [asyncio.create_task(use()) for _ in range(2)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(result, ConnectionError) for result in results)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_eviction_close_runs_outside_registry_lock(self, tmp_path):
        factory, created = _fake_factory()
        registry = DuckDBConnectionRegistry(tmp_path, capacity=1, connector_factory=factory)
        lock_held = []

        async with registry.lease("a"):
            pass
        created[user_database_path("a", tmp_path)].close.side_effect = (
            lambda: lock_held.append(registry._lock.locked())
        )

        async with registry.lease("b"):
            pass

        assert lock_held == [False]


class TestWithDuckDB:
    """Registry over real DuckDB files."""

    @pytest.mark.asyncio
    async def test_each_user_gets_own_file(self, tmp_path):
        registry = DuckDBConnectionRegistry(tmp_path, capacity=4)
        try:
            async with registry.lease("octocat") as connector:
                assert isinstance(connector, DuckDBConnector)
                await connector.execute("CREATE TABLE notes AS SELECT 'mine' AS owner")

            async with registry.lease("hubot") as connector:
                result = await connector.execute(
                    "SELECT count(*) AS n FROM information_schema.tables "
                    "WHERE table_name = 'notes'"
                )
                assert result.rows == [{"n": 0}]

            assert user_database_path("octocat", tmp_path).exists()
            assert user_database_path("hubot", tmp_path).exists()
        finally:
            await registry.close()
