"""Tests for service context wiring."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from mta_mcp.data.config import MTAConfig
from mta_mcp.data.gtfs_loader import GTFSLoader
from mta_mcp.data.static_tables import StaticTables
from mta_mcp.models.gtfs import StopRecord
from mta_mcp.services.context import ServiceContext, get_context, reset_context


@pytest.fixture(autouse=True)
def clean_context():
    reset_context()
    yield
    reset_context()


def test_create_uses_configured_ttls():
    config = MTAConfig(MTA_FEED_CACHE_TTL=5, MTA_BOARD_CACHE_TTL=60)
    context = ServiceContext.create(config, StaticTables())

    assert context.feed_cache.ttl == 5
    assert context.board_cache.ttl == 60
    assert context.feed_cache is not context.board_cache
    assert context.feeds.tables is context.tables


def test_clear_caches():
    context = ServiceContext.create(MTAConfig(), StaticTables())
    context.feed_cache.set("feed:ACE", [])
    context.board_cache.set("board:ACE", {})

    context.clear_caches()

    assert len(context.feed_cache) == 0
    assert len(context.board_cache) == 0


async def test_get_context_loads_tables_once(tmp_path: Path):
    gtfs_dir = tmp_path / "gtfs"
    gtfs_dir.mkdir()
    (gtfs_dir / "routes.txt").write_text("route_id\nA\n")
    (gtfs_dir / "stops.txt").write_text("stop_id,stop_name\nA27,42 St-Port Authority\n")
    db_path = tmp_path / "gtfs.db"
    await GTFSLoader(db_path).ingest(gtfs_dir)

    first = await get_context(db_path)
    second = await get_context()

    assert first is second
    assert first.tables.stops["A27"] == StopRecord(id="A27", name="42 St-Port Authority")


async def test_get_context_without_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MTA_DB_PATH", str(tmp_path / "missing.db"))
    with pytest.raises(FileNotFoundError):
        await get_context()


async def _slow_load(db_path: Path | None = None) -> StaticTables:
    await asyncio.sleep(0)
    return StaticTables()


async def _get_context_twice() -> tuple[ServiceContext, ServiceContext]:
    return await asyncio.gather(get_context(), get_context())


def test_concurrent_get_context_across_event_loops():
    with patch(
        "mta_mcp.services.context.StaticTables.load", new=AsyncMock(side_effect=_slow_load)
    ) as mock_load:
        first, second = asyncio.run(_get_context_twice())
        assert first is second

        # The contended lock from the first loop must not leak into the next one
        reset_context()
        third, fourth = asyncio.run(_get_context_twice())

    assert third is fourth
    assert third is not first
    assert mock_load.await_count == 2
