"""Runtime wiring of config, caches, static tables and services.

The context is the one place caches are created. Tools share the lazily
created default context; tests build their own with ServiceContext.create().
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from mta_mcp.data.cache import ExpiringCache
from mta_mcp.data.config import MTAConfig, get_mta_config
from mta_mcp.data.static_tables import StaticTables
from mta_mcp.models.realtime import TripUpdateRecord
from mta_mcp.models.responses import Board
from mta_mcp.services.arrivals_service import ArrivalsService
from mta_mcp.services.feed_service import FeedService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """Services sharing one set of static tables and two independent caches."""

    config: MTAConfig
    tables: StaticTables
    feed_cache: ExpiringCache[list[TripUpdateRecord]]
    board_cache: ExpiringCache[Board]
    feeds: FeedService
    arrivals: ArrivalsService

    @classmethod
    def create(cls, config: MTAConfig, tables: StaticTables) -> "ServiceContext":
        """Wire services around fresh, empty caches."""
        feed_cache: ExpiringCache[list[TripUpdateRecord]] = ExpiringCache(
            ttl=config.feed_cache_ttl_seconds
        )
        board_cache: ExpiringCache[Board] = ExpiringCache(ttl=config.board_cache_ttl_seconds)
        feeds = FeedService(config, tables, feed_cache)
        arrivals = ArrivalsService(config, feeds, board_cache)
        return cls(
            config=config,
            tables=tables,
            feed_cache=feed_cache,
            board_cache=board_cache,
            feeds=feeds,
            arrivals=arrivals,
        )

    def clear_caches(self) -> None:
        """Drop all cached feeds and boards."""
        self.feed_cache.clear()
        self.board_cache.clear()


_context: ServiceContext | None = None
_context_lock: asyncio.Lock | None = None


def _get_context_lock() -> asyncio.Lock:
    """Get the lock guarding context creation, created on first use."""
    global _context_lock
    if _context_lock is None:
        _context_lock = asyncio.Lock()
    return _context_lock


async def get_context(db_path: Path | None = None) -> ServiceContext:
    """Get or create the default context, loading static tables on first use."""
    global _context
    async with _get_context_lock():
        if _context is None:
            tables = await StaticTables.load(db_path)
            _context = ServiceContext.create(get_mta_config(), tables)
            logger.info("Service context created")
        return _context


def set_context(context: ServiceContext | None) -> None:
    """Replace the default context. Passing None forces a reload on next use."""
    global _context
    _context = context


def reset_context() -> None:
    """Reset the default context, its lock and config. Useful for testing."""
    global _context_lock
    set_context(None)
    # A lock that was ever contended is bound to that event loop
    _context_lock = None
    # Clear the lru_cache on get_mta_config so it re-reads .env/environment
    if hasattr(get_mta_config, "cache_clear"):
        get_mta_config.cache_clear()
