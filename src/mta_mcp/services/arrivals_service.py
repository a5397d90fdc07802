"""Arrivals service: per-stop arrival boards built from a feed group.

A board groups every stop update of a feed into upcoming arrivals per stop
and is cached per group under "board:<group>". The relative "in" label and
the local clock string depend on the current time, so they are recomputed
on every read, including reads served from a board cached many minutes ago.
"""

import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from mta_mcp.data.cache import ExpiringCache
from mta_mcp.data.config import MTAConfig
from mta_mcp.data.feeds import resolve_group
from mta_mcp.data.static_tables import StaticTables
from mta_mcp.models.realtime import TripUpdateRecord
from mta_mcp.models.responses import (
    ArrivalBoardResponse,
    ArrivalItem,
    ArrivalMeta,
    Board,
    BoardRow,
)
from mta_mcp.services.feed_service import FeedService

logger = logging.getLogger(__name__)

# Board window relative to build time
WINDOW_PAST = timedelta(seconds=60)
WINDOW_AHEAD = timedelta(minutes=20)

MAX_ARRIVALS_PER_STOP = 8

# Within this many seconds either side of now an arrival reads "now"
NOW_THRESHOLD_SECONDS = 30

NO_TIME_PLACEHOLDER = "—"


def board_cache_key(group_id: str) -> str:
    return f"board:{group_id}"


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (1.5 -> 2, -1.5 -> -2)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def human_eta(when: datetime | None, now: datetime) -> str:
    """Format an arrival instant relative to now.

    Examples (relative to now):
        +150s -> "2m"
        +45s  -> "1m"
        +15s  -> "now"
        -90s  -> "2m ago"
        None  -> "—"
    """
    if when is None:
        return NO_TIME_PLACEHOLDER
    seconds = _round_half_away((when - now).total_seconds())
    if seconds < -NOW_THRESHOLD_SECONDS:
        return f"{abs(_round_half_away(seconds / 60))}m ago"
    if seconds <= NOW_THRESHOLD_SECONDS:
        return "now"
    minutes = seconds // 60
    return "1m" if minutes <= 1 else f"{minutes}m"


def to_local_hhmm(when: datetime | None, tz: ZoneInfo) -> str | None:
    """Format an instant as a 12-hour local clock time like "8:05 PM"."""
    if when is None:
        return None
    local = when.astimezone(tz)

    period = "AM"
    display_hour = local.hour
    if local.hour == 0:
        display_hour = 12
    elif local.hour == 12:
        period = "PM"
    elif local.hour > 12:
        display_hour = local.hour - 12
        period = "PM"

    return f"{display_hour}:{local.minute:02d} {period}"


def build_board(
    trip_updates: list[TripUpdateRecord],
    tables: StaticTables,
    now: datetime,
    tz: ZoneInfo,
) -> Board:
    """Group a feed's stop updates into per-stop arrival lists.

    Keeps stop updates whose arrival time (departure time as fallback) falls
    in [now - 60s, now + 20m], sorts each stop's list by time and keeps the
    first 8.

    Args:
        trip_updates: Normalized trip updates for one feed group.
        tables: Static tables, for stop names missing from the feed.
        now: Build instant.
        tz: Timezone for the local clock strings.

    Returns:
        Board mapping stop_id -> BoardRow.
    """
    earliest = now - WINDOW_PAST
    latest = now + WINDOW_AHEAD

    by_stop: dict[str, list[ArrivalItem]] = {}
    for trip_update in trip_updates:
        for su in trip_update.stop_updates:
            when = su.arrival.time or su.departure.time
            if when is None or su.stop_id is None:
                continue
            if when < earliest or when > latest:
                continue

            by_stop.setdefault(su.stop_id, []).append(
                ArrivalItem(
                    stop_id=su.stop_id,
                    stop_name=su.stop_name,
                    when_iso=when,
                    when_local=to_local_hhmm(when, tz),
                    in_=human_eta(when, now),
                    route_id=trip_update.route_id,
                    trip_id=trip_update.trip_id,
                    schedule_relationship=su.schedule_relationship,
                    meta=ArrivalMeta(
                        arrival_delay=su.arrival.delay,
                        departure_delay=su.departure.delay,
                    ),
                )
            )

    board: Board = {}
    for stop_id, arrivals in by_stop.items():
        arrivals.sort(key=lambda a: a.when_iso)
        arrivals = arrivals[:MAX_ARRIVALS_PER_STOP]
        board[stop_id] = BoardRow(
            stop_id=stop_id,
            stop_name=arrivals[0].stop_name or tables.stop_name(stop_id) or stop_id,
            updated_at=now,
            arrivals=arrivals,
        )
    return board


def relabel_row(row: BoardRow, now: datetime, tz: ZoneInfo) -> ArrivalBoardResponse:
    """Render a board row with labels computed against the given instant."""
    return ArrivalBoardResponse(
        stop_id=row.stop_id,
        stop_name=row.stop_name,
        updated_at=row.updated_at,
        now=now,
        arrivals=[
            arrival.model_copy(
                update={
                    "in_": human_eta(arrival.when_iso, now),
                    "when_local": to_local_hhmm(arrival.when_iso, tz),
                }
            )
            for arrival in row.arrivals
        ],
    )


class ArrivalsService:
    """Serves arrival boards, caching one board per feed group.

    Usage:
        service = ArrivalsService(config, feed_service, ExpiringCache(ttl=1200))
        board = await service.get_arrival_board("1234567", "608S")
    """

    def __init__(
        self,
        config: MTAConfig,
        feed_service: FeedService,
        cache: ExpiringCache[Board],
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the service.

        Args:
            config: MTA configuration (timezone, board TTL).
            feed_service: Source of normalized trip updates.
            cache: Board cache, separate from the feed cache.
            clock: Wall-clock source returning an aware datetime, for testing.
        """
        self._config = config
        self._feeds = feed_service
        self._cache = cache
        self._clock = clock or (lambda: datetime.now(UTC))
        self._tz = ZoneInfo(config.timezone)

    async def get_arrival_board(
        self,
        group_id: str,
        stop_id: str,
        api_key: str | None = None,
        use_cache: bool = True,
    ) -> ArrivalBoardResponse:
        """Get upcoming arrivals at a stop.

        A stop with no arrivals in the current window is not an error: the
        response has stop_name=None, updated_at=None and no arrivals.

        Args:
            group_id: Feed group the stop belongs to (e.g., "1234567").
            stop_id: Stop id, usually a directional platform (e.g., "608S").
            api_key: Optional API key overriding MTA_API_KEY.
            use_cache: If False, rebuild from a fresh feed and skip cache writes.

        Returns:
            ArrivalBoardResponse with labels relative to the current time.

        Raises:
            UnknownFeedGroupError: If the group id is not recognized.
            FeedError: If the feed cannot be fetched or decoded.
        """
        group = resolve_group(group_id)
        board = await self._get_board(group, api_key, use_cache)

        now = self._clock()
        row = board.get(stop_id)
        if row is None:
            return ArrivalBoardResponse(stop_id=stop_id, now=now)
        return relabel_row(row, now, self._tz)

    async def _get_board(self, group: str, api_key: str | None, use_cache: bool) -> Board:
        if not use_cache:
            return await self._build(group, api_key, use_cache=False)

        key = board_cache_key(group)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Board cache hit for {group}")
            return cached

        async with self._cache.lock(key):
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            board = await self._build(group, api_key, use_cache=True)
            self._cache.set(key, board)
            return board

    async def _build(self, group: str, api_key: str | None, use_cache: bool) -> Board:
        trip_updates = await self._feeds.fetch_feed(group, use_cache=use_cache, api_key=api_key)
        board = build_board(trip_updates, self._feeds.tables, self._clock(), self._tz)
        logger.debug(f"Built board for {group}: {len(board)} stops")
        return board
