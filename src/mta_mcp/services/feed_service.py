"""Feed service: fetch, decode and normalize GTFS-RT trip updates with caching.

Decoded feeds are cached per group under "feed:<group>". Unknown groups are
rejected before any network call; transport and decode failures are logged
and propagated, never cached or retried.
"""

import logging
from datetime import UTC, datetime

from google.transit import gtfs_realtime_pb2

from mta_mcp.data.cache import ExpiringCache
from mta_mcp.data.config import MTAConfig
from mta_mcp.data.feeds import get_group_url, resolve_group
from mta_mcp.data.gtfsrt_client import FeedError, GTFSRTClient
from mta_mcp.data.static_tables import StaticTables
from mta_mcp.models.realtime import StopTimeEvent, StopUpdate, TripUpdateRecord

logger = logging.getLogger(__name__)

StopTimeUpdatePb = gtfs_realtime_pb2.TripUpdate.StopTimeUpdate


def feed_cache_key(group_id: str) -> str:
    return f"feed:{group_id}"


def timestamp_to_datetime(ts: int | None) -> datetime | None:
    """Convert epoch seconds to a UTC datetime; zero or missing gives None."""
    if not ts:
        return None
    try:
        return datetime.fromtimestamp(ts, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_stop_time_event(stu: StopTimeUpdatePb, name: str) -> StopTimeEvent:
    """Parse the arrival or departure of a stop time update."""
    if not stu.HasField(name):
        return StopTimeEvent()
    event = getattr(stu, name)
    return StopTimeEvent(
        time=timestamp_to_datetime(event.time),
        delay=event.delay if event.HasField("delay") else None,
    )


def _schedule_relationship(stu: StopTimeUpdatePb) -> str | None:
    if not stu.HasField("schedule_relationship"):
        return None
    return StopTimeUpdatePb.ScheduleRelationship.Name(stu.schedule_relationship)


def _parse_stop_update(stu: StopTimeUpdatePb, tables: StaticTables) -> StopUpdate:
    """Parse a single stop time update, resolving the stop name."""
    stop_id = stu.stop_id or None
    return StopUpdate(
        stop_id=stop_id,
        stop_name=tables.stop_name(stop_id),
        arrival=_parse_stop_time_event(stu, "arrival"),
        departure=_parse_stop_time_event(stu, "departure"),
        schedule_relationship=_schedule_relationship(stu),
    )


def normalize_feed(
    feed: gtfs_realtime_pb2.FeedMessage, tables: StaticTables
) -> list[TripUpdateRecord]:
    """Flatten a FeedMessage into one record per trip update entity.

    Entities without a trip update (vehicle positions, alerts) are dropped.

    Args:
        feed: Decoded GTFS-RT feed message.
        tables: Static tables used to resolve stop names.

    Returns:
        Trip update records in feed order.
    """
    feed_timestamp = timestamp_to_datetime(feed.header.timestamp)

    records: list[TripUpdateRecord] = []
    for entity in feed.entity:
        if not entity.HasField("trip_update"):
            continue
        tu = entity.trip_update
        vehicle_id = entity.vehicle.vehicle.id if entity.HasField("vehicle") else ""

        records.append(
            TripUpdateRecord(
                id=entity.id or None,
                route_id=tu.trip.route_id or None,
                trip_id=tu.trip.trip_id or None,
                start_date=tu.trip.start_date or None,
                vehicle_id=vehicle_id or None,
                stop_updates=[_parse_stop_update(stu, tables) for stu in tu.stop_time_update],
                timestamp=feed_timestamp,
            )
        )
    return records


class FeedService:
    """Fetches normalized trip updates for a feed group.

    Usage:
        service = FeedService(config, tables, ExpiringCache(ttl=15))
        records = await service.fetch_feed("ACE")
    """

    def __init__(
        self,
        config: MTAConfig,
        tables: StaticTables,
        cache: ExpiringCache[list[TripUpdateRecord]],
    ):
        self._config = config
        self._tables = tables
        self._cache = cache

    @property
    def tables(self) -> StaticTables:
        return self._tables

    async def fetch_feed(
        self,
        group_id: str,
        use_cache: bool = True,
        api_key: str | None = None,
    ) -> list[TripUpdateRecord]:
        """Fetch trip updates for a feed group.

        Args:
            group_id: Feed group id, any case (e.g., "ACE", "nqrw", "1234567").
            use_cache: If False, bypass both the cache read and the cache write.
            api_key: Optional API key overriding MTA_API_KEY for this call.

        Returns:
            Normalized trip update records.

        Raises:
            UnknownFeedGroupError: If the group id is not recognized.
            FeedTransportError: If the feed endpoint cannot be reached.
            FeedDecodeError: If the feed cannot be decoded.
        """
        group = resolve_group(group_id)
        url = get_group_url(group, self._config.feed_base_url)

        if not use_cache:
            return await self._fetch(group, url, api_key)

        key = feed_cache_key(group)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        # Acquire lock to prevent concurrent fetches of the same group
        async with self._cache.lock(key):
            # Double-check cache after acquiring lock
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            records = await self._fetch(group, url, api_key)
            self._cache.set(key, records)
            return records

    async def _fetch(self, group: str, url: str, api_key: str | None) -> list[TripUpdateRecord]:
        try:
            async with GTFSRTClient(self._config, api_key=api_key) as client:
                feed = await client.fetch_feed_message(url)
        except FeedError as e:
            logger.warning(f"Failed to fetch feed {group}: {e}")
            raise

        records = normalize_feed(feed, self._tables)
        logger.debug(f"Fetched {len(records)} trip updates for {group}")
        return records
