"""In-memory, read-only view of the static stop and route tables."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import aiosqlite

from mta_mcp.data.database import get_db
from mta_mcp.models.gtfs import RouteRecord, StopRecord

logger = logging.getLogger(__name__)


def _to_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _row_to_stop(row: aiosqlite.Row) -> StopRecord:
    """Convert a database row to a StopRecord."""
    return StopRecord(
        id=row["stop_id"],
        name=row["stop_name"],
        lat=_to_float(row["stop_lat"]),
        lon=_to_float(row["stop_lon"]),
        routes=row["routes"],
        parent=row["parent_station"],
    )


def _row_to_route(row: aiosqlite.Row) -> RouteRecord:
    """Convert a database row to a RouteRecord."""
    return RouteRecord(
        route_id=row["route_id"],
        short_name=row["route_short_name"],
        long_name=row["route_long_name"],
        desc=row["route_desc"],
        type=_to_int(row["route_type"]),
        color=row["route_color"],
        text_color=row["route_text_color"],
    )


@dataclass
class StaticTables:
    """Stops and routes loaded once at startup; never written afterwards.

    Usage:
        tables = await StaticTables.load(db_path)
        stop = tables.stops.get("R15")
    """

    stops: dict[str, StopRecord] = field(default_factory=dict)  # stop_id -> stop
    routes: list[RouteRecord] = field(default_factory=list)

    @classmethod
    def from_records(
        cls, stops: list[StopRecord], routes: list[RouteRecord] | None = None
    ) -> "StaticTables":
        """Build tables from already loaded records."""
        return cls(stops={stop.id: stop for stop in stops}, routes=list(routes or []))

    @classmethod
    async def load(cls, db_path: Path | None = None) -> "StaticTables":
        """Load all stops and routes from the static database.

        Raises:
            FileNotFoundError: If the database doesn't exist.
        """
        tables = cls()
        async with get_db(db_path) as db:
            async with db.execute(
                """
                SELECT stop_id, stop_name, stop_lat, stop_lon, parent_station, routes
                FROM stops
                """
            ) as cursor:
                async for row in cursor:
                    stop = _row_to_stop(row)
                    tables.stops[stop.id] = stop

            async with db.execute(
                """
                SELECT route_id, route_short_name, route_long_name, route_desc,
                       route_type, route_color, route_text_color
                FROM routes
                ORDER BY route_id
                """
            ) as cursor:
                async for row in cursor:
                    tables.routes.append(_row_to_route(row))

        logger.info(f"Static tables loaded: {len(tables.stops)} stops, {len(tables.routes)} routes")
        return tables

    def stop_name(self, stop_id: str | None) -> str | None:
        """Look up a stop's name; unknown or missing ids give None."""
        if not stop_id:
            return None
        stop = self.stops.get(stop_id)
        return stop.name if stop else None
