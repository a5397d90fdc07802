"""Tests for the MCP tool functions."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from mta_mcp.data.config import MTAConfig
from mta_mcp.data.feeds import UnknownFeedGroupError
from mta_mcp.data.static_tables import StaticTables
from mta_mcp.models.gtfs import RouteRecord, StopRecord
from mta_mcp.models.realtime import StopTimeEvent, StopUpdate, TripUpdateRecord
from mta_mcp.services.context import ServiceContext, reset_context, set_context
from mta_mcp.tools.arrivals_tools import get_arrival_board
from mta_mcp.tools.feed_tools import fetch_feed, list_feed_groups
from mta_mcp.tools.stop_tools import get_route_stops, get_stop, list_routes, search_stops


@pytest.fixture
def tables() -> StaticTables:
    return StaticTables.from_records(
        [
            StopRecord(id="R15", name="49 St", routes="N Q R W"),
            StopRecord(id="R15N", name="49 St", parent="R15"),
            StopRecord(id="635", name="14 St-Union Sq", routes="4 5 6"),
        ],
        [RouteRecord(route_id="Q", short_name="Q")],
    )


@pytest.fixture
def context(tables: StaticTables):
    context = ServiceContext.create(MTAConfig(MTA_API_KEY="test-key"), tables)
    set_context(context)
    yield context
    reset_context()


@pytest.fixture
def trip_updates() -> list[TripUpdateRecord]:
    when = datetime.now(UTC).replace(microsecond=0)
    return [
        TripUpdateRecord(
            id="000001",
            route_id="Q",
            trip_id="T1",
            stop_updates=[
                StopUpdate(
                    stop_id="R15N",
                    stop_name="49 St",
                    arrival=StopTimeEvent(time=when),
                )
            ],
        )
    ]


class TestFeedTools:
    """Tests for list_feed_groups and fetch_feed."""

    def test_list_feed_groups(self) -> None:
        response = list_feed_groups()
        assert response.groups == ["ACE", "BDFM", "G", "JZ", "NQRW", "L", "SI", "1234567"]

    async def test_fetch_feed(self, context: ServiceContext, trip_updates) -> None:
        with patch.object(
            context.feeds, "fetch_feed", AsyncMock(return_value=trip_updates)
        ) as mock_fetch:
            response = await fetch_feed("nqrw")

        mock_fetch.assert_awaited_once_with("nqrw", use_cache=True, api_key=None)
        assert response.group_id == "nqrw"
        assert response.count == 1
        assert response.trip_updates[0].trip_id == "T1"

    async def test_fetch_feed_api_key_override(
        self, context: ServiceContext, trip_updates
    ) -> None:
        with patch.object(
            context.feeds, "fetch_feed", AsyncMock(return_value=trip_updates)
        ) as mock_fetch:
            await fetch_feed("ACE", use_cache=False, api_key="per-request")

        mock_fetch.assert_awaited_once_with("ACE", use_cache=False, api_key="per-request")

    async def test_fetch_feed_unknown_group(self, context: ServiceContext) -> None:
        with pytest.raises(UnknownFeedGroupError):
            await fetch_feed("XYZ")


class TestArrivalTools:
    """Tests for get_arrival_board."""

    async def test_get_arrival_board(self, context: ServiceContext, trip_updates) -> None:
        with patch.object(context.feeds, "fetch_feed", AsyncMock(return_value=trip_updates)):
            response = await get_arrival_board("NQRW", "R15N")

        assert response.stop_id == "R15N"
        assert response.stop_name == "49 St"
        assert len(response.arrivals) == 1
        assert response.arrivals[0].route_id == "Q"
        assert response.model_dump()["arrivals"][0]["in"] == "now"

    async def test_get_arrival_board_api_key_override(
        self, context: ServiceContext, trip_updates
    ) -> None:
        with patch.object(
            context.feeds, "fetch_feed", AsyncMock(return_value=trip_updates)
        ) as mock_fetch:
            await get_arrival_board("NQRW", "R15N", api_key="per-request")

        mock_fetch.assert_awaited_once_with("NQRW", use_cache=True, api_key="per-request")

    async def test_get_arrival_board_missing_stop(
        self, context: ServiceContext, trip_updates
    ) -> None:
        with patch.object(context.feeds, "fetch_feed", AsyncMock(return_value=trip_updates)):
            response = await get_arrival_board("NQRW", "X")

        assert response.stop_name is None
        assert response.updated_at is None
        assert response.arrivals == []


class TestStopTools:
    """Tests for the stop and route tools."""

    async def test_search_stops(self, context: ServiceContext) -> None:
        response = await search_stops(route_id="Q")
        assert [s.id for s in response.stops] == ["R15", "R15N"]

    async def test_search_stops_clamps_limit(self, context: ServiceContext) -> None:
        assert (await search_stops(limit=0)).count == 1
        assert (await search_stops(limit=10_000)).count == 3

    async def test_get_stop(self, context: ServiceContext) -> None:
        stop = await get_stop("635")
        assert stop.name == "14 St-Union Sq"

    async def test_get_stop_not_found(self, context: ServiceContext) -> None:
        with pytest.raises(ValueError, match="Stop not found"):
            await get_stop("NOPE")

    async def test_get_route_stops(self, context: ServiceContext) -> None:
        response = await get_route_stops("6X")
        assert response.normalized_route_id == "6"
        assert [s.id for s in response.stops] == ["635"]

    async def test_get_route_stops_blank(self, context: ServiceContext) -> None:
        with pytest.raises(ValueError, match="route_id is required"):
            await get_route_stops("  ")

    async def test_list_routes(self, context: ServiceContext) -> None:
        response = await list_routes()
        assert response.count == 1
