"""Tests for stop and route queries."""

import pytest

from mta_mcp.data.static_tables import StaticTables
from mta_mcp.models.gtfs import RouteRecord, StopRecord
from mta_mcp.services.stop_service import (
    MAX_SEARCH_RESULTS,
    get_route_stops,
    get_stop,
    list_routes,
    search_stops,
)


@pytest.fixture
def tables() -> StaticTables:
    return StaticTables.from_records(
        [
            StopRecord(id="R15", name="49 St", routes="N Q R W"),
            StopRecord(id="R15N", name="49 St", parent="R15"),
            StopRecord(id="R16", name="Times Sq-42 St", routes="N Q R W"),
            StopRecord(id="127", name="Times Sq-42 St", routes="1 2 3"),
            StopRecord(id="635", name="14 St-Union Sq", routes="4 5 6"),
            StopRecord(id="901", name="Grand Central-42 St", routes="S"),
            StopRecord(id="A27", name="42 St-Port Authority Bus Terminal", routes="A C E"),
        ],
        [
            RouteRecord(route_id="6", short_name="6", long_name="Lexington Avenue Local"),
            RouteRecord(route_id="Q", short_name="Q", long_name="Broadway Express"),
        ],
    )


class TestSearchStops:
    """Tests for search_stops."""

    def test_no_filters_returns_all_sorted(self, tables: StaticTables) -> None:
        result = search_stops(tables)

        assert result.count == 7
        assert result.total_matches == 7
        assert [s.id for s in result.stops][:3] == ["635", "A27", "R15"]

    def test_query_matches_name(self, tables: StaticTables) -> None:
        result = search_stops(tables, query="times SQ")
        assert [s.id for s in result.stops] == ["127", "R16"]

    def test_query_matches_id(self, tables: StaticTables) -> None:
        result = search_stops(tables, query="r15")
        assert {s.id for s in result.stops} == {"R15", "R15N"}

    def test_route_filter(self, tables: StaticTables) -> None:
        result = search_stops(tables, route_id="q")
        assert [s.id for s in result.stops] == ["R15", "R15N", "R16"]

    def test_route_filter_with_alias(self, tables: StaticTables) -> None:
        assert [s.id for s in search_stops(tables, route_id="GS").stops] == ["901"]
        assert [s.id for s in search_stops(tables, route_id="6X").stops] == ["635"]

    def test_query_and_route(self, tables: StaticTables) -> None:
        result = search_stops(tables, query="42 st", route_id="1")
        assert [s.id for s in result.stops] == ["127"]

    def test_blank_route_is_no_filter(self, tables: StaticTables) -> None:
        assert search_stops(tables, route_id="  ").count == 7

    def test_limit(self, tables: StaticTables) -> None:
        result = search_stops(tables, query="42 st", limit=2)
        assert result.count == 2
        assert result.total_matches == 4

    def test_no_matches(self, tables: StaticTables) -> None:
        result = search_stops(tables, query="zzz")
        assert result.stops == []
        assert result.total_matches == 0

    def test_max_results(self) -> None:
        assert MAX_SEARCH_RESULTS == 2000


class TestGetStop:
    """Tests for get_stop."""

    def test_found(self, tables: StaticTables) -> None:
        stop = get_stop(tables, "R15N")
        assert stop is not None
        assert stop.parent == "R15"

    def test_not_found(self, tables: StaticTables) -> None:
        assert get_stop(tables, "NOPE") is None


class TestGetRouteStops:
    """Tests for get_route_stops."""

    def test_normalized_route(self, tables: StaticTables) -> None:
        result = get_route_stops(tables, "6x")
        assert result.route_id == "6x"
        assert result.normalized_route_id == "6"
        assert [s.id for s in result.stops] == ["635"]
        assert result.count == 1

    def test_blank_route(self, tables: StaticTables) -> None:
        result = get_route_stops(tables, "")
        assert result.normalized_route_id is None
        assert result.stops == []


class TestListRoutes:
    """Tests for list_routes."""

    def test_list_routes(self, tables: StaticTables) -> None:
        result = list_routes(tables)
        assert result.count == 2
        assert [r.route_id for r in result.routes] == ["6", "Q"]
