"""Stop and route queries over the in-memory static tables."""

from mta_mcp.data.static_tables import StaticTables
from mta_mcp.matching.normalizers import normalize_text, stop_sort_key
from mta_mcp.matching.route_matcher import (
    filter_stops_by_route,
    normalize_route,
)
from mta_mcp.models.gtfs import RouteRecord, StopRecord
from mta_mcp.models.responses import (
    ListRoutesResponse,
    RouteStopsResponse,
    SearchStopsResponse,
)

# Upper bound on stops returned by a single search
MAX_SEARCH_RESULTS = 2000


def _matches_text(stop: StopRecord, query: str) -> bool:
    """Case- and accent-insensitive substring match on name or id."""
    return query in normalize_text(stop.name) or query in normalize_text(stop.id)


def search_stops(
    tables: StaticTables,
    query: str | None = None,
    route_id: str | None = None,
    limit: int = MAX_SEARCH_RESULTS,
) -> SearchStopsResponse:
    """Search stops by text and/or route.

    Both filters are optional; a blank value means "don't filter". The route
    filter uses the station-code matching rules, so it finds stations whose
    routes column doesn't list the line.

    Args:
        tables: Static tables to search.
        query: Text to find in stop names or ids.
        route_id: Route line that must serve the stop (e.g., "Q", "6X").
        limit: Maximum number of results.

    Returns:
        SearchStopsResponse with stops sorted by name, then id.
    """
    stops: list[StopRecord] = list(tables.stops.values())

    normalized_query = normalize_text(query or "")
    if normalized_query:
        stops = [stop for stop in stops if _matches_text(stop, normalized_query)]

    if normalize_route(route_id):
        stops = filter_stops_by_route(stops, route_id)
    else:
        stops.sort(key=lambda s: stop_sort_key(s.name, s.id))

    total = len(stops)
    stops = stops[:limit]
    return SearchStopsResponse(stops=stops, count=len(stops), total_matches=total)


def get_stop(tables: StaticTables, stop_id: str) -> StopRecord | None:
    """Get a single stop by its id, or None if unknown."""
    return tables.stops.get(stop_id)


def get_route_stops(tables: StaticTables, route_id: str) -> RouteStopsResponse:
    """List every stop served by a route line.

    Args:
        tables: Static tables to search.
        route_id: Route line, any case; express and shuttle aliases allowed.

    Returns:
        RouteStopsResponse with stops sorted by name, then id. Empty when the
        route id is blank.
    """
    stops = filter_stops_by_route(tables.stops.values(), route_id)
    return RouteStopsResponse(
        route_id=route_id,
        normalized_route_id=normalize_route(route_id),
        stops=stops,
        count=len(stops),
    )


def list_routes(tables: StaticTables) -> ListRoutesResponse:
    """List all routes from routes.txt."""
    routes: list[RouteRecord] = list(tables.routes)
    return ListRoutesResponse(routes=routes, count=len(routes))
