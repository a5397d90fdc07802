"""MCP tools for searching stops and routes."""

from mta_mcp.app import mcp
from mta_mcp.models.gtfs import StopRecord
from mta_mcp.models.responses import ListRoutesResponse, RouteStopsResponse, SearchStopsResponse
from mta_mcp.services import stop_service
from mta_mcp.services.context import get_context


@mcp.tool()
async def search_stops(
    query: str | None = None,
    route_id: str | None = None,
    limit: int = 100,
) -> SearchStopsResponse:
    """Search NYC subway stops by name/id and/or by the line serving them.

    Examples:
        search_stops(query="times sq")  # Stops with "times sq" in name or id
        search_stops(route_id="Q")  # Every station on the Q
        search_stops(query="av", route_id="6X")  # 6 express -> 6 line stations

    Args:
        query: Text to search for in stop names or ids (case-insensitive).
        route_id: Line that must serve the stop (e.g., "A", "7", "GS").
        limit: Maximum number of results (default 100, max 2000).

    Returns:
        SearchStopsResponse with stops sorted by name.
    """
    limit = max(1, min(stop_service.MAX_SEARCH_RESULTS, limit))

    context = await get_context()
    return stop_service.search_stops(
        context.tables, query=query, route_id=route_id, limit=limit
    )


@mcp.tool()
async def get_stop(stop_id: str) -> StopRecord:
    """Get a NYC subway stop or station by id (e.g., "R15", "R15N", "635").

    Args:
        stop_id: The stop id to look up.

    Returns:
        The stop, including its parent station and listed routes.
    """
    context = await get_context()
    stop = stop_service.get_stop(context.tables, stop_id)
    if stop is None:
        raise ValueError(f"Stop not found: {stop_id}")
    return stop


@mcp.tool()
async def get_route_stops(route_id: str) -> RouteStopsResponse:
    """List every NYC subway stop served by a line.

    Express and shuttle variants map to their line ("6X" -> "6", "GS" -> "S").

    Args:
        route_id: Line id, case-insensitive (e.g., "Q", "6X", "gs").

    Returns:
        RouteStopsResponse with stops sorted by name.
    """
    if not route_id or not route_id.strip():
        raise ValueError("route_id is required")

    context = await get_context()
    return stop_service.get_route_stops(context.tables, route_id)


@mcp.tool()
async def list_routes() -> ListRoutesResponse:
    """List all NYC subway routes with names and colors."""
    context = await get_context()
    return stop_service.list_routes(context.tables)
