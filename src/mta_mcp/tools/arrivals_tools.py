from mta_mcp.app import mcp
from mta_mcp.models.responses import ArrivalBoardResponse
from mta_mcp.services.context import get_context


@mcp.tool()
async def get_arrival_board(
    group_id: str,
    stop_id: str,
    use_cache: bool = True,
    api_key: str | None = None,
) -> ArrivalBoardResponse:
    """Get upcoming arrivals at a NYC subway stop.

    Returns up to 8 arrivals within the next 20 minutes (and the last minute),
    each with a countdown label ("now", "3m", "1m ago") and a local clock time.
    Countdown labels are always computed at request time.

    A stop with no upcoming arrivals returns an empty list, not an error.

    Args:
        group_id: Feed group serving the stop (e.g., "1234567", "ACE"). Use
            list_feed_groups to see all groups.
        stop_id: Platform stop id including direction (e.g., "608S", "R15N").
        use_cache: Set False to force a fresh feed fetch and board rebuild.
        api_key: Optional MTA API key for this request, overriding MTA_API_KEY.

    Returns:
        ArrivalBoardResponse with arrivals sorted by time.
    """
    context = await get_context()
    return await context.arrivals.get_arrival_board(
        group_id, stop_id, api_key=api_key, use_cache=use_cache
    )
