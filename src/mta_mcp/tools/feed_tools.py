"""MCP tools for feed groups and raw trip updates."""

from mta_mcp.app import mcp
from mta_mcp.data.feeds import list_groups
from mta_mcp.models.responses import FeedResponse, ListGroupsResponse
from mta_mcp.services.context import get_context


@mcp.tool()
def list_feed_groups() -> ListGroupsResponse:
    """List the NYC subway real-time feed groups.

    Each group is a cluster of lines sharing one GTFS-RT feed: "ACE", "BDFM",
    "G", "JZ", "NQRW", "L", "SI" and "1234567" (numbered lines and the 42 St
    shuttle).

    Returns:
        ListGroupsResponse with the valid group ids.
    """
    return ListGroupsResponse(groups=list_groups())


@mcp.tool()
async def fetch_feed(
    group_id: str, use_cache: bool = True, api_key: str | None = None
) -> FeedResponse:
    """Get the current trip updates of one feed group.

    Each trip update lists the upcoming stops of one train with predicted
    arrival/departure times (ISO 8601, UTC) and delays in seconds.

    Args:
        group_id: Feed group id, case-insensitive (e.g., "ACE", "nqrw", "1234567").
        use_cache: Set False to bypass the short-lived feed cache.
        api_key: Optional MTA API key for this request, overriding MTA_API_KEY.

    Returns:
        FeedResponse with the normalized trip updates.
    """
    context = await get_context()
    trip_updates = await context.feeds.fetch_feed(
        group_id, use_cache=use_cache, api_key=api_key
    )
    return FeedResponse(group_id=group_id, trip_updates=trip_updates, count=len(trip_updates))
