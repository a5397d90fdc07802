from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from mta_mcp.models.gtfs import RouteRecord, StopRecord
from mta_mcp.models.realtime import TripUpdateRecord


class ArrivalMeta(BaseModel):
    arrival_delay: int | None = Field(default=None, description="Arrival delay in seconds")
    departure_delay: int | None = Field(default=None, description="Departure delay in seconds")


class ArrivalItem(BaseModel):
    """One upcoming arrival on a stop's board.

    when_local and in are derived from when_iso and are recomputed against
    the wall clock every time a board is read.
    """

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    stop_id: str
    stop_name: str | None = None
    when_iso: datetime = Field(description="Predicted arrival (or departure) instant")
    when_local: str | None = Field(
        default=None, description="Local clock time (e.g., '8:05 PM')"
    )
    in_: str = Field(alias="in", description="Relative label: 'now', '3m', '2m ago'")
    route_id: str | None = None
    trip_id: str | None = None
    schedule_relationship: str | None = None
    meta: ArrivalMeta = ArrivalMeta()


class BoardRow(BaseModel):
    """Arrivals for one stop within a cached board."""

    stop_id: str
    stop_name: str | None = None
    updated_at: datetime = Field(description="When the board was built")
    arrivals: list[ArrivalItem] = Field(description="At most 8, sorted by when_iso")


# stop_id -> row, built once per feed group per cache window
Board = dict[str, BoardRow]


class ArrivalBoardResponse(BaseModel):
    """Response for get_arrival_board."""

    stop_id: str
    stop_name: str | None = None
    updated_at: datetime | None = Field(
        default=None, description="When the underlying board was built (null if no data)"
    )
    now: datetime = Field(description="Instant the relative labels were computed against")
    arrivals: list[ArrivalItem] = []


class ListGroupsResponse(BaseModel):
    groups: list[str] = Field(description="Valid feed group ids")


class FeedResponse(BaseModel):
    group_id: str
    trip_updates: list[TripUpdateRecord]
    count: int = Field(description="Number of trip updates returned")


class SearchStopsResponse(BaseModel):
    stops: list[StopRecord]
    count: int = Field(description="Number of stops returned")
    total_matches: int | None = Field(
        default=None, description="Total matches before limit applied"
    )


class RouteStopsResponse(BaseModel):
    route_id: str = Field(description="Route id as requested")
    normalized_route_id: str | None = Field(
        default=None, description="Route id after equivalence mapping (e.g., 6X -> 6)"
    )
    stops: list[StopRecord] = Field(description="Stops served by the route, sorted by name")
    count: int


class ListRoutesResponse(BaseModel):
    routes: list[RouteRecord]
    count: int
