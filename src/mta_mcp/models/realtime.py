"""Pydantic models for normalized GTFS-RT trip updates.

Flattened view of a FeedMessage: one TripUpdateRecord per entity carrying a
trip update, with stop names resolved from the static stop table.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class StopTimeEvent(BaseModel):
    """Predicted arrival or departure at a stop."""

    model_config = ConfigDict(frozen=True)

    time: datetime | None = None  # absolute instant (UTC)
    delay: int | None = None  # seconds late (positive) or early (negative)


class StopUpdate(BaseModel):
    """Update for a single stop in a trip."""

    model_config = ConfigDict(frozen=True)

    stop_id: str | None = None
    stop_name: str | None = None
    arrival: StopTimeEvent = StopTimeEvent()
    departure: StopTimeEvent = StopTimeEvent()
    schedule_relationship: str | None = None  # SCHEDULED, SKIPPED, NO_DATA, ...


class TripUpdateRecord(BaseModel):
    """Real-time update for a single trip."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None  # feed entity id
    route_id: str | None = None
    trip_id: str | None = None
    start_date: str | None = None  # YYYYMMDD
    vehicle_id: str | None = None
    stop_updates: list[StopUpdate] = []
    timestamp: datetime | None = None  # feed header timestamp
