"""Pydantic models for static GTFS reference data."""

from pydantic import BaseModel, ConfigDict


class StopRecord(BaseModel):
    """A stop or parent station from stops.txt."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    lat: float | None = None
    lon: float | None = None
    routes: str | None = None  # free-text list of route codes, may be stale
    parent: str | None = None  # parent station id, same id space as `id`


class RouteRecord(BaseModel):
    """A route summary from routes.txt."""

    model_config = ConfigDict(frozen=True)

    route_id: str
    short_name: str | None = None
    long_name: str | None = None
    desc: str | None = None
    type: int | None = None  # 1=subway, 2=rail, 3=bus
    color: str | None = None
    text_color: str | None = None
