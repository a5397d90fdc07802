"""Decide whether a subway stop is served by a route line.

The free-text routes column in stops.txt is incomplete for some stations, so
membership is also inferred from the station code: NYCT stop ids carry a
letter prefix and a number (e.g. "R15", "635") and each line owns known
prefix / number ranges.

Matching strategies run in order and short-circuit on the first hit:
1. Exact token in the stop's free-text routes field
2. Prefix / numeric-range rules for the route (when the route has rules)
3. Exact token in the station code (only for routes without rules)
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from mta_mcp.matching.normalizers import code_tokens, stop_sort_key, tokenize_routes
from mta_mcp.models.gtfs import StopRecord

# Express and shuttle variants -> the route code stations are keyed by
ROUTE_EQUIVALENTS: dict[str, str] = {
    "5X": "5",
    "6X": "6",
    "7X": "7",
    "GS": "S",
    "FS": "S",
}

LEADING_LETTERS = re.compile(r"^[A-Z]+")
LEADING_DIGITS = re.compile(r"^\d+")


@dataclass(frozen=True)
class RouteRule:
    """A station-code range owned by a route.

    prefix, min and max are each optional; an unset field matches anything.
    A rule with min or max only matches codes that have a number.
    """

    prefix: str = ""
    min: int | None = None
    max: int | None = None

    def matches(self, prefix: str, number: int | None) -> bool:
        if self.prefix and self.prefix != prefix:
            return False
        if self.min is not None and (number is None or number < self.min):
            return False
        if self.max is not None and (number is None or number > self.max):
            return False
        return True


ROUTE_RULES: dict[str, tuple[RouteRule, ...]] = {
    "1": (RouteRule(min=101, max=199),),
    "2": (RouteRule(min=201, max=299),),
    "3": (RouteRule(min=301, max=399),),
    "4": (RouteRule(min=401, max=499),),
    "5": (
        RouteRule(min=201, max=299),
        RouteRule(min=401, max=499),
        RouteRule(min=501, max=599),
    ),
    "6": (RouteRule(min=601, max=699),),
    "7": (RouteRule(min=701, max=799),),
    "S": (RouteRule(min=901, max=999),),
    "N": (
        RouteRule(prefix="N"),
        RouteRule(prefix="R", min=1, max=21),
    ),
    "Q": (
        RouteRule(prefix="Q"),
        RouteRule(prefix="R", min=13, max=21),
        RouteRule(prefix="D", min=24, max=43),
    ),
    "R": (RouteRule(prefix="R", min=13, max=45),),
    "W": (RouteRule(prefix="R", min=1, max=27),),
}


@dataclass(frozen=True)
class BaseCode:
    """A station code split into its letter prefix and number."""

    code: str
    prefix: str
    number: int | None


def normalize_route(route_id: str | None) -> str | None:
    """Upper-case a route id and map it through ROUTE_EQUIVALENTS.

    Normalizing an already normalized id returns it unchanged.

    Examples:
        "6x" -> "6"
        "GS" -> "S"
        "q" -> "Q"
        "" -> None
    """
    if not route_id:
        return None
    upper = route_id.strip().upper()
    if not upper:
        return None
    return ROUTE_EQUIVALENTS.get(upper, upper)


def extract_base_code(stop: StopRecord | None) -> BaseCode:
    """Get the station code used by the range rules.

    Child platform ids ("R15N") don't reliably carry the station code, so the
    parent station id is preferred over the stop's own id.
    """
    if stop is None:
        return BaseCode(code="", prefix="", number=None)

    raw = stop.parent or stop.id or ""
    code = raw.strip().upper()
    if not code:
        return BaseCode(code="", prefix="", number=None)

    prefix_match = LEADING_LETTERS.match(code)
    prefix = prefix_match.group(0) if prefix_match else ""
    number_match = LEADING_DIGITS.match(code[len(prefix):])
    number = int(number_match.group(0)) if number_match else None
    return BaseCode(code=code, prefix=prefix, number=number)


# A matcher answers "does this stop serve this (normalized) route?"
RouteMatcher = Callable[[StopRecord, str], bool]


def match_listed_routes(stop: StopRecord, route: str) -> bool:
    """Match when the route appears as a token in the stop's routes field."""
    return route in tokenize_routes(stop.routes or "")


def match_code_rules(stop: StopRecord, route: str) -> bool:
    """Match when the station code falls in one of the route's rules."""
    rules = ROUTE_RULES.get(route)
    if not rules:
        return False
    base = extract_base_code(stop)
    return any(rule.matches(base.prefix, base.number) for rule in rules)


def match_code_tokens(stop: StopRecord, route: str) -> bool:
    """Match the route against station-code tokens, for routes without rules."""
    if route in ROUTE_RULES:
        return False
    return route in code_tokens(extract_base_code(stop).code)


MATCHERS: tuple[RouteMatcher, ...] = (
    match_listed_routes,
    match_code_rules,
    match_code_tokens,
)


def stop_serves_route(stop: StopRecord, route_id: str | None) -> bool:
    """Return True if the stop is served by the route line.

    Args:
        stop: Stop to test.
        route_id: Route line id, any case; express and shuttle aliases allowed.
    """
    route = normalize_route(route_id)
    if not route:
        return False
    return any(matcher(stop, route) for matcher in MATCHERS)


def filter_stops_by_route(stops: Iterable[StopRecord], route_id: str | None) -> list[StopRecord]:
    """Return the stops served by a route, sorted by name then stop id.

    An empty route id matches nothing and returns an empty list.
    """
    route = normalize_route(route_id)
    if not route:
        return []
    matched = [stop for stop in stops if stop_serves_route(stop, route)]
    matched.sort(key=lambda s: stop_sort_key(s.name, s.id))
    return matched
