"""Route-to-stop matching for NYCT subway station codes."""

from mta_mcp.matching.normalizers import (
    code_tokens,
    normalize_text,
    remove_accents,
    stop_sort_key,
    tokenize_routes,
)
from mta_mcp.matching.route_matcher import (
    MATCHERS,
    ROUTE_EQUIVALENTS,
    ROUTE_RULES,
    BaseCode,
    RouteRule,
    extract_base_code,
    filter_stops_by_route,
    normalize_route,
    stop_serves_route,
)

__all__ = [
    # Matching
    "stop_serves_route",
    "filter_stops_by_route",
    "normalize_route",
    "extract_base_code",
    "MATCHERS",
    # Tables
    "ROUTE_EQUIVALENTS",
    "ROUTE_RULES",
    "RouteRule",
    "BaseCode",
    # Normalizers
    "normalize_text",
    "remove_accents",
    "stop_sort_key",
    "tokenize_routes",
    "code_tokens",
]
