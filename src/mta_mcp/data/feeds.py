"""NYCT subway GTFS-RT feed groups.

Each group is a cluster of lines that share one real-time feed endpoint.
"""

# group id -> endpoint path under the MTA feed base URL
FEED_GROUPS: dict[str, str] = {
    "ACE": "nyct%2Fgtfs-ace",
    "BDFM": "nyct%2Fgtfs-bdfm",
    "G": "nyct%2Fgtfs-g",
    "JZ": "nyct%2Fgtfs-jz",
    "NQRW": "nyct%2Fgtfs-nqrw",
    "L": "nyct%2Fgtfs-l",
    "SI": "nyct%2Fgtfs-si",
    "1234567": "nyct%2Fgtfs",
}

_GROUPS_BY_LOWER: dict[str, str] = {group.lower(): group for group in FEED_GROUPS}


class UnknownFeedGroupError(ValueError):
    """Raised when a group id is not one of FEED_GROUPS."""

    def __init__(self, group_id: str):
        super().__init__(f"Unknown feed group: {group_id}")
        self.group_id = group_id


def list_groups() -> list[str]:
    """Return the valid feed group ids, in declaration order."""
    return list(FEED_GROUPS)


def resolve_group(group_id: str | None) -> str:
    """Map a group id (any case) to its canonical form.

    Raises:
        UnknownFeedGroupError: If the group id is not recognized.
    """
    canonical = _GROUPS_BY_LOWER.get((group_id or "").strip().lower())
    if canonical is None:
        raise UnknownFeedGroupError(str(group_id))
    return canonical


def get_group_url(group_id: str, base_url: str) -> str:
    """Build the feed endpoint URL for a group.

    Raises:
        UnknownFeedGroupError: If the group id is not recognized.
    """
    canonical = resolve_group(group_id)
    return f"{base_url.rstrip('/')}/{FEED_GROUPS[canonical]}"
