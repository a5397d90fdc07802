"""Tests for feed group resolution."""

import pytest

from mta_mcp.data.feeds import (
    FEED_GROUPS,
    UnknownFeedGroupError,
    get_group_url,
    list_groups,
    resolve_group,
)

BASE_URL = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds"


class TestFeedGroups:
    """Tests for the feed group table."""

    def test_list_groups(self) -> None:
        assert list_groups() == ["ACE", "BDFM", "G", "JZ", "NQRW", "L", "SI", "1234567"]

    def test_list_groups_is_a_copy(self) -> None:
        list_groups().append("XYZ")
        assert "XYZ" not in FEED_GROUPS

    @pytest.mark.parametrize(
        ("group_id", "expected"),
        [("ace", "ACE"), ("NQRW", "NQRW"), (" si ", "SI"), ("1234567", "1234567")],
    )
    def test_resolve_group(self, group_id: str, expected: str) -> None:
        assert resolve_group(group_id) == expected

    @pytest.mark.parametrize("group_id", ["XYZ", "", None, "123"])
    def test_unknown_group(self, group_id: str | None) -> None:
        with pytest.raises(UnknownFeedGroupError) as exc_info:
            resolve_group(group_id)
        assert exc_info.value.group_id == str(group_id)

    def test_unknown_group_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="Unknown feed group: XYZ"):
            resolve_group("XYZ")


class TestGroupUrl:
    """Tests for endpoint URLs."""

    def test_lettered_group(self) -> None:
        assert get_group_url("ace", BASE_URL) == f"{BASE_URL}/nyct%2Fgtfs-ace"

    def test_numbered_group(self) -> None:
        assert get_group_url("1234567", BASE_URL + "/") == f"{BASE_URL}/nyct%2Fgtfs"
