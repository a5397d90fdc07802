"""Tests for the MCP server, health tool and CLI."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

from mta_mcp import __version__
from mta_mcp.server import health, main


def test_health_returns_ok_status():
    """Health check should return status ok."""
    response = health()
    assert response.status == "ok"


def test_health_returns_version():
    """Health check should return the current version."""
    response = health()
    assert response.version == __version__


def test_health_returns_timestamp():
    """Health check should return a valid ISO timestamp."""
    response = health()
    assert "T" in response.timestamp


def test_main_runs_server_by_default():
    """Without a sub-command the MCP server is started."""
    with patch.object(sys, "argv", ["mta-mcp"]), patch("mta_mcp.server.mcp.run") as mock_run:
        main()
    mock_run.assert_called_once_with()


def test_main_ingest(tmp_path: Path):
    """The ingest sub-command runs ingestion against the given paths."""
    db_path = tmp_path / "gtfs.db"
    argv = ["mta-mcp", "ingest", str(tmp_path / "gtfs"), "--db", str(db_path)]
    with (
        patch.object(sys, "argv", argv),
        patch("mta_mcp.server.run_ingest", new_callable=AsyncMock) as mock_ingest,
        patch("mta_mcp.server.mcp.run") as mock_run,
    ):
        main()

    mock_ingest.assert_awaited_once_with(tmp_path / "gtfs", db_path)
    mock_run.assert_not_called()
