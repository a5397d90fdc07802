import argparse
import asyncio
import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from mta_mcp.app import mcp

# Importing the tool modules registers their tools on `mcp`
from mta_mcp.tools import arrivals_tools, feed_tools, stop_tools  # noqa: F401


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the MTA MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from mta_mcp import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


async def run_ingest(gtfs_path: Path, db_path: Path) -> None:
    """Run GTFS ingestion."""
    from mta_mcp.data.gtfs_loader import GTFSLoader

    loader = GTFSLoader(db_path)
    row_counts = await loader.ingest(gtfs_path)

    print("\nIngestion complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="mta-mcp",
        description="MTA Subway MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Ingest GTFS routes and stops into SQLite database",
    )
    ingest_parser.add_argument(
        "gtfs_path",
        type=Path,
        help="Path to GTFS directory or ZIP file",
    )
    ingest_parser.add_argument(
        "--db",
        type=Path,
        default=Path(os.environ.get("MTA_DB_PATH", "data/gtfs.db")),
        help="SQLite database path (default: data/gtfs.db or MTA_DB_PATH env var)",
    )
    ingest_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.command == "ingest":
        # Configure logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        asyncio.run(run_ingest(args.gtfs_path, args.db))
    else:
        # Default: run MCP server
        mcp.run()


if __name__ == "__main__":
    main()
