"""GTFS data loader for ingesting static subway reference data into SQLite."""

import csv
import io
import logging
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
-- routes
CREATE TABLE routes (
    route_id TEXT PRIMARY KEY,
    route_short_name TEXT,
    route_long_name TEXT,
    route_desc TEXT,
    route_type INTEGER,
    route_color TEXT,
    route_text_color TEXT
);

-- stops (routes is a non-standard free-text column listing serving lines)
CREATE TABLE stops (
    stop_id TEXT PRIMARY KEY,
    stop_name TEXT NOT NULL,
    stop_lat REAL,
    stop_lon REAL,
    location_type INTEGER,
    parent_station TEXT,
    routes TEXT
);
"""

INDEX_SQL = """
CREATE INDEX idx_stops_parent ON stops(parent_station);
CREATE INDEX idx_stops_name ON stops(stop_name);
"""

# Table definitions: table_name -> (csv_filename, columns)
TABLE_DEFINITIONS: dict[str, tuple[str, list[str]]] = {
    "routes": (
        "routes.txt",
        [
            "route_id",
            "route_short_name",
            "route_long_name",
            "route_desc",
            "route_type",
            "route_color",
            "route_text_color",
        ],
    ),
    "stops": (
        "stops.txt",
        [
            "stop_id",
            "stop_name",
            "stop_lat",
            "stop_lon",
            "location_type",
            "parent_station",
            "routes",
        ],
    ),
}

# Columns that must be present in the CSV header; the rest load as NULL if missing.
HEADER_COLUMNS: dict[str, list[str]] = {
    "routes": ["route_id"],
    "stops": ["stop_id", "stop_name"],
}

# Columns that must have a value for a row to be inserted.
REQUIRED_COLUMNS: dict[str, list[str]] = {
    "routes": ["route_id"],
    "stops": ["stop_id", "stop_name"],
}

# Chunk size for bulk inserts
CHUNK_SIZE = 10000


class GTFSLoader:
    """Loader for ingesting GTFS routes and stops into SQLite."""

    def __init__(self, db_path: Path):
        """Initialize the loader.

        Args:
            db_path: Path where the SQLite database will be created.
        """
        self.db_path = Path(db_path)

    async def ingest(self, gtfs_path: Path) -> dict[str, int]:
        """Ingest GTFS data from a directory or ZIP file into SQLite.

        Uses atomic swap: loads into temp DB, then replaces the target DB.

        Args:
            gtfs_path: Path to GTFS directory or ZIP file.

        Returns:
            Dictionary with row counts per table.

        Raises:
            FileNotFoundError: If GTFS path doesn't exist or a table file is missing.
            ValueError: If a file lacks required columns or no rows were loaded.
        """
        gtfs_path = Path(gtfs_path)
        if not gtfs_path.exists():
            raise FileNotFoundError(f"GTFS path not found: {gtfs_path}")

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        temp_db = self.db_path.with_suffix(".tmp.db")

        try:
            # Remove temp db if it exists from a previous failed run
            temp_db.unlink(missing_ok=True)

            async with aiosqlite.connect(temp_db) as db:
                await db.execute("PRAGMA journal_mode=OFF")
                await db.execute("PRAGMA synchronous=OFF")

                await db.executescript(SCHEMA_SQL)
                await db.commit()
                row_counts = await self._load_all_tables(db, gtfs_path)
                logger.info("Creating indexes...")
                await db.executescript(INDEX_SQL)
                await db.commit()
                await self._verify_integrity(db)

            # atomic swap
            temp_db.replace(self.db_path)

            logger.info(f"GTFS ingestion complete: {self.db_path}")
            return row_counts

        except Exception:
            temp_db.unlink(missing_ok=True)
            raise

    async def _load_all_tables(self, db: aiosqlite.Connection, gtfs_path: Path) -> dict[str, int]:
        """Load all GTFS tables from directory or ZIP."""
        row_counts: dict[str, int] = {}

        if gtfs_path.is_file() and gtfs_path.suffix == ".zip":
            with zipfile.ZipFile(gtfs_path, "r") as zf:
                names = zf.namelist()
                for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
                    if csv_filename not in names:
                        raise FileNotFoundError(f"{csv_filename} not found in {gtfs_path.name}")
                    with zf.open(csv_filename) as f:
                        text_file = io.TextIOWrapper(f, encoding="utf-8-sig")
                        row_counts[table_name] = await self._load_table(
                            db, table_name, columns, text_file, csv_filename
                        )
        else:
            for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
                csv_path = gtfs_path / csv_filename
                if not csv_path.exists():
                    raise FileNotFoundError(f"{csv_filename} not found in {gtfs_path}")
                with open(csv_path, encoding="utf-8-sig", newline="") as f:
                    row_counts[table_name] = await self._load_table(
                        db, table_name, columns, f, csv_filename
                    )

        return row_counts

    async def _load_table(
        self,
        db: aiosqlite.Connection,
        table_name: str,
        columns: list[str],
        text_file: io.TextIOBase,
        filename: str,
    ) -> int:
        """Load one CSV stream into a table."""
        logger.info(f"Loading {table_name} from {filename}...")

        placeholders = ",".join(["?"] * len(columns))
        insert_sql = f"INSERT OR REPLACE INTO {table_name} ({','.join(columns)}) VALUES ({placeholders})"

        total_rows = 0
        skipped_rows = 0
        chunk: list[tuple[Any, ...]] = []
        required = REQUIRED_COLUMNS.get(table_name, [])

        reader = csv.reader(text_file)
        header_index = self._build_header_index(
            reader, columns, HEADER_COLUMNS.get(table_name, []), filename
        )
        for row_dict in self._iter_rows(reader, header_index):
            if not self._has_required_values(row_dict, required):
                skipped_rows += 1
                continue
            chunk.append(tuple(self._convert_value(row_dict.get(col)) for col in columns))

            if len(chunk) >= CHUNK_SIZE:
                await db.executemany(insert_sql, chunk)
                total_rows += len(chunk)
                chunk = []

        if chunk:
            await db.executemany(insert_sql, chunk)
            total_rows += len(chunk)

        await db.commit()
        logger.info(
            f"  Loaded {total_rows:,} rows into {table_name}"
            + (f" (skipped {skipped_rows:,} invalid)" if skipped_rows else "")
        )
        return total_rows

    def _convert_value(self, value: str | None) -> Any:
        """Convert CSV value to appropriate Python type."""
        if value is None:
            return None
        value = value.strip()
        return value or None

    def _has_required_values(self, row: dict[str, str | None], required: list[str]) -> bool:
        """Return True if all required columns have non-empty values."""
        for col in required:
            value = row.get(col)
            if value is None or value.strip() == "":
                return False
        return True

    def _build_header_index(
        self,
        reader: Iterator[list[str]],
        columns: list[str],
        header_required: list[str],
        filename: str,
    ) -> dict[str, int]:
        """Build header index mapping for a CSV reader."""
        header = next(reader, None)
        if header is None:
            raise ValueError(f"{filename} is empty")
        expected = set(columns)
        header_index: dict[str, int] = {}
        for idx, name in enumerate(header):
            cleaned = name.strip()
            if cleaned in expected and cleaned not in header_index:
                header_index[cleaned] = idx
        missing = [col for col in header_required if col not in header_index]
        if missing:
            raise ValueError(f"{filename} missing columns: {', '.join(missing)}")
        return header_index

    def _iter_rows(
        self, reader: Iterator[list[str]], header_index: dict[str, int]
    ) -> Iterator[dict[str, str | None]]:
        """Map CSV rows to dicts by header index; absent columns map to None."""
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            yield {col: (row[idx] if idx < len(row) else "") for col, idx in header_index.items()}

    async def _verify_integrity(self, db: aiosqlite.Connection) -> None:
        """Verify database integrity after loading."""
        logger.info("Verifying database integrity...")

        for table_name in TABLE_DEFINITIONS:
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                if row is None or row[0] == 0:
                    raise ValueError(f"No {table_name} loaded - check GTFS data")

        logger.info("Database integrity verified")
