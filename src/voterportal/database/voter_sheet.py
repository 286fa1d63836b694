"""
Voter sheet repository for the reference store.

Stores the voter roll as an ordered sheet of rows in SQLite, with a
separate ``deleted_voters`` table playing the role of the "Deleted" sheet.
Row order is insertion order, and ``rowIdx`` is reported the way a
spreadsheet numbers rows (the header occupies row 1).

Rows are unique on (booth, voter_no); lookups by that pair go through the
unique index instead of scanning the sheet.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from voterportal.config.constants import NAME_FIELDS
from voterportal.models import DuplicateMember, StoreMetadata, VoterRecord
from voterportal.utils.formatting import sort_naturally

# Sheet columns, in spreadsheet order
SHEET_COLUMNS = (
    "booth",
    "ward",
    "voter_no",
    "house_no",
    "name",
    "relation_name",
    "gender",
    "original_age",
    "aadhar",
    "dob",
    "calculated_age",
    "aadhar_photo",
)

# Columns a save may overwrite on an existing row
UPDATABLE_COLUMNS = (
    "name",
    "relation_name",
    "gender",
    "original_age",
    "aadhar",
    "dob",
    "calculated_age",
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS voters (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    booth TEXT NOT NULL,
    ward TEXT,
    voter_no TEXT NOT NULL,
    house_no TEXT NOT NULL DEFAULT '',
    name TEXT NOT NULL DEFAULT '',
    relation_name TEXT NOT NULL DEFAULT '',
    gender TEXT NOT NULL DEFAULT '',
    original_age TEXT NOT NULL DEFAULT '',
    aadhar TEXT NOT NULL DEFAULT '',
    dob TEXT NOT NULL DEFAULT '',
    calculated_age TEXT NOT NULL DEFAULT '',
    aadhar_photo TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_voters_identity ON voters(booth, voter_no);
CREATE INDEX IF NOT EXISTS idx_voters_aadhar ON voters(aadhar);

CREATE TABLE IF NOT EXISTS deleted_voters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    booth TEXT NOT NULL,
    ward TEXT,
    voter_no TEXT NOT NULL,
    house_no TEXT,
    name TEXT,
    relation_name TEXT,
    gender TEXT,
    original_age TEXT,
    aadhar TEXT,
    dob TEXT,
    calculated_age TEXT,
    aadhar_photo TEXT,
    reason TEXT NOT NULL,
    deleted_at TEXT NOT NULL
);
"""


class VoterSheetRepository:
    """Repository for the voter roll sheet and its deletion archive."""

    def __init__(self, db_path: str = "~/.voterportal/voter_sheet.db"):
        """Initialize repository with sheet database path.

        Args:
            db_path: Path to SQLite file (created if missing)
        """
        self.db_path = Path(db_path).expanduser()
        self._ensure_database_exists()

    def _ensure_database_exists(self) -> None:
        """Create database directory and schema if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()
        logger.debug(f"Voter sheet database ready: {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with context manager.

        Yields:
            sqlite3.Connection: Database connection
        """
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _now_iso() -> str:
        """Return current UTC timestamp as ISO format string."""
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _to_record(row: sqlite3.Row) -> VoterRecord:
        data = {column: row[column] for column in SHEET_COLUMNS}
        # Header occupies sheet row 1
        data["row_idx"] = row["row_ordinal"] + 1
        return VoterRecord(**data)

    def _select_rows(self, conn: sqlite3.Connection) -> list[sqlite3.Row]:
        """All sheet rows in order, with their 1-based position."""
        return conn.execute(
            "SELECT *, ROW_NUMBER() OVER (ORDER BY row_id) AS row_ordinal "
            "FROM voters ORDER BY row_id"
        ).fetchall()

    # =========================================================================
    # Reads
    # =========================================================================

    def get_metadata(self) -> StoreMetadata:
        """Distinct booths, wards and houses for the selectors.

        Returns:
            StoreMetadata with naturally sorted values; ward-tracking rows
            also populate ``house_map["<booth>/<ward>"]``
        """
        booths: set[str] = set()
        houses: dict[str, set[str]] = {}
        wards: dict[str, set[str]] = {}

        with self._get_connection() as conn:
            rows = conn.execute("SELECT booth, ward, house_no FROM voters").fetchall()

        for row in rows:
            booth = (row["booth"] or "").strip()
            house = (row["house_no"] or "").strip()
            ward = (row["ward"] or "").strip()
            if not booth or not house:
                continue
            booths.add(booth)
            houses.setdefault(booth, set()).add(house)
            if ward:
                wards.setdefault(booth, set()).add(ward)
                houses.setdefault(f"{booth}/{ward}", set()).add(house)

        return StoreMetadata(
            booths=sort_naturally(booths),
            house_map={k: sort_naturally(v) for k, v in houses.items()},
            ward_map={k: sort_naturally(v) for k, v in wards.items()},
        )

    def search(self, booth: str, house: str, ward: str | None = None) -> list[VoterRecord]:
        """Rows whose trimmed booth and house (and ward, if given) match exactly."""
        booth, house = str(booth).strip(), str(house).strip()
        ward = str(ward).strip() if ward else None

        with self._get_connection() as conn:
            rows = self._select_rows(conn)

        results = []
        for row in rows:
            if row["booth"].strip() != booth or row["house_no"].strip() != house:
                continue
            if ward is not None and (row["ward"] or "").strip() != ward:
                continue
            results.append(self._to_record(row))
        return results

    def search_by_name(self, query: str) -> list[VoterRecord]:
        """Rows whose name or relation's name contains query, ignoring case."""
        needle = (query or "").strip().casefold()
        if not needle:
            return []

        with self._get_connection() as conn:
            rows = self._select_rows(conn)

        return [
            self._to_record(row)
            for row in rows
            if any(needle in (row[field] or "").casefold() for field in NAME_FIELDS)
        ]

    def find_duplicate_aadhar(
        self, aadhar: str, exclude_voter_no: str, exclude_booth: str | None = None
    ) -> DuplicateMember | None:
        """First row holding this Aadhaar that belongs to a different voter.

        Args:
            aadhar: Aadhaar number to look for
            exclude_voter_no: Voter number of the record being edited
            exclude_booth: When given, only the (booth, voter_no) pair is
                excluded; otherwise any row with that voter number is

        Returns:
            Minimal identity of the conflicting row, or None
        """
        if not aadhar:
            return None

        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT booth, voter_no, house_no, name FROM voters WHERE aadhar = ? ORDER BY row_id",
                (str(aadhar),),
            ).fetchall()

        for row in rows:
            same_voter = row["voter_no"] == str(exclude_voter_no)
            if exclude_booth is not None:
                same_voter = same_voter and row["booth"] == str(exclude_booth)
            if not same_voter:
                return DuplicateMember(
                    booth=row["booth"],
                    voter_no=row["voter_no"],
                    house_no=row["house_no"],
                    name=row["name"],
                )
        return None

    def count(self) -> int:
        """Number of live rows."""
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM voters").fetchone()[0]

    def get_deleted(self) -> list[dict[str, Any]]:
        """Archived rows, oldest first."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM deleted_voters ORDER BY id").fetchall()
        return [dict(row) for row in rows]

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert_many(self, records: list[VoterRecord]) -> tuple[int, int]:
        """Update rows matched by (booth, voter_no), append the rest.

        Args:
            records: Records to write, in order

        Returns:
            (updated_count, inserted_count)
        """
        updated = inserted = 0
        with self._get_connection() as conn:
            for record in records:
                values = {column: getattr(record, column) for column in UPDATABLE_COLUMNS}
                assignments = ", ".join(f"{column} = :{column}" for column in UPDATABLE_COLUMNS)
                if record.aadhar_photo:
                    assignments += ", aadhar_photo = :aadhar_photo"
                    values["aadhar_photo"] = record.aadhar_photo

                cursor = conn.execute(
                    f"UPDATE voters SET {assignments} WHERE booth = :booth AND voter_no = :voter_no",
                    {**values, "booth": record.booth, "voter_no": record.voter_no},
                )
                if cursor.rowcount:
                    updated += 1
                    continue

                row = {column: getattr(record, column) for column in SHEET_COLUMNS}
                placeholders = ", ".join(f":{column}" for column in SHEET_COLUMNS)
                conn.execute(
                    f"INSERT INTO voters ({', '.join(SHEET_COLUMNS)}) VALUES ({placeholders})",
                    row,
                )
                inserted += 1
            conn.commit()

        logger.info(f"Sheet save: {updated} updated, {inserted} appended")
        return updated, inserted

    def delete(self, booth: str, voter_no: str, reason: str) -> bool:
        """Archive a row with reason and timestamp, then remove it.

        Returns:
            True if a row was archived and removed, False if none matched
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM voters WHERE booth = ? AND voter_no = ?",
                (str(booth).strip(), str(voter_no).strip()),
            ).fetchone()
            if row is None:
                logger.warning(f"Delete requested for missing voter {booth}/{voter_no}")
                return False

            archived = {column: row[column] for column in SHEET_COLUMNS}
            archived.update(reason=reason, deleted_at=self._now_iso())
            columns = ", ".join(archived)
            placeholders = ", ".join(f":{column}" for column in archived)
            conn.execute(f"INSERT INTO deleted_voters ({columns}) VALUES ({placeholders})", archived)
            conn.execute("DELETE FROM voters WHERE row_id = ?", (row["row_id"],))
            conn.commit()

        logger.info(f"Archived voter {booth}/{voter_no} (reason: {reason})")
        return True
