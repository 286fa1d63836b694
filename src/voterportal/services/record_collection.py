"""
Record Collection

Holds the ordered set of records shown for the current search. Records are
addressed by their (booth, voter_no) pair, never by position, because the
UI can fire an edit for a card while a new search is replacing the list.
"""

from typing import Iterator

from loguru import logger

from voterportal.models import VoterKey, VoterRecord
from voterportal.utils.formatting import leading_int


class RecordCollection:
    """In-memory records for the current booth/house or name search."""

    def __init__(self, records: list[VoterRecord] | None = None):
        self._records: list[VoterRecord] = list(records or [])

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[VoterRecord]:
        return iter(list(self._records))

    @property
    def records(self) -> list[VoterRecord]:
        """Copy of the current records, in display order."""
        return list(self._records)

    def snapshot(self) -> list[VoterRecord]:
        """Records as of now; later edits do not affect the returned list."""
        # VoterRecord is frozen, so a shallow copy of the list is enough
        return list(self._records)

    def find(self, booth: str, voter_no: str) -> VoterRecord | None:
        """Return the record with this identity, or None."""
        key = VoterKey(booth, voter_no)
        for record in self._records:
            if record.key == key:
                return record
        return None

    def replace_all(self, records: list[VoterRecord]) -> None:
        """Discard the current records and show a new result set."""
        self._records = list(records)
        logger.debug(f"Collection replaced with {len(self._records)} record(s)")

    def update_one(self, updated: VoterRecord) -> bool:
        """Replace the record sharing updated's (booth, voter_no).

        Returns:
            True if a record was replaced; False (and no change) otherwise
        """
        for i, record in enumerate(self._records):
            if record.key == updated.key:
                self._records[i] = updated
                return True
        logger.debug(f"Update skipped, no record {updated.key} in collection")
        return False

    def append_new(self, booth: str, house_no: str = "", ward: str | None = None, **fields) -> VoterRecord:
        """Create an unsaved member with the next free voter number.

        The new record goes to the top of the list so it is visible
        without scrolling.

        Args:
            booth: Booth the member belongs to
            house_no: House number
            ward: Ward, for rolls that track wards
            **fields: Any other VoterRecord fields (name, gender, ...)

        Returns:
            The created record (is_new=True). Its age starts at "0" until
            the operator enters one.
        """
        fields.setdefault("original_age", "0")
        record = VoterRecord(
            booth=booth,
            house_no=house_no,
            ward=ward,
            voter_no=self.next_voter_no(),
            is_new=True,
            **fields,
        )
        self._records.insert(0, record)
        logger.debug(f"Added new member {record.key}")
        return record

    def remove_one(self, booth: str, voter_no: str) -> bool:
        """Remove the record with this identity; no-op if absent."""
        key = VoterKey(booth, voter_no)
        remaining = [r for r in self._records if r.key != key]
        removed = len(remaining) != len(self._records)
        self._records = remaining
        return removed

    def next_voter_no(self) -> str:
        """One more than the highest voter number present, "1" when empty."""
        if not self._records:
            return "1"
        return str(max(leading_int(r.voter_no) for r in self._records) + 1)
