"""
Field Reconciliation

Keeps one record's editable fields consistent with the collection while
the operator types.

Aadhaar edits are normalized and written to the collection before any
network call. Reaching 12 digits fires one duplicate lookup in the
background; its answer is only shown if the field still holds the value
that was checked, so a slow reply cannot flag a number the operator has
already changed.

Birth date edits write ``dob`` and the derived ``calculated_age`` in a
single update.
"""

import inspect
from datetime import date
from typing import Any, Callable

from loguru import logger

from voterportal.config.constants import DEFAULT_REFERENCE_DATE, EDITABLE_FIELDS
from voterportal.models import (
    DuplicateCheckResult,
    DuplicateMember,
    ExtractedIdentity,
    VoterKey,
    VoterRecord,
)
from voterportal.services.record_collection import RecordCollection
from voterportal.services.store_client import RemoteStoreClient
from voterportal.utils.formatting import (
    calculate_age,
    is_complete_aadhar,
    normalize_aadhar,
    to_iso_date,
)

DuplicateSink = Callable[[DuplicateMember], Any]


def apply_field_edit(
    record: VoterRecord,
    field: str,
    value: str | None,
    reference_date: date = DEFAULT_REFERENCE_DATE,
) -> VoterRecord:
    """Return a copy of record with one field edited.

    Aadhaar input is reduced to digits (max 12). Setting ``dob`` also
    recomputes ``calculated_age``; clearing it clears the age.

    Raises:
        ValueError: If field is an identity field, the derived age, or
            not a record field at all
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field is not editable: {field}")

    if field == "aadhar":
        return record.model_copy(update={"aadhar": normalize_aadhar(value)})

    if field == "dob":
        dob = (value or "").strip()
        return record.model_copy(
            update={"dob": dob, "calculated_age": calculate_age(dob, reference_date)}
        )

    if field == "aadhar_photo":
        return record.model_copy(update={"aadhar_photo": value or None})

    return record.model_copy(update={field: value if value is not None else ""})


class FieldReconciler:
    """Edit controller for a single record card."""

    def __init__(
        self,
        key: VoterKey,
        collection: RecordCollection,
        client: RemoteStoreClient,
        on_duplicate: DuplicateSink | None = None,
        reference_date: date = DEFAULT_REFERENCE_DATE,
    ):
        """Initialize the controller.

        Args:
            key: (booth, voter_no) of the record this card edits
            collection: Collection the record lives in
            client: Store client used for duplicate checks
            on_duplicate: Called with the conflicting member when a
                duplicate Aadhaar is found (may be a coroutine function)
            reference_date: Date the displayed age is computed at
        """
        self.key = key
        self.collection = collection
        self.client = client
        self.on_duplicate = on_duplicate
        self.reference_date = reference_date

        # Sequence number of the most recent duplicate check dispatched
        self._check_seq = 0

    @property
    def record(self) -> VoterRecord | None:
        """Current state of the record in the collection."""
        return self.collection.find(*self.key)

    def edit_field(self, field: str, value: str | None) -> VoterRecord | None:
        """Apply an edit and write it to the collection.

        Returns:
            The updated record, or None if the record is no longer in the
            collection (e.g. a new search replaced it)
        """
        record = self.record
        if record is None:
            logger.debug(f"Edit of {field} ignored, {self.key} no longer loaded")
            return None

        updated = apply_field_edit(record, field, value, self.reference_date)
        self.collection.update_one(updated)
        return updated

    def edit_dob(self, dob: str | None) -> VoterRecord | None:
        """Set birth date and recomputed age together."""
        return self.edit_field("dob", dob)

    def attach_photo(self, data_url: str | None) -> VoterRecord | None:
        """Store the Aadhaar card image (base64 data URL) on the record."""
        return self.edit_field("aadhar_photo", data_url)

    async def edit_aadhar(self, raw: str | None) -> DuplicateCheckResult | None:
        """Normalize and store an Aadhaar edit, checking for duplicates on completion.

        The collection is updated before the lookup is sent. A lookup is
        only sent when the value becomes a complete 12-digit number that
        differs from what the field held before.

        Returns:
            The duplicate-check result if one was issued and is still
            current, otherwise None
        """
        record = self.record
        if record is None:
            return None

        previous = record.aadhar
        updated = self.edit_field("aadhar", raw)
        if updated is None:
            return None

        value = updated.aadhar
        if value == previous:
            return None

        # A changed value supersedes checks already in flight
        self._check_seq += 1
        if not is_complete_aadhar(value):
            return None

        return await self._check_duplicate(value, self._check_seq)

    async def apply_extraction(self, extracted: ExtractedIdentity) -> VoterRecord | None:
        """Fill fields read from a card photo through the normal edit paths.

        Values that were not found (None) leave the field untouched. An
        extracted 12-digit number is duplicate-checked like a typed one.
        """
        if extracted.dob:
            iso_dob = to_iso_date(extracted.dob)
            if iso_dob:
                self.edit_dob(iso_dob)
            else:
                logger.debug(f"Ignoring unreadable extracted dob: {extracted.dob!r}")

        if extracted.aadhar:
            await self.edit_aadhar(extracted.aadhar)

        return self.record

    async def _check_duplicate(self, value: str, seq: int) -> DuplicateCheckResult | None:
        result = await self.client.check_duplicate_aadhar(
            value, self.key.voter_no, exclude_booth=self.key.booth
        )

        current = self.record
        if seq != self._check_seq or current is None or current.aadhar != value:
            logger.debug(f"Discarding stale duplicate check for {self.key} ({value})")
            return None

        if result.is_duplicate and result.member is not None and self.on_duplicate:
            outcome = self.on_duplicate(result.member)
            if inspect.isawaitable(outcome):
                await outcome
        return result
