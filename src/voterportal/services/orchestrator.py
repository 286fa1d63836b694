"""
Entry Orchestrator

Coordinates the collection with the remote store for whole-view actions:
searching, adding a member, saving everything, and deleting one member.

Local validation happens before any request is sent. Store failures come
back as StoreResult values and leave the collection as it was.

Only the newest search may replace the view: a reply to a search that has
since been superseded is dropped. A save refreshes the view only when the
collection still matches what was sent.
"""

from dataclasses import dataclass

from loguru import logger

from voterportal.models import ErrorKind, StoreResult, VoterRecord
from voterportal.services.record_collection import RecordCollection
from voterportal.services.store_client import RemoteStoreClient
from voterportal.utils.formatting import is_valid_aadhar_for_save


@dataclass
class SearchContext:
    """The search that produced the current collection."""

    booth: str = ""
    house: str = ""
    ward: str | None = None
    name_query: str = ""

    @property
    def is_house_search(self) -> bool:
        return bool(self.booth and self.house)

    @property
    def is_name_search(self) -> bool:
        return bool(self.name_query)


class EntryOrchestrator:
    """Search, add, save and delete for the data-entry view."""

    def __init__(self, client: RemoteStoreClient, collection: RecordCollection | None = None):
        """Initialize orchestrator.

        Args:
            client: Store client
            collection: Collection to manage (a new empty one by default)
        """
        self.client = client
        self.collection = collection if collection is not None else RecordCollection()
        self.context = SearchContext()

        # Sequence number of the most recent search dispatched
        self._search_seq = 0

    # =========================================================================
    # Search
    # =========================================================================

    async def search(self, booth: str, house: str, ward: str | None = None) -> StoreResult[list[VoterRecord]]:
        """Load the members of one house, replacing the current view."""
        booth, house = (booth or "").strip(), (house or "").strip()
        if not booth or not house:
            return StoreResult.fail(ErrorKind.VALIDATION, "Select a booth and house number first")

        self._search_seq += 1
        seq = self._search_seq
        result = await self.client.search(booth, house, ward=ward or None)
        self._apply_search_result(result, seq, SearchContext(booth=booth, house=house, ward=ward or None))
        return result

    async def search_by_name(self, query: str) -> StoreResult[list[VoterRecord]]:
        """Load members matching a name across all booths.

        A blank query changes nothing and sends no request.
        """
        query = (query or "").strip()
        if not query:
            return StoreResult.ok([])

        self._search_seq += 1
        seq = self._search_seq
        result = await self.client.search_by_name(query)
        self._apply_search_result(result, seq, SearchContext(name_query=query))
        return result

    async def refresh(self) -> StoreResult[list[VoterRecord]] | None:
        """Repeat the last search. Returns None if there was none."""
        ctx = self.context
        if ctx.is_house_search:
            return await self.search(ctx.booth, ctx.house, ward=ctx.ward)
        if ctx.is_name_search:
            return await self.search_by_name(ctx.name_query)
        return None

    def clear(self) -> None:
        """Empty the view and forget the last search."""
        # Searches still in flight must not repopulate the view
        self._search_seq += 1
        self.collection.replace_all([])
        self.context = SearchContext()

    def _apply_search_result(
        self, result: StoreResult[list[VoterRecord]], seq: int, context: SearchContext
    ) -> None:
        if seq != self._search_seq:
            logger.debug(f"Discarding reply to superseded search {context}")
            return

        self.context = context
        if result.success:
            self.collection.replace_all(result.data or [])
        else:
            self.collection.replace_all([])

    # =========================================================================
    # Add
    # =========================================================================

    def add_member(self, **fields) -> StoreResult[VoterRecord]:
        """Append an unsaved member to the house currently shown.

        Only allowed after a booth/house search, since the new member
        takes its booth and house number from it.
        """
        ctx = self.context
        if not ctx.is_house_search:
            return StoreResult.fail(
                ErrorKind.VALIDATION, "Select a booth and house number before adding a member"
            )

        record = self.collection.append_new(ctx.booth, house_no=ctx.house, ward=ctx.ward, **fields)
        return StoreResult.ok(record)

    # =========================================================================
    # Save
    # =========================================================================

    @staticmethod
    def invalid_records(records: list[VoterRecord]) -> list[VoterRecord]:
        """Records whose Aadhaar is partially filled (neither empty nor 12 digits)."""
        return [r for r in records if not is_valid_aadhar_for_save(r.aadhar)]

    async def save_all(self, refresh: bool = True) -> StoreResult[None]:
        """Validate and upsert every record in the view.

        Nothing is sent if any record fails validation. On success the last
        search is repeated (when refresh is True) so the view shows what the
        store now holds, unless the collection changed while the save was
        in flight; those edits stay in place for the next save.

        Args:
            refresh: Re-run the last search after a successful save

        Returns:
            Save outcome; the store's message is passed through on failure
        """
        records = self.collection.snapshot()
        if not records:
            return StoreResult.ok(message="Nothing to save")

        invalid = self.invalid_records(records)
        if invalid:
            voter_nos = ", ".join(r.voter_no for r in invalid)
            logger.info(f"Save blocked, incomplete Aadhaar for voter(s) {voter_nos}")
            return StoreResult.fail(
                ErrorKind.VALIDATION,
                f"Aadhaar numbers must be 12 digits (voter no. {voter_nos})",
            )

        result = await self.client.save(records)
        if not result.success:
            return result

        if refresh and self.collection.snapshot() != records:
            # Edits made during the save are not stored yet; reloading would drop them
            logger.info("Saved, skipping refresh while newer edits are pending")
            return StoreResult.ok(message="Saved; newer edits still need saving")

        if refresh:
            refreshed = await self.refresh()
            if refreshed is not None and not refreshed.success:
                logger.warning(f"Saved, but refresh failed: {refreshed.message}")
        return result

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete_one(self, record: VoterRecord, reason: str = "") -> StoreResult[None]:
        """Remove a member from the view, archiving it remotely if it was saved.

        Unsaved (new) members are dropped locally without contacting the
        store. Saved members need a reason; they are removed locally only
        after the store confirms.
        """
        current = self.collection.find(*record.key) or record

        if current.is_new:
            self.collection.remove_one(*current.key)
            logger.debug(f"Discarded unsaved member {current.key}")
            return StoreResult.ok(message="Member removed")

        reason = (reason or "").strip()
        if not reason:
            return StoreResult.fail(ErrorKind.VALIDATION, "Choose a reason for deleting this member")

        result = await self.client.delete(current.booth, current.voter_no, reason)
        if result.success:
            self.collection.remove_one(*current.key)
        return result
