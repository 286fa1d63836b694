"""
Remote Store Client

Talks to the spreadsheet-backed voter roll through its HTTP query interface
(``GET ?action=...`` for reads, ``POST`` JSON for writes). Every response is
read and validated; nothing is assumed to have succeeded unseen.

Transport problems never escape this module. Each operation returns a
StoreResult, and the duplicate check degrades to "no duplicate" so a flaky
network cannot block data entry.
"""

import asyncio
from typing import Any, Sequence

import aiohttp
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from voterportal.models import (
    DuplicateCheckResult,
    ErrorKind,
    StoreMetadata,
    StoreResult,
    VoterRecord,
)
from voterportal.utils.formatting import sort_naturally


class StoreTransportError(Exception):
    """Request could not be completed or its response could not be read."""

    pass


class _Envelope(BaseModel):
    """Fields shared by every success/failure reply."""

    success: bool
    message: str | None = None
    error: str | None = None


class _SearchEnvelope(_Envelope):
    data: list[VoterRecord] = Field(default_factory=list)


class _MetadataEnvelope(_Envelope):
    booths: list[str] = Field(default_factory=list)
    houseMap: dict[str, list[str]] = Field(default_factory=dict)
    wardMap: dict[str, list[str]] = Field(default_factory=dict)


class RemoteStoreClient:
    """Client for the voter roll web app."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 20,
        session: aiohttp.ClientSession | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Endpoint URL of the store (e.g. ".../exec")
            timeout_seconds: Total timeout applied to each request
            session: Optional shared aiohttp session; a short-lived session
                is opened per request when omitted
        """
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def fetch_metadata(self) -> StoreResult[StoreMetadata]:
        """Fetch booth, ward and house options for the selectors."""
        try:
            payload = await self._get({"action": "getMetadata"})
            envelope = _MetadataEnvelope.model_validate(payload)
        except (StoreTransportError, ValidationError) as e:
            return self._connectivity_failure("Metadata fetch", e)

        if not envelope.success:
            return self._remote_failure(envelope, "Could not load booth list")

        # Sort here too; older deployments return insertion order
        metadata = StoreMetadata(
            booths=sort_naturally(envelope.booths),
            house_map={k: sort_naturally(v) for k, v in envelope.houseMap.items()},
            ward_map={k: sort_naturally(v) for k, v in envelope.wardMap.items()},
        )
        logger.debug(f"Loaded metadata for {len(metadata.booths)} booth(s)")
        return StoreResult.ok(metadata)

    async def search(
        self, booth: str, house: str, ward: str | None = None
    ) -> StoreResult[list[VoterRecord]]:
        """Find members of one house.

        Args:
            booth: Booth number
            house: House number
            ward: Optional ward, for rolls that track wards

        Returns:
            Records in sheet order; an empty list is a successful search
        """
        params = {"action": "search", "booth": booth.strip(), "house": house.strip()}
        if ward:
            params["ward"] = ward.strip()
        return await self._search(params, f"booth={booth} house={house}")

    async def search_by_name(self, query: str) -> StoreResult[list[VoterRecord]]:
        """Find members whose name or relation's name contains query."""
        query = (query or "").strip()
        if not query:
            return StoreResult.ok([])
        return await self._search({"action": "searchByName", "query": query}, f"name={query!r}")

    async def save(self, records: Sequence[VoterRecord]) -> StoreResult[None]:
        """Upsert the whole collection in one request.

        The store updates rows matched by (booth, voterNo) and appends the
        rest. This is a bulk upsert of everything passed, not a diff.
        """
        body = {"action": "save", "data": [record.to_wire() for record in records]}
        logger.debug(f"Saving {len(records)} record(s)")
        try:
            payload = await self._post(body)
            envelope = _Envelope.model_validate(payload)
        except (StoreTransportError, ValidationError) as e:
            return self._connectivity_failure("Save", e)

        if not envelope.success:
            return self._remote_failure(envelope, "Save failed")

        logger.info(f"Saved {len(records)} record(s)")
        return StoreResult.ok(message=envelope.message or "Saved successfully")

    async def delete(self, booth: str, voter_no: str, reason: str) -> StoreResult[None]:
        """Archive a persisted record with a reason, then remove it."""
        body = {"action": "delete", "booth": booth, "voterNo": voter_no, "reason": reason}
        try:
            payload = await self._post(body)
            envelope = _Envelope.model_validate(payload)
        except (StoreTransportError, ValidationError) as e:
            return self._connectivity_failure("Delete", e)

        if not envelope.success:
            return self._remote_failure(envelope, "Delete failed")

        logger.info(f"Deleted voter {booth}/{voter_no} (reason: {reason})")
        return StoreResult.ok(message=envelope.message or "Deleted successfully")

    async def check_duplicate_aadhar(
        self, aadhar: str, exclude_voter_no: str, exclude_booth: str | None = None
    ) -> DuplicateCheckResult:
        """Look for another record already holding this Aadhaar number.

        Args:
            aadhar: Complete 12-digit Aadhaar number
            exclude_voter_no: Voter number of the record being edited
            exclude_booth: Booth of the record being edited; when given,
                only the exact (booth, voterNo) pair is excluded

        Returns:
            The first conflicting record, or is_duplicate=False. Any
            failure is reported as no duplicate.
        """
        params = {"action": "checkAadhar", "aadhar": aadhar, "voterNo": exclude_voter_no}
        if exclude_booth:
            params["booth"] = exclude_booth
        try:
            payload = await self._get(params)
            result = DuplicateCheckResult.model_validate(payload)
        except (StoreTransportError, ValidationError) as e:
            logger.warning(f"Duplicate check failed, treating as no duplicate: {e}")
            return DuplicateCheckResult(is_duplicate=False)

        if result.is_duplicate:
            logger.info(f"Aadhaar {aadhar} already used by voter {result.member}")
        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _search(self, params: dict[str, str], description: str) -> StoreResult[list[VoterRecord]]:
        """Run a search action and parse the record list."""
        try:
            payload = await self._get(params)
            envelope = _SearchEnvelope.model_validate(payload)
        except (StoreTransportError, ValidationError) as e:
            return self._connectivity_failure("Search", e)

        if not envelope.success:
            return self._remote_failure(envelope, "Search failed")

        logger.debug(f"Search {description} returned {len(envelope.data)} record(s)")
        return StoreResult.ok(list(envelope.data))

    async def _get(self, params: dict[str, str]) -> dict[str, Any]:
        return await self._request("GET", params=params)

    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", json=body)

    async def _request(self, method: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request and return the decoded JSON object.

        Raises:
            StoreTransportError: On network error, timeout, non-2xx status,
                or a body that is not a JSON object
        """
        action = (kwargs.get("params") or kwargs.get("json") or {}).get("action")
        logger.debug(f"{method} {self.base_url} action={action}")
        try:
            if self._session is not None:
                return await self._send(self._session, method, **kwargs)
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                return await self._send(session, method, **kwargs)
        except asyncio.TimeoutError as e:
            raise StoreTransportError(f"Request timed out after {self.timeout.total}s") from e
        except aiohttp.ClientError as e:
            raise StoreTransportError(f"Network error: {e}") from e

    async def _send(self, session: aiohttp.ClientSession, method: str, **kwargs: Any) -> dict[str, Any]:
        async with session.request(method, self.base_url, timeout=self.timeout, **kwargs) as response:
            if response.status >= 400:
                raise StoreTransportError(f"HTTP {response.status} from store")
            try:
                # Apps Script replies with text/plain, so skip the content-type check
                payload = await response.json(content_type=None)
            except ValueError as e:
                raise StoreTransportError(f"Malformed JSON from store: {e}") from e

        if not isinstance(payload, dict):
            raise StoreTransportError(f"Unexpected payload type: {type(payload).__name__}")
        return payload

    @staticmethod
    def _connectivity_failure(operation: str, error: Exception) -> StoreResult[Any]:
        logger.warning(f"{operation} failed: {error}")
        return StoreResult.fail(ErrorKind.CONNECTIVITY, f"{operation} failed: {error}")

    @staticmethod
    def _remote_failure(envelope: _Envelope, default: str) -> StoreResult[Any]:
        kind = ErrorKind.NOT_FOUND if envelope.error == "not_found" else ErrorKind.REMOTE
        message = envelope.message or envelope.error or default
        logger.warning(f"Store rejected request: {message}")
        return StoreResult.fail(kind, message)
