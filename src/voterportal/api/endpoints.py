"""
REST API Endpoints for the Voter Sheet Store

Serves the spreadsheet web-app interface used by the data-entry client:
- ``GET /exec?action=getMetadata|search|searchByName|checkAadhar``
- ``POST /exec`` with JSON ``{"action": "save"|"delete", ...}``

Failures are reported in the body as ``{"success": false, ...}`` with
HTTP 200, the same way the spreadsheet web app answers.
"""

import json
from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from voterportal import __version__
from voterportal.database import VoterSheetRepository
from voterportal.models import VoterRecord


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str = __version__
    rows: int = 0


def _failure(error: str, message: str | None = None, **extra: Any) -> JSONResponse:
    content = {"success": False, "error": error, **extra}
    if message:
        content["message"] = message
    return JSONResponse(content=content)


def create_store_router(repository: VoterSheetRepository) -> APIRouter:
    """
    Create FastAPI router with the store endpoints.

    Args:
        repository: Sheet the endpoints read and write

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter()

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    @router.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        return HealthResponse(status="ok", rows=repository.count())

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @router.get("/exec")
    def do_get(
        action: str = "",
        booth: str = "",
        house: str = "",
        ward: str | None = None,
        query: str = "",
        aadhar: str = "",
        voter_no: str = Query("", alias="voterNo"),
    ):
        """
        Read actions.

        Returns:
            Action-specific JSON payload, or ``{success: false, error}``
            for an unknown action
        """
        logger.debug(f"GET action={action}")

        if action == "getMetadata":
            metadata = repository.get_metadata()
            return JSONResponse(content={"success": True, **metadata.to_wire()})

        if action == "search":
            records = repository.search(booth, house, ward=ward or None)
            return JSONResponse(
                content={"success": True, "data": [r.to_wire() for r in records]}
            )

        if action == "searchByName":
            records = repository.search_by_name(query)
            return JSONResponse(
                content={"success": True, "data": [r.to_wire() for r in records]}
            )

        if action == "checkAadhar":
            member = repository.find_duplicate_aadhar(aadhar, voter_no, exclude_booth=booth or None)
            if member is None:
                return JSONResponse(content={"isDuplicate": False})
            return JSONResponse(content={"isDuplicate": True, "member": member.to_wire()})

        return _failure("Invalid Action")

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @router.post("/exec")
    async def do_post(request: Request):
        """
        Write actions: bulk upsert (``save``) and archive-then-remove (``delete``).

        Returns:
            ``{success, message}`` on completion
        """
        try:
            body = json.loads(await request.body())
        except ValueError as e:
            logger.error(f"Malformed POST body: {e}")
            return _failure(str(e), "Request body is not valid JSON")

        if not isinstance(body, dict):
            return _failure("Request body must be a JSON object")

        action = body.get("action")
        logger.debug(f"POST action={action}")

        if action == "save":
            try:
                records = [VoterRecord.model_validate(item) for item in body.get("data") or []]
            except ValidationError as e:
                logger.error(f"Save rejected, invalid record: {e}")
                return _failure(str(e), "Invalid voter record in save request")

            updated, inserted = await run_in_threadpool(repository.upsert_many, records)
            return JSONResponse(
                content={
                    "success": True,
                    "message": "Saved successfully",
                    "updated": updated,
                    "inserted": inserted,
                }
            )

        if action == "delete":
            booth = str(body.get("booth") or "").strip()
            voter_no = str(body.get("voterNo") or "").strip()
            reason = str(body.get("reason") or "").strip()
            if not booth or not voter_no or not reason:
                return _failure("booth, voterNo and reason are required", "Incomplete delete request")

            deleted = await run_in_threadpool(repository.delete, booth, voter_no, reason)
            if not deleted:
                return _failure("not_found", f"Voter {booth}/{voter_no} not found")
            return JSONResponse(
                content={"success": True, "message": "Moved to Deleted sheet"}
            )

        return _failure("Invalid Action")

    return router


def create_store_app(repository: VoterSheetRepository) -> FastAPI:
    """Build the store web app around a sheet repository."""
    app = FastAPI(title="VoterPortal Store", version=__version__)
    app.include_router(create_store_router(repository))
    return app
