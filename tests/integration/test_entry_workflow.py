"""
Integration tests for the data-entry workflow.

Runs the FastAPI sheet store under uvicorn on a free local port and drives
it through the real aiohttp client, collection, reconciler and orchestrator.
"""

import asyncio
import socket
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import uvicorn

from voterportal.api import create_store_app
from voterportal.database import VoterSheetRepository
from voterportal.models import ErrorKind, VoterKey, VoterRecord
from voterportal.services import EntryOrchestrator, FieldReconciler, RemoteStoreClient

pytestmark = pytest.mark.integration


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def repository():
    """Sheet with one house of two members and a neighbour holding an Aadhaar."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo = VoterSheetRepository(db_path=str(Path(tmpdir) / "sheet.db"))
        repo.upsert_many(
            [
                VoterRecord(booth="12", voter_no="1", house_no="5", name="Ram", relation_name="Dashrath"),
                VoterRecord(booth="12", voter_no="2", house_no="5", name="Sita", relation_name="Ram"),
                VoterRecord(booth="12", voter_no="7", house_no="6", name="Mohan", aadhar="999988887777"),
            ]
        )
        yield repo


@pytest.fixture
async def store_url(repository):
    """Serve the store and yield its endpoint URL."""
    port = _free_port()
    server = uvicorn.Server(
        uvicorn.Config(create_store_app(repository), host="127.0.0.1", port=port, log_level="warning")
    )
    task = asyncio.create_task(server.serve())
    while not server.started:
        if task.done():
            task.result()
        await asyncio.sleep(0.05)

    yield f"http://127.0.0.1:{port}/exec"

    server.should_exit = True
    await task


@pytest.fixture
def client(store_url):
    return RemoteStoreClient(store_url, timeout_seconds=5)


@pytest.fixture
def orchestrator(client):
    return EntryOrchestrator(client)


class TestEntryWorkflow:
    """End-to-end search, edit, save and delete."""

    @pytest.mark.asyncio
    async def test_metadata(self, client):
        result = await client.fetch_metadata()

        assert result.success
        assert result.data.booths == ["12"]
        assert result.data.houses_for("12") == ["5", "6"]

    @pytest.mark.asyncio
    async def test_search_then_add_member(self, orchestrator):
        """Booth 12 / house 5 holds voters 1 and 2; a new member becomes voter 3."""
        result = await orchestrator.search("12", "5")

        assert result.success
        assert [r.voter_no for r in orchestrator.collection] == ["1", "2"]

        added = orchestrator.add_member().data
        assert added.voter_no == "3"
        assert added.is_new is True

    @pytest.mark.asyncio
    async def test_duplicate_aadhar_reported(self, orchestrator, client):
        await orchestrator.search("12", "5")
        on_duplicate = MagicMock()
        reconciler = FieldReconciler(VoterKey("12", "1"), orchestrator.collection, client, on_duplicate=on_duplicate)

        result = await reconciler.edit_aadhar("9999 8888 7777")

        assert result.is_duplicate
        assert orchestrator.collection.find("12", "1").aadhar == "999988887777"
        member = on_duplicate.call_args.args[0]
        assert (member.booth, member.voter_no, member.name) == ("12", "7", "Mohan")

    @pytest.mark.asyncio
    async def test_edit_save_and_reload(self, orchestrator, client, repository):
        """Edits and new members are written and the view shows stored values."""
        await orchestrator.search("12", "5")
        FieldReconciler(VoterKey("12", "1"), orchestrator.collection, client).edit_dob("2020-01-01")
        await FieldReconciler(VoterKey("12", "2"), orchestrator.collection, client).edit_aadhar("123456789012")
        orchestrator.add_member(name="Lav")

        result = await orchestrator.save_all()

        assert result.success
        records = {r.voter_no: r for r in orchestrator.collection}
        assert set(records) == {"1", "2", "3"}
        assert records["1"].calculated_age == "6"
        assert records["2"].aadhar == "123456789012"
        assert records["3"].name == "Lav"
        assert not any(r.is_new for r in records.values())
        assert repository.count() == 4

    @pytest.mark.asyncio
    async def test_partial_aadhar_never_reaches_store(self, orchestrator, client, repository):
        await orchestrator.search("12", "5")
        await FieldReconciler(VoterKey("12", "1"), orchestrator.collection, client).edit_aadhar("12345")

        result = await orchestrator.save_all()

        assert result.error_kind == ErrorKind.VALIDATION
        assert repository.search("12", "5")[0].aadhar == ""

    @pytest.mark.asyncio
    async def test_delete_saved_member(self, orchestrator, repository):
        await orchestrator.search("12", "5")

        result = await orchestrator.delete_one(orchestrator.collection.find("12", "2"), "शादी")

        assert result.success
        assert [r.voter_no for r in orchestrator.collection] == ["1"]
        assert repository.get_deleted()[0]["reason"] == "शादी"

    @pytest.mark.asyncio
    async def test_delete_already_removed_member(self, orchestrator, repository):
        await orchestrator.search("12", "5")
        repository.delete("12", "2", "मृत्यु")

        result = await orchestrator.delete_one(orchestrator.collection.find("12", "2"), "शादी")

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert orchestrator.collection.find("12", "2") is not None

    @pytest.mark.asyncio
    async def test_name_search_refreshed_after_save(self, orchestrator, client):
        await orchestrator.search_by_name("ram")
        assert {r.voter_no for r in orchestrator.collection} == {"1", "2"}

        FieldReconciler(VoterKey("12", "1"), orchestrator.collection, client).edit_field("name", "Ramesh")
        result = await orchestrator.save_all()

        assert result.success
        assert orchestrator.collection.find("12", "1").name == "Ramesh"

    @pytest.mark.asyncio
    async def test_concurrent_operators_last_save_wins(self, client, repository):
        """Two operators on the same house: the later save overwrites the earlier one."""
        first = EntryOrchestrator(client)
        second = EntryOrchestrator(client)
        await first.search("12", "5")
        await second.search("12", "5")

        FieldReconciler(VoterKey("12", "1"), first.collection, client).edit_field("name", "Ram Chandra")
        FieldReconciler(VoterKey("12", "1"), second.collection, client).edit_field("relation_name", "Raja Dashrath")

        assert (await first.save_all()).success
        assert (await second.save_all()).success

        stored = repository.search("12", "5")[0]
        assert stored.relation_name == "Raja Dashrath"
        # The second snapshot still held the old name
        assert stored.name == "Ram"
