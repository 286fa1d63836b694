"""Tests for the voter sheet store HTTP interface."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from voterportal.api import create_store_app
from voterportal.database import VoterSheetRepository
from voterportal.models import VoterRecord


@pytest.fixture
def repository():
    with tempfile.TemporaryDirectory() as tmpdir:
        repo = VoterSheetRepository(db_path=str(Path(tmpdir) / "store.db"))
        repo.upsert_many(
            [
                VoterRecord(booth="12", voter_no="1", house_no="5", name="Ram"),
                VoterRecord(booth="12", voter_no="2", house_no="5", name="Sita", aadhar="111122223333"),
            ]
        )
        yield repo


@pytest.fixture
def api(repository):
    return TestClient(create_store_app(repository))


class TestReadActions:
    """Test GET /exec actions."""

    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["rows"] == 2

    def test_get_metadata(self, api):
        body = api.get("/exec", params={"action": "getMetadata"}).json()

        assert body["success"] is True
        assert body["booths"] == ["12"]
        assert body["houseMap"] == {"12": ["5"]}
        assert body["wardMap"] == {}

    def test_search(self, api):
        body = api.get("/exec", params={"action": "search", "booth": "12", "house": "5"}).json()

        assert body["success"] is True
        assert [row["voterNo"] for row in body["data"]] == ["1", "2"]
        assert body["data"][0]["rowIdx"] == 2

    def test_search_by_name(self, api):
        body = api.get("/exec", params={"action": "searchByName", "query": "sit"}).json()
        assert [row["name"] for row in body["data"]] == ["Sita"]

    def test_check_aadhar_duplicate(self, api):
        body = api.get(
            "/exec",
            params={"action": "checkAadhar", "aadhar": "111122223333", "voterNo": "1", "booth": "12"},
        ).json()

        assert body["isDuplicate"] is True
        assert body["member"] == {"booth": "12", "voterNo": "2", "houseNo": "5", "name": "Sita"}

    def test_check_aadhar_own_record(self, api):
        body = api.get(
            "/exec", params={"action": "checkAadhar", "aadhar": "111122223333", "voterNo": "2"}
        ).json()
        assert body == {"isDuplicate": False}

    def test_invalid_action(self, api):
        body = api.get("/exec", params={"action": "dropTable"}).json()
        assert body == {"success": False, "error": "Invalid Action"}


class TestWriteActions:
    """Test POST /exec actions."""

    def test_save_updates_and_appends(self, api, repository):
        body = api.post(
            "/exec",
            json={
                "action": "save",
                "data": [
                    {"booth": "12", "voterNo": "1", "houseNo": "5", "name": "Ram", "aadhar": "123456789012"},
                    {"booth": "12", "voterNo": "3", "houseNo": "5", "name": "Naya"},
                ],
            },
        ).json()

        assert body["success"] is True
        assert (body["updated"], body["inserted"]) == (1, 1)
        assert repository.search("12", "5")[0].aadhar == "123456789012"
        assert repository.count() == 3

    def test_save_rejects_invalid_record(self, api, repository):
        body = api.post("/exec", json={"action": "save", "data": [{"name": "no identity"}]}).json()

        assert body["success"] is False
        assert repository.count() == 2

    def test_delete(self, api, repository):
        body = api.post(
            "/exec", json={"action": "delete", "booth": "12", "voterNo": "2", "reason": "पलायन"}
        ).json()

        assert body["success"] is True
        assert repository.count() == 1
        assert repository.get_deleted()[0]["reason"] == "पलायन"

    def test_delete_not_found(self, api):
        body = api.post(
            "/exec", json={"action": "delete", "booth": "12", "voterNo": "9", "reason": "पलायन"}
        ).json()

        assert body["success"] is False
        assert body["error"] == "not_found"

    def test_delete_requires_reason(self, api, repository):
        body = api.post("/exec", json={"action": "delete", "booth": "12", "voterNo": "2"}).json()

        assert body["success"] is False
        assert repository.count() == 2

    def test_malformed_body(self, api):
        response = api.post("/exec", content=b"{not json", headers={"Content-Type": "text/plain"})

        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_invalid_post_action(self, api):
        assert api.post("/exec", json={"action": "truncate"}).json()["error"] == "Invalid Action"
