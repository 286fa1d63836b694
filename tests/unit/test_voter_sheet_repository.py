"""Unit tests for VoterSheetRepository."""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from voterportal.database.voter_sheet import VoterSheetRepository
from voterportal.models import VoterRecord


@pytest.fixture
def temp_db():
    """Create temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "sheet" / "test_voter_sheet.db"
        yield str(db_path)


@pytest.fixture
def repository(temp_db):
    """Repository pre-filled with two booths."""
    repo = VoterSheetRepository(db_path=temp_db)
    repo.upsert_many(
        [
            VoterRecord(booth="12", voter_no="1", house_no="5", name="Ram Kumar", relation_name="Dashrath"),
            VoterRecord(booth="12", voter_no="2", house_no="5", name="Sita Devi", relation_name="Ram Kumar"),
            VoterRecord(booth="12", voter_no="3", house_no="10", name="Lakshman"),
            VoterRecord(booth="12", voter_no="4", house_no="9", name="Bharat", aadhar="111122223333"),
            VoterRecord(booth="2", ward="A", voter_no="1", house_no="1", name="Gita"),
            VoterRecord(booth="2", ward="B", voter_no="2", house_no="3", name="Mohan"),
        ]
    )
    return repo


class TestInitialization:
    """Test schema creation."""

    def test_creates_database_and_parent_directory(self, temp_db):
        assert not Path(temp_db).exists()

        VoterSheetRepository(db_path=temp_db)

        assert Path(temp_db).exists()

    def test_creates_tables(self, repository, temp_db):
        conn = sqlite3.connect(temp_db)
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        conn.close()

        assert "voters" in tables
        assert "deleted_voters" in tables

    def test_reopening_keeps_rows(self, repository, temp_db):
        assert VoterSheetRepository(db_path=temp_db).count() == 6


class TestMetadata:
    """Test selector options."""

    def test_booths_sorted_naturally(self, repository):
        assert repository.get_metadata().booths == ["2", "12"]

    def test_houses_sorted_naturally(self, repository):
        assert repository.get_metadata().houses_for("12") == ["5", "9", "10"]

    def test_booth_name_with_slash_listed(self, repository):
        repository.upsert_many([VoterRecord(booth="7/A", voter_no="1", house_no="4", name="Kamla")])

        metadata = repository.get_metadata()

        assert metadata.booths == ["2", "7/A", "12"]
        assert metadata.houses_for("7/A") == ["4"]

    def test_wards_only_for_ward_tracking_booths(self, repository):
        metadata = repository.get_metadata()

        assert metadata.wards_for("2") == ["A", "B"]
        assert metadata.wards_for("12") == []
        assert metadata.houses_for("2", ward="B") == ["3"]


class TestSearch:
    """Test house and name lookups."""

    def test_search_house_in_sheet_order(self, repository):
        records = repository.search("12", "5")

        assert [r.voter_no for r in records] == ["1", "2"]
        # Header is sheet row 1, so the first data row is row 2
        assert [r.row_idx for r in records] == [2, 3]

    def test_search_trims_input(self, repository):
        assert len(repository.search(" 12 ", "5 ")) == 2

    def test_search_with_ward(self, repository):
        assert [r.name for r in repository.search("2", "1", ward="A")] == ["Gita"]
        assert repository.search("2", "1", ward="B") == []

    def test_search_no_match(self, repository):
        assert repository.search("12", "99") == []

    def test_search_by_name_matches_name_or_relation(self, repository):
        records = repository.search_by_name("ram kumar")
        assert {r.voter_no for r in records} == {"1", "2"}

    def test_search_by_name_case_insensitive(self, repository):
        assert [r.name for r in repository.search_by_name("GITA")] == ["Gita"]

    def test_blank_name_query(self, repository):
        assert repository.search_by_name("  ") == []


class TestDuplicateAadhar:
    """Test the duplicate Aadhaar lookup."""

    def test_finds_other_voter(self, repository):
        member = repository.find_duplicate_aadhar("111122223333", "1", exclude_booth="12")

        assert member.voter_no == "4"
        assert member.name == "Bharat"
        assert member.house_no == "9"

    def test_excludes_record_itself(self, repository):
        assert repository.find_duplicate_aadhar("111122223333", "4", exclude_booth="12") is None

    def test_same_voter_no_other_booth_is_duplicate(self, repository):
        """With a booth given, voter 4 of booth 2 is a different person."""
        member = repository.find_duplicate_aadhar("111122223333", "4", exclude_booth="2")
        assert member.booth == "12"

    def test_without_booth_excludes_by_voter_no(self, repository):
        assert repository.find_duplicate_aadhar("111122223333", "4") is None

    def test_unused_number(self, repository):
        assert repository.find_duplicate_aadhar("999999999999", "1") is None


class TestUpsert:
    """Test bulk save."""

    def test_updates_existing_and_appends_new(self, repository):
        updated, inserted = repository.upsert_many(
            [
                VoterRecord(booth="12", voter_no="1", house_no="5", name="Ram Kumar", aadhar="123456789012"),
                VoterRecord(booth="12", voter_no="11", house_no="5", name="Naya", is_new=True),
            ]
        )

        assert (updated, inserted) == (1, 1)
        records = repository.search("12", "5")
        assert [r.voter_no for r in records] == ["1", "2", "11"]
        assert records[0].aadhar == "123456789012"
        assert repository.count() == 7

    def test_photo_kept_when_not_supplied(self, repository):
        repository.upsert_many(
            [VoterRecord(booth="12", voter_no="1", house_no="5", aadhar_photo="data:image/png;base64,AAAA")]
        )
        repository.upsert_many([VoterRecord(booth="12", voter_no="1", house_no="5", name="Ram")])

        record = repository.search("12", "5")[0]
        assert record.aadhar_photo == "data:image/png;base64,AAAA"
        assert record.name == "Ram"


class TestDelete:
    """Test archive-then-remove."""

    def test_delete_archives_with_reason(self, repository):
        assert repository.delete("12", "2", "शादी") is True

        assert [r.voter_no for r in repository.search("12", "5")] == ["1"]
        archived = repository.get_deleted()
        assert len(archived) == 1
        assert archived[0]["name"] == "Sita Devi"
        assert archived[0]["reason"] == "शादी"
        assert archived[0]["deleted_at"]

    def test_delete_missing(self, repository):
        assert repository.delete("12", "99", "मृत्यु") is False
        assert repository.get_deleted() == []
        assert repository.count() == 6

    def test_row_numbers_close_up_after_delete(self, repository):
        repository.delete("12", "1", "मृत्यु")
        assert repository.search("12", "5")[0].row_idx == 2
